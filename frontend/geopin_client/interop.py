"""
Conversion layer between Python objects and the page.

Under Pyodide, Python callables handed to JavaScript must be wrapped in
proxies, dicts must become plain JS objects, and JS classes are constructed
with ``.new()``. ``PlainBridge`` does none of that and is what the tests use
with fake page objects; the Pyodide implementation lives in ``main.py``.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from typing import Any


class Bridge(ABC):
    @abstractmethod
    def proxy(self, fn: Callable) -> Any:
        ...

    @abstractmethod
    def to_js(self, obj: Any) -> Any:
        ...

    @abstractmethod
    def new(self, cls: Any, *args: Any) -> Any:
        ...

    def call_soon(self, coro: Coroutine) -> asyncio.Future:
        return asyncio.ensure_future(coro)


class PlainBridge(Bridge):
    def proxy(self, fn: Callable) -> Any:
        return fn

    def to_js(self, obj: Any) -> Any:
        return obj

    def new(self, cls: Any, *args: Any) -> Any:
        return cls(*args)
