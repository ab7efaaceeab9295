"""PyScript entry point: wires the bootstrap to the real page."""

import sys

from js import Object, window
from loguru import logger
from pyodide.ffi import create_proxy, to_js

from geopin_client.bootstrap import register
from geopin_client.interop import Bridge


class PyodideBridge(Bridge):
    def proxy(self, fn):
        return create_proxy(fn)

    def to_js(self, obj):
        return to_js(obj, dict_converter=Object.fromEntries)

    def new(self, cls, *args):
        return cls.new(*args)


logger.remove()
logger.add(sys.stdout, colorize=False, format="{level} | {name}:{function} | {message}")

register(window, PyodideBridge())
