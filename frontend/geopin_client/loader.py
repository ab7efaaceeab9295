"""
Mapping provider script loader
==============================

The provider announces readiness by calling a global function whose name is
fixed by its script URL (``callback=initMap``). That handshake is wrapped in a
single-resolution future: it resolves with the ``google.maps`` namespace, or
fails with ``MapsLoadError`` when the script errors out or with
``MapsLoadTimeout`` when nothing happens within the timeout.
"""

import asyncio
from typing import Any
from urllib.parse import urlencode

from loguru import logger

from geopin_client import config
from geopin_client.interop import Bridge


class MapsLoadError(Exception):
    """The mapping provider script could not be loaded."""


class MapsLoadTimeout(MapsLoadError):
    """The provider script neither loaded nor failed in time."""


def maps_namespace(window: Any) -> Any | None:
    """``window.google.maps`` if the provider library is already on the page."""
    google = getattr(window, "google", None)
    if google is None:
        return None
    return getattr(google, "maps", None)


def api_key(window: Any) -> str:
    return getattr(window, config.API_KEY_GLOBAL, None) or config.API_KEY_PLACEHOLDER


def maps_script_url(key: str) -> str:
    query = urlencode(
        {
            "key": key,
            "libraries": ",".join(config.MAPS_LIBRARIES),
            "callback": config.MAPS_CALLBACK_NAME,
        },
        safe=",",
    )
    return f"{config.MAPS_SCRIPT_BASE}?{query}"


def load_maps_api(
    window: Any,
    bridge: Bridge,
    timeout: float | None = config.SCRIPT_LOAD_TIMEOUT,
) -> asyncio.Future:
    """Return a future for the provider's ``google.maps`` namespace.

    Must be called with a running event loop. If the library is already on the
    page the future is resolved immediately and no script tag is injected.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    maps = maps_namespace(window)
    if maps is not None:
        future.set_result(maps)
        return future

    def on_ready(*_args):
        if future.done():
            logger.warning("Google Maps API loaded after the loader gave up; ignoring")
            return
        maps = maps_namespace(window)
        if maps is None:
            future.set_exception(MapsLoadError("initMap was called but google.maps is missing"))
            return
        logger.info("Google Maps API loaded")
        future.set_result(maps)

    def on_error(*_args):
        if not future.done():
            future.set_exception(MapsLoadError("Error loading Google Maps API"))

    def on_timeout():
        if not future.done():
            future.set_exception(
                MapsLoadTimeout(f"Google Maps API did not load within {timeout:g}s")
            )

    setattr(window, config.MAPS_CALLBACK_NAME, bridge.proxy(on_ready))

    document = window.document
    script = document.createElement("script")
    script.src = maps_script_url(api_key(window))
    setattr(script, "async", True)
    script.defer = True
    script.onerror = bridge.proxy(on_error)
    document.head.appendChild(script)

    if timeout is not None:
        handle = loop.call_later(timeout, on_timeout)
        future.add_done_callback(lambda _f: handle.cancel())

    return future
