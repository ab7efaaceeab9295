"""
Page bootstrap
==============

Runs once the DOM is ready:

1. Scroll-reveal animations (AOS)
2. Icon replacement (Feather)
3. Animated globe background (Vanta)
4. Google Maps, loaded asynchronously

Each integration is independent; one missing or broken library never stops
the others.
"""

import asyncio
from typing import Any

from loguru import logger

from geopin_client import config
from geopin_client.interop import Bridge
from geopin_client.loader import MapsLoadError, load_maps_api
from geopin_client.maps import MapContext, init_map


def init_scroll_reveal(window: Any, bridge: Bridge) -> bool:
    aos = getattr(window, "AOS", None)
    if aos is None:
        logger.warning("AOS is not available, skipping scroll animations")
        return False
    aos.init(bridge.to_js(config.SCROLL_REVEAL_OPTIONS))
    return True


def init_icons(window: Any) -> bool:
    feather = getattr(window, "feather", None)
    if feather is None:
        logger.warning("Feather icons are not available, skipping icon replacement")
        return False
    feather.replace()
    return True


def init_background(window: Any, bridge: Bridge) -> bool:
    try:
        vanta = getattr(window, "VANTA", None)
        if vanta is None:
            return False
        vanta.GLOBE(bridge.to_js({"el": config.BACKGROUND_ELEMENT, **config.BACKGROUND_OPTIONS}))
        return True
    except Exception as e:
        logger.error(f"Error initializing Vanta.js: {e}")
        return False


def show_map_error(window: Any) -> None:
    container = window.document.getElementById(config.MAP_CONTAINER_ID)
    if container is not None:
        container.innerHTML = config.MAP_LOAD_ERROR_HTML


async def load_google_maps(
    window: Any,
    bridge: Bridge,
    timeout: float | None = config.SCRIPT_LOAD_TIMEOUT,
) -> MapContext | None:
    """Load the provider and build the map. Failures end up on the page, not in the caller."""
    try:
        maps = await load_maps_api(window, bridge, timeout=timeout)
    except MapsLoadError as e:
        logger.error(f"Error loading Google Maps API: {e}")
        show_map_error(window)
        return None

    return init_map(window, maps, bridge)


def bootstrap(window: Any, bridge: Bridge, timeout: float | None = config.SCRIPT_LOAD_TIMEOUT) -> asyncio.Future:
    """Initialize the visual libraries, then start loading the map.

    Returns the pending map task so callers can await the whole sequence.
    """
    logger.info("GeoPin application initialized")

    init_scroll_reveal(window, bridge)
    init_icons(window)
    init_background(window, bridge)

    return bridge.call_soon(load_google_maps(window, bridge, timeout=timeout))


def register(window: Any, bridge: Bridge) -> None:
    """Run ``bootstrap`` on DOMContentLoaded, or now if that has already fired."""
    document = window.document
    if document.readyState == "loading":
        document.addEventListener("DOMContentLoaded", bridge.proxy(lambda _event: bootstrap(window, bridge)))
    else:
        bootstrap(window, bridge)
