"""
Map widget setup and the page's map context.

The map handle lives in a module-scoped ``MapContext`` published once the
provider has loaded; other code reaches it through ``get_map_context()``.
"""

from dataclasses import dataclass
from typing import Any, NamedTuple

from loguru import logger

from geopin_client import config
from geopin_client.interop import Bridge


class MapNotReady(RuntimeError):
    """The map has not been constructed yet."""


class LatLng(NamedTuple):
    lat: float
    lng: float

    def as_literal(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


DEFAULT_LOCATION = LatLng(*config.DEFAULT_LOCATION)


@dataclass
class MapContext:
    map: Any
    maps: Any
    user_location: LatLng | None = None
    marker: Any = None

    def apply_user_location(self, location: LatLng, bridge: Bridge) -> bool:
        """Center on the user and drop the marker. Only the first fix is used."""
        if self.user_location is not None:
            return False

        self.user_location = location
        self.map.setCenter(bridge.to_js(location.as_literal()))
        self.map.setZoom(config.USER_ZOOM)
        self.marker = bridge.new(
            self.maps.Marker,
            bridge.to_js(
                {
                    "position": location.as_literal(),
                    "map": self.map,
                    "title": config.MARKER_TITLE,
                    "icon": {"url": config.MARKER_ICON_URL},
                }
            ),
        )
        logger.info(f"User location found: {location.lat}, {location.lng}")
        return True


_context: MapContext | None = None


def get_map_context() -> MapContext:
    if _context is None:
        raise MapNotReady("The map has not been initialized yet")
    return _context


def clear_map_context() -> None:
    """Forget the current map, as a page reload would."""
    global _context
    _context = None


def request_user_location(window: Any, context: MapContext, bridge: Bridge) -> None:
    navigator = getattr(window, "navigator", None)
    geolocation = getattr(navigator, "geolocation", None) if navigator is not None else None
    if geolocation is None:
        logger.warning("Geolocation is not supported by this browser")
        return

    def on_success(position):
        coords = position.coords
        context.apply_user_location(LatLng(coords.latitude, coords.longitude), bridge)

    def on_failure(error):
        message = getattr(error, "message", error)
        logger.warning(f"Error getting user location: {message}")

    geolocation.getCurrentPosition(bridge.proxy(on_success), bridge.proxy(on_failure))


def init_map(window: Any, maps: Any, bridge: Bridge) -> MapContext:
    """Build the map in #map, publish it, then try to center on the user."""
    global _context
    if _context is not None:
        logger.debug("Map already initialized")
        return _context

    element = window.document.getElementById(config.MAP_CONTAINER_ID)
    map_ = bridge.new(
        maps.Map,
        element,
        bridge.to_js(
            {
                "center": DEFAULT_LOCATION.as_literal(),
                "zoom": config.DEFAULT_ZOOM,
                "mapTypeId": config.MAP_TYPE,
                "styles": config.MAP_STYLES,
            }
        ),
    )

    def on_click(event):
        logger.info(f"Map clicked at: {event.latLng.toString()}")

    map_.addListener("click", bridge.proxy(on_click))

    _context = MapContext(map=map_, maps=maps)
    request_user_location(window, _context, bridge)
    return _context
