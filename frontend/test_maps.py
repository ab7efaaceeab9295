"""
Map loading scenarios, driven against fake page objects.
"""

import asyncio
from types import SimpleNamespace

import pytest

from geopin_client import config
from geopin_client.bootstrap import load_google_maps
from geopin_client.loader import MapsLoadError, MapsLoadTimeout, load_maps_api, maps_script_url
from geopin_client.maps import MapNotReady, get_map_context, init_map


async def start_loading(window, bridge, timeout=None):
    """Begin loading and return the task once the script tag is in place."""
    task = asyncio.ensure_future(load_google_maps(window, bridge, timeout=timeout))
    await asyncio.sleep(0)
    return task


def test_already_loaded_maps_skip_script_injection(window, bridge):
    maps = window.load_maps()

    context = asyncio.run(load_google_maps(window, bridge))

    assert window.document.scripts == []
    assert context is get_map_context()
    assert len(maps.maps_created) == 1
    map_ = context.map
    assert map_.element is window.document.elements["map"]
    assert map_.center == {"lat": 0.0, "lng": 0.0}
    assert map_.zoom == 2
    assert map_.options["mapTypeId"] == "terrain"
    assert map_.options["styles"] == [
        {"featureType": "poi", "elementType": "labels", "stylers": [{"visibility": "off"}]}
    ]


def test_geolocation_success_centers_and_marks(window, bridge, make_geolocation):
    window.navigator.geolocation = make_geolocation(coords=(12.34, 56.78))
    maps = window.load_maps()

    context = asyncio.run(load_google_maps(window, bridge))

    assert context.map.center == {"lat": 12.34, "lng": 56.78}
    assert context.map.zoom == 12
    assert len(maps.markers) == 1
    marker = maps.markers[0].options
    assert marker["position"] == {"lat": 12.34, "lng": 56.78}
    assert marker["map"] is context.map
    assert marker["title"] == "Your Location"
    assert marker["icon"] == {"url": "https://maps.google.com/mapfiles/ms/icons/blue-dot.png"}
    assert context.user_location == (12.34, 56.78)


def test_geolocation_failure_keeps_default_view(window, bridge, make_geolocation):
    window.navigator.geolocation = make_geolocation(coords=None)
    maps = window.load_maps()

    context = asyncio.run(load_google_maps(window, bridge))

    assert window.navigator.geolocation.requests == 1
    assert context.map.center == {"lat": 0.0, "lng": 0.0}
    assert context.map.zoom == 2
    assert maps.markers == []
    assert context.user_location is None


def test_missing_geolocation_support_keeps_default_view(window, bridge):
    maps = window.load_maps()

    context = asyncio.run(load_google_maps(window, bridge))

    assert context.map.zoom == 2
    assert maps.markers == []


def test_user_location_used_at_most_once(window, bridge, make_geolocation):
    window.navigator.geolocation = make_geolocation(coords=(1.0, 2.0), fixes=3)
    maps = window.load_maps()

    asyncio.run(load_google_maps(window, bridge))

    assert len(maps.markers) == 1


def test_only_one_map_per_page(window, bridge):
    maps = window.load_maps()

    first = init_map(window, maps, bridge)
    second = init_map(window, maps, bridge)

    assert first is second
    assert len(maps.maps_created) == 1


def test_map_click_is_logged_without_side_effects(window, bridge):
    maps = window.load_maps()
    context = init_map(window, maps, bridge)

    event = SimpleNamespace(latLng=SimpleNamespace(toString=lambda: "(48.1, 11.5)"))
    context.map.listeners["click"](event)

    assert context.map.zoom == 2


def test_context_not_ready_before_map_loads():
    with pytest.raises(MapNotReady):
        get_map_context()


def test_script_injected_and_callback_initializes_map(window, bridge):
    window.GOOGLE_MAPS_API_KEY = "test-key"

    async def scenario():
        task = await start_loading(window, bridge)
        [script] = window.document.scripts
        assert script.src == (
            "https://maps.googleapis.com/maps/api/js"
            "?key=test-key&libraries=places,geocoding&callback=initMap"
        )
        assert getattr(script, "async") is True
        assert script.defer is True

        window.load_maps()
        window.initMap()
        return await task

    context = asyncio.run(scenario())
    assert context is get_map_context()


def test_placeholder_key_when_none_configured(window, bridge):
    async def scenario():
        task = await start_loading(window, bridge)
        src = window.document.scripts[0].src
        task.cancel()
        return src

    src = asyncio.run(scenario())
    assert "key=YOUR_API_KEY" in src


def test_script_load_failure_shows_error(window, bridge):
    async def scenario():
        task = await start_loading(window, bridge)
        window.document.scripts[0].onerror(SimpleNamespace(type="error"))
        return await task

    assert asyncio.run(scenario()) is None
    assert window.document.elements["map"].innerHTML == config.MAP_LOAD_ERROR_HTML
    with pytest.raises(MapNotReady):
        get_map_context()


def test_script_load_timeout_shows_error(window, bridge):
    async def scenario():
        return await load_google_maps(window, bridge, timeout=0.01)

    assert asyncio.run(scenario()) is None
    assert "Error loading Google Maps" in window.document.elements["map"].innerHTML


def test_loader_future_resolves_once(window, bridge):
    async def scenario():
        future = load_maps_api(window, bridge, timeout=0.01)
        with pytest.raises(MapsLoadTimeout):
            await future

        # a late callback or error after the timeout changes nothing
        window.load_maps()
        window.initMap()
        window.document.scripts[0].onerror(None)
        return future

    future = asyncio.run(scenario())
    assert isinstance(future.exception(), MapsLoadTimeout)


def test_loader_error_variant(window, bridge):
    async def scenario():
        future = load_maps_api(window, bridge, timeout=None)
        window.document.scripts[0].onerror(None)
        with pytest.raises(MapsLoadError):
            await future

    asyncio.run(scenario())


def test_callback_without_namespace_is_an_error(window, bridge):
    async def scenario():
        future = load_maps_api(window, bridge, timeout=None)
        window.initMap()
        with pytest.raises(MapsLoadError):
            await future

    asyncio.run(scenario())


def test_maps_script_url_encodes_key():
    assert maps_script_url("a b&c").startswith("https://maps.googleapis.com/maps/api/js?key=a+b%26c&")
