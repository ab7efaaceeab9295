"""Fake page objects standing in for the browser and the Google Maps API."""

from types import SimpleNamespace

import pytest

from geopin_client.interop import PlainBridge
from geopin_client.maps import clear_map_context


class FakeElement:
    def __init__(self, tag: str = "div"):
        self.tagName = tag
        self.innerHTML = ""
        self.children = []

    def appendChild(self, child):
        self.children.append(child)
        return child


class FakeDocument:
    def __init__(self, ready_state: str = "complete"):
        self.readyState = ready_state
        self.head = FakeElement("head")
        self.elements = {"map": FakeElement(), "vanta-bg": FakeElement("header")}
        self.listeners = {}

    def getElementById(self, element_id):
        return self.elements.get(element_id)

    def createElement(self, tag):
        return FakeElement(tag)

    def addEventListener(self, name, listener):
        self.listeners.setdefault(name, []).append(listener)

    @property
    def scripts(self):
        return [child for child in self.head.children if child.tagName == "script"]


class FakeMap:
    def __init__(self, element, options):
        self.element = element
        self.options = options
        self.center = options["center"]
        self.zoom = options["zoom"]
        self.listeners = {}

    def setCenter(self, center):
        self.center = center

    def setZoom(self, zoom):
        self.zoom = zoom

    def addListener(self, name, listener):
        self.listeners[name] = listener


class FakeMaps:
    """Stand-in for the ``google.maps`` namespace."""

    def __init__(self):
        self.maps_created = []
        self.markers = []

    def Map(self, element, options):
        map_ = FakeMap(element, options)
        self.maps_created.append(map_)
        return map_

    def Marker(self, options):
        marker = SimpleNamespace(options=options)
        self.markers.append(marker)
        return marker


class FakeGeolocation:
    def __init__(self, coords=None, fixes: int = 1):
        self.coords = coords
        self.fixes = fixes
        self.requests = 0

    def getCurrentPosition(self, on_success, on_failure):
        self.requests += 1
        if self.coords is None:
            on_failure(SimpleNamespace(code=1, message="User denied Geolocation"))
            return
        lat, lng = self.coords
        for _ in range(self.fixes):
            on_success(SimpleNamespace(coords=SimpleNamespace(latitude=lat, longitude=lng)))


class FakeWindow:
    def __init__(self, ready_state: str = "complete", geolocation=None):
        self.document = FakeDocument(ready_state)
        self.navigator = SimpleNamespace()
        if geolocation is not None:
            self.navigator.geolocation = geolocation

    def load_maps(self):
        """Simulate the provider script having run."""
        maps = FakeMaps()
        self.google = SimpleNamespace(maps=maps)
        return maps


@pytest.fixture(autouse=True)
def fresh_map_context():
    clear_map_context()
    yield
    clear_map_context()


@pytest.fixture
def bridge():
    return PlainBridge()


@pytest.fixture
def window():
    return FakeWindow()


@pytest.fixture
def make_geolocation():
    return FakeGeolocation


@pytest.fixture
def make_window():
    return FakeWindow
