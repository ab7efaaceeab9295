# Third-party widget settings and mapping provider contract

SCROLL_REVEAL_OPTIONS = {
    "duration": 800,
    "easing": "ease-in-out",
    "once": True,
}

BACKGROUND_ELEMENT = "#vanta-bg"
BACKGROUND_OPTIONS = {
    "mouseControls": True,
    "touchControls": True,
    "gyroControls": False,
    "minHeight": 200.00,
    "minWidth": 200.00,
    "scale": 1.00,
    "scaleMobile": 1.00,
    "color": 0x3B82F6,
    "backgroundColor": 0xF1F5F9,
    "size": 1.10,
}

# Mapping provider
MAPS_SCRIPT_BASE = "https://maps.googleapis.com/maps/api/js"
MAPS_LIBRARIES = ("places", "geocoding")
MAPS_CALLBACK_NAME = "initMap"  # fixed by the provider's callback contract
API_KEY_GLOBAL = "GOOGLE_MAPS_API_KEY"
API_KEY_PLACEHOLDER = "YOUR_API_KEY"
SCRIPT_LOAD_TIMEOUT = 20.0  # seconds; None waits forever

# Map widget
MAP_CONTAINER_ID = "map"
DEFAULT_LOCATION = (0.0, 0.0)
DEFAULT_ZOOM = 2
USER_ZOOM = 12
MAP_TYPE = "terrain"
MAP_STYLES = [
    {
        "featureType": "poi",
        "elementType": "labels",
        "stylers": [{"visibility": "off"}],
    }
]
MARKER_TITLE = "Your Location"
MARKER_ICON_URL = "https://maps.google.com/mapfiles/ms/icons/blue-dot.png"

MAP_LOAD_ERROR_HTML = (
    '<div class="p-4 text-red-600">Error loading Google Maps. '
    "Please check your API key and internet connection.</div>"
)
