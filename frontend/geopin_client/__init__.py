"""Browser-side bootstrap for the GeoPin page (runs under PyScript)."""

__version__ = "1.0.0"
