"""
Static asset serving with mode-dependent caching and an SPA fallback.

Assets are cached for a year in production and revalidated on every request
in development. HTML is the mutable entry point, so it is always revalidated.
Any GET that matches no file is answered with the entry-point HTML so
client-side routes survive a reload.
"""

import os
from pathlib import Path

from loguru import logger
from starlette.exceptions import HTTPException
from starlette.responses import HTMLResponse, PlainTextResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from geopin.core.config import Settings

HTML_CACHE_CONTROL = "public, max-age=0, must-revalidate"
DEV_CACHE_CONTROL = "public, max-age=0"

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

ENTRY_POINT_ERROR = "Error loading the application"


def cache_control_for(path: str, settings: Settings) -> str:
    if path.endswith(".html"):
        return HTML_CACHE_CONTROL
    if settings.is_production:
        return f"public, max-age={settings.STATIC_MAX_AGE}"
    return DEV_CACHE_CONTROL


def is_private_path(path: str) -> bool:
    """Client test modules and bytecode caches live in the asset root but are not assets."""
    parts = Path(path).parts
    if "__pycache__" in parts:
        return True
    if not parts:
        return False
    name = parts[-1]
    return name == "conftest.py" or (name.startswith("test_") and name.endswith(".py"))


def entry_point_response(index_path: Path) -> Response:
    """Serve the entry-point HTML uncached, or a plain 500 if it cannot be read."""
    try:
        with open(index_path, "rb") as f:
            content = f.read()
    except OSError as e:
        logger.error(f"Error sending file {index_path}: {e}")
        return PlainTextResponse(ENTRY_POINT_ERROR, status_code=500)

    return HTMLResponse(content, headers=NO_CACHE_HEADERS)


class CachedStaticFiles(StaticFiles):
    def __init__(self, settings: Settings):
        # The directory is validated by the startup checks, not at import time
        super().__init__(directory=settings.STATIC_DIR, html=True, check_dir=False)
        self.settings = settings

    def file_response(
        self,
        full_path: str | os.PathLike[str],
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        response = super().file_response(full_path, stat_result, scope, status_code)
        response.headers["Cache-Control"] = cache_control_for(str(full_path), self.settings)
        return response

    def lookup_path(self, path: str) -> tuple[str, os.stat_result | None]:
        if is_private_path(path):
            return "", None
        return super().lookup_path(path)

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            response = await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
        else:
            # html mode answers misses with 404.html when one exists
            if response.status_code != 404:
                return response
        return entry_point_response(self.settings.index_path)
