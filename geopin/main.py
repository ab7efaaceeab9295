"""
GeoPin Backend - static content server
Serves the GeoPin page and its assets behind security, compression and
rate-limit policies, with a health check under /api.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger

from geopin import __version__
from geopin.api.routes import router as api_router
from geopin.core.config import Settings, get_settings
from geopin.core.rate_limit import RateLimitMiddleware
from geopin.core.security import SecurityHeadersMiddleware, security_headers
from geopin.core.static import CachedStaticFiles

GENERIC_ERROR = "Something broke!"


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="GeoPin",
        description="Static content server for the GeoPin location page",
        version=__version__,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        openapi_url=None if settings.is_production else "/openapi.json",
    )
    app.state.settings = settings

    # Middleware added last runs first: security headers wrap everything,
    # including 429s from the limiter and compressed bodies.
    app.add_middleware(RateLimitMiddleware, settings=settings)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware, settings=settings)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"Error handling {request.method} {request.url.path}")
        return PlainTextResponse(GENERIC_ERROR, status_code=500, headers=security_headers(settings))

    app.include_router(api_router, prefix="/api")

    # Mounted last so API routes win; unmatched GETs fall back to index.html
    app.mount("/", CachedStaticFiles(settings), name="static")

    return app


app = create_app()
