"""
Security response headers.

Every response leaving the app gets a restrictive Content-Security-Policy that
whitelists the CDNs used by the page (AOS, Feather, Vanta, Tailwind, PyScript)
and the Google Maps origins, plus the usual hardening headers.
"""

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from geopin.core.config import Settings

CSP_DIRECTIVES: dict[str, list[str]] = {
    "default-src": ["'self'"],
    "base-uri": ["'self'"],
    "script-src": [
        "'self'",
        "https://unpkg.com",
        "https://cdn.jsdelivr.net",
        "https://maps.googleapis.com",
        "https://maps.gstatic.com",
        "https://fonts.googleapis.com",
        "https://cdn.tailwindcss.com",
        "https://pyscript.net",
        "'unsafe-inline'",
        # Pyodide compiles WebAssembly and evaluates its bootstrap
        "'unsafe-eval'",
        "'wasm-unsafe-eval'",
    ],
    "script-src-attr": ["'none'"],
    "style-src": [
        "'self'",
        "https://unpkg.com",
        "https://cdn.jsdelivr.net",
        "https://fonts.googleapis.com",
        "https://cdn.tailwindcss.com",
        "https://pyscript.net",
        "'unsafe-inline'",
    ],
    "img-src": [
        "'self'",
        "data:",
        "https://*.googleapis.com",
        "https://*.gstatic.com",
        "https://*.google.com",
        "https://maps.gstatic.com",
        "https://*.ggpht.com",
    ],
    "connect-src": [
        "'self'",
        "https://*.googleapis.com",
        "https://*.gstatic.com",
        "https://maps.googleapis.com",
        "https://cdn.jsdelivr.net",
        "https://pyscript.net",
        "https://pypi.org",
        "https://files.pythonhosted.org",
        "ws://localhost:*",
    ],
    "font-src": ["'self'", "https://fonts.gstatic.com", "https://cdn.jsdelivr.net", "data:"],
    "form-action": ["'self'"],
    "frame-ancestors": ["'self'"],
    "frame-src": ["https://www.google.com", "https://maps.google.com"],
    "object-src": ["'none'"],
    "upgrade-insecure-requests": [],
}

HSTS_MAX_AGE = 15552000  # 180 days

SUPPRESSED_HEADERS = ("x-powered-by", "server")


def build_csp(directives: dict[str, list[str]] = CSP_DIRECTIVES) -> str:
    parts = []
    for name, sources in directives.items():
        parts.append(" ".join([name, *sources]) if sources else name)
    return "; ".join(parts)


def security_headers(settings: Settings) -> dict[str, str]:
    """Headers added to every response for the given settings."""
    headers = {
        "Content-Security-Policy": build_csp(),
        "Cross-Origin-Resource-Policy": "cross-origin",
        "Origin-Agent-Cluster": "?1",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": f"max-age={HSTS_MAX_AGE}; includeSubDomains",
        "X-Content-Type-Options": "nosniff",
        "X-DNS-Prefetch-Control": "off",
        "X-Download-Options": "noopen",
        "X-Frame-Options": "DENY",
        "X-Permitted-Cross-Domain-Policies": "none",
        "X-XSS-Protection": "0",
    }
    if settings.cross_origin_isolation:
        headers["Cross-Origin-Opener-Policy"] = "same-origin"
        headers["Cross-Origin-Embedder-Policy"] = "require-corp"
    return headers


class SecurityHeadersMiddleware:
    """Pure ASGI middleware so streamed file responses are not buffered."""

    def __init__(self, app: ASGIApp, settings: Settings):
        self.app = app
        self.headers = security_headers(settings)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name in SUPPRESSED_HEADERS:
                    if name in headers:
                        del headers[name]
                for name, value in self.headers.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_headers)
