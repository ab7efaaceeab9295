"""
Per-address rolling window rate limiting
========================================

Each client address keeps a log of the timestamps of its accepted requests.
A request is rejected when the address already has ``max_requests`` hits
inside the trailing ``window_seconds``. Rejected requests are not logged,
so a client that backs off regains its budget as old hits age out.
"""

import math
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from geopin.core.config import Settings


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the oldest hit leaves the window

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(math.ceil(self.reset_after)),
        }


class SlidingWindowRateLimiter:
    """Thread-safe sliding-log limiter keyed by client address."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        now = self.clock()
        cutoff = now - self.window_seconds

        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            allowed = len(hits) < self.max_requests
            if allowed:
                hits.append(now)

            reset_after = hits[0] + self.window_seconds - now if hits else self.window_seconds
            return RateLimitDecision(
                allowed=allowed,
                limit=self.max_requests,
                remaining=max(0, self.max_requests - len(hits)),
                reset_after=max(0.0, reset_after),
            )

    def prune(self) -> int:
        """Drop addresses whose hits have all expired. Returns how many were dropped."""
        cutoff = self.clock() - self.window_seconds
        with self._lock:
            stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
            for key in stale:
                del self._hits[key]
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    @property
    def tracked_addresses(self) -> int:
        with self._lock:
            return len(self._hits)


def client_address(scope: Scope, trust_proxy: bool = False) -> str:
    if trust_proxy:
        forwarded = Headers(scope=scope).get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    client = scope.get("client")
    return client[0] if client else "unknown"


class RateLimitMiddleware:
    """Reject over-budget clients with a plain 429 before the request reaches the app."""

    # Number of accepted requests between sweeps of expired addresses
    PRUNE_INTERVAL = 1000

    def __init__(self, app: ASGIApp, settings: Settings, limiter: SlidingWindowRateLimiter | None = None):
        self.app = app
        self.message = settings.RATE_LIMIT_MESSAGE
        self.trust_proxy = settings.TRUST_PROXY
        self.limiter = limiter or SlidingWindowRateLimiter(
            settings.RATE_LIMIT_MAX_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS
        )
        self._since_prune = 0

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        address = client_address(scope, self.trust_proxy)
        decision = self.limiter.hit(address)

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {address}")
            headers = decision.headers()
            headers["Retry-After"] = headers["RateLimit-Reset"]
            response = PlainTextResponse(self.message, status_code=429, headers=headers)
            await response(scope, receive, send)
            return

        self._since_prune += 1
        if self._since_prune >= self.PRUNE_INTERVAL:
            self._since_prune = 0
            self.limiter.prune()

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in decision.headers().items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_headers)
