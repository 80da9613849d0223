"""
Request Rate Limiting
=====================
Fixed-window per-client limiter for the inbound surface.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
import structlog

logger = structlog.get_logger(__name__)


@dataclass
class RateLimitInfo:
    """Rate limit check result with quota information."""
    allowed: bool
    remaining: int
    limit: int
    reset_at: int  # Unix timestamp
    retry_after: Optional[int] = None  # Seconds until retry allowed

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(0, self.remaining)),
            "X-RateLimit-Reset": str(self.reset_at),
        }
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class InMemoryRateLimiter:
    """
    In-process fixed-window counter.

    Counters are per process, which matches the single-process deployment
    of the collector.
    """

    def __init__(self, rate: int = 60, window: int = 60, clock: Callable[[], float] = time.time):
        """
        Args:
            rate: Number of requests allowed per window
            window: Window size in seconds
            clock: Time source, replaceable in tests
        """
        self.rate = rate
        self.window = window
        self._clock = clock
        self._buckets: Dict[str, Dict[str, int]] = {}

    def check(self, key: str) -> RateLimitInfo:
        """
        Count a request for ``key`` and decide whether it is allowed.

        Args:
            key: Unique identifier (client IP)

        Returns:
            RateLimitInfo with decision and quota
        """
        now = self._clock()
        window_start = int(now / self.window) * self.window

        bucket = self._buckets.get(key)
        if bucket is None or bucket["window"] < window_start:
            bucket = self._buckets[key] = {"window": window_start, "count": 0}
            self._evict(window_start)

        reset_at = int(window_start + self.window)

        if bucket["count"] >= self.rate:
            return RateLimitInfo(
                allowed=False,
                remaining=0,
                limit=self.rate,
                reset_at=reset_at,
                retry_after=max(1, reset_at - int(now)),
            )

        bucket["count"] += 1
        return RateLimitInfo(
            allowed=True,
            remaining=self.rate - bucket["count"],
            limit=self.rate,
            reset_at=reset_at,
        )

    def _evict(self, window_start: int) -> None:
        """Forget counters from past windows."""
        stale = [k for k, b in self._buckets.items() if b["window"] < window_start]
        for k in stale:
            del self._buckets[k]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject clients that exceed the per-window request budget with 429."""

    def __init__(
        self,
        app,
        limiter: InMemoryRateLimiter,
        exempt_paths=("/health", "/metrics"),
        trust_forwarded: bool = False,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.exempt_paths = tuple(exempt_paths)
        self.trust_forwarded = trust_forwarded

    def client_key(self, request: Request) -> str:
        # X-Forwarded-For is client-controlled unless a proxy overwrites it.
        forwarded = request.headers.get("x-forwarded-for", "")
        if forwarded and self.trust_forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path.startswith(self.exempt_paths):
            return await call_next(request)

        info = self.limiter.check(self.client_key(request))
        if not info.allowed:
            logger.warning("rate_limited", path=request.url.path, retry_after=info.retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "ok": False,
                    "error": "Too many requests, please try again later.",
                    "code": "RATE_LIMITED",
                },
                headers=info.headers,
            )

        response = await call_next(request)
        response.headers.update(info.headers)
        return response
