"""
Middleware Setup
================
CORS, security headers and per-client rate limiting for the collector app.
"""

from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from ..config import CollectorConfig
from .rate_limit import InMemoryRateLimiter, RateLimitMiddleware
from .security import SecurityHeadersMiddleware

logger = structlog.get_logger(__name__)


def setup_cors(
    app: FastAPI,
    origins: Optional[List[str]] = None,
    allow_methods: Optional[List[str]] = None,
    allow_headers: Optional[List[str]] = None,
) -> None:
    """
    Configure CORS middleware.

    The public form is embedded on other sites, so a wildcard is accepted
    but logged. Credentials are only allowed with an explicit origin list.
    """
    origins = origins or ["*"]

    if "*" in origins:
        logger.warning("cors_wildcard_enabled", origins=origins)

    if allow_methods is None:
        allow_methods = ["GET", "POST", "OPTIONS"]

    if allow_headers is None:
        allow_headers = ["Content-Type", "X-Send-Key", "X-Request-ID"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )

    logger.info("cors_configured", origins_count=len(origins))


def setup_middleware(app: FastAPI, config: CollectorConfig) -> None:
    """Install the middleware stack; the last one added runs first."""
    app.add_middleware(
        RateLimitMiddleware,
        limiter=InMemoryRateLimiter(rate=config.rate_limit_per_minute, window=60),
        trust_forwarded=config.trust_proxy,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    setup_cors(app, origins=config.cors_origins)
