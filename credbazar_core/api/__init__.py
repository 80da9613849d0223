"""
Collector HTTP API
==================
"""

from .app import create_app
from .errors import create_error_response, register_error_handlers
from .rate_limit import InMemoryRateLimiter, RateLimitInfo, RateLimitMiddleware
from .routes import router
from .security import SecurityHeadersMiddleware

__all__ = [
    "create_app",
    "router",
    # Errors
    "create_error_response",
    "register_error_handlers",
    # Middleware
    "InMemoryRateLimiter",
    "RateLimitInfo",
    "RateLimitMiddleware",
    "SecurityHeadersMiddleware",
]
