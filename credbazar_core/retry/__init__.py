"""
Retry Logic with Exponential Backoff
=====================================
Robust retry mechanism for transient failures.
"""

from .exceptions import RetryExhausted
from .backoff import BackoffFn, exponential_backoff, retry_with_backoff

__all__ = [
    "RetryExhausted",
    "BackoffFn",
    "exponential_backoff",
    "retry_with_backoff",
]
