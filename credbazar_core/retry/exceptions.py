"""
Retry Exceptions
================
Raised by the retry combinator once every attempt has failed.
"""

from typing import Optional


class RetryExhausted(Exception):
    """All attempts failed; carries the final error and the attempt count."""

    def __init__(
        self,
        message: str,
        last_exception: Optional[BaseException] = None,
        attempts: int = 0,
    ):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts
