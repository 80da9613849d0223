"""
Retry Backoff
=============
Retry an async call with a pluggable backoff schedule.
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional, Set, Type, TypeVar

import structlog

from .exceptions import RetryExhausted

logger = structlog.get_logger(__name__)

T = TypeVar('T')

BackoffFn = Callable[[int], float]


def exponential_backoff(
    base_delay: float = 1.0,
    exponential_base: float = 2.0,
    max_delay: float = 60.0,
    jitter: bool = False,
) -> BackoffFn:
    """
    Build a backoff function mapping the failed-attempt number to a delay.

    With the defaults the delays after the first, second and third failure
    are 1s, 2s and 4s.
    """
    def backoff(attempt: int) -> float:
        delay = min(base_delay * (exponential_base ** (attempt - 1)), max_delay)
        if jitter:
            delay = delay * (0.5 + random.random())
        return delay
    return backoff


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args,
    max_attempts: int = 3,
    backoff: Optional[BackoffFn] = None,
    retryable_exceptions: Optional[Set[Type[Exception]]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    **kwargs,
) -> T:
    """
    Await ``func`` until it succeeds or ``max_attempts`` calls have failed.

    The first success returns immediately. There is no wait after the last
    failed attempt.

    Args:
        func: Async function to execute
        *args: Positional arguments for func
        max_attempts: Maximum number of attempts, the first one included
        backoff: Delay in seconds after the n-th failure (default 1s, 2s, 4s, ...)
        retryable_exceptions: Set of exception types to retry on
        sleep: Awaitable sleep, replaceable in tests
        **kwargs: Keyword arguments for func

    Returns:
        Result of func

    Raises:
        RetryExhausted: If all attempts fail
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    retryable = tuple(retryable_exceptions or {Exception})
    delay_for = backoff or exponential_backoff()
    name = getattr(func, "__name__", repr(func))
    last_exception: Optional[BaseException] = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except retryable as e:
            last_exception = e

            if attempt == max_attempts:
                logger.error(
                    "retry_exhausted",
                    func=name,
                    attempts=attempt,
                    error=str(e),
                )
                break

            delay = delay_for(attempt)
            logger.warning(
                "retry_scheduled",
                func=name,
                attempt=attempt,
                delay=delay,
                error=str(e),
            )
            await sleep(delay)

    raise RetryExhausted(
        f"Failed after {max_attempts} attempts: {last_exception}",
        last_exception=last_exception,
        attempts=max_attempts,
    )
