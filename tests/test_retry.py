"""
Tests for retry with exponential backoff.
"""

import pytest

from credbazar_core.retry import RetryExhausted, exponential_backoff, retry_with_backoff


class Flaky:
    """Coroutine callable failing a fixed number of times."""

    def __init__(self, failures: int, exc_type=ConnectionError):
        self.failures = failures
        self.exc_type = exc_type
        self.calls = 0

    async def __call__(self, value="ok"):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc_type(f"failure {self.calls}")
        return value


class TestExponentialBackoff:
    """Tests for delay schedules."""

    def test_default_schedule(self):
        backoff = exponential_backoff()

        assert [backoff(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_max_delay_caps(self):
        backoff = exponential_backoff(base_delay=10.0, max_delay=15.0)

        assert backoff(1) == 10.0
        assert backoff(2) == 15.0

    def test_jitter_stays_in_range(self):
        backoff = exponential_backoff(base_delay=2.0, jitter=True)

        for _ in range(20):
            assert 1.0 <= backoff(1) <= 3.0


class TestRetryWithBackoff:
    """Tests for the retry combinator."""

    @pytest.mark.asyncio
    async def test_first_success_does_not_sleep(self, recording_sleep):
        func = Flaky(0)

        result = await retry_with_backoff(func, "value", sleep=recording_sleep)

        assert result == "value"
        assert func.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_success_on_third_attempt(self, recording_sleep):
        """Two failures then success wait 1s and 2s."""
        func = Flaky(2)

        result = await retry_with_backoff(func, max_attempts=3, sleep=recording_sleep)

        assert result == "ok"
        assert func.calls == 3
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted(self, recording_sleep):
        """All attempts failing raise RetryExhausted with the last error."""
        func = Flaky(10)

        with pytest.raises(RetryExhausted) as exc_info:
            await retry_with_backoff(func, max_attempts=3, sleep=recording_sleep)

        assert func.calls == 3
        assert exc_info.value.attempts == 3
        assert str(exc_info.value.last_exception) == "failure 3"
        # no wait after the final failure
        assert recording_sleep.delays == [1.0, 2.0]
        assert sum(recording_sleep.delays) >= 3.0

    @pytest.mark.asyncio
    async def test_non_retryable_propagates(self, recording_sleep):
        func = Flaky(1, exc_type=KeyError)

        with pytest.raises(KeyError):
            await retry_with_backoff(
                func,
                retryable_exceptions={ConnectionError},
                sleep=recording_sleep,
            )

        assert func.calls == 1

    @pytest.mark.asyncio
    async def test_custom_backoff(self, recording_sleep):
        func = Flaky(2)

        await retry_with_backoff(func, backoff=lambda n: 0.5 * n, sleep=recording_sleep)

        assert recording_sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            await retry_with_backoff(Flaky(0), max_attempts=0)
