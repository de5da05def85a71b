"""Tests for the shared retry policy."""

import pytest

from llm.base import CancellationError, ProviderError
from llm.cancellation import CancellationToken
from llm.retry import RetryPolicy


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def flaky(failures: int, result: str = "ok"):
    """Operation failing ``failures`` times before returning ``result``."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise ProviderError(f"boom {calls['count']}", provider="test")
        return result

    return operation, calls


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_linear_delays(self):
        policy = RetryPolicy(max_retries=3, base_delay=0.8)
        assert policy.max_attempts == 4
        assert [policy.delay_for(i) for i in range(3)] == pytest.approx([0.8, 1.6, 2.4])

    @pytest.mark.asyncio
    async def test_success_first_try_does_not_sleep(self):
        sleep = SleepRecorder()
        operation, calls = flaky(0)

        result = await RetryPolicy(sleep=sleep).run(operation)

        assert result == "ok"
        assert calls["count"] == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_one_retry_after_failure(self):
        sleep = SleepRecorder()
        operation, calls = flaky(1)

        result = await RetryPolicy(sleep=sleep).run(operation)

        assert result == "ok"
        assert calls["count"] == 2
        assert sleep.delays == [0.8]

    @pytest.mark.asyncio
    async def test_last_error_raised_when_attempts_exhausted(self):
        sleep = SleepRecorder()
        operation, calls = flaky(5)

        with pytest.raises(ProviderError, match="boom 2"):
            await RetryPolicy(sleep=sleep).run(operation)

        assert calls["count"] == 2
        assert sleep.delays == [0.8]

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self):
        sleep = SleepRecorder()
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            raise CancellationError("stop")

        with pytest.raises(CancellationError):
            await RetryPolicy(sleep=sleep).run(operation)

        assert calls["count"] == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_cancelled_token_prevents_first_attempt(self):
        token = CancellationToken()
        token.cancel()
        operation, calls = flaky(0)

        with pytest.raises(CancellationError):
            await RetryPolicy().run(operation, cancellation=token)

        assert calls["count"] == 0

    @pytest.mark.asyncio
    async def test_cancel_during_backoff_stops_retry(self):
        token = CancellationToken()
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            token.cancel("user left")
            raise ProviderError("boom", provider="test")

        with pytest.raises(CancellationError, match="user left"):
            await RetryPolicy(base_delay=30).run(operation, cancellation=token)

        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_non_retryable_provider_error_raised_at_once(self):
        sleep = SleepRecorder()
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            raise ProviderError("stream cut", provider="test", retryable=False)

        with pytest.raises(ProviderError, match="stream cut"):
            await RetryPolicy(sleep=sleep).run(operation)

        assert calls["count"] == 1
        assert sleep.delays == []
