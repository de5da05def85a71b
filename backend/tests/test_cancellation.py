"""Tests for cooperative cancellation."""

import asyncio

import pytest

from llm.base import CancellationError
from llm.cancellation import CancellationToken, guarded


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_cancel_sets_reason_once(self):
        token = CancellationToken()
        assert token.cancelled is False

        token.cancel("first")
        token.cancel("second")

        assert token.cancelled is True
        assert token.reason == "first"
        with pytest.raises(CancellationError, match="first"):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_guard_returns_result(self):
        token = CancellationToken()

        async def work():
            return 42

        assert await token.guard(work()) == 42

    @pytest.mark.asyncio
    async def test_guard_aborts_in_flight_work(self):
        token = CancellationToken()
        started = asyncio.Event()
        finished = {"value": False}

        async def slow():
            started.set()
            try:
                await asyncio.sleep(30)
            finally:
                finished["value"] = True

        async def cancel_soon():
            await started.wait()
            token.cancel("client disconnected")

        canceller = asyncio.create_task(cancel_soon())
        with pytest.raises(CancellationError, match="client disconnected"):
            await token.guard(slow())
        await canceller

        assert finished["value"] is True

    @pytest.mark.asyncio
    async def test_guard_on_cancelled_token_never_starts_work(self):
        token = CancellationToken()
        token.cancel()
        ran = {"value": False}

        async def work():
            ran["value"] = True

        with pytest.raises(CancellationError):
            await token.guard(work())

        assert ran["value"] is False

    @pytest.mark.asyncio
    async def test_sleep_wakes_on_cancel(self):
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)

        with pytest.raises(CancellationError):
            await asyncio.wait_for(token.sleep(30), timeout=5)

    @pytest.mark.asyncio
    async def test_sleep_completes_without_cancel(self):
        await CancellationToken().sleep(0.01)

    @pytest.mark.asyncio
    async def test_guarded_without_token(self):
        async def work():
            return "done"

        assert await guarded(work(), None) == "done"
