"""Cooperative cancellation for provider calls.

A token is created per chat turn and threaded through every awaited
operation. Adapters check it at the top of loops and before retry sleeps, and
race in-flight HTTP work against it.
"""

import asyncio
import inspect
from collections.abc import Awaitable
from typing import TypeVar

from llm.base import CancellationError

T = TypeVar("T")


class CancellationToken:
    """Cancellation signal backed by an ``asyncio.Event``."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError(self.reason or "cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        The pending work is cancelled when the token wins.
        """
        if self._event.is_set():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise CancellationError(self.reason or "cancelled")
        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise CancellationError(self.reason or "cancelled")

    async def sleep(self, delay: float) -> None:
        """Sleep for ``delay`` seconds, waking early with an error on cancel."""
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except TimeoutError:
            return
        raise CancellationError(self.reason or "cancelled")


def check_cancelled(token: CancellationToken | None) -> None:
    """Raise if an optional token has fired."""
    if token is not None:
        token.raise_if_cancelled()


async def guarded(awaitable: Awaitable[T], token: CancellationToken | None) -> T:
    """Await ``awaitable``, racing it against ``token`` when one is given."""
    if token is None:
        return await awaitable
    return await token.guard(awaitable)
