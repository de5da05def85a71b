"""Retry policy shared by all provider clients.

Linear backoff: after failed attempt ``i`` (0-based) the policy waits
``base_delay * (i + 1)`` seconds. Cancellation is never retried, and neither
is a ProviderError marked non-retryable.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from llm.base import CancellationError, ProviderError
from llm.cancellation import CancellationToken, check_cancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for bounded retries.

    Args:
        max_retries: Extra attempts after the first one
        base_delay: Backoff unit in seconds
        sleep: Optional sleep replacement (tests inject a recorder here)
    """

    max_retries: int = 1
    base_delay: float = 0.8
    sleep: SleepFunc | None = None

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Backoff before the attempt following ``attempt``."""
        return self.base_delay * (attempt + 1)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        cancellation: CancellationToken | None = None,
        label: str = "call",
    ) -> T:
        """Run ``operation`` until it succeeds or attempts run out.

        Raises:
            CancellationError: Immediately, whenever the token fires.
            Exception: The last error once every attempt failed.
        """
        last_error: Exception | None = None

        for attempt in range(self.max_attempts):
            check_cancelled(cancellation)
            try:
                return await operation()
            except CancellationError:
                raise
            except Exception as e:
                last_error = e
                logger.warning("%s attempt %d failed: %s", label, attempt, e)
                if isinstance(e, ProviderError) and not e.retryable:
                    raise
                if attempt < self.max_retries:
                    await self._backoff(self.delay_for(attempt), cancellation)

        assert last_error is not None
        raise last_error

    async def _backoff(
        self, delay: float, cancellation: CancellationToken | None
    ) -> None:
        check_cancelled(cancellation)
        if self.sleep is not None:
            await self.sleep(delay)
        elif cancellation is not None:
            await cancellation.sleep(delay)
        else:
            await asyncio.sleep(delay)
