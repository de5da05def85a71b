"""Rate limiting middleware for the chat endpoints.

Every chat turn can cost two provider calls plus a continuation, so chat
paths are throttled per client with in-memory sliding windows.
"""

import logging
import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from config import get_settings
from responses import ResponseCode, error_response

logger = logging.getLogger(__name__)

HOUR = 3600.0


@dataclass(frozen=True)
class Window:
    """At most ``limit`` requests per ``seconds``."""

    seconds: float
    limit: int
    message: str


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_minute: int = 20
    requests_per_hour: int = 200
    burst_limit: int = 5  # within 10 seconds

    @classmethod
    def from_settings(cls) -> "RateLimitConfig":
        settings = get_settings()
        return cls(
            requests_per_minute=settings.rate_limit_per_minute,
            requests_per_hour=settings.rate_limit_per_hour,
            burst_limit=settings.rate_limit_burst,
        )

    def windows(self) -> tuple[Window, ...]:
        """Windows checked in order, shortest first."""
        return (
            Window(10.0, self.burst_limit, "Too many requests. Please slow down."),
            Window(60.0, self.requests_per_minute, "Rate limit exceeded. Please wait a moment."),
            Window(HOUR, self.requests_per_hour, "Hourly rate limit exceeded."),
        )


@dataclass
class RateLimitDecision:
    allowed: bool
    headers: dict[str, str]
    message: str | None = None


class RateLimiter:
    """In-memory sliding-window limiter keyed by client."""

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._requests: dict[str, deque[float]] = defaultdict(deque)

    @staticmethod
    def client_id(request: Request) -> str:
        """Identify the caller by forwarded address, else peer address."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"
        if request.client:
            return f"ip:{request.client.host}"
        return "unknown"

    def check(self, client_id: str) -> RateLimitDecision:
        """Record a request for ``client_id`` if every window allows it."""
        now = self._clock()
        timestamps = self._requests[client_id]
        while timestamps and timestamps[0] <= now - HOUR:
            timestamps.popleft()

        for window in self.config.windows():
            in_window = sum(1 for ts in timestamps if ts > now - window.seconds)
            if in_window >= window.limit:
                return RateLimitDecision(
                    allowed=False,
                    message=window.message,
                    headers={
                        "X-RateLimit-Limit": str(window.limit),
                        "X-RateLimit-Remaining": "0",
                        "Retry-After": str(int(window.seconds)),
                    },
                )

        timestamps.append(now)
        minute_count = sum(1 for ts in timestamps if ts > now - 60.0)
        return RateLimitDecision(
            allowed=True,
            headers={
                "X-RateLimit-Limit": str(self.config.requests_per_minute),
                "X-RateLimit-Remaining": str(
                    max(self.config.requests_per_minute - minute_count, 0)
                ),
            },
        )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply rate limiting to the chat paths."""

    RATE_LIMITED_PATHS = frozenset({"/api/chat", "/api/chat/complete"})

    def __init__(self, app, config: RateLimitConfig | None = None) -> None:
        super().__init__(app)
        self.limiter = RateLimiter(config or RateLimitConfig.from_settings())

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path not in self.RATE_LIMITED_PATHS:
            return await call_next(request)

        client_id = self.limiter.client_id(request)
        decision = self.limiter.check(client_id)

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s", client_id, request.url.path
            )
            return error_response(
                ResponseCode.RATE_LIMITED,
                custom_message=decision.message,
                request_id=getattr(request.state, "request_id", None),
                headers=decision.headers,
            )

        response = await call_next(request)
        response.headers.update(decision.headers)
        return response
