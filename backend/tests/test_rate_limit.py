"""Tests for the sliding-window rate limiter."""

from middleware.rate_limit import RateLimitConfig, RateLimiter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:
    """Tests for RateLimiter."""

    def setup_method(self):
        self.clock = FakeClock()
        self.limiter = RateLimiter(
            RateLimitConfig(requests_per_minute=4, requests_per_hour=6, burst_limit=2),
            clock=self.clock,
        )

    def test_burst_limit(self):
        assert self.limiter.check("ip:1").allowed is True
        assert self.limiter.check("ip:1").allowed is True

        decision = self.limiter.check("ip:1")

        assert decision.allowed is False
        assert decision.headers["Retry-After"] == "10"
        assert decision.message == "Too many requests. Please slow down."

    def test_clients_are_independent(self):
        self.limiter.check("ip:1")
        self.limiter.check("ip:1")
        assert self.limiter.check("ip:2").allowed is True

    def test_minute_limit_after_burst_window(self):
        for _ in range(2):
            self.limiter.check("ip:1")
        self.clock.now += 11
        for _ in range(2):
            assert self.limiter.check("ip:1").allowed is True
        self.clock.now += 11

        decision = self.limiter.check("ip:1")

        assert decision.allowed is False
        assert decision.headers["Retry-After"] == "60"

    def test_hour_limit_and_expiry(self):
        for _ in range(6):
            self.clock.now += 61
            assert self.limiter.check("ip:1").allowed is True
        self.clock.now += 61
        assert self.limiter.check("ip:1").allowed is False

        self.clock.now += 3600
        assert self.limiter.check("ip:1").allowed is True

    def test_remaining_header(self):
        decision = self.limiter.check("ip:1")
        assert decision.headers["X-RateLimit-Remaining"] == "3"
