"""Middleware package for FastAPI application."""

from middleware.rate_limit import RateLimitConfig, RateLimiter, RateLimitMiddleware

__all__ = ["RateLimitMiddleware", "RateLimitConfig", "RateLimiter"]
