"""Limiter used when no rate limit store is configured."""

from __future__ import annotations

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class FailOpenRateLimiter(AbstractRateLimiter):
    """Allows every request.

    A missing rate limit store must never block legitimate traffic.
    """

    backend_name = "none"

    async def _check(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int,
    ) -> RateLimitResult:
        return RateLimitResult(allowed=True, limit=max_requests)
