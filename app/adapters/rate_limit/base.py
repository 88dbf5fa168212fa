"""Rate limiter interfaces.

The pipeline depends on this abstraction (not a concrete implementation) so
the counter storage is chosen once at startup.

Algorithm (fixed window, not sliding), per identifier:
1. Load the window. If absent or expired, replace it with ``count=1`` and
   ``reset_at=now+window`` and allow. Nothing carries over from the old window.
2. If ``count >= max_requests``, deny with ``retry_after=ceil(remaining)``.
   No write happens.
3. Otherwise increment ``count`` and allow.

Backend failures never reach the caller: they are logged and the request is
allowed (fail-open).
"""

from __future__ import annotations

import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

RATE_LIMIT_PREFIX = "ratelimit:"


def rate_limit_key(identifier: str) -> str:
    return f"{RATE_LIMIT_PREFIX}{identifier}"


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (None when unknown).
        reset_at: UNIX epoch seconds when the current window resets (None when unknown).
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int | None = None
    reset_at: int | None = None
    retry_after_seconds: int | None = None


@dataclass(frozen=True)
class RateWindow:
    """Counter state of one identifier's current window.

    Attributes:
        count: Requests accepted in this window (>= 1).
        reset_at_ms: Epoch milliseconds after which the window is expired.
    """

    count: int
    reset_at_ms: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms >= self.reset_at_ms

    def remaining_ms(self, now_ms: int) -> int:
        return max(0, self.reset_at_ms - now_ms)


class AbstractRateLimiter(ABC):
    """Interface for fixed-window rate limiters."""

    backend_name: str = "unknown"

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the limiter.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def check(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int,
    ) -> RateLimitResult:
        """Count one request for identifier and decide whether it may proceed.

        Args:
            identifier: Caller identifier (e.g., network address).
            max_requests: Requests allowed per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult describing whether it was allowed.

        Raises:
            ValueError: If arguments are invalid.
        """
        if not identifier:
            raise ValueError("identifier must be a non-empty string")
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        try:
            return await self._check(identifier, max_requests, window_seconds)
        except Exception as exc:
            logger.warning(
                "rate_limit.backend_error",
                extra={
                    "backend": self.backend_name,
                    "key_hash": hash_identifier(identifier),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return RateLimitResult(allowed=True, limit=max_requests)

    @abstractmethod
    async def _check(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int,
    ) -> RateLimitResult:
        """Backend-specific check; exceptions are converted to fail-open by check()."""
        raise NotImplementedError

    def _build_allowed_result(self, *, window: RateWindow, max_requests: int) -> RateLimitResult:
        """Build a RateLimitResult for an allowed request."""
        return RateLimitResult(
            allowed=True,
            limit=max_requests,
            remaining=max(0, max_requests - window.count),
            reset_at=window.reset_at_ms // 1000,
            retry_after_seconds=None,
        )

    def _build_blocked_result(
        self, *, window: RateWindow, max_requests: int, now_ms: int
    ) -> RateLimitResult:
        """Build a RateLimitResult for a blocked request."""
        return RateLimitResult(
            allowed=False,
            limit=max_requests,
            remaining=0,
            reset_at=window.reset_at_ms // 1000,
            retry_after_seconds=math.ceil(window.remaining_ms(now_ms) / 1000),
        )
