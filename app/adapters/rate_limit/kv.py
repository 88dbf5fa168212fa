"""Fixed-window rate limiter over the key/value (log) backend.

Each window is stored as ``ratelimit:{identifier}`` -> ``{"count", "resetAt"}``
(epoch ms) with a native expiry equal to the remaining window length, so idle
windows are garbage-collected by the store.

Notes:
- Best-effort under concurrency: read, decide and write are separate calls, so
  concurrent requests in one window may both read a stale count and undercount.
  Good enough for abuse mitigation, not for metering.
"""

from __future__ import annotations

import math
import time
from typing import Callable

from app.adapters.kv.base import AbstractKeyValueStore
from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitResult,
    RateWindow,
    rate_limit_key,
)


class KeyValueFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter persisting one JSON window per identifier."""

    backend_name = "log"

    def __init__(
        self,
        kv: AbstractKeyValueStore,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        self._kv = kv

    async def _load_window(self, key: str) -> RateWindow | None:
        payload = await self._kv.get_json(key)
        if payload is None:
            return None
        return RateWindow(count=int(payload["count"]), reset_at_ms=int(payload["resetAt"]))

    async def _save_window(self, key: str, window: RateWindow, *, ttl_seconds: int) -> None:
        await self._kv.put_json(
            key,
            {"count": window.count, "resetAt": window.reset_at_ms},
            ttl_seconds=max(1, ttl_seconds),
        )

    async def _check(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int,
    ) -> RateLimitResult:
        key = rate_limit_key(identifier)
        now_ms = self._now_ms()
        window = await self._load_window(key)

        if window is None or window.is_expired(now_ms):
            fresh = RateWindow(count=1, reset_at_ms=now_ms + window_seconds * 1000)
            await self._save_window(key, fresh, ttl_seconds=window_seconds)
            return self._build_allowed_result(window=fresh, max_requests=max_requests)

        if window.count >= max_requests:
            return self._build_blocked_result(
                window=window, max_requests=max_requests, now_ms=now_ms
            )

        incremented = RateWindow(count=window.count + 1, reset_at_ms=window.reset_at_ms)
        await self._save_window(
            key,
            incremented,
            ttl_seconds=math.ceil(window.remaining_ms(now_ms) / 1000),
        )
        return self._build_allowed_result(window=incremented, max_requests=max_requests)
