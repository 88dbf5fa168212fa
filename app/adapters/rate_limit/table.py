"""Fixed-window rate limiter over the SQLite table backend.

Windows live in ``rate_limits(key, count, reset_at)`` with ``reset_at`` in
epoch milliseconds. An expired or missing window is replaced by delete then
insert; an active window is incremented with ``count = count + 1``, which is
atomic per row. Two requests racing to create the same window can collide on
the primary key; the loser surfaces as a backend error and is allowed
(fail-open). Expired rows stay until they are replaced.
"""

from __future__ import annotations

import time
from typing import Callable

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitResult,
    RateWindow,
    rate_limit_key,
)
from app.adapters.sql.database import SqliteDatabase


class TableFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter persisting one row per identifier."""

    backend_name = "table"

    def __init__(
        self,
        database: SqliteDatabase,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(clock=clock)
        self._database = database

    async def _check(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int,
    ) -> RateLimitResult:
        key = rate_limit_key(identifier)
        now_ms = self._now_ms()

        async with self._database.connect() as db:
            cursor = await db.execute(
                "SELECT count, reset_at FROM rate_limits WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
            window = (
                RateWindow(count=row["count"], reset_at_ms=row["reset_at"])
                if row is not None
                else None
            )

            if window is None or window.is_expired(now_ms):
                fresh = RateWindow(count=1, reset_at_ms=now_ms + window_seconds * 1000)
                await db.execute("DELETE FROM rate_limits WHERE key = ?", (key,))
                await db.execute(
                    "INSERT INTO rate_limits (key, count, reset_at) VALUES (?, ?, ?)",
                    (key, fresh.count, fresh.reset_at_ms),
                )
                await db.commit()
                return self._build_allowed_result(window=fresh, max_requests=max_requests)

            if window.count >= max_requests:
                return self._build_blocked_result(
                    window=window, max_requests=max_requests, now_ms=now_ms
                )

            await db.execute(
                "UPDATE rate_limits SET count = count + 1 WHERE key = ?",
                (key,),
            )
            await db.commit()

        incremented = RateWindow(count=window.count + 1, reset_at_ms=window.reset_at_ms)
        return self._build_allowed_result(window=incremented, max_requests=max_requests)
