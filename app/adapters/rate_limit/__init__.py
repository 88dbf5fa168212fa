"""Rate limiting adapters.

Fixed-window limiters share one interface so the intake pipeline does not care
whether counters live in the key/value backend, the SQLite table backend, or
nowhere at all (fail-open).
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult, RateWindow
from app.adapters.rate_limit.factory import create_rate_limiter
from app.adapters.rate_limit.fail_open import FailOpenRateLimiter
from app.adapters.rate_limit.kv import KeyValueFixedWindowRateLimiter
from app.adapters.rate_limit.table import TableFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "FailOpenRateLimiter",
    "KeyValueFixedWindowRateLimiter",
    "RateLimitResult",
    "RateWindow",
    "TableFixedWindowRateLimiter",
    "create_rate_limiter",
]
