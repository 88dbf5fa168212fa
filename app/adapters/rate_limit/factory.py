"""Factory selecting the rate limiter backend."""

from __future__ import annotations

import logging
import time
from typing import Callable

from app.adapters.backends import Backends
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.fail_open import FailOpenRateLimiter
from app.adapters.rate_limit.kv import KeyValueFixedWindowRateLimiter
from app.adapters.rate_limit.table import TableFixedWindowRateLimiter

logger = logging.getLogger(__name__)


def create_rate_limiter(
    backends: Backends,
    *,
    clock: Callable[[], float] = time.time,
) -> AbstractRateLimiter:
    """Pick the rate limiter for the configured backends.

    The key/value backend is preferred (cheaper counters), then the table
    backend. Without either, every request is allowed.

    Args:
        backends: Available backend handles.
        clock: Time source function returning UNIX time in seconds.

    Returns:
        AbstractRateLimiter: Selected limiter.
    """
    limiter: AbstractRateLimiter
    if backends.kv is not None:
        limiter = KeyValueFixedWindowRateLimiter(backends.kv, clock=clock)
    elif backends.database is not None:
        limiter = TableFixedWindowRateLimiter(backends.database, clock=clock)
    else:
        logger.warning("rate_limit.fail_open", extra={"reason": "no_backend_configured"})
        limiter = FailOpenRateLimiter(clock=clock)

    logger.info("rate_limit.selected", extra={"backend": limiter.backend_name})
    return limiter
