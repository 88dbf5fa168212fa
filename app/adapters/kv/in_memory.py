"""In-memory key/value store with per-key expiry.

Notes:
- Per-process only: every worker holds its own data, nothing is shared.
- Thread-safe: uses a lock around shared state.
- Intended for local development and tests (``STORAGE_KV_URL=memory://``).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import AsyncIterator, Callable

from app.adapters.kv.base import AbstractKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: str
    expires_at: float | None


class InMemoryKeyValueStore(AbstractKeyValueStore):
    """Dictionary-backed store honoring ``ttl_seconds`` on reads."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the store.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"InMemoryKeyValueStore(size={len(self._entries)})"

    def _is_expired(self, entry: _Entry, now: float) -> bool:
        return entry.expires_at is not None and now >= entry.expires_at

    def ttl(self, key: str) -> float | None:
        """Return remaining seconds before key expires (None when no expiry or absent)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.expires_at is None:
                return None
            return max(0.0, entry.expires_at - self._clock())

    async def get(self, key: str) -> str | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, now):
                self._entries.pop(key, None)
                logger.debug("kv.expired", extra={"kv_key": key})
                return None
            return entry.value

    async def put(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None and ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    async def list_keys(self, prefix: str) -> AsyncIterator[str]:
        now = self._clock()
        with self._lock:
            keys = sorted(
                key
                for key, entry in self._entries.items()
                if key.startswith(prefix) and not self._is_expired(entry, now)
            )
        for key in keys:
            yield key
