"""Key/value store interface used by the log backend.

Storage and rate limiting code depend on this abstraction, so the concrete
store (Redis, in-memory) is chosen once at startup.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator


class AbstractKeyValueStore(ABC):
    """Interface for key/value stores with expiry and prefix listing.

    Reads are not guaranteed to observe writes from other clients immediately.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the raw value stored under key, or None when absent/expired."""
        raise NotImplementedError

    @abstractmethod
    async def put(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        """Store value under key, replacing any previous value.

        Args:
            key: Record key.
            value: Serialized value.
            ttl_seconds: Optional expiry; the key disappears after this many seconds.
        """
        raise NotImplementedError

    @abstractmethod
    def list_keys(self, prefix: str) -> AsyncIterator[str]:
        """Iterate over all live keys starting with prefix."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections held by the store."""

    async def get_json(self, key: str) -> Any | None:
        """Return the JSON-decoded value under key, or None when absent."""
        raw = await self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def put_json(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """JSON-encode value and store it under key."""
        await self.put(
            key,
            json.dumps(value, separators=(",", ":"), ensure_ascii=False),
            ttl_seconds=ttl_seconds,
        )
