"""Redis-backed key/value store for the log backend."""

from __future__ import annotations

import re
from typing import Any, AsyncIterator

from redis.asyncio import Redis

from app.adapters.kv.base import AbstractKeyValueStore

# Characters with special meaning in Redis glob-style MATCH patterns
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_match_pattern(prefix: str) -> str:
    """Escape glob metacharacters so prefix matches literally in SCAN MATCH."""
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class RedisKeyValueStore(AbstractKeyValueStore):
    """Key/value store over ``redis.asyncio`` with a shared connection pool.

    Expiry maps to ``SET ... EX``; prefix listing uses incremental ``SCAN``
    so large keyspaces never block the server.
    """

    def __init__(
        self,
        url: str,
        *,
        client: Redis | None = None,
        scan_count: int = 500,
        **connection_params: Any,
    ) -> None:
        """Initialize the store.

        Args:
            url: Redis connection URL (redis://, rediss:// or unix://).
            client: Optional pre-built client (used by tests).
            scan_count: SCAN batch size hint.
            **connection_params: Extra keyword arguments for ``Redis.from_url``.
        """
        params: dict[str, Any] = {
            "encoding": "utf-8",
            "decode_responses": True,
            "max_connections": 10,
            "socket_timeout": 5.0,
            "socket_connect_timeout": 2.0,
            "retry_on_timeout": True,
        }
        params.update(connection_params)
        self._url = url
        self._scan_count = scan_count
        self._client = client or Redis.from_url(url, **params)

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def put(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None and ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")
        await self._client.set(key, value, ex=ttl_seconds)

    async def list_keys(self, prefix: str) -> AsyncIterator[str]:
        pattern = f"{escape_match_pattern(prefix)}*"
        async for key in self._client.scan_iter(match=pattern, count=self._scan_count):
            yield key

    async def aclose(self) -> None:
        await self._client.aclose()
