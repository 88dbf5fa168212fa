"""Factory for key/value stores selected by URL scheme."""

from __future__ import annotations

from urllib.parse import urlsplit

from app.adapters.kv.base import AbstractKeyValueStore
from app.adapters.kv.in_memory import InMemoryKeyValueStore
from app.adapters.kv.redis_store import RedisKeyValueStore
from app.core.errors import ValidationAppError

REDIS_SCHEMES = {"redis", "rediss", "unix"}


def create_key_value_store(url: str) -> AbstractKeyValueStore:
    """Instantiate the key/value store described by url.

    Args:
        url: ``memory://`` or a Redis URL.

    Returns:
        AbstractKeyValueStore: Configured store.

    Raises:
        ValidationAppError: If the URL scheme is not supported.
    """
    scheme = urlsplit(url).scheme.lower()

    if scheme == "memory":
        return InMemoryKeyValueStore()

    if scheme in REDIS_SCHEMES:
        return RedisKeyValueStore(url)

    raise ValidationAppError(
        code="kv_unknown_scheme",
        message=(
            f"Unsupported key/value store URL scheme: '{scheme}'. "
            "Supported schemes: memory, redis, rediss, unix"
        ),
    )
