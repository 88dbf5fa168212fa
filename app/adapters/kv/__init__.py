"""Key/value ("log") backend adapters.

The log backend is a plain key/value store with per-key expiry and prefix
listing but no query language. Redis is the production implementation; the
in-memory store serves local development and tests.
"""

from app.adapters.kv.base import AbstractKeyValueStore
from app.adapters.kv.factory import create_key_value_store
from app.adapters.kv.in_memory import InMemoryKeyValueStore
from app.adapters.kv.redis_store import RedisKeyValueStore

__all__ = [
    "AbstractKeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_key_value_store",
]
