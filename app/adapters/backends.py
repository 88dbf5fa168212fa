"""Handles to the two storage backends shared by persistence and rate limiting."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.adapters.kv.base import AbstractKeyValueStore
from app.adapters.kv.factory import create_key_value_store
from app.adapters.sql.database import SqliteDatabase
from app.core.config import StorageSettings

logger = logging.getLogger(__name__)


@dataclass
class Backends:
    """Optional backend handles; either (or both) may be absent.

    Attributes:
        kv: Key/value store for the log backend.
        database: SQLite database for the table backend.
    """

    kv: AbstractKeyValueStore | None = None
    database: SqliteDatabase | None = None

    @classmethod
    def from_settings(cls, storage_settings: StorageSettings) -> "Backends":
        """Build backend handles from configuration without touching the network."""
        kv = (
            create_key_value_store(storage_settings.kv_url)
            if storage_settings.kv_url
            else None
        )
        database = (
            SqliteDatabase(storage_settings.sqlite_path)
            if storage_settings.sqlite_path
            else None
        )
        logger.info(
            "backends.configured",
            extra={"kv_configured": kv is not None, "table_configured": database is not None},
        )
        return cls(kv=kv, database=database)

    async def initialize(self) -> None:
        """Prepare backends that need setup (table schema)."""
        if self.database is not None:
            await self.database.initialize()

    async def aclose(self) -> None:
        if self.kv is not None:
            await self.kv.aclose()
