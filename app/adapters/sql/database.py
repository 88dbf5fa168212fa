"""SQLite database handle for the table backend.

Each operation opens its own ``aiosqlite`` connection, so no connection state
is shared between concurrent requests. Use a file path; ``:memory:`` databases
do not survive across connections.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

logger = logging.getLogger(__name__)


SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS submissions (
        id TEXT PRIMARY KEY,
        form_id TEXT NOT NULL,
        data TEXT NOT NULL,
        metadata TEXT NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_form_id ON submissions(form_id)",
    "CREATE INDEX IF NOT EXISTS idx_created_at ON submissions(created_at DESC)",
    """
    CREATE INDEX IF NOT EXISTS idx_form_id_created_at
    ON submissions(form_id, created_at DESC)
    """,
    """
    CREATE TABLE IF NOT EXISTS rate_limits (
        key TEXT PRIMARY KEY,
        count INTEGER NOT NULL,
        reset_at INTEGER NOT NULL
    )
    """,
)


class SqliteDatabase:
    """Factory for short-lived SQLite connections to a single database file."""

    def __init__(self, path: str | Path, *, timeout_seconds: float = 5.0) -> None:
        self.path = Path(path).expanduser().resolve()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._timeout = timeout_seconds

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"SqliteDatabase(path={str(self.path)!r})"

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection with name-addressable rows."""
        async with aiosqlite.connect(self.path, timeout=self._timeout) as db:
            db.row_factory = aiosqlite.Row
            yield db

    async def initialize(self) -> None:
        """Create tables and indexes if they don't exist."""
        async with self.connect() as db:
            for statement in SCHEMA_STATEMENTS:
                await db.execute(statement)
            await db.commit()
        logger.info("sqlite.initialized", extra={"db_path": str(self.path)})
