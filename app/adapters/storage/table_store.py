"""Submission store over the SQLite table backend.

Rows live in the ``submissions`` table; ``data`` and ``metadata`` are JSON
text and ``created_at`` duplicates ``metadata.timestamp`` for ordering.
Reads observe every committed write immediately.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import aiosqlite

from app.adapters.sql.database import SqliteDatabase
from app.adapters.storage.base import AbstractSubmissionStore
from app.schemas.submission import Submission, SubmissionMetadata
from app.utils.ids import IdGenerator, generate_submission_id

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "SELECT id, form_id, data, metadata, created_at FROM submissions"


def _row_to_submission(row: aiosqlite.Row) -> Submission:
    return Submission(
        id=row["id"],
        form_id=row["form_id"],
        data=json.loads(row["data"]),
        metadata=SubmissionMetadata.model_validate(json.loads(row["metadata"])),
    )


class TableSubmissionStore(AbstractSubmissionStore):
    """Stores submissions as rows of a single relational table."""

    backend_name = "table"

    def __init__(
        self,
        database: SqliteDatabase,
        *,
        id_generator: IdGenerator = generate_submission_id,
    ) -> None:
        self._database = database
        self._id_generator = id_generator

    async def store(
        self,
        form_id: str,
        data: dict[str, Any],
        metadata: SubmissionMetadata,
    ) -> str:
        submission_id = self._id_generator()
        metadata_record = metadata.model_dump(by_alias=True, exclude_none=True)

        async with self._backend_errors("store"):
            async with self._database.connect() as db:
                await db.execute(
                    """
                    INSERT INTO submissions (id, form_id, data, metadata, created_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        submission_id,
                        form_id,
                        json.dumps(data, ensure_ascii=False),
                        json.dumps(metadata_record, ensure_ascii=False),
                        metadata.timestamp,
                    ),
                )
                await db.commit()

        logger.info(
            "submission.stored",
            extra={
                "backend": self.backend_name,
                "form_id": form_id,
                "submission_id": submission_id,
            },
        )
        return submission_id

    async def list_by_form(self, form_id: str, limit: int, offset: int) -> list[Submission]:
        if limit <= 0:
            return []

        async with self._backend_errors("list_by_form"):
            async with self._database.connect() as db:
                # rowid breaks ties between identical timestamps by insertion order
                cursor = await db.execute(
                    f"""
                    {_SELECT_COLUMNS}
                    WHERE form_id = ?
                    ORDER BY created_at DESC, rowid DESC
                    LIMIT ? OFFSET ?
                    """,
                    (form_id, limit, max(0, offset)),
                )
                rows = await cursor.fetchall()
            return [_row_to_submission(row) for row in rows]

    async def get_by_id(self, submission_id: str) -> Submission | None:
        async with self._backend_errors("get_by_id"):
            async with self._database.connect() as db:
                cursor = await db.execute(
                    f"{_SELECT_COLUMNS} WHERE id = ?",
                    (submission_id,),
                )
                row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_submission(row)
