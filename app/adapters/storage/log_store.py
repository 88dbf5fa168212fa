"""Submission store over a key/value (log) backend.

Key layout:
- ``submission:{formId}:{id}`` -> JSON submission record (including ``id``)
- ``index:{formId}``           -> JSON array of ids, newest first, bounded

Known limitations of this layout:
- ``get_by_id`` has no direct key (records are partitioned by form id), so it
  scans every ``submission:`` key. Use the table backend when point lookups by
  bare id are frequent.
- The index update is a non-atomic read-modify-write; concurrent stores to
  the same form may drop an id from the index (the record itself survives).
- Reads may lag writes made by other clients.
"""

from __future__ import annotations

import logging
from typing import Any

from app.adapters.kv.base import AbstractKeyValueStore
from app.adapters.storage.base import AbstractSubmissionStore
from app.schemas.submission import Submission, SubmissionMetadata
from app.utils.ids import IdGenerator, generate_submission_id

logger = logging.getLogger(__name__)

SUBMISSION_PREFIX = "submission:"
INDEX_PREFIX = "index:"
DEFAULT_INDEX_LIMIT = 1000


def submission_key(form_id: str, submission_id: str) -> str:
    return f"{SUBMISSION_PREFIX}{form_id}:{submission_id}"


def index_key(form_id: str) -> str:
    return f"{INDEX_PREFIX}{form_id}"


class LogSubmissionStore(AbstractSubmissionStore):
    """Stores each submission as its own record plus a per-form id index."""

    backend_name = "log"

    def __init__(
        self,
        kv: AbstractKeyValueStore,
        *,
        id_generator: IdGenerator = generate_submission_id,
        index_limit: int = DEFAULT_INDEX_LIMIT,
    ) -> None:
        if index_limit < 1:
            raise ValueError("index_limit must be >= 1")
        self._kv = kv
        self._id_generator = id_generator
        self._index_limit = index_limit

    async def _read_index(self, form_id: str) -> list[str]:
        index = await self._kv.get_json(index_key(form_id))
        return list(index) if index else []

    async def store(
        self,
        form_id: str,
        data: dict[str, Any],
        metadata: SubmissionMetadata,
    ) -> str:
        submission = Submission(
            id=self._id_generator(),
            form_id=form_id,
            data=data,
            metadata=metadata,
        )

        async with self._backend_errors("store"):
            await self._kv.put_json(
                submission_key(form_id, submission.id), submission.to_record()
            )

            index = await self._read_index(form_id)
            index.insert(0, submission.id)
            dropped = len(index) - self._index_limit
            await self._kv.put_json(index_key(form_id), index[: self._index_limit])

        logger.info(
            "submission.stored",
            extra={
                "backend": self.backend_name,
                "form_id": form_id,
                "submission_id": submission.id,
                "index_evicted": max(0, dropped),
            },
        )
        return submission.id

    async def list_by_form(self, form_id: str, limit: int, offset: int) -> list[Submission]:
        if limit <= 0:
            return []
        offset = max(0, offset)

        submissions: list[Submission] = []
        async with self._backend_errors("list_by_form"):
            index = await self._read_index(form_id)
            for submission_id in index[offset : offset + limit]:
                record = await self._kv.get_json(submission_key(form_id, submission_id))
                if record is None:
                    # Index can reference a record not yet visible to this reader
                    logger.debug(
                        "submission.index_dangling",
                        extra={"form_id": form_id, "submission_id": submission_id},
                    )
                    continue
                submissions.append(Submission.model_validate(record))
        return submissions

    async def get_by_id(self, submission_id: str) -> Submission | None:
        suffix = f":{submission_id}"
        async with self._backend_errors("get_by_id"):
            async for key in self._kv.list_keys(SUBMISSION_PREFIX):
                if not key.endswith(suffix):
                    continue
                record = await self._kv.get_json(key)
                # Form ids may contain ":", so the suffix alone is ambiguous
                if record is None or record.get("id") != submission_id:
                    continue
                return Submission.model_validate(record)
        return None
