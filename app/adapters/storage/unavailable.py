"""Placeholder store used when no storage backend is configured."""

from __future__ import annotations

from typing import Any

from app.adapters.storage.base import AbstractSubmissionStore
from app.core.errors import StorageUnavailableError
from app.schemas.submission import Submission, SubmissionMetadata


class UnavailableSubmissionStore(AbstractSubmissionStore):
    """Rejects writes and answers reads with empty results."""

    backend_name = "none"

    async def store(
        self,
        form_id: str,
        data: dict[str, Any],
        metadata: SubmissionMetadata,
    ) -> str:
        raise StorageUnavailableError(
            code="storage_unavailable",
            message="No storage backend configured",
            details={
                "hint": "Set STORAGE_SQLITE_PATH and/or STORAGE_KV_URL",
            },
        )

    async def list_by_form(self, form_id: str, limit: int, offset: int) -> list[Submission]:
        return []

    async def get_by_id(self, submission_id: str) -> Submission | None:
        return None
