"""Submission store interface.

Submissions are immutable: stores expose create and read operations only.
Backend I/O failures surface as ``StorageAppError`` carrying the backend name,
with the original exception chained as ``__cause__``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from app.core.errors import AppError, StorageAppError
from app.schemas.submission import Submission, SubmissionMetadata

logger = logging.getLogger(__name__)


class AbstractSubmissionStore(ABC):
    """Interface for submission persistence backends."""

    backend_name: str = "unknown"

    @abstractmethod
    async def store(
        self,
        form_id: str,
        data: dict[str, Any],
        metadata: SubmissionMetadata,
    ) -> str:
        """Persist a new submission and return its assigned id.

        Raises:
            StorageAppError: If the backend write failed.
            StorageUnavailableError: If no backend is configured.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_by_form(self, form_id: str, limit: int, offset: int) -> list[Submission]:
        """Return up to limit submissions of form_id, newest first, skipping offset."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, submission_id: str) -> Submission | None:
        """Return the submission with submission_id, or None when not found."""
        raise NotImplementedError

    @asynccontextmanager
    async def _backend_errors(self, operation: str) -> AsyncIterator[None]:
        """Translate unexpected backend exceptions into StorageAppError."""
        try:
            yield
        except AppError:
            raise
        except Exception as exc:
            logger.error(
                "storage.backend_error",
                extra={
                    "backend": self.backend_name,
                    "operation": operation,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise StorageAppError(
                code="storage_error",
                message=f"Storage backend '{self.backend_name}' failed during {operation}",
                details={
                    "backend": self.backend_name,
                    "operation": operation,
                    "cause": type(exc).__name__,
                },
                backend=self.backend_name,
            ) from exc
