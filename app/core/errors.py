"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: int
    limit: int
    backend: str
    operation: str
    cause: str
    error_codes: list[str]
    provider: str
    submission_id: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class VerificationAppError(AppError):
    """Raised when the anti-abuse verifier rejects a submission."""


class NotFoundAppError(AppError):
    """Raised by the HTTP layer when a point lookup finds nothing."""


class RateLimitAppError(AppError):
    """Raised when a caller exhausted its submission quota."""


class NotificationAppError(AppError):
    """Raised when a notification could not be delivered."""


class StorageUnavailableError(AppError):
    """Raised when no storage backend is configured."""


@dataclass
class StorageAppError(AppError):
    """Raised when a storage backend I/O operation fails.

    The underlying exception is chained as ``__cause__``.

    Attributes:
        backend: Name of the failing backend ("log" or "table").
    """

    backend: str = "unknown"
