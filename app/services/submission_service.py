"""Submission intake service composing verification, rate limiting, storage and notification.

This service is the core business flow for incoming form submissions. Per
submission, steps run strictly in this order:
- Input validation
- Anti-abuse verification of the caller's token
- Fixed-window rate limiting per caller address
- Persistence (failures propagate to the caller)
- Email notification as a detached task (failures are only logged)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from app.adapters.notifier.base import AbstractNotifier
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.storage.base import AbstractSubmissionStore
from app.adapters.verifier.base import AbstractVerifier
from app.core.config import AppSettings
from app.core.errors import RateLimitAppError, ValidationAppError, VerificationAppError
from app.core.logging import hash_identifier
from app.schemas.submission import Submission, SubmissionMetadata, SubmitRequest

logger = logging.getLogger(__name__)

# Upper bound for draining pending notifications on shutdown
NOTIFICATION_DRAIN_TIMEOUT_SECONDS = 10.0


def utc_timestamp() -> str:
    """Return the current UTC instant as ISO-8601 with millisecond precision."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _validate_request(request: SubmitRequest) -> tuple[str, str, dict[str, Any]]:
    """Check required submission fields.

    Args:
        request: Parsed submission payload.

    Returns:
        Tuple of (token, form_id, data).

    Raises:
        ValidationAppError: If a required field is missing or data is not an object.
    """
    if not request.turnstile_token:
        raise ValidationAppError(
            code="missing_turnstile_token",
            message="Turnstile token is required",
        )
    if not request.form_id:
        raise ValidationAppError(
            code="missing_form_id",
            message="Form ID is required",
        )
    if request.data is None:
        raise ValidationAppError(
            code="missing_form_data",
            message="Form data is required",
        )
    if not isinstance(request.data, dict):
        raise ValidationAppError(
            code="invalid_form_data",
            message="Form data must be an object",
            details={"received_type": type(request.data).__name__},
        )
    return request.turnstile_token, request.form_id, request.data


class SubmissionService:
    """Intake pipeline for form submissions.

    Attributes:
        store: Submission persistence backend.
        rate_limiter: Fixed-window limiter keyed by caller address.
        verifier: Anti-abuse token verifier.
        notifier: Optional notifier; None disables notifications.
    """

    def __init__(
        self,
        *,
        store: AbstractSubmissionStore,
        rate_limiter: AbstractRateLimiter,
        verifier: AbstractVerifier,
        notifier: AbstractNotifier | None,
        app_settings: AppSettings,
    ) -> None:
        self.store = store
        self.rate_limiter = rate_limiter
        self.verifier = verifier
        self.notifier = notifier
        self._app_settings = app_settings
        # Strong references keep detached tasks alive until they finish
        self._pending_notifications: set[asyncio.Task[None]] = set()

    async def submit(self, request: SubmitRequest, *, client_ip: str, user_agent: str) -> str:
        """Run the intake pipeline for one submission.

        Args:
            request: Parsed submission payload.
            client_ip: Caller network address.
            user_agent: Caller User-Agent header.

        Returns:
            The new submission id.

        Raises:
            ValidationAppError: If required fields are missing.
            VerificationAppError: If the verifier rejected the token.
            RateLimitAppError: If the caller exhausted its quota.
            StorageAppError: If persistence failed.
            StorageUnavailableError: If no storage backend is configured.
        """
        token, form_id, data = _validate_request(request)
        ip_hash = hash_identifier(client_ip)

        verdict = await self.verifier.verify(token, client_ip)
        if not verdict.accepted:
            logger.warning(
                "submission.verification_failed",
                extra={
                    "form_id": form_id,
                    "ip_hash": ip_hash,
                    "error_codes": verdict.error_codes,
                },
            )
            raise VerificationAppError(
                code="verification_failed",
                message="Turnstile verification failed",
                details={"error_codes": verdict.error_codes},
            )

        await self._enforce_rate_limit(client_ip, ip_hash)

        metadata = SubmissionMetadata(
            ip=client_ip,
            user_agent=user_agent,
            timestamp=utc_timestamp(),
            spam_score=verdict.confidence_score,
        )
        submission_id = await self.store.store(form_id, data, metadata)

        logger.info(
            "submission.accepted",
            extra={
                "form_id": form_id,
                "submission_id": submission_id,
                "backend": self.store.backend_name,
                "ip_hash": ip_hash,
                "field_count": len(data),
            },
        )

        if self.notifier is not None:
            self._schedule_notification(
                self.notifier,
                Submission(id=submission_id, form_id=form_id, data=data, metadata=metadata),
            )

        return submission_id

    async def _enforce_rate_limit(self, client_ip: str, ip_hash: str) -> None:
        if not self._app_settings.rate_limit_enabled:
            return

        max_requests = self._app_settings.rate_limit_requests
        window_seconds = self._app_settings.rate_limit_window_seconds
        result = await self.rate_limiter.check(client_ip, max_requests, window_seconds)
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "key_hash": ip_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "window_s": window_seconds,
                },
            )
            return

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "key_hash": ip_hash,
                "limit": result.limit,
                "window_s": window_seconds,
                "retry_after_s": retry_after,
            },
        )
        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message="Rate limit exceeded",
            details={"retry_after": retry_after, "limit": result.limit},
        )

    def _schedule_notification(self, notifier: AbstractNotifier, submission: Submission) -> None:
        """Start notification delivery without waiting for it."""
        task = asyncio.create_task(
            self._deliver_notification(notifier, submission),
            name=f"notify:{submission.id}",
        )
        self._pending_notifications.add(task)
        task.add_done_callback(self._pending_notifications.discard)

    async def _deliver_notification(
        self, notifier: AbstractNotifier, submission: Submission
    ) -> None:
        try:
            await notifier.notify(submission)
        except Exception as exc:
            # Persistence already succeeded; the caller never sees this failure
            logger.error(
                "notification.failed",
                extra={
                    "form_id": submission.form_id,
                    "submission_id": submission.id,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )

    @property
    def pending_notifications(self) -> int:
        return len(self._pending_notifications)

    async def list_submissions(self, form_id: str, *, limit: int, offset: int) -> list[Submission]:
        """Return a page of form_id submissions, newest first."""
        return await self.store.list_by_form(form_id, limit, offset)

    async def get_submission(self, submission_id: str) -> Submission | None:
        """Return one submission by id, or None."""
        return await self.store.get_by_id(submission_id)

    async def aclose(self, timeout: float = NOTIFICATION_DRAIN_TIMEOUT_SECONDS) -> None:
        """Wait (bounded) for in-flight notifications before shutdown."""
        if not self._pending_notifications:
            return
        pending = list(self._pending_notifications)
        done, not_done = await asyncio.wait(pending, timeout=timeout)
        if not_done:
            logger.warning(
                "notification.drain_timeout",
                extra={"completed": len(done), "abandoned": len(not_done)},
            )
            for task in not_done:
                task.cancel()
