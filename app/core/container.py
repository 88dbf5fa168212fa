"""Runtime wiring of backends, adapters and the intake service.

Backends are selected exactly once, when the container is built at startup;
no component re-checks configuration per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.adapters.backends import Backends
from app.adapters.notifier.base import AbstractNotifier
from app.adapters.notifier.factory import create_notifier
from app.adapters.rate_limit.factory import create_rate_limiter
from app.adapters.storage.factory import create_submission_store
from app.adapters.verifier.base import AbstractVerifier
from app.adapters.verifier.turnstile import TurnstileVerifier
from app.core.config import Settings
from app.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Objects living for the whole application lifespan."""

    settings: Settings
    backends: Backends
    http_client: httpx.AsyncClient
    submission_service: SubmissionService

    async def aclose(self) -> None:
        """Drain notifications, then release HTTP and backend connections."""
        await self.submission_service.aclose()
        await self.http_client.aclose()
        await self.backends.aclose()
        logger.info("container.closed")


async def build_container(
    settings: Settings,
    *,
    verifier: AbstractVerifier | None = None,
    notifier: AbstractNotifier | None = None,
) -> ServiceContainer:
    """Build and initialize every long-lived component.

    Args:
        settings: Resolved application settings.
        verifier: Optional verifier override (defaults to Turnstile).
        notifier: Optional notifier override (defaults to email settings).

    Returns:
        ServiceContainer: Ready-to-use components.
    """
    backends = Backends.from_settings(settings.storage)
    await backends.initialize()

    http_client = httpx.AsyncClient()

    if verifier is None:
        verifier = TurnstileVerifier(
            http_client,
            secret_key=settings.verifier.secret_key,
            verify_url=settings.verifier.verify_url,
            timeout_seconds=settings.verifier.timeout_seconds,
        )
    if notifier is None:
        notifier = create_notifier(settings.email, http_client)

    service = SubmissionService(
        store=create_submission_store(
            backends, index_limit=settings.storage.index_limit
        ),
        rate_limiter=create_rate_limiter(backends),
        verifier=verifier,
        notifier=notifier,
        app_settings=settings.app,
    )

    logger.info(
        "container.ready",
        extra={
            "storage_backend": service.store.backend_name,
            "rate_limit_backend": service.rate_limiter.backend_name,
            "notifications_enabled": notifier is not None,
        },
    )
    return ServiceContainer(
        settings=settings,
        backends=backends,
        http_client=http_client,
        submission_service=service,
    )
