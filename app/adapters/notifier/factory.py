"""Factory for creating the submission notifier from configuration."""

from __future__ import annotations

import logging

import httpx

from app.adapters.notifier.base import AbstractNotifier
from app.adapters.notifier.email import SUPPORTED_PROVIDERS, EmailNotifier
from app.core.config import EmailSettings
from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


def create_notifier(
    email_settings: EmailSettings,
    client: httpx.AsyncClient,
) -> AbstractNotifier | None:
    """Instantiate the email notifier, or return None when notifications are off.

    Notifications are off when the provider is ``none`` or when the API key or
    recipients are missing.

    Args:
        email_settings: Email configuration.
        client: Shared async HTTP client.

    Returns:
        Configured notifier, or None.

    Raises:
        ValidationAppError: If provider-specific requirements are not met.
    """
    provider = email_settings.provider.lower()

    if provider == "none":
        return None

    if provider not in SUPPORTED_PROVIDERS:
        raise ValidationAppError(
            code="email_unknown_provider",
            message=(
                f"Unknown email provider: '{provider}'. "
                f"Supported providers: none, {', '.join(SUPPORTED_PROVIDERS)}"
            ),
        )

    if not email_settings.api_key or not email_settings.to:
        logger.warning(
            "notification.disabled",
            extra={
                "provider": provider,
                "reason": "missing_api_key_or_recipients",
            },
        )
        return None

    if provider == "mailgun" and not email_settings.mailgun_domain:
        raise ValidationAppError(
            code="email_missing_mailgun_domain",
            message="Mailgun provider requires EMAIL_MAILGUN_DOMAIN environment variable",
        )

    return EmailNotifier(
        client,
        provider=provider,
        api_key=email_settings.api_key,
        from_address=email_settings.from_address or "",
        to=email_settings.to,
        mailgun_domain=email_settings.mailgun_domain,
        mailtrap_inbox_id=email_settings.mailtrap_inbox_id,
        timeout_seconds=email_settings.timeout_seconds,
    )
