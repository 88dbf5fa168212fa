"""Email notifier adapter supporting Resend, SendGrid, Mailgun and Mailtrap.

All providers are called over their HTTP APIs with a shared
``httpx.AsyncClient``; no SMTP connection is involved.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.adapters.notifier.base import AbstractNotifier
from app.adapters.notifier.templates import build_subject, render_html, render_text
from app.core.errors import NotificationAppError
from app.schemas.submission import Submission

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("resend", "sendgrid", "mailgun", "mailtrap")

RESEND_URL = "https://api.resend.com/emails"
SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
MAILGUN_URL_TEMPLATE = "https://api.mailgun.net/v3/{domain}/messages"
MAILTRAP_SEND_URL = "https://send.api.mailtrap.io/api/send"
MAILTRAP_SANDBOX_URL_TEMPLATE = "https://sandbox.api.mailtrap.io/api/send/{inbox_id}"


def parse_recipients(recipients: str) -> list[str]:
    """Split a comma-separated recipient list, dropping blanks."""
    return [email.strip() for email in recipients.split(",") if email.strip()]


class EmailNotifier(AbstractNotifier):
    """Sends one email per stored submission through a provider HTTP API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        provider: str,
        api_key: str,
        from_address: str,
        to: str,
        mailgun_domain: str | None = None,
        mailtrap_inbox_id: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        provider = provider.lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported email provider: {provider}")
        if provider == "mailgun" and not mailgun_domain:
            raise ValueError("Mailgun requires a sending domain")

        self._client = client
        self.provider = provider
        self._api_key = api_key
        self._from = from_address
        self._recipients = parse_recipients(to)
        self._mailgun_domain = mailgun_domain
        self._mailtrap_inbox_id = mailtrap_inbox_id
        self._timeout = timeout_seconds

    def _bearer_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def _build_request(self, submission: Submission) -> dict[str, Any]:
        """Build keyword arguments for ``httpx.AsyncClient.post``."""
        subject = build_subject(submission)
        html = render_html(submission)
        text = render_text(submission)

        if self.provider == "resend":
            return {
                "url": RESEND_URL,
                "headers": self._bearer_headers(),
                "json": {
                    "from": self._from,
                    "to": self._recipients,
                    "subject": subject,
                    "html": html,
                    "text": text,
                },
            }

        if self.provider == "sendgrid":
            return {
                "url": SENDGRID_URL,
                "headers": self._bearer_headers(),
                "json": {
                    "personalizations": [
                        {"to": [{"email": email} for email in self._recipients]}
                    ],
                    "from": {"email": self._from},
                    "subject": subject,
                    "content": [
                        {"type": "text/plain", "value": text},
                        {"type": "text/html", "value": html},
                    ],
                },
            }

        if self.provider == "mailgun":
            return {
                "url": MAILGUN_URL_TEMPLATE.format(domain=self._mailgun_domain),
                "auth": ("api", self._api_key),
                "data": {
                    "from": self._from,
                    "to": ",".join(self._recipients),
                    "subject": subject,
                    "html": html,
                    "text": text,
                },
            }

        # mailtrap: sandbox inbox when an inbox id is configured
        url = (
            MAILTRAP_SANDBOX_URL_TEMPLATE.format(inbox_id=self._mailtrap_inbox_id)
            if self._mailtrap_inbox_id
            else MAILTRAP_SEND_URL
        )
        return {
            "url": url,
            "headers": self._bearer_headers(),
            "json": {
                "from": {"email": self._from},
                "to": [{"email": email} for email in self._recipients],
                "subject": subject,
                "html": html,
                "text": text,
            },
        }

    async def notify(self, submission: Submission) -> None:
        """Send the notification email for submission.

        Raises:
            NotificationAppError: If the provider is unreachable or rejects the message.
        """
        request = self._build_request(submission)
        try:
            response = await self._client.post(timeout=self._timeout, **request)
        except httpx.HTTPError as exc:
            raise NotificationAppError(
                code="notification_transport_error",
                message=f"{self.provider} request failed: {exc}",
                details={"provider": self.provider, "submission_id": submission.id},
            ) from exc

        if response.is_error:
            raise NotificationAppError(
                code="notification_rejected",
                message=f"{self.provider} error: {response.text}",
                details={
                    "provider": self.provider,
                    "http_status": response.status_code,
                    "submission_id": submission.id,
                },
            )

        logger.info(
            "notification.sent",
            extra={
                "provider": self.provider,
                "form_id": submission.form_id,
                "submission_id": submission.id,
                "recipients": len(self._recipients),
            },
        )
