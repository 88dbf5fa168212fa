"""Unit tests for the email notifier, its templates and its factory."""

import base64
import json
from urllib.parse import parse_qs

import httpx
import pytest

from app.adapters.notifier.email import (
    MAILTRAP_SEND_URL,
    RESEND_URL,
    SENDGRID_URL,
    EmailNotifier,
    parse_recipients,
)
from app.adapters.notifier.factory import create_notifier
from app.adapters.notifier.templates import build_subject, render_html, render_text
from app.core.config import EmailSettings
from app.core.errors import NotificationAppError, ValidationAppError
from app.schemas.submission import Submission


@pytest.fixture
def submission(make_metadata) -> Submission:
    return Submission(
        id="sub-1",
        form_id="contact",
        data={"name": "Ada", "message": "<script>alert(1)</script>"},
        metadata=make_metadata(),
    )


class _Recorder:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"id": "msg-1"})


def _notifier(recorder: _Recorder, provider: str, **kwargs) -> tuple[EmailNotifier, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    notifier = EmailNotifier(
        client,
        provider=provider,
        api_key="key-123",
        from_address="forms@example.com",
        to="ops@example.com, sales@example.com",
        **kwargs,
    )
    return notifier, client


class TestTemplates:
    def test_subject(self, submission: Submission) -> None:
        assert build_subject(submission) == "New Form Submission: contact"

    def test_html_escapes_user_values(self, submission: Submission) -> None:
        html = render_html(submission)

        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "Spam Score:</strong> 0.90" in html

    def test_text_lists_fields(self, submission: Submission) -> None:
        text = render_text(submission)

        assert "Submission ID: sub-1" in text
        assert "name: Ada" in text
        assert "IP Address: 203.0.113.7" in text
        assert text.endswith("Sent by Form Intake API")

    def test_score_line_omitted_without_score(self, make_metadata) -> None:
        submission = Submission(
            id="s", form_id="f", data={}, metadata=make_metadata(spam_score=None)
        )

        assert "Spam Score" not in render_text(submission)
        assert "Spam Score" not in render_html(submission)


class TestEmailNotifier:
    @pytest.mark.asyncio
    async def test_resend(self, submission: Submission) -> None:
        recorder = _Recorder()
        notifier, client = _notifier(recorder, "resend")
        async with client:
            await notifier.notify(submission)

        request = recorder.requests[0]
        body = json.loads(request.content)
        assert str(request.url) == RESEND_URL
        assert request.headers["Authorization"] == "Bearer key-123"
        assert body["from"] == "forms@example.com"
        assert body["to"] == ["ops@example.com", "sales@example.com"]
        assert body["subject"] == "New Form Submission: contact"
        assert "Ada" in body["text"]

    @pytest.mark.asyncio
    async def test_sendgrid(self, submission: Submission) -> None:
        recorder = _Recorder(status_code=202)
        notifier, client = _notifier(recorder, "sendgrid")
        async with client:
            await notifier.notify(submission)

        request = recorder.requests[0]
        body = json.loads(request.content)
        assert str(request.url) == SENDGRID_URL
        assert body["personalizations"] == [
            {"to": [{"email": "ops@example.com"}, {"email": "sales@example.com"}]}
        ]
        assert body["from"] == {"email": "forms@example.com"}
        assert [c["type"] for c in body["content"]] == ["text/plain", "text/html"]

    @pytest.mark.asyncio
    async def test_mailgun_uses_basic_auth_and_form_data(self, submission: Submission) -> None:
        recorder = _Recorder()
        notifier, client = _notifier(recorder, "mailgun", mailgun_domain="mg.example.com")
        async with client:
            await notifier.notify(submission)

        request = recorder.requests[0]
        form = parse_qs(request.content.decode())
        expected_auth = base64.b64encode(b"api:key-123").decode()
        assert str(request.url) == "https://api.mailgun.net/v3/mg.example.com/messages"
        assert request.headers["Authorization"] == f"Basic {expected_auth}"
        assert form["to"] == ["ops@example.com,sales@example.com"]
        assert form["subject"] == ["New Form Submission: contact"]

    @pytest.mark.asyncio
    async def test_mailtrap_sending_and_sandbox(self, submission: Submission) -> None:
        recorder = _Recorder()
        sending, client = _notifier(recorder, "mailtrap")
        async with client:
            await sending.notify(submission)
        sandbox, client = _notifier(recorder, "mailtrap", mailtrap_inbox_id="42")
        async with client:
            await sandbox.notify(submission)

        assert str(recorder.requests[0].url) == MAILTRAP_SEND_URL
        assert str(recorder.requests[1].url) == "https://sandbox.api.mailtrap.io/api/send/42"
        body = json.loads(recorder.requests[0].content)
        assert body["to"] == [{"email": "ops@example.com"}, {"email": "sales@example.com"}]

    @pytest.mark.asyncio
    async def test_provider_rejection_raises(self, submission: Submission) -> None:
        notifier, client = _notifier(_Recorder(status_code=401), "resend")
        async with client:
            with pytest.raises(NotificationAppError) as exc_info:
                await notifier.notify(submission)

        assert exc_info.value.code == "notification_rejected"
        assert exc_info.value.details["http_status"] == 401

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, submission: Submission) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        notifier = EmailNotifier(
            client, provider="resend", api_key="k", from_address="a@b.c", to="d@e.f"
        )
        async with client:
            with pytest.raises(NotificationAppError) as exc_info:
                await notifier.notify(submission)

        assert exc_info.value.code == "notification_transport_error"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)

    def test_rejects_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            EmailNotifier(
                httpx.AsyncClient(), provider="smtp", api_key="k", from_address="a", to="b"
            )

    def test_mailgun_requires_domain(self) -> None:
        with pytest.raises(ValueError):
            EmailNotifier(
                httpx.AsyncClient(), provider="mailgun", api_key="k", from_address="a", to="b"
            )


def test_parse_recipients() -> None:
    assert parse_recipients(" a@x.io, ,b@x.io ") == ["a@x.io", "b@x.io"]


class TestNotifierFactory:
    def test_none_provider_disables_notifications(self) -> None:
        assert create_notifier(EmailSettings(provider="none"), httpx.AsyncClient()) is None

    def test_missing_key_disables_notifications(self) -> None:
        email_settings = EmailSettings(provider="resend", api_key=None, to="ops@example.com")

        assert create_notifier(email_settings, httpx.AsyncClient()) is None

    def test_missing_recipients_disables_notifications(self) -> None:
        email_settings = EmailSettings(provider="resend", api_key="k", to=None)

        assert create_notifier(email_settings, httpx.AsyncClient()) is None

    def test_builds_configured_provider(self) -> None:
        email_settings = EmailSettings(
            provider="SendGrid", api_key="k", to="ops@example.com", from_address="f@example.com"
        )

        notifier = create_notifier(email_settings, httpx.AsyncClient())

        assert isinstance(notifier, EmailNotifier)
        assert notifier.provider == "sendgrid"

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            create_notifier(EmailSettings(provider="pigeon"), httpx.AsyncClient())

        assert exc_info.value.code == "email_unknown_provider"

    def test_mailgun_without_domain(self) -> None:
        email_settings = EmailSettings(provider="mailgun", api_key="k", to="ops@example.com")

        with pytest.raises(ValidationAppError) as exc_info:
            create_notifier(email_settings, httpx.AsyncClient())

        assert exc_info.value.code == "email_missing_mailgun_domain"
