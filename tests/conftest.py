"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults are set before any import that might load settings.
"""

import os
import sqlite3
from typing import Any, Callable

import pytest

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

# Set default env vars that all tests might need
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-read-token,other-read-token")
os.environ.setdefault("EMAIL_PROVIDER", "none")

from app.adapters.kv.in_memory import InMemoryKeyValueStore  # noqa: E402
from app.adapters.notifier.base import AbstractNotifier  # noqa: E402
from app.adapters.sql.database import SCHEMA_STATEMENTS, SqliteDatabase  # noqa: E402
from app.adapters.verifier.base import AbstractVerifier, VerificationResult  # noqa: E402
from app.schemas.submission import Submission, SubmissionMetadata  # noqa: E402


class FakeClock:
    """Deterministic clock returning UNIX seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class StubVerifier(AbstractVerifier):
    """Verifier returning a fixed verdict and recording calls."""

    def __init__(self, result: VerificationResult | None = None) -> None:
        self.result = result or VerificationResult(accepted=True, confidence_score=0.9)
        self.calls: list[tuple[str, str]] = []

    async def verify(self, token: str, remote_ip: str) -> VerificationResult:
        self.calls.append((token, remote_ip))
        return self.result


class RecordingNotifier(AbstractNotifier):
    """Notifier recording delivered submissions, optionally failing."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.delivered: list[Submission] = []

    async def notify(self, submission: Submission) -> None:
        if self.error is not None:
            raise self.error
        self.delivered.append(submission)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture
def database(tmp_path) -> SqliteDatabase:
    """SQLite table backend with the schema already created."""
    db = SqliteDatabase(tmp_path / "submissions.db")
    conn = sqlite3.connect(db.path)
    try:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(statement)
        conn.commit()
    finally:
        conn.close()
    return db


@pytest.fixture
def stub_verifier() -> StubVerifier:
    return StubVerifier()


@pytest.fixture
def rejecting_verifier() -> StubVerifier:
    return StubVerifier(
        VerificationResult(accepted=False, error_codes=["invalid-input-response"])
    )


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(error=RuntimeError("smtp relay down"))


@pytest.fixture
def make_metadata() -> Callable[..., SubmissionMetadata]:
    """Factory for submission metadata with sensible defaults."""

    def _make(**overrides: Any) -> SubmissionMetadata:
        base: dict[str, Any] = {
            "ip": "203.0.113.7",
            "user_agent": "pytest-agent/1.0",
            "timestamp": "2025-01-01T00:00:00.000Z",
            "spam_score": 0.9,
        }
        base.update(overrides)
        return SubmissionMetadata(**base)

    return _make
