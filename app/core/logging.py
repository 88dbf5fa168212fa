"""Structured logging for the intake service.

Every record leaves the process as one JSON line carrying the request id of
the HTTP request that produced it. Caller secrets (tokens, keys) and raw form
content are masked before formatting, and caller addresses are only ever
logged through ``hash_identifier``.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from app.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Matched after lowercasing and mapping "-" to "_"
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "api_key",
        "app_api_keys",
        "authorization",
        "bearer_token",
        "cookie",
        "email_api_key",
        "form_data",
        "password",
        "secret",
        "secret_key",
        "set_cookie",
        "token",
        "turnstile_secret_key",
        "turnstile_token",
        "user_agent",
        "x_api_key",
    }
)

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS: frozenset[str] = frozenset(
    LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS: dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def set_request_id(request_id: str | None) -> None:
    """Bind a correlation id to the current context."""
    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def hash_identifier(value: str) -> str:
    """Return a short, stable SHA-256 prefix for a caller identifier.

    Args:
        value: Raw identifier such as a client address.

    Returns:
        The first 16 hex characters of the digest.
    """
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def _normalize_key(key: str) -> str:
    return key.lower().replace("-", "_")


def redact(value: Any, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> Any:
    """Mask sensitive entries in nested mappings, lists and tuples.

    Args:
        value: Any value attached to a log record.
        sensitive_keys: Normalized key names whose values are masked.

    Returns:
        A copy of value with sensitive entries replaced by ``REDACTED``.
    """
    if isinstance(value, Mapping):
        masked: dict[Any, Any] = {}
        for key, item in value.items():
            if _normalize_key(str(key)) in sensitive_keys:
                masked[key] = REDACTED
            else:
                masked[key] = redact(item, sensitive_keys)
        return masked
    if isinstance(value, (list, tuple)):
        return type(value)(redact(item, sensitive_keys) for item in value)
    return value


def record_extras(
    record: LogRecord, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT
) -> dict[str, Any]:
    """Return the ``extra`` fields of a record, already redacted."""
    extras = {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }
    return redact(extras, sensitive_keys)


def _normalize_keys(keys: Iterable[str] | None) -> frozenset[str]:
    if keys is None:
        return SENSITIVE_KEYS_DEFAULT
    return frozenset(_normalize_key(key) for key in keys)


class RequestIdFilter(logging.Filter):
    """Stamp records with the context request id unless one was passed."""

    def filter(self, record: LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask sensitive extras in place so every formatter sees safe values."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = _normalize_keys(sensitive_keys)

    def filter(self, record: LogRecord) -> bool:
        for key, value in record_extras(record, self.sensitive_keys).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object per line."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = _normalize_keys(sensitive_keys)
        self.ensure_ascii = ensure_ascii

    def formatTime(self, record: LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def format(self, record: LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id

        payload.update(record_extras(record, self.sensitive_keys))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _open_handler(log_settings: LogSettings) -> logging.Handler:
    """Return a stdout handler, or a file handler when output=file."""
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    path = Path(log_settings.file_path or "logs/app.log")
    path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes <= 0:
        return logging.FileHandler(path, encoding="utf-8")
    return RotatingFileHandler(
        path,
        maxBytes=log_settings.max_bytes,
        backupCount=log_settings.backup_count,
        encoding="utf-8",
    )


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install the service's single root handler.

    Args:
        log_settings: Logging settings; the process-wide ones when omitted.
    """
    cfg = log_settings or settings.log
    level = logging.getLevelName(cfg.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = _open_handler(cfg)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    if cfg.format.lower() == "plain":
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    else:
        handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # uvicorn installs its own handlers
    for name in ("uvicorn", "uvicorn.access"):
        logging.getLogger(name).propagate = False
    for name, floor in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(level, floor))
