"""Submission notification adapters (email delivery)."""

from app.adapters.notifier.base import AbstractNotifier
from app.adapters.notifier.email import EmailNotifier
from app.adapters.notifier.factory import create_notifier

__all__ = ["AbstractNotifier", "EmailNotifier", "create_notifier"]
