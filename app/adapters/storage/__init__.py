"""Submission persistence adapters.

Two interchangeable backends implement ``AbstractSubmissionStore``:
- ``TableSubmissionStore``: SQLite table with real query support.
- ``LogSubmissionStore``: key/value records plus a bounded per-form index.

The backend is selected once at startup by ``create_submission_store``.
"""

from app.adapters.storage.base import AbstractSubmissionStore
from app.adapters.storage.factory import create_submission_store
from app.adapters.storage.log_store import LogSubmissionStore
from app.adapters.storage.table_store import TableSubmissionStore
from app.adapters.storage.unavailable import UnavailableSubmissionStore

__all__ = [
    "AbstractSubmissionStore",
    "LogSubmissionStore",
    "TableSubmissionStore",
    "UnavailableSubmissionStore",
    "create_submission_store",
]
