"""Factory selecting the submission store backend."""

from __future__ import annotations

import logging

from app.adapters.backends import Backends
from app.adapters.storage.base import AbstractSubmissionStore
from app.adapters.storage.log_store import DEFAULT_INDEX_LIMIT, LogSubmissionStore
from app.adapters.storage.table_store import TableSubmissionStore
from app.adapters.storage.unavailable import UnavailableSubmissionStore
from app.utils.ids import IdGenerator, generate_submission_id

logger = logging.getLogger(__name__)


def create_submission_store(
    backends: Backends,
    *,
    id_generator: IdGenerator = generate_submission_id,
    index_limit: int = DEFAULT_INDEX_LIMIT,
) -> AbstractSubmissionStore:
    """Pick the submission store for the configured backends.

    The table backend is used exclusively when configured, otherwise the log
    backend. Without either, writes fail with StorageUnavailableError and
    reads return empty results.

    Args:
        backends: Available backend handles.
        id_generator: Identifier source for new submissions.
        index_limit: Per-form index cap for the log backend.

    Returns:
        AbstractSubmissionStore: Selected store.
    """
    store: AbstractSubmissionStore
    if backends.database is not None:
        store = TableSubmissionStore(backends.database, id_generator=id_generator)
    elif backends.kv is not None:
        store = LogSubmissionStore(
            backends.kv, id_generator=id_generator, index_limit=index_limit
        )
    else:
        logger.warning("storage.unavailable", extra={"reason": "no_backend_configured"})
        store = UnavailableSubmissionStore()

    logger.info("storage.selected", extra={"backend": store.backend_name})
    return store
