"""Tests specific to the key/value (log) submission store layout."""

from unittest.mock import AsyncMock

import pytest

from app.adapters.kv.in_memory import InMemoryKeyValueStore
from app.adapters.storage.log_store import (
    DEFAULT_INDEX_LIMIT,
    LogSubmissionStore,
    index_key,
    submission_key,
)
from app.core.errors import StorageAppError


@pytest.mark.asyncio
async def test_record_and_index_keys(kv: InMemoryKeyValueStore, make_metadata) -> None:
    store = LogSubmissionStore(kv)

    submission_id = await store.store("contact", {"name": "Ada"}, make_metadata())

    record = await kv.get_json(submission_key("contact", submission_id))
    assert record["id"] == submission_id
    assert record["formId"] == "contact"
    assert record["data"] == {"name": "Ada"}
    assert record["metadata"]["userAgent"] == "pytest-agent/1.0"
    assert record["metadata"]["spamScore"] == 0.9
    assert await kv.get_json(index_key("contact")) == [submission_id]


@pytest.mark.asyncio
async def test_records_are_written_without_expiry(kv: InMemoryKeyValueStore, make_metadata) -> None:
    store = LogSubmissionStore(kv)

    submission_id = await store.store("contact", {}, make_metadata())

    assert kv.ttl(submission_key("contact", submission_id)) is None
    assert kv.ttl(index_key("contact")) is None


@pytest.mark.asyncio
async def test_index_is_capped_and_evicts_oldest(kv: InMemoryKeyValueStore, make_metadata) -> None:
    store = LogSubmissionStore(kv, index_limit=3)

    ids = [await store.store("contact", {"n": i}, make_metadata()) for i in range(5)]

    assert await kv.get_json(index_key("contact")) == [ids[4], ids[3], ids[2]]
    listed = await store.list_by_form("contact", 10, 0)
    assert [s.id for s in listed] == [ids[4], ids[3], ids[2]]

    # Evicted records stay reachable by id
    evicted = await store.get_by_id(ids[0])
    assert evicted is not None
    assert evicted.data == {"n": 0}


@pytest.mark.asyncio
async def test_default_index_keeps_newest_thousand(kv: InMemoryKeyValueStore, make_metadata) -> None:
    store = LogSubmissionStore(kv)
    metadata = make_metadata()

    ids = [await store.store("contact", {}, metadata) for _ in range(DEFAULT_INDEX_LIMIT + 3)]

    index = await kv.get_json(index_key("contact"))
    assert len(index) == DEFAULT_INDEX_LIMIT
    assert index[0] == ids[-1]
    assert index[-1] == ids[3]


@pytest.mark.asyncio
async def test_list_skips_dangling_index_entries(kv: InMemoryKeyValueStore, make_metadata) -> None:
    store = LogSubmissionStore(kv)
    submission_id = await store.store("contact", {}, make_metadata())
    await kv.put_json(index_key("contact"), ["not-yet-visible", submission_id])

    listed = await store.list_by_form("contact", 10, 0)

    assert [s.id for s in listed] == [submission_id]


@pytest.mark.asyncio
async def test_get_by_id_matches_whole_id_suffix(kv: InMemoryKeyValueStore, make_metadata) -> None:
    ids = iter(["abc", "xabc"])
    store = LogSubmissionStore(kv, id_generator=lambda: next(ids))

    await store.store("contact", {"n": 1}, make_metadata())
    await store.store("contact", {"n": 2}, make_metadata())

    found = await store.get_by_id("xabc")
    assert found is not None
    assert found.data == {"n": 2}


@pytest.mark.asyncio
async def test_get_by_id_ignores_form_ids_containing_colons(
    kv: InMemoryKeyValueStore, make_metadata
) -> None:
    store = LogSubmissionStore(kv, id_generator=lambda: "XYZ")

    await store.store("team:alpha", {"n": 1}, make_metadata())

    assert await store.get_by_id("alpha:XYZ") is None
    found = await store.get_by_id("XYZ")
    assert found is not None
    assert found.form_id == "team:alpha"


@pytest.mark.asyncio
async def test_get_by_id_keeps_scanning_past_other_ids_with_same_suffix(
    kv: InMemoryKeyValueStore, make_metadata
) -> None:
    store = LogSubmissionStore(kv, id_generator=lambda: "alpha:XYZ")

    await store.store("z", {"n": 2}, make_metadata())
    # Sorts ahead of the real record and ends with the same suffix
    await kv.put_json(submission_key("a:alpha", "XYZ"), {"id": "XYZ"})

    found = await store.get_by_id("alpha:XYZ")
    assert found is not None
    assert found.form_id == "z"
    assert found.data == {"n": 2}


@pytest.mark.asyncio
async def test_backend_failure_is_wrapped(make_metadata) -> None:
    kv = AsyncMock(spec=InMemoryKeyValueStore)
    kv.put_json.side_effect = ConnectionError("connection refused")
    store = LogSubmissionStore(kv)

    with pytest.raises(StorageAppError) as exc_info:
        await store.store("contact", {}, make_metadata())

    assert exc_info.value.backend == "log"
    assert exc_info.value.code == "storage_error"
    assert exc_info.value.details["operation"] == "store"
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_rejects_invalid_index_limit(kv: InMemoryKeyValueStore) -> None:
    with pytest.raises(ValueError):
        LogSubmissionStore(kv, index_limit=0)
