"""
Tests for the document store backends.

The same behaviours are checked against the in-memory store and the
SQLAlchemy store running on a temporary SQLite file.
"""

import pytest

from trainassess.common.exceptions import ConflictError, DependencyError
from trainassess.store import MemoryDocumentStore, SQLDocumentStore, create_store
from trainassess.store.base import sort_documents


async def _open_store(kind, tmp_path):
    if kind == "memory":
        store = MemoryDocumentStore()
    else:
        store = SQLDocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await store.open()
    return store


BACKENDS = ["memory", "sql"]


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", BACKENDS)
async def test_insert_assigns_id_and_version(kind, tmp_path):
    store = await _open_store(kind, tmp_path)
    try:
        stored = await store.insert("things", {"name": "a"})
        assert stored["id"]
        assert stored["version"] == 1

        fetched = await store.get("things", stored["id"])
        assert fetched == {"id": stored["id"], "version": 1, "name": "a"}
        assert await store.get("things", "missing") is None
    finally:
        await store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", BACKENDS)
async def test_insert_duplicate_id_conflicts(kind, tmp_path):
    store = await _open_store(kind, tmp_path)
    try:
        await store.insert("things", {"id": "fixed", "name": "a"})
        with pytest.raises(ConflictError):
            await store.insert("things", {"id": "fixed", "name": "b"})
        # Same id in another collection is fine
        await store.insert("others", {"id": "fixed"})
    finally:
        await store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", BACKENDS)
async def test_find_filters_and_sorts(kind, tmp_path):
    store = await _open_store(kind, tmp_path)
    try:
        await store.insert("things", {"date": "2024-01-02", "owner": "x"})
        await store.insert("things", {"date": "2024-01-01", "owner": "x"})
        await store.insert("things", {"date": "2024-01-03", "owner": "y"})

        found = await store.find("things", {"owner": "x"}, sort_by="date")
        assert [doc["date"] for doc in found] == ["2024-01-01", "2024-01-02"]

        found = await store.find("things", sort_by="date", descending=True)
        assert [doc["date"] for doc in found] == ["2024-01-03", "2024-01-02", "2024-01-01"]

        assert await store.count("things") == 3
        assert await store.count("things", {"owner": "y"}) == 1
        assert (await store.find_one("things", {"owner": "y"}))["date"] == "2024-01-03"
        assert await store.find_one("things", {"owner": "z"}) is None
    finally:
        await store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", BACKENDS)
async def test_replace_bumps_version(kind, tmp_path):
    store = await _open_store(kind, tmp_path)
    try:
        stored = await store.insert("things", {"name": "a"})
        replaced = await store.replace("things", stored["id"], {"name": "b"}, expected_version=1)
        assert replaced["version"] == 2
        assert (await store.get("things", stored["id"]))["name"] == "b"

        # Unconditional replace
        replaced = await store.replace("things", stored["id"], {"name": "c"})
        assert replaced["version"] == 3

        assert await store.replace("things", "missing", {"name": "x"}) is None
    finally:
        await store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", BACKENDS)
async def test_replace_with_stale_version_conflicts(kind, tmp_path):
    store = await _open_store(kind, tmp_path)
    try:
        stored = await store.insert("things", {"name": "a"})
        await store.replace("things", stored["id"], {"name": "b"}, expected_version=1)

        with pytest.raises(ConflictError) as exc_info:
            await store.replace("things", stored["id"], {"name": "c"}, expected_version=1)
        assert exc_info.value.details["current_version"] == 2
        assert (await store.get("things", stored["id"]))["name"] == "b"
    finally:
        await store.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", BACKENDS)
async def test_delete(kind, tmp_path):
    store = await _open_store(kind, tmp_path)
    try:
        stored = await store.insert("things", {"name": "a"})
        assert await store.delete("things", stored["id"]) is True
        assert await store.delete("things", stored["id"]) is False
        assert await store.get("things", stored["id"]) is None
    finally:
        await store.close()


@pytest.mark.asyncio
async def test_memory_store_isolates_callers():
    store = MemoryDocumentStore()
    document = {"items": [1, 2]}
    stored = await store.insert("things", document)
    document["items"].append(3)
    stored["items"].append(4)

    assert (await store.get("things", stored["id"]))["items"] == [1, 2]


@pytest.mark.asyncio
async def test_sql_store_persists_across_reopen(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'persist.db'}"
    store = SQLDocumentStore(url)
    await store.open()
    stored = await store.insert("things", {"name": "kept"})
    await store.close()

    reopened = SQLDocumentStore(url)
    await reopened.open()
    try:
        assert (await reopened.get("things", stored["id"]))["name"] == "kept"
    finally:
        await reopened.close()


@pytest.mark.asyncio
async def test_sql_store_unreachable_raises_dependency_error(tmp_path):
    store = SQLDocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'store.db'}")
    with pytest.raises(DependencyError):
        await store.open()


def test_create_store_picks_backend():
    assert isinstance(create_store("memory://"), MemoryDocumentStore)
    assert isinstance(create_store("sqlite+aiosqlite:///./x.db"), SQLDocumentStore)


def test_sort_places_missing_values_first():
    documents = [{"k": "b"}, {"k": None}, {"k": "a"}]
    assert [d["k"] for d in sort_documents(documents, "k")] == [None, "a", "b"]
    assert [d["k"] for d in sort_documents(documents, "k", descending=True)] == ["b", "a", None]
