import asyncio

import pytest

from codeshare.core.exception import NotFound, StoreUnavailable
from codeshare.extension.store.base import FieldFilter
from codeshare.extension.store.memory import MemoryDocumentStore


@pytest.mark.asyncio
async def test_create_does_not_overwrite_existing_document():
    store = MemoryDocumentStore()

    assert await store.create("users", "u1", {"points": 0}) is True
    await store.increment("users", "u1", {"points": 7})
    assert await store.create("users", "u1", {"points": 0}) is False

    assert (await store.get("users", "u1"))["points"] == 7


@pytest.mark.asyncio
async def test_query_filters_orders_and_limits():
    store = MemoryDocumentStore()
    await store.set("codes", "a", {"expiryDate": "2026-10-18", "n": 1})
    await store.set("codes", "b", {"expiryDate": "2026-10-19", "n": 2})
    await store.set("codes", "c", {"expiryDate": "2026-11-01", "n": 3})
    await store.set("codes", "d", {"n": 4})

    active = await store.query("codes", FieldFilter("expiryDate", ">=", "2026-10-19"))
    assert sorted(d.key for d in active) == ["b", "c"]

    newest = await store.query("codes", order_by="expiryDate", descending=True, limit=2)
    assert [d.key for d in newest] == ["c", "b"]


def test_field_filter_rejects_unknown_operator():
    with pytest.raises(ValueError):
        FieldFilter("points", "!=", 0)


@pytest.mark.asyncio
async def test_returned_documents_are_copies():
    store = MemoryDocumentStore()
    await store.set("users", "u1", {"points": 1})

    data = await store.get("users", "u1")
    data["points"] = 999

    assert (await store.get("users", "u1"))["points"] == 1


@pytest.mark.asyncio
async def test_increment_missing_document_raises_not_found():
    store = MemoryDocumentStore()

    with pytest.raises(NotFound):
        await store.increment("users", "ghost", {"points": 1})


@pytest.mark.asyncio
async def test_increment_is_atomic_under_concurrency():
    store = MemoryDocumentStore()
    await store.set("codes", "c1", {"claimedCount": 0})

    await asyncio.gather(*[store.increment("codes", "c1", {"claimedCount": 1}) for _ in range(25)])

    assert (await store.get("codes", "c1"))["claimedCount"] == 25


@pytest.mark.asyncio
async def test_transaction_error_writes_nothing():
    store = MemoryDocumentStore()
    await store.set("users", "u1", {"points": 10})

    def _tx(tx):
        tx.get("users", "u1")
        tx.increment("users", "u1", {"points": -5})
        tx.add("codes", {"code": "ABC"})
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await store.run_transaction(_tx)

    assert (await store.get("users", "u1"))["points"] == 10
    assert await store.query("codes") == []


@pytest.mark.asyncio
async def test_transaction_commits_all_writes_together():
    store = MemoryDocumentStore()
    await store.set("users", "u1", {"points": 10})

    def _tx(tx):
        tx.get("users", "u1")
        tx.increment("users", "u1", {"points": -5})
        return tx.add("codes", {"code": "ABC"})

    key = await store.run_transaction(_tx)

    assert (await store.get("users", "u1"))["points"] == 5
    assert (await store.get("codes", key)) == {"code": "ABC"}


@pytest.mark.asyncio
async def test_transaction_increment_on_missing_document_rolls_back():
    store = MemoryDocumentStore()

    def _tx(tx):
        tx.add("codes", {"code": "ABC"})
        tx.increment("users", "ghost", {"points": -5})

    with pytest.raises(NotFound):
        await store.run_transaction(_tx)

    assert await store.query("codes") == []


@pytest.mark.asyncio
async def test_transaction_read_after_write_is_rejected():
    store = MemoryDocumentStore()

    def _tx(tx):
        tx.set("users", "u1", {"points": 1})
        tx.get("users", "u1")

    with pytest.raises(RuntimeError):
        await store.run_transaction(_tx)


@pytest.mark.asyncio
async def test_delete_many_and_delete_missing():
    store = MemoryDocumentStore()
    for key in ("a", "b", "c"):
        await store.set("codes", key, {"n": key})

    assert await store.delete_many("codes", ["a", "b"]) == 2
    await store.delete("codes", "does-not-exist")

    assert [d.key for d in await store.query("codes")] == ["c"]


@pytest.mark.asyncio
async def test_unavailable_store_raises_store_unavailable():
    store = MemoryDocumentStore()
    store.available = False

    with pytest.raises(StoreUnavailable):
        await store.get("users", "u1")
    with pytest.raises(StoreUnavailable):
        await store.run_transaction(lambda tx: None)
