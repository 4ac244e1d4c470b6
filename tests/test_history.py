"""Tests for the record cache and history."""

import asyncio

from checkin_tracker.services.cache import InMemoryCache
from checkin_tracker.services.history import RecordHistory
from tests.conftest import FakeRecordStoreClient


def test_cache_invalidate_by_prefix() -> None:
    cache = InMemoryCache()
    cache.set("scan-records:all::50", [1], ttl_seconds=60)
    cache.set("scan-records:sandbox:zone-1:50", [2], ttl_seconds=60)
    cache.set("other", "kept", ttl_seconds=60)

    dropped = cache.invalidate("scan-records")

    assert dropped == 2
    assert cache.get("scan-records:all::50") is None
    assert cache.get("other") == "kept"


def test_cache_expires_entries() -> None:
    now = [100.0]
    cache = InMemoryCache(clock=lambda: now[0])
    cache.set("key", "value", ttl_seconds=30)

    now[0] = 129.0
    assert cache.get("key") == "value"

    now[0] = 130.0
    assert cache.get("key") is None
    assert len(cache) == 0


def test_history_serves_from_cache_until_invalidated() -> None:
    store = FakeRecordStoreClient()
    asyncio.run(store.create_record({"uid": "A123", "sandbox": "zone-1"}))
    history = RecordHistory(store=store, cache=InMemoryCache())

    first = asyncio.run(history.list_records())
    second = asyncio.run(history.list_records())

    assert first == second
    assert store.list_calls == 1

    history.invalidate()
    asyncio.run(history.list_records())

    assert store.list_calls == 2


def test_history_keys_queries_separately() -> None:
    store = FakeRecordStoreClient()
    asyncio.run(store.create_record({"uid": "A123", "sandbox": "zone-1"}))
    asyncio.run(store.create_record({"uid": "B456", "sandbox": "zone-2"}))
    history = RecordHistory(store=store, cache=InMemoryCache())

    zone_one = asyncio.run(
        history.list_records(filter_type="sandbox", sandbox="zone-1")
    )
    zone_two = asyncio.run(
        history.list_records(filter_type="sandbox", sandbox="zone-2")
    )

    assert [record.uid for record in zone_one] == ["A123"]
    assert [record.uid for record in zone_two] == ["B456"]
    assert store.list_calls == 2
