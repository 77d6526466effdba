"""
Tests for the breaker-gated remote cache.

Verifies that:
1. Hits are written back to the local cache
2. Store errors become misses and count against the breaker
3. An open circuit skips the store entirely
4. Successful calls reset the breaker
"""

import asyncio

from weatherscape.storage import (
    CacheEntry,
    CircuitBreaker,
    LocalCache,
    MemoryStore,
    MockRemoteStore,
    RemoteCache,
)


def make_remote(store=None, available=True):
    local_store = MemoryStore()
    local = LocalCache(local_store)
    store = store if store is not None else MockRemoteStore()
    breaker = CircuitBreaker(available=available)
    return RemoteCache(store, breaker, local_cache=local), store, local_store, breaker


class TestRemoteCacheReads:
    """Test remote reads and write-back."""

    def test_hit_writes_back_to_local(self):
        remote, store, local_store, _ = make_remote()
        store.documents["oslo_snow_day"] = {
            "url": "https://cdn.test/oslo.png",
            "city": "Oslo",
            "condition": "Snow",
            "isDay": True,
        }

        async def scenario():
            image_ref = await remote.get("oslo_snow_day")
            local_ref = await remote.local_cache.get("oslo_snow_day")
            return image_ref, local_ref

        image_ref, local_ref = asyncio.run(scenario())

        assert image_ref == "https://cdn.test/oslo.png"
        assert local_ref == image_ref, "Remote hit should be copied to the local cache"
        assert "image_cache:oslo_snow_day" in local_store.records

    def test_miss_returns_none(self):
        remote, store, local_store, breaker = make_remote()

        assert asyncio.run(remote.get("oslo_snow_day")) is None
        assert local_store.records == {}
        assert breaker.consecutive_failures == 0

    def test_document_without_url_is_a_miss(self):
        remote, store, _, _ = make_remote()
        store.documents["oslo_snow_day"] = {"city": "Oslo"}

        assert asyncio.run(remote.get("oslo_snow_day")) is None

    def test_error_is_a_miss_and_counts(self):
        remote, store, _, breaker = make_remote()
        store.failing = True

        assert asyncio.run(remote.get("oslo_snow_day")) is None
        assert breaker.consecutive_failures == 1

    def test_open_circuit_skips_store(self):
        remote, store, _, breaker = make_remote()
        store.failing = True

        async def scenario():
            for _ in range(5):
                await remote.get("oslo_snow_day")

        asyncio.run(scenario())

        assert store.get_calls == 3, "Calls after the third failure should be skipped"
        assert breaker.should_skip() is True

    def test_success_resets_breaker(self):
        remote, store, _, breaker = make_remote()
        breaker.record_failure()
        breaker.record_failure()

        asyncio.run(remote.get("oslo_snow_day"))

        assert breaker.consecutive_failures == 0

    def test_unavailable_store_never_called(self):
        remote, store, _, _ = make_remote(available=False)

        async def scenario():
            await remote.get("oslo_snow_day")
            await remote.set("oslo_snow_day", CacheEntry.create("https://cdn.test/x.png", "Oslo", "Snow", True))

        asyncio.run(scenario())

        assert store.get_calls == 0
        assert store.set_calls == 0

    def test_no_store_configured(self):
        remote = RemoteCache(None, CircuitBreaker(available=False))

        assert asyncio.run(remote.get("oslo_snow_day")) is None


class TestRemoteCacheWrites:
    """Test remote writes."""

    def test_set_stores_document(self):
        remote, store, _, _ = make_remote()
        entry = CacheEntry(
            image_ref="https://cdn.test/lima.png",
            created_at=1_700_000_000_000,
            city="Lima",
            condition="Fog",
            is_day=False,
        )

        asyncio.run(remote.set("lima_fog_night", entry))

        document = store.documents["lima_fog_night"]
        assert document["url"] == "https://cdn.test/lima.png"
        assert document["city"] == "Lima"
        assert document["condition"] == "Fog"
        assert document["isDay"] is False
        assert document["createdAt"].year == 2023

    def test_set_failure_is_silent_and_counts(self):
        remote, store, _, breaker = make_remote()
        store.failing = True

        asyncio.run(remote.set("lima_fog_night", CacheEntry.create("https://cdn.test/x.png", "Lima", "Fog", False)))

        assert breaker.consecutive_failures == 1
        assert store.documents == {}
