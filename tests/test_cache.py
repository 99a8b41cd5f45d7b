"""Cache store, registry, key derivation and sweeper tests"""

import asyncio
import threading
from datetime import datetime, timedelta, timezone

import pytest

from dspace_client.services.cache import CacheRegistry, CacheStore
from dspace_client.services.keys import MAX_KEY_LENGTH, generate_key
from dspace_client.services.sweeper import CacheSweeper


class TestCacheStore:
    """TTL store behaviour"""

    def _store(self, clock, ttl_seconds=120, **kwargs):
        return CacheStore("search", timedelta(seconds=ttl_seconds), clock=clock, **kwargs)

    def test_get_before_ttl_returns_value(self, clock):
        store = self._store(clock)
        store.set("k", {"a": 1})
        clock.advance(119.9)
        assert store.get("k") == {"a": 1}

    def test_get_exactly_at_ttl_still_returns_value(self, clock):
        store = self._store(clock)
        store.set("k", "v")
        clock.advance(120)
        assert store.get("k") == "v"

    def test_get_after_ttl_returns_none_and_evicts(self, clock):
        store = self._store(clock)
        store.set("k", "v")
        clock.advance(120.001)
        assert store.get("k") is None
        assert "k" not in store
        assert store.get_stats().expirations == 1

    def test_set_overwrites_and_resets_age(self, clock):
        store = self._store(clock)
        store.set("k", "old")
        clock.advance(100)
        store.set("k", "new")
        clock.advance(100)
        assert store.get("k") == "new"

    def test_missing_key(self, clock):
        store = self._store(clock)
        assert store.get("nope") is None
        assert store.get_stats().misses == 1

    def test_delete(self, clock):
        store = self._store(clock)
        store.set("k", "v")
        assert store.delete("k") is True
        assert store.delete("k") is False
        assert store.get("k") is None

    def test_clear(self, clock):
        store = self._store(clock)
        store.set("a", 1)
        store.set("b", 2)
        store.clear()
        assert len(store) == 0

    def test_sweep_removes_only_expired(self, clock):
        store = self._store(clock)
        store.set("old", 1)
        clock.advance(100)
        store.set("fresh", 2)
        clock.advance(30)

        assert store.sweep_expired() == 1
        assert "old" not in store
        assert store.get("fresh") == 2

    def test_sweep_does_not_touch_values_already_returned(self, clock):
        store = self._store(clock)
        store.set("k", {"items": [1, 2]})
        value = store.get("k")
        clock.advance(500)
        store.sweep_expired()
        assert value == {"items": [1, 2]}

    def test_max_size_evicts_oldest(self, clock):
        store = self._store(clock, max_size=2)
        store.set("a", 1)
        clock.advance(1)
        store.set("b", 2)
        clock.advance(1)
        store.set("c", 3)

        assert "a" not in store
        assert store.get("b") == 2
        assert store.get("c") == 3
        assert store.get_stats().evictions == 1

    def test_overwrite_at_capacity_does_not_evict(self, clock):
        store = self._store(clock, max_size=2)
        store.set("a", 1)
        store.set("b", 2)
        store.set("a", 10)
        assert len(store) == 2
        assert store.get("b") == 2

    def test_invalidate_by_pattern(self, clock):
        store = self._store(clock)
        store.set("item-stats:1", 1)
        store.set("item-stats:2", 2)
        store.set("site-stats:", 3)
        assert store.invalidate("item-stats") == 2
        assert len(store) == 1

    def test_stats_hit_rate(self, clock):
        store = self._store(clock)
        store.set("k", "v")
        store.get("k")
        store.get("missing")
        stats = store.get_stats().to_dict()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == "50.00%"


class TestCacheRegistry:
    """Four independent stores"""

    def test_default_ttls(self):
        caches = CacheRegistry.from_ttls()
        assert caches.facets.ttl == timedelta(minutes=10)
        assert caches.search.ttl == timedelta(minutes=2)
        assert caches.items.ttl == timedelta(minutes=5)
        assert caches.stats.ttl == timedelta(minutes=15)

    def test_ttl_override_per_store(self):
        caches = CacheRegistry.from_ttls({"search": timedelta(seconds=5)})
        assert caches.search.ttl == timedelta(seconds=5)
        assert caches.facets.ttl == timedelta(minutes=10)

    def test_stores_expire_independently(self, caches, clock):
        caches.search.set("k", "search")
        caches.facets.set("k", "facets")
        clock.advance(121)
        assert caches.search.get("k") is None
        assert caches.facets.get("k") == "facets"

    def test_sweep_all_and_status(self, caches, clock):
        caches.search.set("a", 1)
        caches.items.set("b", 2)
        caches.stats.set("c", 3)
        clock.advance(301)

        assert caches.sweep_expired() == 2
        assert caches.status() == {"facets": 0, "search": 0, "items": 0, "stats": 1}

    def test_clear_all(self, caches):
        for store in caches:
            store.set("k", 1)
        caches.clear_all()
        assert sum(caches.status().values()) == 0


class TestGenerateKey:
    """Deterministic keys"""

    def test_key_order_does_not_matter(self):
        assert generate_key("search", {"a": 1, "b": 2}) == generate_key(
            "search", {"b": 2, "a": 1}
        )

    def test_nested_and_set_values_are_normalized(self):
        first = generate_key("facets", {"f": {"y": {"b", "a"}, "x": [1, 2]}})
        second = generate_key("facets", {"f": {"x": [1, 2], "y": {"a", "b"}}})
        assert first == second

    def test_different_params_differ(self):
        assert generate_key("search", {"a": 1}) != generate_key("search", {"a": 2})
        assert generate_key("search", {"a": 1}) != generate_key("recent", {"a": 1})

    def test_list_order_is_significant(self):
        assert generate_key("e", {"v": [1, 2]}) != generate_key("e", {"v": [2, 1]})

    def test_string_params_used_verbatim(self):
        assert generate_key("search-facets", "query=x&page=0") == (
            "search-facets:query=x&page=0"
        )

    def test_no_params(self):
        assert generate_key("site-stats") == "site-stats:"

    def test_long_keys_are_hashed(self):
        params = {"query": "x" * 500}
        key = generate_key("search", params)
        assert len(key) <= MAX_KEY_LENGTH
        assert key.startswith("search:")
        assert key == generate_key("search", dict(params))
        assert key != generate_key("search", {"query": "y" * 500})


class TestCacheSweeper:
    """Scheduled sweep"""

    @pytest.mark.asyncio
    async def test_sweep_once(self, caches, clock):
        caches.search.set("k", 1)
        clock.advance(200)
        sweeper = CacheSweeper(caches, interval_seconds=60)
        assert await sweeper.sweep() == 1

    @pytest.mark.asyncio
    async def test_start_and_stop(self, caches):
        sweeper = CacheSweeper(caches, interval_seconds=60)
        sweeper.start()
        try:
            assert sweeper.is_running()
            job = sweeper.scheduler.get_job(CacheSweeper.JOB_ID)
            assert job is not None
        finally:
            sweeper.stop()
        assert not sweeper.is_running()

    @pytest.mark.asyncio
    async def test_scheduled_sweep_runs_on_loop_thread(self, caches, monkeypatch):
        threads = []
        original = caches.sweep_expired

        def recording_sweep():
            threads.append(threading.current_thread())
            return original()

        monkeypatch.setattr(caches, "sweep_expired", recording_sweep)
        sweeper = CacheSweeper(caches, interval_seconds=60)
        sweeper.start()
        try:
            job = sweeper.scheduler.get_job(CacheSweeper.JOB_ID)
            job.modify(next_run_time=datetime.now(timezone.utc))
            for _ in range(200):
                if threads:
                    break
                await asyncio.sleep(0.01)
        finally:
            sweeper.stop()

        assert threads == [threading.current_thread()]
