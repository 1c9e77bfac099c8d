"""Unit tests for caching system."""
import threading
import time

import pytest

from reelvote.core.cache import TTLCache, get_or_fetch


@pytest.mark.unit
class TestTTLCache:
    """Tests for TTLCache class."""

    def test_basic_get_set(self):
        cache = TTLCache()
        cache.set("active_reels", ["doc-1"])
        assert cache.get("active_reels") == ["doc-1"]

    def test_get_nonexistent_key(self):
        assert TTLCache().get("nonexistent") is None

    def test_ttl_expiration(self):
        cache = TTLCache()
        cache.set("results", [])

        assert not cache.is_expired("results", ttl_seconds=1.0)
        time.sleep(0.15)
        assert cache.is_expired("results", ttl_seconds=0.1)

    def test_nonexistent_key_is_expired(self):
        assert TTLCache().is_expired("nonexistent", ttl_seconds=1.0)

    def test_lru_eviction(self):
        """The least recently used entry goes first once max_size is reached."""
        cache = TTLCache(max_size=3)
        cache.set("key1", "value1")
        cache.set("key2", "value2")
        cache.set("key3", "value3")

        cache.get("key1")
        cache.set("key4", "value4")

        assert cache.get("key1") == "value1"
        assert cache.get("key2") is None
        assert cache.get("key3") == "value3"
        assert cache.get("key4") == "value4"

    def test_update_existing_key_maintains_size(self):
        cache = TTLCache(max_size=2)
        cache.set("key1", "value1")
        cache.set("key2", "value2")
        cache.set("key2", "value2_updated")

        assert cache.get("key1") == "value1"
        assert cache.get("key2") == "value2_updated"

    def test_invalidate_multiple_keys(self):
        cache = TTLCache()
        cache.set("active_reels", [1])
        cache.set("results", [2])
        cache.set("other", [3])

        cache.invalidate("active_reels", "results", "nonexistent")

        assert cache.get("active_reels") is None
        assert cache.get("results") is None
        assert cache.get("other") == [3]

    def test_invalidate_prefix(self):
        cache = TTLCache()
        cache.set("results:Fiction", 1)
        cache.set("results:Documentary", 2)
        cache.set("active_reels", 3)

        cache.invalidate_prefix("results")

        assert cache.get("results:Fiction") is None
        assert cache.get("results:Documentary") is None
        assert cache.get("active_reels") == 3

    def test_clear(self):
        cache = TTLCache()
        cache.set("key1", "value1")
        cache.set("key2", "value2")
        cache.clear()
        assert cache.get("key1") is None
        assert cache.get_stats()["size"] == 0

    def test_get_stats(self):
        cache = TTLCache(max_size=50)
        cache.set("key1", "value1")

        stats = cache.get_stats()

        assert stats["size"] == 1
        assert stats["max_size"] == 50
        assert stats["hits"] == 0
        assert stats["misses"] == 0
        assert stats["hit_rate_percent"] == 0
        assert "age_seconds" in stats["entries"]["key1"]
        assert "cached_at" in stats["entries"]["key1"]


@pytest.mark.unit
class TestGetOrFetch:
    """Tests for get_or_fetch function."""

    def test_cache_miss_calls_fetch(self):
        cache = TTLCache()
        calls = []

        result = get_or_fetch(cache, "key1", lambda: calls.append(1) or "fetched", ttl_seconds=1.0)

        assert result == "fetched"
        assert len(calls) == 1
        assert cache.get("key1") == "fetched"

    def test_cache_hit_skips_fetch(self):
        cache = TTLCache()
        cache.set("key1", "cached_value")

        result = get_or_fetch(cache, "key1", lambda: pytest.fail("fetch should not run"), ttl_seconds=1.0)

        assert result == "cached_value"

    def test_expired_cache_refetches(self):
        cache = TTLCache()
        cache.set("key1", "old_value")
        time.sleep(0.2)

        assert get_or_fetch(cache, "key1", lambda: "new_value", ttl_seconds=0.1) == "new_value"

    def test_empty_list_is_a_hit(self):
        """An empty reel list is a valid cached value, not a miss."""
        cache = TTLCache()
        calls = []

        def fetch():
            calls.append(1)
            return []

        get_or_fetch(cache, "active_reels", fetch, ttl_seconds=10.0)
        get_or_fetch(cache, "active_reels", fetch, ttl_seconds=10.0)

        assert len(calls) == 1

    def test_hit_rate_calculation(self):
        cache = TTLCache()
        for _ in range(4):
            get_or_fetch(cache, "key1", lambda: "value", ttl_seconds=1.0)

        stats = cache.get_stats()
        assert stats["hits"] == 3
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 75.0

    def test_thundering_herd_prevention(self):
        """Concurrent misses on one key only fetch once."""
        cache = TTLCache()
        call_count = {"count": 0}

        def slow_fetch():
            call_count["count"] += 1
            time.sleep(0.1)
            return f"value_{call_count['count']}"

        results = []

        def fetch_in_thread():
            results.append(get_or_fetch(cache, "key1", slow_fetch, ttl_seconds=10.0))

        threads = [threading.Thread(target=fetch_in_thread) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert call_count["count"] == 1
        assert results == ["value_1"] * 10
