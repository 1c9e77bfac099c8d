"""
In-process TTL cache for read-mostly endpoints.

During a screening hundreds of clients reload the reel list and the results
board at the same moments (a reel change, a results refresh), so those reads
go through this cache. Vote writes and admin changes invalidate the affected
keys, so a short TTL only bounds staleness for changes made elsewhere.

- OrderedDict storage with LRU eviction once ``max_size`` is reached
- Per-read TTL check against the insertion timestamp
- RLock so ``get_or_fetch`` can hold the lock while calling helpers
- Hit/miss counters surfaced by ``/health``
"""

import time
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    """Thread-safe TTL cache with LRU eviction.

    Storage format: ``OrderedDict[key, (value, stored_at)]``.
    """

    def __init__(self, max_size: int = 100):
        self._cache: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value (ignoring TTL) and mark it recently used."""
        with self._lock:
            if key not in self._cache:
                return None
            value, _ = self._cache[key]
            self._cache.move_to_end(key)
            return value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, evicting the least recently used entry if full."""
        with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = (value, time.time())
            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def is_expired(self, key: str, ttl_seconds: float) -> bool:
        with self._lock:
            if key not in self._cache:
                return True
            _, stored_at = self._cache[key]
            return time.time() - stored_at > ttl_seconds

    def invalidate(self, *keys: str) -> None:
        """Drop one or more keys."""
        with self._lock:
            for key in keys:
                self._cache.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> None:
        """Drop every key starting with ``prefix`` (e.g. per-category results)."""
        with self._lock:
            for key in [k for k in self._cache if k.startswith(prefix)]:
                del self._cache[key]

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Size, capacity, hit/miss counters and per-entry age for monitoring."""
        with self._lock:
            total = self._hits + self._misses
            now = time.time()
            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(self._hits / total * 100, 2) if total else 0,
                "entries": {
                    key: {
                        "age_seconds": round(now - stored_at, 2),
                        "cached_at": datetime.fromtimestamp(stored_at).isoformat(),
                    }
                    for key, (_, stored_at) in self._cache.items()
                },
            }


def get_or_fetch(
    cache: TTLCache,
    cache_key: str,
    fetch_func: Callable[[], Any],
    ttl_seconds: float = 3.0
) -> Any:
    """
    Return the cached value for ``cache_key`` or call ``fetch_func`` and cache it.

    Uses double-checked locking: a lock-free freshness check first, then a
    second check under the lock so concurrent misses only fetch once.
    ``None`` results are never treated as hits.
    """
    if not cache.is_expired(cache_key, ttl_seconds):
        cached = cache.get(cache_key)
        if cached is not None:
            with cache._lock:
                cache._hits += 1
            return cached

    with cache._lock:
        if not cache.is_expired(cache_key, ttl_seconds):
            cached = cache.get(cache_key)
            if cached is not None:
                cache._hits += 1
                return cached

        cache._misses += 1
        fresh = fetch_func()
        cache.set(cache_key, fresh)
        return fresh


# Shared by every request handler in this process
global_cache = TTLCache()
