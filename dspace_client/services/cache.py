"""
CacheStore - In-memory response cache with a per-store TTL.

Features:
- TTL (Time To Live) per store, checked lazily on read
- Periodic sweep of expired entries (see sweeper.CacheSweeper)
- Optional size cap with oldest-entry eviction
- CacheRegistry holding one store per data class (facets, search, items, stats)

Every operation is synchronous, so a get/set/delete never yields to the
event loop half way through.
"""

import time
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

from loguru import logger

from dspace_client.services.keys import generate_key

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with metadata."""

    data: T
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at


class CacheStore:
    """
    Key/value store whose entries expire ``ttl`` after they were set.

    Usage:
        cache = CacheStore("search", ttl=timedelta(minutes=2))

        key = cache.generate_key("search", {"query": "nile"})
        cached = cache.get(key)
        if cached is not None:
            return cached

        data = await fetch_data()
        cache.set(key, data)
    """

    def __init__(
        self,
        name: str,
        ttl: timedelta,
        max_size: int | None = None,
        clock: Clock = time.monotonic,
        debug: bool = False,
    ):
        self.name = name
        self.ttl = ttl
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._max_size = max_size
        self._clock = clock
        self._debug = debug
        self._stats = CacheStats()

    def generate_key(
        self, endpoint: str, params: Mapping[str, Any] | str | None = None
    ) -> str:
        """Generate a cache key from an endpoint name and params."""
        return generate_key(endpoint, params)

    def _is_expired(self, entry: CacheEntry[Any], now: float) -> bool:
        return entry.age(now) > self.ttl.total_seconds()

    def get(self, key: str) -> Any | None:
        """
        Get value from cache.

        Returns the stored value, or None when missing or expired.
        Expired entries are evicted on the way.
        """
        entry = self._memory.get(key)
        if entry is None:
            self._stats.misses += 1
            self._log(f"MISS: {key[:50]}...")
            return None

        if self._is_expired(entry, self._clock()):
            del self._memory[key]
            self._stats.misses += 1
            self._stats.expirations += 1
            self._log(f"EXPIRED: {key[:50]}...")
            return None

        self._stats.hits += 1
        self._log(f"HIT: {key[:50]}...")
        return entry.data

    def set(self, key: str, data: Any) -> None:
        """Store data under key, overwriting and resetting its age."""
        if (
            self._max_size is not None
            and len(self._memory) >= self._max_size
            and key not in self._memory
        ):
            self._evict_oldest()

        self._memory[key] = CacheEntry(data=data, stored_at=self._clock())
        self._log(f"SET: {key[:50]}... (TTL: {self.ttl.total_seconds()}s)")

    def delete(self, key: str) -> bool:
        """Delete a specific key from cache."""
        if key in self._memory:
            del self._memory[key]
            self._log(f"DELETE: {key[:50]}...")
            return True
        return False

    def invalidate(self, pattern: str) -> int:
        """
        Invalidate all keys containing a substring.

        Returns:
            Number of entries invalidated
        """
        keys_to_delete = [k for k in self._memory if pattern in k]
        for key in keys_to_delete:
            del self._memory[key]

        if keys_to_delete:
            self._log(f"INVALIDATE: {len(keys_to_delete)} entries matching '{pattern}'")

        return len(keys_to_delete)

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._memory)
        self._memory.clear()
        self._log(f"CLEAR: {count} entries removed")

    def sweep_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        now = self._clock()
        expired_keys = [k for k, v in self._memory.items() if self._is_expired(v, now)]
        for key in expired_keys:
            del self._memory[key]

        if expired_keys:
            self._stats.expirations += len(expired_keys)
            self._log(f"SWEEP: {len(expired_keys)} expired entries removed")

        return len(expired_keys)

    def _evict_oldest(self) -> None:
        """Evict the entry that was stored first."""
        if not self._memory:
            return

        oldest_key = min(self._memory, key=lambda k: self._memory[k].stored_at)
        del self._memory[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key[:50]}...")

    def __len__(self) -> int:
        return len(self._memory)

    def __contains__(self, key: str) -> bool:
        return key in self._memory

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CacheStore:{self.name}] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int | None = None

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }


DEFAULT_TTLS = {
    "facets": timedelta(minutes=10),
    "search": timedelta(minutes=2),
    "items": timedelta(minutes=5),
    "stats": timedelta(minutes=15),
}


class CacheRegistry:
    """
    One CacheStore per data class, created once and passed to every component.

    Usage:
        caches = CacheRegistry.from_ttls({"search": timedelta(minutes=2), ...})
        caches.search.get(key)
    """

    def __init__(
        self,
        facets: CacheStore,
        search: CacheStore,
        items: CacheStore,
        stats: CacheStore,
    ):
        self.facets = facets
        self.search = search
        self.items = items
        self.stats = stats

    @classmethod
    def from_ttls(
        cls,
        ttls: Mapping[str, timedelta] | None = None,
        max_size: int | None = None,
        clock: Clock = time.monotonic,
        debug: bool = False,
    ) -> "CacheRegistry":
        """Build the four stores, falling back to DEFAULT_TTLS per store."""
        merged = {**DEFAULT_TTLS, **(ttls or {})}
        stores = {
            name: CacheStore(
                name, merged[name], max_size=max_size, clock=clock, debug=debug
            )
            for name in DEFAULT_TTLS
        }
        return cls(**stores)

    def __iter__(self) -> Iterator[CacheStore]:
        return iter((self.facets, self.search, self.items, self.stats))

    def sweep_expired(self) -> int:
        """Sweep every store. Returns the total number of removed entries."""
        return sum(store.sweep_expired() for store in self)

    def clear_all(self) -> None:
        for store in self:
            store.clear()

    def status(self) -> dict[str, int]:
        """Number of entries held by each store."""
        return {store.name: len(store) for store in self}

    def get_stats(self) -> dict[str, dict[str, Any]]:
        return {store.name: store.get_stats().to_dict() for store in self}
