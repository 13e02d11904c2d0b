"""In-memory TTL cache with LRU eviction.

Backs the in-memory rate limiter: a single bounded ordered map where every
entry also carries its own expiry. Designed to be swapped for Redis while
keeping the same interface and behaviors.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

V = TypeVar("V")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CacheItem(Generic[V]):
    """Container for cached values with expiration metadata."""

    value: V
    expires_at: int


class SimpleTTLCache(Generic[V]):
    """Thread-safe, in-memory TTL cache with LRU eviction.

    TTL and clock share the same unit (milliseconds by default).

    Attributes:
        ttl: Time-to-live applied to every entry on each ``set``.
        max_entries: Maximum number of cached items (None for unlimited).
    """

    def __init__(
        self,
        ttl: int,
        max_entries: int | None = 1000,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if ttl < 1:
            raise ValueError("ttl must be >= 1")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, CacheItem[V]] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SimpleTTLCache(ttl={self._ttl}, max_entries={self._max_entries}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses}, "
            f"evictions={self._evictions})"
        )

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired_locked()
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            item = self._store.get(key)  # type: ignore[arg-type]
            return item is not None and not self._is_expired(item)

    def get(self, key: str) -> V | None:
        """Retrieve a cached value if it exists and is not expired.

        A live entry is marked as most recently used.

        Args:
            key: Cache key.

        Returns:
            Cached value or None if not found/expired.
        """

        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                return None

            if self._is_expired(item):
                self._evict_single(key)
                self._misses += 1
                return None

            self._hits += 1
            self._store.move_to_end(key)  # mark as recently used
            return item.value

    def set(self, key: str, value: V) -> None:
        """Store a value, resetting its TTL and evicting as needed.

        Args:
            key: Cache key.
            value: Value to store.
        """

        with self._lock:
            self._evict_expired_locked()
            self._store[key] = CacheItem(value=value, expires_at=self._clock() + self._ttl)
            self._store.move_to_end(key)
            self._evict_if_over_capacity_locked()

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""

        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | None]:
        """Return lightweight cache metrics without exposing keys or values."""

        with self._lock:
            self._evict_expired_locked()
            return {
                "ttl": self._ttl,
                "max_entries": self._max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _evict_single(self, key: str) -> None:
        if key in self._store:
            self._store.pop(key, None)
            self._evictions += 1

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired_keys = [k for k, item in self._store.items() if item.expires_at <= now]
        for key in expired_keys:
            self._evict_single(key)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._store) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            self._store.popitem(last=False)
            self._evictions += 1

    def _is_expired(self, item: CacheItem[V]) -> bool:
        return self._clock() >= item.expires_at
