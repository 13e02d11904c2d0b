"""Unit tests for the in-memory SimpleTTLCache."""

import threading

import pytest

from app.utils.simple_cache import SimpleTTLCache


def test_set_and_get_updates_hit_miss_counters(clock) -> None:
    cache: SimpleTTLCache[list[int]] = SimpleTTLCache(ttl=10_000, clock=clock)

    assert cache.get("missing") is None

    cache.set("key", [1, 2])

    assert cache.get("key") == [1, 2]

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1


def test_expired_entry_is_evicted(clock) -> None:
    cache: SimpleTTLCache[str] = SimpleTTLCache(ttl=5_000, clock=clock)
    cache.set("key", "value")

    clock.advance(5_000)

    assert cache.get("key") is None
    assert "key" not in cache
    assert cache.stats()["evictions"] == 1


def test_set_refreshes_ttl(clock) -> None:
    cache: SimpleTTLCache[str] = SimpleTTLCache(ttl=1_000, clock=clock)
    cache.set("key", "v1")

    clock.advance(900)
    cache.set("key", "v2")
    clock.advance(900)

    assert cache.get("key") == "v2"


def test_lru_eviction_removes_least_recently_used(clock) -> None:
    cache: SimpleTTLCache[int] = SimpleTTLCache(ttl=100_000, max_entries=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    # Access "a" so that "b" becomes least recently used
    assert cache.get("a") == 1

    cache.set("c", 3)

    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert cache.get("b") is None
    assert len(cache) == 2


def test_delete_and_clear(clock) -> None:
    cache: SimpleTTLCache[int] = SimpleTTLCache(ttl=10_000, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")

    assert cache.delete("a") is True
    assert cache.delete("a") is False

    cache.clear()

    stats = cache.stats()
    assert stats["entries"] == 0
    assert stats["hits"] == 0
    assert stats["misses"] == 0
    assert stats["evictions"] == 0


@pytest.mark.parametrize("kwargs", [{"ttl": 0}, {"ttl": 10, "max_entries": 0}])
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        SimpleTTLCache(**kwargs)


def test_thread_safety_under_concurrent_sets() -> None:
    cache: SimpleTTLCache[int] = SimpleTTLCache(ttl=30_000, max_entries=None)
    total_keys = 50

    def _writer(idx: int) -> None:
        cache.set(f"k-{idx}", idx)

    threads = [threading.Thread(target=_writer, args=(i,)) for i in range(total_keys)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert cache.stats()["entries"] == total_keys
    assert cache.get("k-0") == 0
    assert cache.get("k-49") == 49


def test_stats_excludes_expired_entries(clock) -> None:
    cache: SimpleTTLCache[int] = SimpleTTLCache(ttl=60_000, clock=clock)
    cache.set("a", 1)

    clock.advance(120_000)

    stats = cache.stats()
    assert stats["entries"] == 0
    assert stats["evictions"] == 1
