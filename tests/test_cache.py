import pytest

from football_dashboard.cache import CacheEntry, TTLCache


def test_get_right_after_set_returns_value(clock):
    cache = TTLCache(clock=clock)
    cache.set("competitions", {"competitions": []}, ttl=10)
    assert cache.get("competitions") == {"competitions": []}


def test_entry_expires_after_ttl(clock):
    cache = TTLCache(clock=clock)
    cache.set("live", [1, 2], ttl=10)
    clock.advance(9.99)
    assert cache.get("live") == [1, 2]
    clock.advance(0.01)
    assert cache.get("live") is None
    # evicted on the expired read
    assert len(cache) == 0


def test_default_ttl_used_when_not_given(clock):
    cache = TTLCache(default_ttl=5, clock=clock)
    cache.set("k", "v")
    clock.advance(5)
    assert cache.get("k", "miss") == "miss"


def test_falsy_values_are_cached(clock):
    cache = TTLCache(clock=clock)
    cache.set("empty", [])
    sentinel = object()
    assert cache.get("empty", sentinel) == []


def test_has_delete_clear(clock):
    cache = TTLCache(clock=clock)
    cache.set("a", 1, ttl=1)
    cache.set("b", 2)
    assert cache.has("a")
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    assert not cache.has("a")
    cache.clear()
    assert len(cache) == 0


def test_stats_reports_whole_percentages(clock):
    cache = TTLCache(clock=clock)
    assert cache.stats() == {"size": 0, "hits": 0, "misses": 0, "hit_rate": 0, "miss_rate": 0}
    cache.set("a", 1)
    cache.get("a")
    cache.get("a")
    cache.get("missing")
    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["hits"] == 2 and stats["misses"] == 1
    assert stats["hit_rate"] == 67
    assert stats["miss_rate"] == 33


@pytest.mark.parametrize("elapsed,fresh", [(0, True), (2.5, True), (3, False), (10, False)])
def test_cache_entry_freshness(elapsed, fresh):
    entry = CacheEntry(value="x", timestamp=100.0, ttl=3)
    assert entry.is_fresh(100.0 + elapsed) is fresh
