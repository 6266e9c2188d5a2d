"""Tests for the in-memory TTL cache."""

from __future__ import annotations

import pytest

from dpccompare.services.ttl_cache import TTLCache
from dpccompare.shared.errors import ApplicationError


class TestTTLCache:
    """Test TTLCache expiry and statistics."""

    def test_hit_within_ttl(self, fake_clock) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=60, clock=fake_clock)
        cache.set("a", 1)
        fake_clock.advance(60)

        assert cache.get("a") == 1

    def test_expired_entry_is_deleted(self, fake_clock) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=60, clock=fake_clock)
        cache.set("a", 1)
        fake_clock.advance(60.5)

        assert cache.get("a") is None
        assert len(cache) == 0

    def test_set_refreshes_insertion_time(self, fake_clock) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=10, clock=fake_clock)
        cache.set("a", 1)
        fake_clock.advance(8)
        cache.set("a", 2)
        fake_clock.advance(8)

        assert cache.get("a") == 2

    def test_stats_count_hits_and_misses(self, fake_clock) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=10, clock=fake_clock)
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        fake_clock.advance(11)
        cache.get("a")

        stats = cache.stats()
        assert (stats.size, stats.hits, stats.misses, stats.ttl_seconds) == (0, 1, 2, 10)

    def test_contains_does_not_touch_stats(self, fake_clock) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=10, clock=fake_clock)
        cache.set("a", 1)

        assert "a" in cache
        assert "b" not in cache
        fake_clock.advance(11)
        assert "a" not in cache
        assert cache.stats().hits == 0
        assert cache.stats().misses == 0

    def test_disabled_cache_never_stores(self, fake_clock) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=10, clock=fake_clock, enabled=False)
        cache.set("a", 1)

        assert cache.get("a") is None
        assert len(cache) == 0

    def test_clear_and_keys(self) -> None:
        cache: TTLCache[str, int] = TTLCache(ttl_seconds=10)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.keys() == ["a", "b"]

        cache.clear()
        assert cache.keys() == []

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ApplicationError):
            TTLCache(ttl_seconds=0)
