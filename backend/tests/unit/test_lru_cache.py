"""Unit tests for the in-memory LRU cache with lazy TTL expiry."""

import pytest

from locality.utils.cache import LRUCache
from tests.fakes import FakeClock


class TestLRUCacheInit:
    def test_defaults(self) -> None:
        cache = LRUCache()
        assert cache.max_size == 100
        assert cache.ttl_seconds == 86400
        assert len(cache) == 0

    def test_rejects_zero_size(self) -> None:
        with pytest.raises(ValueError, match="max_size"):
            LRUCache(max_size=0)

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError, match="ttl_seconds"):
            LRUCache(ttl_seconds=0)


class TestLRUCacheExpiry:
    def setup_method(self) -> None:
        self.clock = FakeClock()
        self.cache: LRUCache[str, str] = LRUCache(max_size=3, ttl_seconds=10, clock=self.clock)

    def test_get_fresh_value(self) -> None:
        self.cache.set("a", "A")
        self.clock.advance(9.99)
        assert self.cache.get("a") == "A"

    def test_stale_value_not_returned(self) -> None:
        self.cache.set("a", "A")
        self.clock.advance(10)
        assert self.cache.get("a") is None

    def test_stale_entry_is_kept(self) -> None:
        self.cache.set("a", "A")
        self.clock.advance(60)
        assert self.cache.get("a") is None
        assert "a" in self.cache
        assert len(self.cache) == 1

    def test_overwrite_refreshes_timestamp(self) -> None:
        self.cache.set("a", "A")
        self.clock.advance(60)
        self.cache.set("a", "A2")
        assert self.cache.get("a") == "A2"
        self.clock.advance(9)
        assert self.cache.get("a") == "A2"

    def test_missing_key(self) -> None:
        assert self.cache.get("nope") is None
        assert "nope" not in self.cache


class TestLRUCacheEviction:
    def setup_method(self) -> None:
        self.clock = FakeClock()
        self.cache: LRUCache[str, str] = LRUCache(max_size=3, ttl_seconds=10, clock=self.clock)

    def test_evicts_least_recently_inserted(self) -> None:
        for key in ("a", "b", "c"):
            assert self.cache.set(key, key.upper()) is None
        assert self.cache.set("d", "D") == "a"
        assert "a" not in self.cache
        assert self.cache.set("e", "E") == "b"

    def test_read_hit_refreshes_recency(self) -> None:
        for key in ("a", "b", "c"):
            self.cache.set(key, key.upper())
        self.cache.get("a")
        assert self.cache.set("d", "D") == "b"
        assert "a" in self.cache

    def test_stale_read_does_not_refresh_recency(self) -> None:
        self.cache.set("a", "A")
        self.clock.advance(11)
        self.cache.set("b", "B")
        self.cache.set("c", "C")
        assert self.cache.get("a") is None
        assert self.cache.set("d", "D") == "a"

    def test_overwrite_does_not_evict(self) -> None:
        for key in ("a", "b", "c"):
            self.cache.set(key, key.upper())
        assert self.cache.set("a", "A2") is None
        assert len(self.cache) == 3
        assert self.cache.set("d", "D") == "b"
        assert self.cache.set("e", "E") == "c"
        assert "a" in self.cache

    def test_clear(self) -> None:
        self.cache.set("a", "A")
        self.cache.clear()
        assert len(self.cache) == 0
