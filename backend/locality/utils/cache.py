"""In-memory LRU cache with lazy TTL expiration.

Process-level cache for resolved localities. Nothing survives a restart.
TTL: 24h (place names don't change daily). Max 100 entries.

Stale entries are kept until they are overwritten or evicted; a stale
entry only means the caller should refetch.
"""

import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    """TTL-aware LRU cache. Recency is refreshed on every read hit and write."""

    def __init__(
        self,
        max_size: int = 100,
        ttl_seconds: float = 86400,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._cache: OrderedDict[K, tuple[float, V]] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock

    def get(self, key: K) -> V | None:
        """Return the value if present and fresh, marking it most-recently-used."""
        item = self._cache.get(key)
        if item is None:
            return None
        ts, value = item
        if not self._is_fresh(ts):
            return None
        self._cache.move_to_end(key)
        return value

    def set(self, key: K, value: V) -> K | None:
        """Store value as fresh and most-recently-used.

        Returns:
            The evicted key when the insert pushed the cache over capacity.
        """
        if key in self._cache:
            self._cache.move_to_end(key)
        self._cache[key] = (self._clock(), value)
        if len(self._cache) > self._max_size:
            evicted, _ = self._cache.popitem(last=False)
            return evicted
        return None

    def clear(self) -> None:
        self._cache.clear()

    def _is_fresh(self, inserted_at: float) -> bool:
        return self._clock() - inserted_at < self._ttl

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl_seconds(self) -> float:
        return self._ttl
