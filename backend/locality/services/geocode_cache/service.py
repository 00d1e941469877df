"""Geocode cache: bounded, time-expiring cache in front of Nominatim.

Resolves a coordinate pair to a locality while keeping three promises at
once:
1. never exceed the upstream request rate (every fetch takes a permit)
2. never refetch a key that was resolved within the TTL (hits and misses)
3. never hold more than ``capacity`` entries (LRU eviction)

Concurrency model: a single asyncio event loop. Cache state is only touched
between awaits, so no lock guards it. Concurrent lookups for the same key
share one in-flight fetch (request coalescing); a caller that gives up does
not cancel the fetch other callers are waiting on.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from typing import Union

from locality.models import (
    CacheKey,
    CacheStats,
    InvalidCoordinates,
    LocalityResult,
    NegativeMarker,
)
from locality.services.nominatim import ReverseGeocoderService
from locality.utils.cache import LRUCache
from locality.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

Resolution = Union[LocalityResult, NegativeMarker]


class GeocodeCache:
    """Reverse-geocoding cache with rate limiting and request coalescing.

    Example:
        ```python
        cache = GeocodeCache(NominatimReverseGeocoder())
        result = await cache.resolve(41.9178, 3.2014)
        if result.found:
            print(result.locality)  # "Tamariu"
        ```
    """

    def __init__(
        self,
        geocoder: ReverseGeocoderService,
        rate_limiter: RateLimiter | None = None,
        capacity: int = 100,
        ttl_seconds: float = 86400,
        coordinate_precision: int = 4,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the geocode cache.

        Args:
            geocoder: Upstream used on a miss or a stale entry.
            rate_limiter: Limiter consulted before every upstream call.
                Defaults to one permit per second on ``clock``.
            capacity: Maximum number of cached entries.
            ttl_seconds: Freshness window for an entry.
            coordinate_precision: Decimal places kept in a cache key.
            clock: Monotonic time source, injectable for tests.
        """
        self._geocoder = geocoder
        self._rate_limiter = rate_limiter or RateLimiter(1.0, clock=clock)
        self._entries: LRUCache[CacheKey, Resolution] = LRUCache(
            max_size=capacity, ttl_seconds=ttl_seconds, clock=clock
        )
        self._precision = coordinate_precision
        self._in_flight: dict[CacheKey, asyncio.Task[Resolution]] = {}
        self._hits = 0
        self._misses = 0

    async def resolve(self, latitude: float, longitude: float) -> Resolution:
        """Resolve coordinates to a locality or a negative marker.

        Raises:
            InvalidCoordinates: Out-of-range input. Nothing is touched.
            NetworkError: Upstream unreachable or non-success status.
            ParseError: Malformed upstream response.
        """
        latitude, longitude = validate_coordinates(latitude, longitude)
        key = CacheKey.from_coordinates(latitude, longitude, self._precision)

        cached = self._entries.get(key)
        if cached is not None:
            self._hits += 1
            logger.debug(f"[GEOCODE] Hit {key}")
            return cached

        task = self._in_flight.get(key)
        if task is None:
            self._misses += 1
            logger.debug(f"[GEOCODE] Miss {key}, fetching")
            task = asyncio.ensure_future(self._fetch_and_store(key, latitude, longitude))
            task.add_done_callback(_consume_outcome)
            self._in_flight[key] = task
        else:
            logger.debug(f"[GEOCODE] Joining in-flight fetch for {key}")

        # Cancelling this caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: CacheKey, latitude: float, longitude: float) -> Resolution:
        try:
            await self._rate_limiter.acquire()
            result = await self._geocoder.fetch_locality(latitude, longitude)
            value: Resolution = result if result is not None else NegativeMarker(
                latitude=latitude, longitude=longitude
            )
            evicted = self._entries.set(key, value)
            if evicted is not None:
                logger.debug(f"[GEOCODE] Evicted {evicted} (capacity {self._entries.max_size})")
            return value
        finally:
            # Failures are not cached; a stale entry for the key stays as it was
            self._in_flight.pop(key, None)

    def get_cached(self, latitude: float, longitude: float) -> Resolution | None:
        """Return a fresh cached value without any network call, else None."""
        key = self.key_for(latitude, longitude)
        cached = self._entries.get(key)
        if cached is not None:
            self._hits += 1
        return cached

    def is_pending(self, latitude: float, longitude: float) -> bool:
        """Whether an upstream fetch for these coordinates is in flight."""
        return self.key_for(latitude, longitude) in self._in_flight

    def key_for(self, latitude: float, longitude: float) -> CacheKey:
        """Validate coordinates and build their cache key.

        Raises:
            InvalidCoordinates: Latitude outside [-90, 90], longitude outside
                [-180, 180], or either not a finite number.
        """
        latitude, longitude = validate_coordinates(latitude, longitude)
        return CacheKey.from_coordinates(latitude, longitude, self._precision)

    def clear(self) -> None:
        """Drop every entry. In-flight fetches still complete and store."""
        self._entries.clear()
        logger.info("[GEOCODE] Cache cleared")

    def reset_rate_limiter(self) -> None:
        self._rate_limiter.reset()

    async def aclose(self) -> None:
        """Let in-flight fetches finish, then close the upstream client."""
        pending = list(self._in_flight.values())
        if pending:
            logger.info(f"[GEOCODE] Waiting for {len(pending)} in-flight fetch(es) before closing")
            # Outcomes stay on the tasks; waiters and _consume_outcome read them
            await asyncio.wait(pending)
        await self._geocoder.close()

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            capacity=self._entries.max_size,
            ttl_seconds=self._entries.ttl_seconds,
            hits=self._hits,
            misses=self._misses,
            in_flight=len(self._in_flight),
        )

    @property
    def pending_keys(self) -> list[CacheKey]:
        return list(self._in_flight)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._entries.max_size

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def geocoder(self) -> ReverseGeocoderService:
        return self._geocoder

    def __contains__(self, key: object) -> bool:
        return key in self._entries


def validate_coordinates(latitude: float, longitude: float) -> tuple[float, float]:
    """Return the coordinates as floats.

    Numeric strings are accepted. Booleans, non-numeric values, NaN, infinities
    and out-of-range values raise InvalidCoordinates.
    """
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise InvalidCoordinates(latitude, longitude)
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError) as e:
        raise InvalidCoordinates(latitude, longitude) from e

    if not math.isfinite(lat) or not -90 <= lat <= 90:
        raise InvalidCoordinates(
            latitude, longitude, f"Invalid latitude: {latitude}. Must be between -90 and 90."
        )
    if not math.isfinite(lon) or not -180 <= lon <= 180:
        raise InvalidCoordinates(
            latitude, longitude, f"Invalid longitude: {longitude}. Must be between -180 and 180."
        )
    return lat, lon


def _consume_outcome(task: asyncio.Task) -> None:
    # Mark the exception retrieved: every waiter may have gone away already.
    if not task.cancelled() and task.exception() is not None:
        logger.debug(f"[GEOCODE] Fetch failed: {task.exception()!r}")
