"""Minimum-interval async rate limiter for outgoing upstream requests.

Nominatim's usage policy allows at most one request per second from a
client. Every network call made by the geocode cache takes a permit here
first, regardless of cache state.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Grants permits spaced at least ``min_interval_seconds`` apart.

    Waiters queue on an ``asyncio.Lock``, which wakes them in FIFO order, so
    concurrent callers are served in request order and none starves. The
    limiter never rejects, it only delays.
    """

    def __init__(
        self,
        min_interval_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if min_interval_seconds < 0:
            raise ValueError("min_interval_seconds must not be negative")
        self._min_interval = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_granted_at: float | None = None

    async def acquire(self) -> float:
        """Wait for a permit.

        Returns:
            The clock time at which the permit was granted.
        """
        async with self._lock:
            if self._last_granted_at is not None:
                # Loop so a sleep that wakes marginally early still honours the interval.
                while True:
                    remaining = self._min_interval - (self._clock() - self._last_granted_at)
                    if remaining <= 0:
                        break
                    logger.debug(f"[RATE] Waiting {remaining:.3f}s for permit")
                    await self._sleep(remaining)
            granted_at = self._clock()
            self._last_granted_at = granted_at
            return granted_at

    def reset(self) -> None:
        """Forget the last grant so the next permit is immediate."""
        self._last_granted_at = None

    @property
    def min_interval_seconds(self) -> float:
        return self._min_interval

    @property
    def last_granted_at(self) -> float | None:
        return self._last_granted_at
