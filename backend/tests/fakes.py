"""Test doubles: a controllable clock and a scripted upstream geocoder."""

import asyncio
from typing import Optional

from locality.models import LocalityResult
from locality.services.nominatim import ReverseGeocoderService


class FakeClock:
    """Manually advanced monotonic clock with a matching async sleep."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.now += seconds
        await asyncio.sleep(0)


class FakeGeocoder(ReverseGeocoderService):
    """Records every upstream call and answers from ``outcomes``.

    ``outcomes`` maps ``(lat, lon)`` to a LocalityResult, None (no locality)
    or an exception instance to raise. Unlisted coordinates resolve to a
    result named ``Place <lat>,<lon>``. When ``gate`` is set, every call
    blocks until the event fires.
    """

    def __init__(self, clock: Optional[FakeClock] = None) -> None:
        self.clock = clock
        self.calls: list[tuple[float, float, Optional[float]]] = []
        self.outcomes: dict[tuple[float, float], object] = {}
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    async def fetch_locality(self, latitude: float, longitude: float) -> Optional[LocalityResult]:
        self.calls.append((latitude, longitude, self.clock() if self.clock else None))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.get(
            (latitude, longitude),
            LocalityResult(
                locality=f"Place {latitude},{longitude}",
                display_name=f"Place {latitude},{longitude}, Somewhere",
                latitude=latitude,
                longitude=longitude,
            ),
        )
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        return len(self.calls)


async def settle(rounds: int = 10) -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)
