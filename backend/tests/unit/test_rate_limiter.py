"""Unit tests for the minimum-interval rate limiter."""

import asyncio

import pytest

from locality.utils.rate_limit import RateLimiter
from tests.fakes import FakeClock, settle


class TestRateLimiterInit:
    def test_defaults(self) -> None:
        limiter = RateLimiter()
        assert limiter.min_interval_seconds == 1.0
        assert limiter.last_granted_at is None

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ValueError):
            RateLimiter(-1)


class TestRateLimiterAcquire:
    def setup_method(self) -> None:
        self.clock = FakeClock()
        self.limiter = RateLimiter(1.0, clock=self.clock, sleep=self.clock.sleep)

    @pytest.mark.asyncio
    async def test_first_permit_is_immediate(self) -> None:
        granted = await self.limiter.acquire()
        assert granted == 1000.0
        assert self.limiter.last_granted_at == 1000.0

    @pytest.mark.asyncio
    async def test_second_permit_waits_remaining_interval(self) -> None:
        await self.limiter.acquire()
        self.clock.advance(0.25)
        granted = await self.limiter.acquire()
        assert granted == pytest.approx(1001.0)

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self) -> None:
        await self.limiter.acquire()
        self.clock.advance(5)
        granted = await self.limiter.acquire()
        assert granted == 1005.0

    @pytest.mark.asyncio
    async def test_concurrent_permits_are_spaced(self) -> None:
        grants = await asyncio.gather(*(self.limiter.acquire() for _ in range(5)))
        assert grants == pytest.approx([1000.0, 1001.0, 1002.0, 1003.0, 1004.0])

    @pytest.mark.asyncio
    async def test_permits_granted_in_request_order(self) -> None:
        order: list[int] = []

        async def worker(i: int) -> None:
            await self.limiter.acquire()
            order.append(i)

        tasks = []
        for i in range(4):
            tasks.append(asyncio.create_task(worker(i)))
            await asyncio.sleep(0)
        await asyncio.gather(*tasks)
        assert order == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_block_others(self) -> None:
        gate = asyncio.Event()

        async def slow_sleep(seconds: float) -> None:
            await gate.wait()
            self.clock.advance(seconds)

        limiter = RateLimiter(1.0, clock=self.clock, sleep=slow_sleep)
        await limiter.acquire()
        waiting = asyncio.create_task(limiter.acquire())
        queued = asyncio.create_task(limiter.acquire())
        await settle()
        waiting.cancel()
        gate.set()
        granted = await queued
        with pytest.raises(asyncio.CancelledError):
            await waiting
        assert granted >= 1001.0

    @pytest.mark.asyncio
    async def test_reset_makes_next_permit_immediate(self) -> None:
        await self.limiter.acquire()
        self.limiter.reset()
        assert self.limiter.last_granted_at is None
        assert await self.limiter.acquire() == 1000.0


class TestRateLimiterRealClock:
    @pytest.mark.asyncio
    async def test_real_spacing(self) -> None:
        limiter = RateLimiter(0.05)
        grants = await asyncio.gather(*(limiter.acquire() for _ in range(3)))
        for earlier, later in zip(grants, grants[1:]):
            assert later - earlier >= 0.05
