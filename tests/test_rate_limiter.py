"""Tests for the minimum-interval request gate."""

import asyncio

import pytest

from sec_filings.utils import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def test_first_request_never_waits():
    clock = FakeClock()
    limiter = RateLimiter(0.15, clock=clock, sleep=clock.sleep)

    asyncio.run(limiter.wait_if_needed())

    assert clock.sleeps == []
    assert limiter.last_request == 0.0


def test_waits_only_for_the_remaining_interval():
    clock = FakeClock()
    limiter = RateLimiter(0.15, clock=clock, sleep=clock.sleep)

    async def scenario():
        await limiter.wait_if_needed()
        clock.now += 0.05
        await limiter.wait_if_needed()
        clock.now += 0.5
        await limiter.wait_if_needed()

    asyncio.run(scenario())

    assert clock.sleeps == [pytest.approx(0.10)]
    assert limiter.last_request == pytest.approx(0.65)


def test_concurrent_callers_are_spaced_by_the_interval():
    clock = FakeClock()
    limiter = RateLimiter(0.15, clock=clock, sleep=clock.sleep)
    starts = []

    async def request():
        await limiter.wait_if_needed()
        starts.append(clock.now)

    async def scenario():
        await asyncio.gather(request(), request(), request())

    asyncio.run(scenario())

    assert len(starts) == 3
    gaps = [later - earlier for earlier, later in zip(starts, starts[1:])]
    assert all(gap >= 0.15 - 1e-9 for gap in gaps)
