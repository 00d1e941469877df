"""Shared fixtures."""

import pytest

from tests.fakes import FakeClock, FakeGeocoder


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def geocoder(clock: FakeClock) -> FakeGeocoder:
    return FakeGeocoder(clock)
