"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from cronloop.scheduler import Scheduler

# A Monday, aligned on a minute boundary
T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock for deterministic ticking."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at T0."""
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> Scheduler:
    """Create a scheduler evaluating expressions in UTC against the fake clock."""
    return Scheduler({"tick_interval_ms": 100, "timezone": "UTC"}, clock=clock)


@pytest.fixture
def run_ticks(scheduler: Scheduler, clock: FakeClock) -> Callable[[int, int], None]:
    """Advance the fake clock and tick the given number of times."""

    def _run(count: int, step_ms: int = 100) -> None:
        for _ in range(count):
            clock.advance(milliseconds=step_ms)
            scheduler.tick()

    return _run
