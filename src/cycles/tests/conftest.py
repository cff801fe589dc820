"""Shared fixtures and builders for cycle engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.config_loader import CycleConfig, load_cycle_config
from src.cycles.tracker import CycleTracker
from src.models.tracking import Cycle, DailyLog, FlowIntensity, UserSettings

TEST_USER_ID = "user_12345678"
TEST_DATE = date(2024, 1, 20)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def flow_log(day: str | date, flow: FlowIntensity = FlowIntensity.medium, **extra) -> DailyLog:
    return DailyLog(date=day, flow=flow, **extra)


def period(start: date, days: int = 5) -> list[DailyLog]:
    """Consecutive flow logs starting at ``start``."""
    return [flow_log(start + timedelta(days=i)) for i in range(days)]


def periods(first_start: date, lengths: list[int], days: int = 5) -> list[DailyLog]:
    """Flow logs for back-to-back cycles with the given lengths (oldest first).

    One more period than ``lengths`` is produced; the last one opens the
    active cycle.
    """
    logs: list[DailyLog] = []
    start = first_start
    for length in lengths:
        logs.extend(period(start, days))
        start += timedelta(days=length)
    logs.extend(period(start, days))
    return logs


def cycles_from_lengths(lengths: list[int], active_start: date = date(2024, 1, 1)) -> list[Cycle]:
    """Newest-first cycles: an open cycle at ``active_start`` then completed ones.

    ``lengths[0]`` is the open cycle's placeholder; the rest are completed
    cycles going back in time.
    """
    cycles = [Cycle(start_date=active_start, length=lengths[0])]
    start = active_start
    for length in lengths[1:]:
        start -= timedelta(days=length)
        cycles.append(Cycle(start_date=start, length=length))
    return cycles


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the real bundled cycle config for tests."""
    return load_cycle_config()


@pytest.fixture
def tracker(cycle_config: CycleConfig) -> CycleTracker:
    return CycleTracker(cycle_config)


@pytest.fixture
def settings() -> UserSettings:
    return UserSettings(avg_cycle_length=28, avg_period_length=5, name="Ada")


@pytest.fixture
def regular_logs() -> list[DailyLog]:
    """Four 28-day cycles plus an open one starting 2024-01-01."""
    return periods(date(2023, 9, 11), [28, 28, 28, 28])
