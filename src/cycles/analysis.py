"""Trend and history summaries over daily logs and cycles.

These feed the analysis screen (cycle history bars, metric trend line,
most frequent symptoms) and the context handed to the conversational
insight service.  Like the rest of the engine they are pure functions over
the inputs; nothing here calls the AI service.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Sequence

from src.cycles.dates import format_date_iso, to_local_date
from src.cycles.phase import CycleStatus
from src.models.tracking import Cycle, DailyLog

logger = logging.getLogger("flowindex.cycles.analysis")

Metric = Literal["water", "sleep", "weight", "temperature"]

# Order in which the analysis screen picks a metric to show first
TREND_METRICS: tuple[Metric, ...] = ("weight", "sleep", "water", "temperature")

_MIN_HISTORY_SCALE = 35  # chart height never shrinks below this many days


# ---------------------------------------------------------------------------
# Cycle history
# ---------------------------------------------------------------------------


@dataclass
class CycleHistory:
    """Recent cycles oldest → newest, with a common bar-chart scale."""

    recent: list[Cycle] = field(default_factory=list)
    max_length: int = _MIN_HISTORY_SCALE


def cycle_history(cycles: Sequence[Cycle], limit: int = 6) -> CycleHistory:
    """The ``limit`` most recent cycles (input newest first), oldest first."""
    recent = list(cycles[:limit])
    recent.reverse()
    max_length = max([c.length for c in recent] + [_MIN_HISTORY_SCALE])
    return CycleHistory(recent=recent, max_length=max_length)


# ---------------------------------------------------------------------------
# Metric trends
# ---------------------------------------------------------------------------


@dataclass
class TrendPoint:
    date: date
    value: float


@dataclass
class MetricTrend:
    """Summary of one metric over its most recent readings.

    ``value_range`` is never 0 so callers can normalise by it safely.
    """

    metric: Metric
    points: list[TrendPoint]
    minimum: float
    maximum: float
    value_range: float
    average: float


def _metric_value(log: DailyLog, metric: Metric) -> float | None:
    value = getattr(log, metric)
    if value is None or math.isnan(value):
        return None
    return value


def metric_trend(
    logs: Sequence[DailyLog], metric: Metric, window: int = 14
) -> MetricTrend | None:
    """Trend over the last ``window`` logs that recorded ``metric``.

    Returns:
        MetricTrend, or None when no log has a value for the metric.
    """
    if metric not in TREND_METRICS:
        raise ValueError(f"Unknown metric {metric!r}; expected one of {TREND_METRICS}")

    points = [
        TrendPoint(date=log.date, value=value)
        for log in sorted(logs, key=lambda log: log.date)
        if (value := _metric_value(log, metric)) is not None
    ][-window:]

    if not points:
        return None

    values = [p.value for p in points]
    low, high = min(values), max(values)
    return MetricTrend(
        metric=metric,
        points=points,
        minimum=low,
        maximum=high,
        value_range=(high - low) or 1.0,
        average=sum(values) / len(values),
    )


def default_trend_metric(logs: Sequence[DailyLog]) -> Metric:
    """First metric (in display order) with any positive reading."""
    for metric in TREND_METRICS:
        if any((v := _metric_value(log, metric)) is not None and v > 0 for log in logs):
            return metric
    return TREND_METRICS[0]


# ---------------------------------------------------------------------------
# Symptoms
# ---------------------------------------------------------------------------


def symptom_frequency(logs: Sequence[DailyLog], top: int = 5) -> list[tuple[str, int]]:
    """Most frequently logged physical symptoms, most common first.

    Ties keep the order in which the symptoms were first seen.
    """
    counts: Counter[str] = Counter()
    for log in logs:
        counts.update(s.value for s in log.symptoms)
    # Counter.most_common is stable for equal counts (insertion order)
    return counts.most_common(top)


# ---------------------------------------------------------------------------
# Insight context
# ---------------------------------------------------------------------------


def recent_logs(
    logs: Sequence[DailyLog], today: date | datetime, days: int = 7
) -> list[DailyLog]:
    """Logs dated between ``days`` days ago and today, inclusive."""
    ref = to_local_date(today)
    return [log for log in logs if 0 <= (ref - log.date).days <= days]


def insight_context(
    logs: Sequence[DailyLog],
    active_cycle: Cycle | None,
    today: date | datetime,
    name: str,
    status: CycleStatus | None = None,
) -> dict[str, Any]:
    """Build the JSON-safe context the insight service puts in its prompt."""
    ref = to_local_date(today)
    context: dict[str, Any] = {
        "name": name,
        "current_date": format_date_iso(ref),
        "last_period_start": (
            format_date_iso(active_cycle.start_date) if active_cycle else None
        ),
        "recent_logs": [
            {
                "date": format_date_iso(log.date),
                "symptoms": [s.value for s in log.symptoms],
                "moods": [m.value for m in log.moods],
                "water": log.water,
                "sleep": log.sleep,
                "flow": log.flow.value if log.flow else None,
            }
            for log in sorted(recent_logs(logs, ref), key=lambda log: log.date)
        ],
    }
    if status is not None:
        context["cycle_day"] = status.cycle_day
        context["phase"] = status.phase.label
        context["days_until_next_period"] = status.days_until_next
    return context
