"""Project future period, fertile-window and ovulation days onto a calendar.

Starting from the active cycle's start date, the next ``horizon_cycles``
(12) cycles are laid out ``smart_length`` days apart.  For each one:

- the first ``period_length`` days are marked as projected period;
- ovulation is assumed ``luteal_phase_days`` (14) before that period start;
- ovulation −5 … +1 days are marked fertile, ovulation itself flagged.

Projected period days always win: a fertile marker never replaces one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Sequence

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.dates import format_date_iso, parse_iso_date
from src.models.tracking import Cycle

logger = logging.getLogger("flowindex.cycles.projector")


@dataclass(frozen=True)
class DayMarker:
    """Prediction flags for one calendar day."""

    is_projected_period: bool = False
    is_fertile: bool = False
    is_ovulation_day: bool = False


PERIOD_MARKER = DayMarker(is_projected_period=True)
FERTILE_MARKER = DayMarker(is_fertile=True)
OVULATION_MARKER = DayMarker(is_fertile=True, is_ovulation_day=True)


@dataclass
class CalendarProjection:
    """Predictions keyed by ISO date, plus the length that produced them.

    Attributes:
        markers:     ``YYYY-MM-DD`` → DayMarker.  Days without a prediction
                     are absent.
        used_length: Cycle length the projection was laid out with.
        anchor:      Start date of the active cycle, None if nothing to project.
    """

    markers: dict[str, DayMarker] = field(default_factory=dict)
    used_length: int = 0
    anchor: date | None = None

    def marker_for(self, day: str | date) -> DayMarker | None:
        return self.markers.get(format_date_iso(parse_iso_date(day)))

    @property
    def next_period_start(self) -> date | None:
        if self.anchor is None:
            return None
        return self.anchor + timedelta(days=self.used_length)

    def ovulation_days(self) -> list[date]:
        return sorted(date.fromisoformat(k) for k, m in self.markers.items() if m.is_ovulation_day)

    def __len__(self) -> int:
        return len(self.markers)


def fertile_window_start_day(cycle_length: int, config: CycleConfig | None = None) -> int:
    """1-based cycle day on which the fertile window opens (never before day 1)."""
    pc = (config or get_cycle_config()).projection
    ovulation_day = cycle_length - pc.luteal_phase_days
    return max(1, ovulation_day - pc.days_before_ovulation)


def project_calendar(
    cycles: Sequence[Cycle],
    smart_length: int,
    period_length: int,
    config: CycleConfig | None = None,
) -> CalendarProjection:
    """Build the prediction map for the calendar view.

    Args:
        cycles:        Cycles newest first; only ``cycles[0].start_date`` is used.
        smart_length:  Cycle length to lay future cycles out with.
        period_length: Number of projected bleeding days per cycle.
        config:        Engine config; the global config when omitted.

    Returns:
        A fresh CalendarProjection; empty when there are no cycles.
    """
    cfg = config or get_cycle_config()
    pc = cfg.projection

    if not cycles:
        return CalendarProjection(used_length=smart_length)

    anchor = cycles[0].start_date
    markers: dict[str, DayMarker] = {}

    for c in range(1, pc.horizon_cycles + 1):
        next_start = anchor + timedelta(days=smart_length * c)

        for i in range(period_length):
            markers[format_date_iso(next_start + timedelta(days=i))] = PERIOD_MARKER

        ovulation = next_start - timedelta(days=pc.luteal_phase_days)
        for offset in range(-pc.days_before_ovulation, pc.days_after_ovulation + 1):
            key = format_date_iso(ovulation + timedelta(days=offset))
            existing = markers.get(key)
            if existing is not None and existing.is_projected_period:
                continue
            markers[key] = OVULATION_MARKER if offset == 0 else FERTILE_MARKER

    logger.debug(
        "Projected %d cycle(s) from %s at %d days: %d marked day(s)",
        pc.horizon_cycles,
        anchor,
        smart_length,
        len(markers),
    )
    return CalendarProjection(markers=markers, used_length=smart_length, anchor=anchor)
