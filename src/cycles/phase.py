"""Current cycle day and phase.

The phase is re-derived from ``today`` on every call; nothing about it is
stored.  Rules are evaluated top to bottom and the first match wins:

    start in the future        → not started
    past the predicted length  → late
    day ≤ period length        → menstruation
    |day − ovulation day| ≤ 2  → fertile window
    day > ovulation day + 2    → luteal
    otherwise                  → follicular

The ovulation day is ``smart_length − 14`` (fixed luteal phase).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.dates import to_local_date
from src.models.tracking import Cycle


class CyclePhase(str, Enum):
    not_started = "not_started"
    menstruation = "menstruation"
    fertile_window = "fertile_window"
    luteal = "luteal"
    follicular = "follicular"
    late = "late"

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]


_PHASE_LABELS = {
    CyclePhase.not_started: "Not Started",
    CyclePhase.menstruation: "Menstruation",
    CyclePhase.fertile_window: "Fertile Window",
    CyclePhase.luteal: "Luteal Phase",
    CyclePhase.follicular: "Follicular Phase",
    CyclePhase.late: "Late",
}


def _plural_days(n: int) -> str:
    return f"{n} Day{'s' if n != 1 else ''}"


@dataclass(frozen=True)
class CycleStatus:
    """Where the user is in the active cycle today.

    Attributes:
        cycle_day:       1-based day of the cycle; None when not started.
        phase:           The single active phase.
        days_until_next: Days until the predicted next period (negative when
                         late); days until the start when not started.
        is_future:       True when the active cycle starts after today.
        cycle_length:    The length the prediction was made with.
    """

    cycle_day: int | None
    phase: CyclePhase
    days_until_next: int
    is_future: bool
    cycle_length: int

    @property
    def days_late(self) -> int:
        return max(0, -self.days_until_next) if self.phase is CyclePhase.late else 0

    @property
    def progress(self) -> float:
        """Fraction of the predicted cycle elapsed, clamped to [0, 1]."""
        if self.cycle_day is None or self.cycle_length <= 0:
            return 0.0
        return min(self.cycle_day / self.cycle_length, 1.0)

    @property
    def summary_text(self) -> str:
        if self.phase is CyclePhase.not_started:
            if not self.is_future:
                return "No period logged yet"
            return f"Starts in {self.days_until_next} days"
        if self.phase is CyclePhase.late:
            return f"{_plural_days(self.days_late)} Late"
        if self.phase is CyclePhase.fertile_window:
            return "High chance of pregnancy"
        if self.phase is CyclePhase.luteal:
            return f"{_plural_days(self.days_until_next)} until period"
        return f"Day {self.cycle_day}"


def classify_phase(
    today: date | datetime,
    active_cycle: Cycle | None,
    smart_length: int,
    period_length: int,
    config: CycleConfig | None = None,
) -> CycleStatus:
    """Classify today's position in the active cycle.

    Args:
        today:         The user's local "today"; the engine never reads the clock.
        active_cycle:  ``cycles[0]``, or None with no history.
        smart_length:  Predicted cycle length.
        period_length: Expected bleeding days.
        config:        Engine config; the global config when omitted.
    """
    cfg = config or get_cycle_config()

    if active_cycle is None:
        return CycleStatus(
            cycle_day=None,
            phase=CyclePhase.not_started,
            days_until_next=0,
            is_future=False,
            cycle_length=smart_length,
        )

    days_diff = (to_local_date(today) - active_cycle.start_date).days

    if days_diff < 0:
        return CycleStatus(
            cycle_day=None,
            phase=CyclePhase.not_started,
            days_until_next=abs(days_diff),
            is_future=True,
            cycle_length=smart_length,
        )

    cycle_day = days_diff + 1
    days_left = smart_length - cycle_day
    ovulation_day = smart_length - cfg.projection.luteal_phase_days
    radius = cfg.phase.fertile_radius_days

    if days_left < 0:
        phase = CyclePhase.late
    elif cycle_day <= period_length:
        phase = CyclePhase.menstruation
    elif abs(cycle_day - ovulation_day) <= radius:
        phase = CyclePhase.fertile_window
    elif cycle_day > ovulation_day + radius:
        phase = CyclePhase.luteal
    else:
        phase = CyclePhase.follicular

    return CycleStatus(
        cycle_day=cycle_day,
        phase=phase,
        days_until_next=days_left,
        is_future=False,
        cycle_length=smart_length,
    )
