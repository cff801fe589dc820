"""Cycle tracking engine facade.

Wires the segmenter, smart length estimator, regularity scorer, calendar
projector and phase classifier together:

    logs → segment_cycles → smart_average (+ regularity_score)
         → project_calendar (calendar view)
         → classify_phase   (today's status)

Every call is a pure re-derivation from its arguments; the tracker holds
nothing but the (read-only) engine config.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.estimator import is_smart_prediction, smart_average
from src.cycles.phase import CycleStatus, classify_phase
from src.cycles.projector import CalendarProjection, project_calendar
from src.cycles.regularity import regularity_score
from src.cycles.segmenter import period_logs, segment_cycles
from src.models.tracking import Cycle, DailyLog, UserSettings

logger = logging.getLogger("flowindex.cycles.tracker")


@dataclass
class CycleSummary:
    """Everything the home screen and calendar need for one render.

    Attributes:
        cycles:              Cycles newest first.
        smart_length:        Estimated length of the current cycle.
        is_smart_prediction: True if history (not the setting) drove it.
        regularity:          0–100 regularity score.
        status:              Today's cycle day and phase.
        projection:          Future period / fertile / ovulation markers.
    """

    cycles: list[Cycle]
    smart_length: int
    is_smart_prediction: bool
    regularity: int
    status: CycleStatus
    projection: CalendarProjection = field(default_factory=CalendarProjection)

    @property
    def active_cycle(self) -> Cycle | None:
        return self.cycles[0] if self.cycles else None


class CycleTracker:
    """Derive cycles and predictions from daily logs.

    Usage::

        tracker = CycleTracker()
        summary = tracker.analyze(logs, settings, today=date(2024, 1, 20))
        summary.status.phase            # CyclePhase.follicular
        summary.projection.markers      # {"2024-01-29": DayMarker(...), ...}
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def config(self) -> CycleConfig:
        return self._config

    def segment(self, logs: Iterable[DailyLog], default_length: int) -> list[Cycle]:
        return segment_cycles(logs, default_length, self._config)

    def smart_length(self, cycles: Sequence[Cycle], user_default: int) -> int:
        return smart_average(cycles, user_default, self._config)

    def regularity(self, cycles: Sequence[Cycle]) -> int:
        return regularity_score(cycles, self._config)

    def project(
        self, cycles: Sequence[Cycle], smart_length: int, period_length: int
    ) -> CalendarProjection:
        return project_calendar(cycles, smart_length, period_length, self._config)

    def classify(
        self,
        today: date | datetime,
        active_cycle: Cycle | None,
        smart_length: int,
        period_length: int,
    ) -> CycleStatus:
        return classify_phase(today, active_cycle, smart_length, period_length, self._config)

    def analyze(
        self,
        logs: Iterable[DailyLog],
        settings: UserSettings,
        today: date | datetime,
        cycles: Sequence[Cycle] | None = None,
    ) -> CycleSummary:
        """Run the whole pipeline for one render.

        Args:
            logs:     The user's daily logs.
            settings: The user's cycle settings.
            today:    Reference date for the phase classification.
            cycles:   Stored cycles (newest first).  Segmented from ``logs``
                      with the settings' default length when omitted.
        """
        if cycles is None:
            history = self.segment(logs, settings.avg_cycle_length)
        else:
            history = list(cycles)

        smart = self.smart_length(history, settings.avg_cycle_length)
        summary = CycleSummary(
            cycles=history,
            smart_length=smart,
            is_smart_prediction=is_smart_prediction(smart, settings.avg_cycle_length),
            regularity=self.regularity(history),
            status=self.classify(
                today,
                history[0] if history else None,
                smart,
                settings.avg_period_length,
            ),
            projection=self.project(history, smart, settings.avg_period_length),
        )
        logger.debug(
            "Analyzed %d cycle(s): length=%d smart=%s regularity=%d phase=%s",
            len(history),
            smart,
            summary.is_smart_prediction,
            summary.regularity,
            summary.status.phase.value,
        )
        return summary

    def refresh_cycles(
        self,
        logs: Sequence[DailyLog],
        settings: UserSettings,
        stored_cycles: Sequence[Cycle],
    ) -> list[Cycle] | None:
        """Decide what the stored cycle list should become after a change.

        Returns:
            The re-segmented cycles when the logs imply any, ``[]`` when the
            user removed every period log and stale cycles are still stored,
            or None when nothing needs to be written.
        """
        detected = self.segment(logs, settings.avg_cycle_length)
        if detected:
            return detected
        if stored_cycles and not period_logs(logs):
            logger.info("All period logs removed; clearing %d stored cycle(s)", len(stored_cycles))
            return []
        return None
