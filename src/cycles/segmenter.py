"""Turn a history of daily logs into discrete menstrual cycles.

A cycle starts on the first flow day of a period and runs up to (not
including) the first flow day of the next one.  Periods are found by
clustering flow days: two flow days separated by more than the boundary
gap (7 days by default) belong to different periods.  Spotting never counts
as a period day.

The output is rebuilt wholesale from the logs every time; stored cycles are
never patched.  Calling it twice on the same logs yields equal lists.
"""

from __future__ import annotations

import logging
from typing import Iterable

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.dates import diff_days_between
from src.models.tracking import Cycle, DailyLog

logger = logging.getLogger("flowindex.cycles.segmenter")


def period_logs(logs: Iterable[DailyLog]) -> list[DailyLog]:
    """Return the logs that count as period days, oldest first."""
    return sorted((log for log in logs if log.has_period_flow), key=lambda log: log.date)


def segment_cycles(
    logs: Iterable[DailyLog],
    default_length: int,
    config: CycleConfig | None = None,
) -> list[Cycle]:
    """Detect cycles from daily logs.

    Args:
        logs:           Daily logs in any order, at most one per date.
        default_length: Placeholder length for the still-open latest cycle.
        config:         Engine config; the global config when omitted.

    Returns:
        Cycles newest first.  Completed cycles carry their measured length,
        the first element (the open cycle) carries ``default_length``.
        Empty when no log has period flow.
    """
    cfg = config or get_cycle_config()
    boundary = cfg.segmentation.boundary_gap_days

    flow_logs = period_logs(logs)
    if not flow_logs:
        return []

    cycles: list[Cycle] = []
    current_start = flow_logs[0].date
    last_flow_date = flow_logs[0].date

    for log in flow_logs[1:]:
        if diff_days_between(last_flow_date, log.date) > boundary:
            # Previous period is over; this log opens a new cycle
            cycles.append(
                Cycle(
                    start_date=current_start,
                    length=diff_days_between(current_start, log.date),
                )
            )
            current_start = log.date
        last_flow_date = log.date

    cycles.append(Cycle(start_date=current_start, length=default_length))

    logger.debug(
        "Segmented %d cycle(s) from %d period log(s) (boundary %d days)",
        len(cycles),
        len(flow_logs),
        boundary,
    )
    cycles.reverse()
    return cycles
