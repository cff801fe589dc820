"""Stateless cycle engine endpoints.

Clients post their logs (and optionally their stored cycles); nothing is
persisted here.  Storage and sync stay with the client's backend.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter

from src.cycles.tracker import CycleSummary
from src.dependencies import Tracker
from src.models.tracking import (
    AnalyzeRequest,
    Cycle,
    CycleAnalysisRead,
    CycleStatusRead,
    DayMarkerRead,
    SegmentRequest,
)

router = APIRouter(prefix="/cycles", tags=["cycles"])
logger = logging.getLogger("flowindex.routers.cycles")


def _summary_to_read(summary: CycleSummary) -> CycleAnalysisRead:
    status = summary.status
    return CycleAnalysisRead(
        cycles=summary.cycles,
        active_cycle=summary.active_cycle,
        smart_length=summary.smart_length,
        is_smart_prediction=summary.is_smart_prediction,
        regularity=summary.regularity,
        status=CycleStatusRead(
            cycle_day=status.cycle_day,
            phase=status.phase.value,
            phase_label=status.phase.label,
            days_until_next=status.days_until_next,
            is_future=status.is_future,
            progress=round(status.progress, 4),
            summary_text=status.summary_text,
        ),
        predictions={
            day: DayMarkerRead(
                is_projected_period=marker.is_projected_period,
                is_fertile=marker.is_fertile,
                is_ovulation_day=marker.is_ovulation_day,
            )
            for day, marker in sorted(summary.projection.markers.items())
        },
    )


@router.post("/segment", response_model=list[Cycle])
async def segment(body: SegmentRequest, tracker: Tracker) -> Any:
    return tracker.segment(body.logs, body.default_length)


@router.post("/analyze", response_model=CycleAnalysisRead)
async def analyze(body: AnalyzeRequest, tracker: Tracker) -> Any:
    today = body.today or date.today()
    summary = tracker.analyze(body.logs, body.settings, today, cycles=body.cycles)
    logger.info(
        "Analyzed %d log(s) → %d cycle(s), phase %s",
        len(body.logs),
        len(summary.cycles),
        summary.status.phase.value,
    )
    return _summary_to_read(summary)
