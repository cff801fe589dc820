"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.cycles.config_loader import get_cycle_config
from src.cycles.tracker import CycleTracker


def get_tracker() -> CycleTracker:
    """A tracker bound to the currently loaded engine config."""
    return CycleTracker(get_cycle_config())


# Annotated shortcuts for route signatures
Tracker = Annotated[CycleTracker, Depends(get_tracker)]
AppSettings = Annotated[Settings, Depends(get_settings)]
