"""Cycle regularity score (0–100).

A step function over the spread (max − min) of recent completed cycle
lengths.  New users with little history are reported as fully regular.
"""

from __future__ import annotations

from typing import Sequence

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.models.tracking import Cycle


def regularity_score(cycles: Sequence[Cycle], config: CycleConfig | None = None) -> int:
    """Score how regular the user's recent cycles are.

    Args:
        cycles: Cycles newest first; index 0 is the open cycle.
        config: Engine config; the global config when omitted.

    Returns:
        100 with fewer than ``min_history_cycles`` cycles or fewer than two
        plausible completed lengths in the window, otherwise the band score
        for ``max - min``.
    """
    cfg = config or get_cycle_config()
    rc = cfg.regularity

    if len(cycles) < rc.min_history_cycles:
        return 100

    window = cycles[1 : rc.window_cycles + 1]
    lengths = [c.length for c in window if cfg.cycle_length.is_plausible(c.length)]
    if len(lengths) < 2:
        return 100

    return rc.score_for_variation(max(lengths) - min(lengths))
