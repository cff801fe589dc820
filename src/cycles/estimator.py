"""Personalised cycle length estimate ("smart length").

Uses a fixed-weight moving average over the most recent completed cycles:
0.5 / 0.3 / 0.2, most recent first (``smart_average.weights`` in
cycle_config.yaml).

The open cycle (index 0) is never used because its length is only a
placeholder, and lengths outside the plausible range are skipped rather than
clamped.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.models.tracking import Cycle

logger = logging.getLogger("flowindex.cycles.estimator")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (28.5 → 29)."""
    return int(math.floor(value + 0.5))


def completed_lengths(cycles: Sequence[Cycle], config: CycleConfig) -> list[int]:
    """Plausible lengths of the completed cycles, newest first."""
    lengths = [c.length for c in cycles[1:]]
    valid = [n for n in lengths if config.cycle_length.is_plausible(n)]
    if len(valid) != len(lengths):
        logger.debug("Skipped %d implausible cycle length(s)", len(lengths) - len(valid))
    return valid


def smart_average(
    cycles: Sequence[Cycle],
    user_default: int,
    config: CycleConfig | None = None,
) -> int:
    """Estimate the next cycle length from history.

    Args:
        cycles:       Cycles newest first; index 0 is the open cycle.
        user_default: The user's configured average cycle length.
        config:       Engine config; the global config when omitted.

    Returns:
        ``user_default`` with no usable history, the rounded plain mean with
        fewer cycles than weights, otherwise the weighted average of the
        most recent ones.
    """
    cfg = config or get_cycle_config()
    lengths = completed_lengths(cycles, cfg)

    if not lengths:
        return user_default

    weights = cfg.smart_average.weights
    if len(lengths) < len(weights):
        return round_half_up(sum(lengths) / len(lengths))

    weighted = sum(length * weight for length, weight in zip(lengths, weights))
    logger.debug("Weighted average over %s = %.2f", lengths[: len(weights)], weighted)
    return round_half_up(weighted)


def is_smart_prediction(smart_length: int, user_default: int) -> bool:
    """True when history, not the static setting, drove the estimate."""
    return smart_length != user_default
