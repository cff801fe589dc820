"""Load, validate, and hot-reload the cycle engine configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  It is loaded
lazily on first use and cached.  Call ``reload_cycle_config()`` to re-read
from disk after an edit — no restart required.

Usage::

    from src.cycles.config_loader import get_cycle_config

    config = get_cycle_config()
    config.segmentation.boundary_gap_days   # 7
    config.cycle_length.is_plausible(52)    # False
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("flowindex.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"

_WEIGHT_SUM_TOLERANCE = 1e-6


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class DefaultsConfig:
    """Fallbacks used when the user has not configured anything."""

    cycle_length_days: int = 28
    period_length_days: int = 5


@dataclass
class SegmentationConfig:
    """Period boundary detection settings."""

    boundary_gap_days: int = 7


@dataclass
class CycleLengthConfig:
    """Physiologically plausible cycle length range (inclusive)."""

    min_days: int = 21
    max_days: int = 45

    def is_plausible(self, length: int) -> bool:
        return self.min_days <= length <= self.max_days


@dataclass
class SmartAverageConfig:
    """Weighted moving average settings.

    ``weights[0]`` applies to the most recent completed cycle.
    """

    weights: list[float] = field(default_factory=lambda: [0.5, 0.3, 0.2])

    @property
    def window(self) -> int:
        return len(self.weights)


@dataclass
class RegularityBand:
    """One step of the regularity score step function."""

    max_variation: int
    score: int


@dataclass
class RegularityConfig:
    """Regularity scoring settings."""

    min_history_cycles: int = 4
    window_cycles: int = 6
    bands: list[RegularityBand] = field(
        default_factory=lambda: [
            RegularityBand(2, 100),
            RegularityBand(4, 80),
            RegularityBand(7, 60),
            RegularityBand(10, 40),
        ]
    )
    floor_score: int = 20

    def score_for_variation(self, variation: int) -> int:
        for band in self.bands:
            if variation <= band.max_variation:
                return band.score
        return self.floor_score


@dataclass
class ProjectionConfig:
    """Calendar projection settings."""

    horizon_cycles: int = 12
    luteal_phase_days: int = 14
    days_before_ovulation: int = 5
    days_after_ovulation: int = 1


@dataclass
class PhaseConfig:
    """Current phase classification settings."""

    fertile_radius_days: int = 2


@dataclass
class CycleConfig:
    """Complete, validated cycle engine configuration.

    This is the single in-memory representation of cycle_config.yaml.
    The segmenter, estimator, scorer, projector and classifier all read
    from this object and never mutate it.
    """

    version: str = "1.0"
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    cycle_length: CycleLengthConfig = field(default_factory=CycleLengthConfig)
    smart_average: SmartAverageConfig = field(default_factory=SmartAverageConfig)
    regularity: RegularityConfig = field(default_factory=RegularityConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    phase: PhaseConfig = field(default_factory=PhaseConfig)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    try:
        import yaml  # pyyaml
    except ImportError as exc:
        raise ImportError(
            "pyyaml is required for config loading. Install with: pip install pyyaml"
        ) from exc

    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Missing sections fall back to the built-in defaults.  All problems are
    collected and reported together.

    Raises:
        ConfigValidationError: If any value is missing its type or out of range.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, name: str, minimum: int = 0) -> int:
        value = section.get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{name}.{key} must be an integer, got {value!r}")
            return default
        if number < minimum:
            errors.append(f"{name}.{key} = {number} must be >= {minimum}")
        return number

    def _section(key: str) -> dict:
        value = raw.get(key) or {}
        if not isinstance(value, dict):
            errors.append(f"'{key}' must be a mapping")
            return {}
        return value

    version = str(raw.get("version", "1.0"))

    # ── Defaults ──
    d_raw = _section("defaults")
    defaults = DefaultsConfig(
        cycle_length_days=_int(d_raw, "cycle_length_days", 28, "defaults", minimum=1),
        period_length_days=_int(d_raw, "period_length_days", 5, "defaults", minimum=1),
    )

    # ── Segmentation ──
    s_raw = _section("segmentation")
    segmentation = SegmentationConfig(
        boundary_gap_days=_int(s_raw, "boundary_gap_days", 7, "segmentation", minimum=1),
    )

    # ── Plausible lengths ──
    cl_raw = _section("cycle_length")
    cycle_length = CycleLengthConfig(
        min_days=_int(cl_raw, "min_days", 21, "cycle_length", minimum=1),
        max_days=_int(cl_raw, "max_days", 45, "cycle_length", minimum=1),
    )
    if cycle_length.min_days > cycle_length.max_days:
        errors.append(
            f"cycle_length.min_days ({cycle_length.min_days}) exceeds "
            f"max_days ({cycle_length.max_days})"
        )

    # ── Smart average ──
    sa_raw = _section("smart_average")
    weights_raw = sa_raw.get("weights", [0.5, 0.3, 0.2])
    weights: list[float] = []
    if not isinstance(weights_raw, list) or not weights_raw:
        errors.append("smart_average.weights must be a non-empty list")
    else:
        for i, w in enumerate(weights_raw):
            try:
                weight = float(w)
            except (TypeError, ValueError):
                errors.append(f"smart_average.weights[{i}] must be a number, got {w!r}")
                continue
            if weight <= 0.0:
                errors.append(f"smart_average.weights[{i}] = {weight} must be positive")
            weights.append(weight)
        total = sum(weights)
        if weights and abs(total - 1.0) > _WEIGHT_SUM_TOLERANCE:
            errors.append(f"smart_average.weights sum to {total:.4f}, expected 1.0")
    smart_average = SmartAverageConfig(weights=weights)

    # ── Regularity ──
    r_raw = _section("regularity")
    bands: list[RegularityBand] = []
    for i, band in enumerate(r_raw.get("bands") or []):
        if not isinstance(band, dict):
            errors.append(f"regularity.bands[{i}] must be a mapping")
            continue
        bands.append(
            RegularityBand(
                max_variation=_int(band, "max_variation", 0, f"regularity.bands[{i}]"),
                score=_int(band, "score", 0, f"regularity.bands[{i}]"),
            )
        )
    for prev, nxt in zip(bands, bands[1:]):
        if nxt.max_variation <= prev.max_variation:
            errors.append("regularity.bands must be in strictly ascending max_variation order")
            break
    regularity = RegularityConfig(
        min_history_cycles=_int(r_raw, "min_history_cycles", 4, "regularity"),
        window_cycles=_int(r_raw, "window_cycles", 6, "regularity", minimum=1),
        floor_score=_int(r_raw, "floor_score", 20, "regularity"),
    )
    if bands:
        regularity.bands = bands
    for band in regularity.bands:
        if not 0 <= band.score <= 100:
            errors.append(f"regularity band score {band.score} is out of range [0, 100]")
    if not 0 <= regularity.floor_score <= 100:
        errors.append(f"regularity.floor_score {regularity.floor_score} is out of range [0, 100]")

    # ── Projection ──
    p_raw = _section("projection")
    fw_raw = p_raw.get("fertile_window") or {}
    projection = ProjectionConfig(
        horizon_cycles=_int(p_raw, "horizon_cycles", 12, "projection", minimum=1),
        luteal_phase_days=_int(p_raw, "luteal_phase_days", 14, "projection", minimum=1),
        days_before_ovulation=_int(
            fw_raw, "days_before_ovulation", 5, "projection.fertile_window"
        ),
        days_after_ovulation=_int(
            fw_raw, "days_after_ovulation", 1, "projection.fertile_window"
        ),
    )

    # ── Phase ──
    ph_raw = _section("phase")
    phase = PhaseConfig(
        fertile_radius_days=_int(ph_raw, "fertile_radius_days", 2, "phase"),
    )

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    if segmentation.boundary_gap_days != 7:
        logger.warning(
            "Segmentation boundary gap is %d days (default 7); cycle counts will "
            "differ from other installations.",
            segmentation.boundary_gap_days,
        )

    return CycleConfig(
        version=version,
        defaults=defaults,
        segmentation=segmentation,
        cycle_length=cycle_length,
        smart_average=smart_average,
        regularity=regularity,
        projection=projection,
        phase=phase,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    try:
        new_config = load_cycle_config(path)  # validate before acquiring lock
    except (ConfigValidationError, FileNotFoundError):
        logger.warning("Cycle config reload failed; keeping the current config")
        raise
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
