"""Pydantic models for cycle tracking: daily logs, cycles, user settings,
and the request/response bodies of the cycle engine API."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator, ConfigDict, Field

from src.cycles.dates import parse_iso_date
from src.models.base import FlowBase


# ---------- Enums ----------

class FlowIntensity(str, Enum):
    light = "Light"
    medium = "Medium"
    heavy = "Heavy"
    spotting = "Spotting"


class Mood(str, Enum):
    happy = "Happy"
    sad = "Sad"
    anxious = "Anxious"
    irritable = "Irritable"
    energetic = "Energetic"
    tired = "Tired"
    calm = "Calm"
    mood_swings = "Mood Swings"


class PhysicalSymptom(str, Enum):
    cramps = "Cramps"
    headache = "Headache"
    bloating = "Bloating"
    acne = "Acne"
    backache = "Backache"
    tender_breasts = "Tender Breasts"
    nausea = "Nausea"
    insomnia = "Insomnia"
    cravings = "Cravings"


class DischargeType(str, Enum):
    dry = "Dry"
    sticky = "Sticky"
    creamy = "Creamy"
    egg_white = "Egg White"
    watery = "Watery"


class SexActivity(str, Enum):
    protected = "Protected"
    unprotected = "Unprotected"
    high_drive = "High Drive"
    low_drive = "Low Drive"
    masturbation = "Masturbation"
    none = "No Sexual Intercourse"


class Theme(str, Enum):
    light = "light"
    dark = "dark"


def _strict_date(value: Any) -> Any:
    # Reject timestamps and datetime strings pydantic would otherwise coerce
    if value is None:
        return value
    return parse_iso_date(value)


IsoDate = Annotated[date, BeforeValidator(_strict_date)]


# ---------- Daily Logs ----------

class DailyLog(FlowBase):
    """One log per calendar date.  The engine only ever reads these."""

    model_config = ConfigDict(frozen=True)

    date: IsoDate
    flow: FlowIntensity | None = None
    moods: list[Mood] = Field(default_factory=list)
    symptoms: list[PhysicalSymptom] = Field(default_factory=list)
    discharge: DischargeType | None = None
    sex: list[SexActivity] = Field(default_factory=list)
    notes: str | None = None
    water: float | None = Field(default=None, ge=0)        # cups
    sleep: float | None = Field(default=None, ge=0, le=24)  # hours
    weight: float | None = Field(default=None, gt=0)       # unit agnostic
    temperature: float | None = None                       # BBT

    @property
    def has_period_flow(self) -> bool:
        """True when the log counts as a period day (spotting never does)."""
        return self.flow is not None and self.flow is not FlowIntensity.spotting


# ---------- Cycles ----------

class Cycle(FlowBase):
    """A derived menstrual cycle, keyed by its first flow day.

    ``length`` is measured for completed cycles and a placeholder for the
    open (most recent) one.
    """

    model_config = ConfigDict(frozen=True)

    start_date: IsoDate
    end_date: IsoDate | None = None
    length: int = Field(ge=1)


# ---------- User Settings ----------

class UserSettings(FlowBase):
    avg_cycle_length: int = Field(default=28, ge=1, le=120)
    avg_period_length: int = Field(default=5, ge=1, le=30)
    name: str = "Beautiful"
    dob: IsoDate | None = None
    theme: Theme = Theme.light


# ---------- API bodies ----------

class SegmentRequest(FlowBase):
    logs: list[DailyLog] = Field(default_factory=list)
    default_length: int = Field(default=28, ge=1, le=120)


class AnalyzeRequest(FlowBase):
    logs: list[DailyLog] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    cycles: list[Cycle] | None = None  # newest first; segmented from logs when omitted
    today: IsoDate | None = None


class DayMarkerRead(FlowBase):
    is_projected_period: bool
    is_fertile: bool
    is_ovulation_day: bool


class CycleStatusRead(FlowBase):
    cycle_day: int | None
    phase: str
    phase_label: str
    days_until_next: int
    is_future: bool
    progress: float
    summary_text: str


class CycleAnalysisRead(FlowBase):
    cycles: list[Cycle]
    active_cycle: Cycle | None
    smart_length: int
    is_smart_prediction: bool
    regularity: int
    status: CycleStatusRead
    predictions: dict[str, DayMarkerRead]
