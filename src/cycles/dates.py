"""Calendar-date helpers for the cycle engine.

Every engine component works on plain ``datetime.date`` values (a
year/month/day triple with no time or zone) and exchanges dates with the
outside world as ``YYYY-MM-DD`` strings.  Nothing in the engine ever parses
a timestamp, so a date can never drift across midnight between the device's
zone and UTC.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, tzinfo

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidDateError(ValueError):
    """Raised when a value is not a valid ``YYYY-MM-DD`` calendar date."""


def to_local_date(value: date | datetime, tz: tzinfo | None = None) -> date:
    """Return the user's calendar date for a date or datetime.

    Callers should pass the user's own local date.  Aware datetimes are
    converted to ``tz`` first, or to the host's zone when ``tz`` is None,
    which is only right when the host and the user share a zone.  Naive
    datetimes are taken as already local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def format_date_iso(value: date | datetime) -> str:
    """Format the *local* calendar date of ``value`` as ``YYYY-MM-DD``."""
    return to_local_date(value).isoformat()


def parse_iso_date(value: str | date) -> date:
    """Parse a strict ``YYYY-MM-DD`` string.

    ``date`` instances pass through unchanged.  Anything else (timestamps,
    datetime strings, ``01/02/2024``, impossible dates like ``2024-02-30``)
    raises instead of guessing.

    Raises:
        InvalidDateError: If the value is not a valid ISO calendar date.
    """
    if isinstance(value, datetime):
        raise InvalidDateError(f"Expected a calendar date, got datetime {value!r}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise InvalidDateError(f"Expected a YYYY-MM-DD date string, got {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid calendar date {value!r}: {exc}") from exc


def diff_days_between(d1: str | date, d2: str | date) -> int:
    """Whole days from ``d1`` to ``d2`` (``d2 - d1``); negative if ``d2`` is earlier."""
    return (parse_iso_date(d2) - parse_iso_date(d1)).days


def add_days(d: str | date, days: int) -> date:
    return parse_iso_date(d) + timedelta(days=days)


def days_in_month(year: int, month: int) -> int:
    """Number of days in ``month`` (1–12) of ``year``."""
    return calendar.monthrange(year, month)[1]


def first_weekday_of_month(year: int, month: int) -> int:
    """Weekday of the 1st of the month, 0 = Sunday … 6 = Saturday.

    Sunday-first to match the calendar grid the app renders.
    """
    return (date(year, month, 1).weekday() + 1) % 7


def is_same_day(a: date | datetime, b: date | datetime) -> bool:
    return to_local_date(a) == to_local_date(b)
