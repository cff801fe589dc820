"""Tests for ISO calendar-date helpers."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.cycles.dates import (
    InvalidDateError,
    add_days,
    days_in_month,
    diff_days_between,
    first_weekday_of_month,
    format_date_iso,
    is_same_day,
    parse_iso_date,
    to_local_date,
)


class TestFormatDateISO:
    def test_formats_date(self) -> None:
        assert format_date_iso(date(2024, 3, 7)) == "2024-03-07"

    def test_naive_midnight_keeps_its_day(self) -> None:
        assert format_date_iso(datetime(2024, 3, 7, 0, 0)) == "2024-03-07"

    def test_naive_late_evening_keeps_its_day(self) -> None:
        assert format_date_iso(datetime(2024, 3, 7, 23, 59)) == "2024-03-07"

    def test_aware_datetime_uses_local_calendar_date(self) -> None:
        moment = datetime(2024, 3, 7, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert format_date_iso(moment) == moment.astimezone().date().isoformat()

    def test_to_local_date_passes_dates_through(self) -> None:
        d = date(2024, 1, 1)
        assert to_local_date(d) is d

    def test_to_local_date_uses_given_zone(self) -> None:
        # 02:30 UTC on the 8th is still the evening of the 7th in New York (UTC-5)
        moment = datetime(2024, 3, 8, 2, 30, tzinfo=timezone.utc)
        assert to_local_date(moment, timezone(timedelta(hours=-5))) == date(2024, 3, 7)
        assert to_local_date(moment, timezone(timedelta(hours=9))) == date(2024, 3, 8)


class TestParseISODate:
    def test_parses_valid_date(self) -> None:
        assert parse_iso_date("2024-02-29") == date(2024, 2, 29)

    def test_date_passes_through(self) -> None:
        assert parse_iso_date(date(2024, 1, 1)) == date(2024, 1, 1)

    @pytest.mark.parametrize(
        "value",
        ["2024-1-1", "01/02/2024", "2024-01-01T00:00:00", "20240101", "", "2023-02-29", "2024-13-01"],
    )
    def test_rejects_non_iso_strings(self, value: str) -> None:
        with pytest.raises(InvalidDateError):
            parse_iso_date(value)

    def test_rejects_datetime(self) -> None:
        with pytest.raises(InvalidDateError):
            parse_iso_date(datetime(2024, 1, 1, 12, 0))

    def test_rejects_timestamps(self) -> None:
        with pytest.raises(InvalidDateError):
            parse_iso_date(1704067200)  # type: ignore[arg-type]

    def test_invalid_date_error_is_value_error(self) -> None:
        assert issubclass(InvalidDateError, ValueError)


class TestDiffDays:
    def test_forward_difference(self) -> None:
        assert diff_days_between("2024-01-01", "2024-01-08") == 7

    def test_backward_difference_is_negative(self) -> None:
        assert diff_days_between("2024-01-08", "2024-01-01") == -7

    def test_across_dst_change_is_exact(self) -> None:
        # US DST starts 2024-03-10; a calendar-date diff must not lose an hour
        assert diff_days_between("2024-03-09", "2024-03-11") == 2

    def test_across_leap_day(self) -> None:
        assert diff_days_between(date(2024, 2, 28), date(2024, 3, 1)) == 2

    def test_add_days(self) -> None:
        assert add_days("2024-01-29", -14) == date(2024, 1, 15)
        assert add_days(date(2023, 12, 31), 1) == date(2024, 1, 1)


class TestCalendarHelpers:
    def test_days_in_month(self) -> None:
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2023, 2) == 28
        assert days_in_month(2024, 4) == 30

    def test_first_weekday_is_sunday_based(self) -> None:
        # 2024-09-01 was a Sunday, 2024-01-01 a Monday
        assert first_weekday_of_month(2024, 9) == 0
        assert first_weekday_of_month(2024, 1) == 1

    def test_is_same_day(self) -> None:
        assert is_same_day(datetime(2024, 1, 1, 8), date(2024, 1, 1))
        assert not is_same_day(date(2024, 1, 1), date(2024, 1, 2))
