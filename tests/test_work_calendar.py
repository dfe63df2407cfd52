from datetime import date, timedelta

import pytest

from core.exceptions import CalendarBoundsError, ValidationError
from core.services.work_calendar.engine import (
    WorkCalendarEngine,
    add_working_days,
    calculate_working_days_between,
    get_next_working_day,
    get_previous_working_day,
    is_non_working_day,
    offset_working_days,
    parse_iso_date,
    subtract_working_days,
)

XMAS = ["2024-12-25"]


def test_weekends_and_holidays_are_non_working():
    assert is_non_working_day(date(2024, 12, 28))  # Saturday
    assert is_non_working_day(date(2024, 12, 29))  # Sunday
    assert is_non_working_day(date(2024, 12, 25), XMAS)
    assert not is_non_working_day(date(2024, 12, 25))
    assert not is_non_working_day(date(2024, 12, 27), XMAS)


def test_previous_and_next_working_day_are_strict():
    # Friday -> Monday, Monday -> Friday
    assert get_next_working_day(date(2024, 12, 27)) == date(2024, 12, 30)
    assert get_previous_working_day(date(2024, 12, 30)) == date(2024, 12, 27)
    # a working day never returns itself
    assert get_next_working_day(date(2024, 12, 23)) == date(2024, 12, 24)
    assert get_next_working_day(date(2024, 12, 24), XMAS) == date(2024, 12, 26)


def test_subtract_working_days_skips_weekends_and_holidays():
    assert subtract_working_days(date(2024, 12, 27), 2, XMAS) == date(2024, 12, 24)
    assert subtract_working_days(date(2024, 12, 30), 1) == date(2024, 12, 27)
    assert subtract_working_days(date(2024, 12, 31), 14) == date(2024, 12, 11)


def test_subtract_zero_or_negative_returns_input():
    d = date(2024, 12, 28)
    assert subtract_working_days(d, 0) == d
    assert subtract_working_days(d, -3) == d


def test_add_working_days_counts_start_as_day_one():
    assert add_working_days(date(2024, 12, 24), 1, XMAS) == date(2024, 12, 24)
    assert add_working_days(date(2024, 12, 24), 3, XMAS) == date(2024, 12, 27)
    # non-working start moves forward first
    assert add_working_days(date(2024, 12, 28), 1) == date(2024, 12, 30)
    assert add_working_days(date(2024, 12, 28), 0) == date(2024, 12, 28)


def test_offset_working_days_maps_cpm_offsets():
    start = date(2024, 12, 11)
    assert offset_working_days(start, 0) == start
    assert offset_working_days(start, 4) == date(2024, 12, 17)
    assert offset_working_days(start, 12) == date(2024, 12, 27)
    assert offset_working_days(date(2024, 12, 28), 0) == date(2024, 12, 30)


def test_working_days_between_is_inclusive():
    assert calculate_working_days_between(date(2024, 12, 23), date(2024, 12, 27), XMAS) == 4
    assert calculate_working_days_between(date(2024, 12, 27), date(2024, 12, 27)) == 1
    assert calculate_working_days_between(date(2024, 12, 27), date(2024, 12, 23)) == 0


def test_unbounded_holiday_run_raises_calendar_bounds_error():
    start = date(2025, 1, 1)
    holidays = [start + timedelta(days=i) for i in range(1, 1200)]
    with pytest.raises(CalendarBoundsError):
        get_next_working_day(start, holidays)


def test_parse_iso_date_rejects_garbage():
    assert parse_iso_date("2024-12-31") == date(2024, 12, 31)
    assert parse_iso_date("2024-12-31T10:00:00Z") == date(2024, 12, 31)
    with pytest.raises(ValidationError) as exc:
        parse_iso_date("not-a-date")
    assert exc.value.code == "INVALID_DATE"


def test_engine_binds_holidays():
    cal = WorkCalendarEngine(XMAS)
    assert cal.holidays == frozenset({date(2024, 12, 25)})
    assert cal.next_working_day(date(2024, 12, 25)) == date(2024, 12, 26)
    assert cal.next_working_day(date(2024, 12, 24)) == date(2024, 12, 24)
    assert cal.next_working_day(date(2024, 12, 24), include_today=False) == date(2024, 12, 26)
    assert cal.previous_working_day(date(2024, 12, 26)) == date(2024, 12, 24)
    assert cal.working_days_between(date(2024, 12, 23), date(2024, 12, 27)) == 4
