# core/services/work_calendar/engine.py
"""
Working-day arithmetic over a Mon-Fri week and a set of holidays.

All functions are pure: they never mutate their arguments and only depend on
the date, the offset and the holiday set they are given.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import FrozenSet, Iterable, Optional, Union

from core.exceptions import CalendarBoundsError, ValidationError

DateLike = Union[date, str]
HolidayInput = Optional[Iterable[DateLike]]

# Longest run of consecutive non-working days tolerated while searching for
# the previous/next working day.
MAX_STEP_ITERATIONS = 1000
WEEKEND_DAYS = frozenset({5, 6})

_ONE_DAY = timedelta(days=1)


def parse_iso_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r}", code="INVALID_DATE") from exc


def to_iso(value: date) -> str:
    return value.isoformat()


def normalize_holidays(holidays: HolidayInput) -> FrozenSet[date]:
    if not holidays:
        return frozenset()
    if isinstance(holidays, frozenset) and all(type(h) is date for h in holidays):
        return holidays
    return frozenset(parse_iso_date(h) for h in holidays)


def _step_cap(count: int) -> int:
    return MAX_STEP_ITERATIONS + 7 * max(count, 0)


def _is_off(d: date, holidays: FrozenSet[date]) -> bool:
    return d.weekday() in WEEKEND_DAYS or d in holidays


def is_non_working_day(d: date, holidays: HolidayInput = None) -> bool:
    return _is_off(d, normalize_holidays(holidays))


def get_previous_working_day(d: date, holidays: HolidayInput = None) -> date:
    """Closest working day strictly before ``d``."""
    hols = normalize_holidays(holidays)
    current = d
    for _ in range(MAX_STEP_ITERATIONS):
        current -= _ONE_DAY
        if not _is_off(current, hols):
            return current
    raise CalendarBoundsError(
        f"No working day found within {MAX_STEP_ITERATIONS} days before {d.isoformat()}."
    )


def get_next_working_day(d: date, holidays: HolidayInput = None) -> date:
    """Closest working day strictly after ``d``."""
    hols = normalize_holidays(holidays)
    current = d
    for _ in range(MAX_STEP_ITERATIONS):
        current += _ONE_DAY
        if not _is_off(current, hols):
            return current
    raise CalendarBoundsError(
        f"No working day found within {MAX_STEP_ITERATIONS} days after {d.isoformat()}."
    )


def subtract_working_days(d: date, working_days: int, holidays: HolidayInput = None) -> date:
    """
    Step back one calendar day at a time until ``working_days`` working days
    have been passed. Zero or negative counts return ``d`` unchanged.
    """
    if working_days <= 0:
        return d
    hols = normalize_holidays(holidays)
    current = d
    remaining = working_days
    for _ in range(_step_cap(working_days)):
        current -= _ONE_DAY
        if not _is_off(current, hols):
            remaining -= 1
            if remaining == 0:
                return current
    raise CalendarBoundsError(
        f"Could not subtract {working_days} working days from {d.isoformat()}."
    )


def add_working_days(d: date, working_days: int, holidays: HolidayInput = None) -> date:
    """
    The ``working_days``-th working day counting ``d`` itself as day one.

    A non-working ``d`` is first moved to the next working day, which then
    counts as day one. Zero or negative counts return ``d`` unchanged.
    """
    if working_days <= 0:
        return d
    hols = normalize_holidays(holidays)
    current = d if not _is_off(d, hols) else get_next_working_day(d, hols)
    remaining = working_days - 1
    for _ in range(_step_cap(working_days)):
        if remaining == 0:
            return current
        current += _ONE_DAY
        if not _is_off(current, hols):
            remaining -= 1
    raise CalendarBoundsError(
        f"Could not add {working_days} working days to {d.isoformat()}."
    )


def offset_working_days(start: date, offset: int, holidays: HolidayInput = None) -> date:
    """
    Map a 0-based CPM day offset onto the calendar: offset 0 is ``start``
    (moved forward to a working day), offset n is n working days later.
    """
    hols = normalize_holidays(holidays)
    current = start if not _is_off(start, hols) else get_next_working_day(start, hols)
    remaining = offset
    for _ in range(_step_cap(offset)):
        if remaining <= 0:
            return current
        current += _ONE_DAY
        if not _is_off(current, hols):
            remaining -= 1
    raise CalendarBoundsError(
        f"Could not offset {start.isoformat()} by {offset} working days."
    )


def calculate_working_days_between(start: date, end: date, holidays: HolidayInput = None) -> int:
    """Inclusive count of working days in [start, end]; 0 when end < start."""
    if end < start:
        return 0
    hols = normalize_holidays(holidays)
    current = start
    count = 0
    while current <= end:
        if not _is_off(current, hols):
            count += 1
        current += _ONE_DAY
    return count


class WorkCalendarEngine:
    """
    Binds a holiday set to the working-day functions above.
    Read-only: holidays are frozen at construction.
    """

    def __init__(self, holidays: HolidayInput = None):
        self._holidays: FrozenSet[date] = normalize_holidays(holidays)

    @property
    def holidays(self) -> FrozenSet[date]:
        return self._holidays

    def is_working_day(self, d: date) -> bool:
        return not _is_off(d, self._holidays)

    def is_non_working_day(self, d: date) -> bool:
        return _is_off(d, self._holidays)

    def next_working_day(self, d: date, include_today: bool = True) -> date:
        if include_today and self.is_working_day(d):
            return d
        return get_next_working_day(d, self._holidays)

    def previous_working_day(self, d: date, include_today: bool = False) -> date:
        if include_today and self.is_working_day(d):
            return d
        return get_previous_working_day(d, self._holidays)

    def add_working_days(self, start: date, working_days: int) -> date:
        return add_working_days(start, working_days, self._holidays)

    def subtract_working_days(self, end: date, working_days: int) -> date:
        return subtract_working_days(end, working_days, self._holidays)

    def offset_working_days(self, start: date, offset: int) -> date:
        return offset_working_days(start, offset, self._holidays)

    def working_days_between(self, start: date, end: date) -> int:
        return calculate_working_days_between(start, end, self._holidays)


__all__ = [
    "MAX_STEP_ITERATIONS",
    "WorkCalendarEngine",
    "add_working_days",
    "calculate_working_days_between",
    "get_next_working_day",
    "get_previous_working_day",
    "is_non_working_day",
    "normalize_holidays",
    "offset_working_days",
    "parse_iso_date",
    "subtract_working_days",
    "to_iso",
]
