"""
Calendar-specific unit helpers.

Every unit size comes from the calendar definition; nothing here assumes a
24-hour day, a 7-day week, or a 12-month year.
"""

from __future__ import annotations

from ..schemas.calendar import CalendarDefinition
from .types import CalendarDate


def get_seconds_per_hour(calendar: CalendarDefinition) -> int:
    return calendar.time.minutes_in_hour * calendar.time.seconds_in_minute


def get_seconds_per_day(calendar: CalendarDefinition) -> int:
    return calendar.time.hours_in_day * get_seconds_per_hour(calendar)


def get_days_per_week(calendar: CalendarDefinition) -> int:
    return len(calendar.weekdays)


def get_months_per_year(calendar: CalendarDefinition) -> int:
    return len(calendar.months)


def weeks_to_days(weeks: int, calendar: CalendarDefinition) -> int:
    return weeks * get_days_per_week(calendar)


def normalize_month(month: int, year: int, calendar: CalendarDefinition) -> tuple[int, int]:
    """Fold an out-of-range 1-based month into ``(month, year)``."""
    year_delta, month_index = divmod(month - 1, get_months_per_year(calendar))
    return month_index + 1, year + year_delta


def normalize_weekday(weekday: int, calendar: CalendarDefinition) -> int:
    return weekday % get_days_per_week(calendar)


def compare_dates(date_a: CalendarDate, date_b: CalendarDate) -> int:
    """Return -1, 0, or 1 comparing by date, then time when both carry it."""
    key_a = date_a.sort_key()
    key_b = date_b.sort_key()
    if date_a.time is None or date_b.time is None:
        key_a = key_a[:4]
        key_b = key_b[:4]
    return (key_a > key_b) - (key_a < key_b)


def is_same_day(date_a: CalendarDate, date_b: CalendarDate) -> bool:
    """Equality ignoring weekday and time of day."""
    return (date_a.year, date_a.month, date_a.day, date_a.intercalary) == (
        date_b.year,
        date_b.month,
        date_b.day,
        date_b.intercalary,
    )


def is_date_before(date_a: CalendarDate, date_b: CalendarDate) -> bool:
    return compare_dates(date_a, date_b) < 0


def is_date_after(date_a: CalendarDate, date_b: CalendarDate) -> bool:
    return compare_dates(date_a, date_b) > 0
