"""Human-readable rendering of calendar dates."""

from __future__ import annotations

from typing import Literal

from ..schemas.calendar import CalendarDefinition
from .types import CalendarDate, TimeOfDay

DateStyle = Literal["short", "long", "numeric"]


def add_ordinal_suffix(number: int) -> str:
    """Return ``number`` with its English ordinal suffix (1st, 2nd, 11th, 23rd)."""
    if 11 <= number % 100 <= 13:
        return f"{number}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def format_time(time: TimeOfDay) -> str:
    return f"{time.hour:02d}:{time.minute:02d}:{time.second:02d}"


def format_year(year: int, calendar: CalendarDefinition) -> str:
    return f"{calendar.year.prefix}{year}{calendar.year.suffix}".strip()


def _weekday_name(date: CalendarDate, calendar: CalendarDefinition, style: DateStyle) -> str:
    if not 0 <= date.weekday < len(calendar.weekdays):
        return "Unknown"
    weekday = calendar.weekdays[date.weekday]
    if style == "short" and weekday.abbreviation:
        return weekday.abbreviation
    return weekday.name


def _month_name(date: CalendarDate, calendar: CalendarDefinition, style: DateStyle) -> str:
    if not 1 <= date.month <= len(calendar.months):
        return "Unknown"
    month = calendar.months[date.month - 1]
    if style == "short" and month.abbreviation:
        return month.abbreviation
    return month.name


def format_date(
    date: CalendarDate,
    calendar: CalendarDefinition,
    *,
    include_time: bool = False,
    include_weekday: bool = True,
    include_year: bool = True,
    style: DateStyle = "long",
) -> str:
    """
    Render a date using the calendar's own month, weekday, and year labels.

    Intercalary days are shown by name (with the slot number for multi-day
    blocks) and never carry a weekday.
    """
    parts: list[str] = []

    if include_weekday and not date.is_intercalary:
        parts.append(_weekday_name(date, calendar, style))

    if date.is_intercalary:
        block_days = next(
            (entry.days for entry in calendar.intercalary if entry.name == date.intercalary),
            1,
        )
        parts.append(f"{date.intercalary} {date.day}" if block_days > 1 else str(date.intercalary))
    elif style == "numeric":
        parts.append(f"{date.month}/{date.day}")
    else:
        day = add_ordinal_suffix(date.day) if style == "long" else str(date.day)
        parts.append(f"{day} {_month_name(date, calendar, style)}")

    if include_year:
        parts.append(format_year(date.year, calendar))

    if include_time and date.time is not None:
        parts.append(format_time(date.time))

    return ", ".join(parts)
