"""Calendar definition schemas."""

from .calendar import (
    CalendarDefinition,
    CalendarIntercalary,
    CalendarMonth,
    CalendarWeekday,
    LeapYearSettings,
    TimeSettings,
    WorldTimeSettings,
    YearSettings,
    load_calendar_directory,
)

__all__ = [
    "CalendarDefinition",
    "CalendarIntercalary",
    "CalendarMonth",
    "CalendarWeekday",
    "LeapYearSettings",
    "TimeSettings",
    "WorldTimeSettings",
    "YearSettings",
    "load_calendar_directory",
]
