"""
World calendar engine.

Converts a linear world time to and from dates of user-defined calendars and
expands recurrence patterns over them.
"""

from .exceptions import (
    CalendarConfigurationError,
    ClockStateError,
    InvalidDateError,
    PatternValidationError,
    UnsupportedFrequencyError,
    WorldCalendarError,
)
from .recurrence import RecurrenceGenerator, RecurringPattern, generate_occurrences
from .schemas import CalendarDefinition, load_calendar_directory
from .time import CalendarCalculus, CalendarDate, TimeOfDay, WorldClock

__version__ = "0.1.0"

__all__ = [
    "CalendarCalculus",
    "CalendarConfigurationError",
    "CalendarDate",
    "CalendarDefinition",
    "ClockStateError",
    "InvalidDateError",
    "PatternValidationError",
    "RecurrenceGenerator",
    "RecurringPattern",
    "TimeOfDay",
    "UnsupportedFrequencyError",
    "WorldCalendarError",
    "WorldClock",
    "generate_occurrences",
    "load_calendar_directory",
]
