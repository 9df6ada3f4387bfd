from .generator import RecurrenceGenerator, generate_occurrences, nth_weekday_of_month
from .patterns import (
    PatternKind,
    RecurrenceFrequency,
    RecurrenceOccurrence,
    RecurringPattern,
    create_daily_pattern,
    create_monthly_day_pattern,
    create_monthly_weekday_pattern,
    create_simple_pattern,
    create_weekly_pattern,
    create_yearly_pattern,
    resolve_weekday,
)

__all__ = [
    "PatternKind",
    "RecurrenceFrequency",
    "RecurrenceGenerator",
    "RecurrenceOccurrence",
    "RecurringPattern",
    "create_daily_pattern",
    "create_monthly_day_pattern",
    "create_monthly_weekday_pattern",
    "create_simple_pattern",
    "create_weekly_pattern",
    "create_yearly_pattern",
    "generate_occurrences",
    "nth_weekday_of_month",
    "resolve_weekday",
]
