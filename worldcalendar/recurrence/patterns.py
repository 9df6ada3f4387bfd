"""
Recurrence pattern values and their builders.

A ``RecurringPattern`` is immutable and calendar-agnostic: weekdays are
indices into whatever weekday cycle the calendar defines. The builders
validate their inputs; the dataclass itself does not, so a malformed pattern
can still reach the generator, which bounds its work with an iteration cap.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..exceptions import PatternValidationError, UnsupportedFrequencyError
from ..schemas.calendar import CalendarDefinition
from ..time.types import CalendarDate


class RecurrenceFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PatternKind(StrEnum):
    """The stepping rule a pattern resolves to."""

    DAILY = "daily"
    WEEKLY = "weekly"
    WEEKLY_WEEKDAYS = "weekly_weekdays"
    MONTHLY_DAY = "monthly_day"
    MONTHLY_WEEKDAY = "monthly_weekday"
    MONTHLY_SAME_DAY = "monthly_same_day"
    YEARLY = "yearly"


@dataclass(frozen=True)
class RecurringPattern:
    frequency: str
    interval: int = 1
    end_date: CalendarDate | None = None
    max_occurrences: int | None = None
    weekdays: tuple[int, ...] = ()
    month_day: int | None = None
    month_week: int | None = None
    month_weekday: int | None = None
    year_month: int | None = None
    year_day: int | None = None
    exceptions: tuple[CalendarDate, ...] = field(default_factory=tuple)

    @property
    def kind(self) -> PatternKind:
        """
        Resolve the stepping rule.

        Raises:
            UnsupportedFrequencyError: If ``frequency`` is not a known value
        """
        match self.frequency:
            case RecurrenceFrequency.DAILY:
                return PatternKind.DAILY
            case RecurrenceFrequency.WEEKLY:
                return PatternKind.WEEKLY_WEEKDAYS if self.weekdays else PatternKind.WEEKLY
            case RecurrenceFrequency.MONTHLY:
                if self.month_day:
                    return PatternKind.MONTHLY_DAY
                if self.month_week and self.month_weekday is not None:
                    return PatternKind.MONTHLY_WEEKDAY
                return PatternKind.MONTHLY_SAME_DAY
            case RecurrenceFrequency.YEARLY:
                return PatternKind.YEARLY
            case _:
                raise UnsupportedFrequencyError(self.frequency)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"frequency": str(self.frequency), "interval": self.interval}
        for name in ("max_occurrences", "month_day", "month_week", "month_weekday", "year_month", "year_day"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        if self.weekdays:
            payload["weekdays"] = list(self.weekdays)
        if self.end_date is not None:
            payload["end_date"] = self.end_date.to_dict()
        if self.exceptions:
            payload["exceptions"] = [exception.to_dict() for exception in self.exceptions]
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecurringPattern:
        end_date = data.get("end_date")
        return cls(
            frequency=data["frequency"],
            interval=int(data.get("interval", 1)),
            end_date=CalendarDate.from_dict(end_date) if end_date else None,
            max_occurrences=data.get("max_occurrences"),
            weekdays=tuple(data.get("weekdays", ())),
            month_day=data.get("month_day"),
            month_week=data.get("month_week"),
            month_weekday=data.get("month_weekday"),
            year_month=data.get("year_month"),
            year_day=data.get("year_day"),
            exceptions=tuple(CalendarDate.from_dict(item) for item in data.get("exceptions", ())),
        )


@dataclass(frozen=True)
class RecurrenceOccurrence:
    date: CalendarDate
    is_exception: bool
    index: int


def resolve_weekday(weekday: int | str, calendar: CalendarDefinition | None = None) -> int:
    """
    Map a weekday name or index to an index of the calendar's weekday cycle.

    Names need a calendar to resolve against; bare indices are checked
    against it when one is given.
    """
    if isinstance(weekday, str):
        if calendar is None:
            raise PatternValidationError(
                "Weekday names need a calendar to resolve against", field="weekday", value=weekday
            )
        try:
            return calendar.weekday_index(weekday)
        except KeyError:
            raise PatternValidationError(
                f"Unknown weekday '{weekday}' for calendar '{calendar.id}'", field="weekday", value=weekday
            ) from None

    if weekday < 0 or (calendar is not None and weekday >= len(calendar.weekdays)):
        raise PatternValidationError("Weekday index out of range", field="weekday", value=weekday)
    return weekday


def _validate_common(interval: int, options: dict[str, Any]) -> dict[str, Any]:
    if interval < 1:
        raise PatternValidationError("interval must be at least 1", field="interval", value=interval)

    max_occurrences = options.get("max_occurrences")
    if max_occurrences is not None and max_occurrences < 1:
        raise PatternValidationError(
            "max_occurrences must be at least 1", field="max_occurrences", value=max_occurrences
        )

    exceptions: Iterable[CalendarDate] = options.get("exceptions", ())
    return {**options, "exceptions": tuple(exceptions)}


def create_simple_pattern(frequency: RecurrenceFrequency | str, interval: int = 1, **options: Any) -> RecurringPattern:
    """Build a pattern for any frequency from keyword options."""
    if frequency not in set(RecurrenceFrequency):
        raise UnsupportedFrequencyError(frequency)
    return RecurringPattern(frequency=RecurrenceFrequency(frequency), interval=interval, **_validate_common(interval, options))


def create_daily_pattern(interval: int = 1, **options: Any) -> RecurringPattern:
    return create_simple_pattern(RecurrenceFrequency.DAILY, interval, **options)


def create_weekly_pattern(
    weekdays: Sequence[int | str] = (),
    interval: int = 1,
    *,
    calendar: CalendarDefinition | None = None,
    **options: Any,
) -> RecurringPattern:
    """Every ``interval`` weeks, optionally on the listed weekdays only."""
    resolved = tuple(sorted({resolve_weekday(weekday, calendar) for weekday in weekdays}))
    return RecurringPattern(
        frequency=RecurrenceFrequency.WEEKLY,
        interval=interval,
        weekdays=resolved,
        **_validate_common(interval, options),
    )


def create_monthly_day_pattern(day_of_month: int, interval: int = 1, **options: Any) -> RecurringPattern:
    """The same day of every ``interval`` months, clamped to short months."""
    if day_of_month < 1:
        raise PatternValidationError("day_of_month must be at least 1", field="month_day", value=day_of_month)
    return RecurringPattern(
        frequency=RecurrenceFrequency.MONTHLY,
        interval=interval,
        month_day=day_of_month,
        **_validate_common(interval, options),
    )


def create_monthly_weekday_pattern(
    week: int,
    weekday: int | str,
    interval: int = 1,
    *,
    calendar: CalendarDefinition | None = None,
    **options: Any,
) -> RecurringPattern:
    """The ``week``-th occurrence of ``weekday`` in every ``interval`` months."""
    if week < 1:
        raise PatternValidationError("week must be at least 1", field="month_week", value=week)
    return RecurringPattern(
        frequency=RecurrenceFrequency.MONTHLY,
        interval=interval,
        month_week=week,
        month_weekday=resolve_weekday(weekday, calendar),
        **_validate_common(interval, options),
    )


def create_yearly_pattern(month: int, day: int, interval: int = 1, **options: Any) -> RecurringPattern:
    """The given month and day every ``interval`` years, clamped in short (non-leap) months."""
    if month < 1:
        raise PatternValidationError("month must be at least 1", field="year_month", value=month)
    if day < 1:
        raise PatternValidationError("day must be at least 1", field="year_day", value=day)
    return RecurringPattern(
        frequency=RecurrenceFrequency.YEARLY,
        interval=interval,
        year_month=month,
        year_day=day,
        **_validate_common(interval, options),
    )
