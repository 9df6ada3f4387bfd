"""
Recurrence occurrence generation.

The generator walks forward from a start date, one pattern step at a time,
using the geometry of the calendar it is handed. A single generation call
reads one calendar snapshot, so a concurrent ``update_calendar`` never splits
a result across two calendar versions.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from ..config import get_config
from ..structured_logging.enhanced_logging_config import get_logger
from ..time.time_utils import is_same_day, normalize_weekday
from ..time.types import CalendarDate
from .patterns import PatternKind, RecurrenceOccurrence, RecurringPattern

if TYPE_CHECKING:  # pragma: no cover - only used for type hints
    from ..time.calculus import CalendarCalculus
    from ..time.geometry import CalendarGeometry

logger = get_logger(__name__)


def nth_weekday_of_month(
    geometry: CalendarGeometry,
    year: int,
    month: int,
    week: int,
    weekday: int,
) -> CalendarDate | None:
    """
    Return the ``week``-th ``weekday`` of a month, or None when the month is too short.

    Weekdays inside a month are strictly periodic (intercalary blocks only
    sit between months), so the first match plus whole weeks is exact.
    """
    month_length = geometry.get_month_length(month, year)
    for day in range(1, min(geometry.days_per_week, month_length) + 1):
        if geometry.calculate_weekday(year, month, day) == weekday:
            target = day + (week - 1) * geometry.days_per_week
            if target > month_length:
                return None
            return CalendarDate(year, month, target, weekday)
    return None


class RecurrenceGenerator:
    """Expands a ``RecurringPattern`` into concrete occurrence dates."""

    def __init__(self, *, max_iterations: int | None = None) -> None:
        if max_iterations is None:
            max_iterations = get_config().recurrence.max_iterations
        self.max_iterations = max_iterations

    def generate_occurrences(
        self,
        start_date: CalendarDate,
        pattern: RecurringPattern,
        range_start: CalendarDate,
        range_end: CalendarDate,
        calculus: CalendarCalculus,
    ) -> list[RecurrenceOccurrence]:
        """
        Generate the occurrences of ``pattern`` that fall inside ``[range_start, range_end]``.

        A start date that does not itself match the pattern is first moved to
        the earliest matching date on or after it. Every later step advances
        the occurrence index, whether or not the date lands inside the range.
        Exception dates are returned flagged rather than dropped.

        Raises:
            UnsupportedFrequencyError: If the pattern frequency is unknown
        """
        kind = pattern.kind
        geometry = calculus.geometry

        range_start_days = geometry.date_to_days(range_start)
        range_end_days = geometry.date_to_days(range_end)
        end_days = geometry.date_to_days(pattern.end_date) if pattern.end_date is not None else None

        occurrences: list[RecurrenceOccurrence] = []
        current: CalendarDate | None = self._align(start_date, pattern, kind, geometry)
        index = 0
        iterations = 0

        while current is not None:
            if iterations >= self.max_iterations:
                logger.debug(
                    "Recurrence generation truncated at iteration cap",
                    calendar_id=geometry.calendar.id,
                    frequency=str(pattern.frequency),
                    max_iterations=self.max_iterations,
                    emitted=len(occurrences),
                )
                break
            iterations += 1

            current_days = geometry.date_to_days(current)
            if end_days is not None and current_days > end_days:
                break
            if pattern.max_occurrences is not None and index >= pattern.max_occurrences:
                break
            if current_days > range_end_days:
                break

            if current_days >= range_start_days:
                is_exception = any(is_same_day(current, exception) for exception in pattern.exceptions)
                occurrences.append(RecurrenceOccurrence(date=current, is_exception=is_exception, index=index))

            current = self._step(current, pattern, kind, geometry)
            index += 1

        return occurrences

    # Stepping

    def _step(
        self,
        current: CalendarDate,
        pattern: RecurringPattern,
        kind: PatternKind,
        geometry: CalendarGeometry,
    ) -> CalendarDate | None:
        match kind:
            case PatternKind.DAILY:
                return geometry.add_days(current, pattern.interval)
            case PatternKind.WEEKLY:
                return geometry.add_days(current, pattern.interval * geometry.days_per_week)
            case PatternKind.WEEKLY_WEEKDAYS:
                return self._next_listed_weekday(current, pattern, geometry)
            case PatternKind.MONTHLY_DAY:
                return self._next_month_day(current, pattern, geometry)
            case PatternKind.MONTHLY_WEEKDAY:
                return self._next_nth_weekday(current, pattern, geometry)
            case PatternKind.MONTHLY_SAME_DAY:
                return geometry.add_months(current, pattern.interval)
            case PatternKind.YEARLY:
                return self._next_yearly(current, pattern, geometry)

    def _next_listed_weekday(
        self, current: CalendarDate, pattern: RecurringPattern, geometry: CalendarGeometry
    ) -> CalendarDate:
        days_per_week = geometry.days_per_week
        weekdays = sorted(normalize_weekday(weekday, geometry.calendar) for weekday in pattern.weekdays)

        if current.is_intercalary:
            # Intercalary days carry no weekday; resume from the next counted day.
            current = self._first_regular_day(current, geometry)
            if current.weekday in weekdays:
                return current
        current_weekday = current.weekday

        later = [weekday for weekday in weekdays if weekday > current_weekday]
        if later:
            target = later[0]
            delta = target - current_weekday
        else:
            target = weekdays[0]
            delta = days_per_week - current_weekday + target + (pattern.interval - 1) * days_per_week

        return self._land_on_weekday(geometry.add_days(current, delta), target, geometry)

    def _first_regular_day(self, date: CalendarDate, geometry: CalendarGeometry) -> CalendarDate:
        limit = sum(block.days for block in geometry.calendar.intercalary) + 1
        for _ in range(limit):
            date = geometry.add_days(date, 1)
            if not date.is_intercalary:
                break
        return date

    def _land_on_weekday(self, candidate: CalendarDate, weekday: int, geometry: CalendarGeometry) -> CalendarDate:
        """Walk past days excluded from the weekday count until ``weekday`` comes up."""
        limit = geometry.days_per_week + sum(block.days for block in geometry.calendar.intercalary)
        for _ in range(limit):
            if not candidate.is_intercalary and candidate.weekday == weekday:
                return candidate
            candidate = geometry.add_days(candidate, 1)
        return candidate

    def _next_month_day(
        self, current: CalendarDate, pattern: RecurringPattern, geometry: CalendarGeometry
    ) -> CalendarDate:
        month_day = pattern.month_day or current.day

        if not current.is_intercalary:
            day = min(month_day, geometry.get_month_length(current.month, current.year))
            if current.day < day:
                return CalendarDate(
                    current.year,
                    current.month,
                    day,
                    geometry.calculate_weekday(current.year, current.month, day),
                    time=current.time,
                )

        moved = geometry.add_months(current, pattern.interval)
        day = min(month_day, geometry.get_month_length(moved.month, moved.year))
        return moved.replace(day=day, weekday=geometry.calculate_weekday(moved.year, moved.month, day))

    def _next_nth_weekday(
        self, current: CalendarDate, pattern: RecurringPattern, geometry: CalendarGeometry
    ) -> CalendarDate | None:
        week = pattern.month_week or 1
        weekday = pattern.month_weekday or 0

        candidate = nth_weekday_of_month(geometry, current.year, current.month, week, weekday)
        if candidate is not None and geometry.date_to_days(candidate) > geometry.date_to_days(current):
            return candidate.with_time(current.time)

        month_start = current
        for _ in range(self.max_iterations):
            month_start = geometry.add_months(month_start.replace(day=1, intercalary=None), pattern.interval)
            candidate = nth_weekday_of_month(geometry, month_start.year, month_start.month, week, weekday)
            if candidate is not None:
                return candidate.with_time(current.time)
        return None

    def _next_yearly(
        self, current: CalendarDate, pattern: RecurringPattern, geometry: CalendarGeometry
    ) -> CalendarDate:
        target_month = min(pattern.year_month or current.month, geometry.months_per_year)
        target_day = pattern.year_day or current.day

        position = (current.month, 1 if current.is_intercalary else 0, current.day)
        day = min(target_day, geometry.get_month_length(target_month, current.year))
        if position < (target_month, 0, day):
            return CalendarDate(
                current.year,
                target_month,
                day,
                geometry.calculate_weekday(current.year, target_month, day),
                time=current.time,
            )

        year = current.year + pattern.interval
        day = min(target_day, geometry.get_month_length(target_month, year))
        return CalendarDate(year, target_month, day, geometry.calculate_weekday(year, target_month, day), time=current.time)

    # Start alignment

    def _align(
        self,
        start_date: CalendarDate,
        pattern: RecurringPattern,
        kind: PatternKind,
        geometry: CalendarGeometry,
    ) -> CalendarDate | None:
        if self._matches(start_date, pattern, kind, geometry):
            return start_date
        return self._step(start_date, replace(pattern, interval=1), kind, geometry)

    def _matches(
        self,
        date: CalendarDate,
        pattern: RecurringPattern,
        kind: PatternKind,
        geometry: CalendarGeometry,
    ) -> bool:
        match kind:
            case PatternKind.WEEKLY_WEEKDAYS:
                weekdays = {normalize_weekday(weekday, geometry.calendar) for weekday in pattern.weekdays}
                return not date.is_intercalary and date.weekday in weekdays
            case PatternKind.MONTHLY_DAY:
                if date.is_intercalary or pattern.month_day is None:
                    return False
                return date.day == min(pattern.month_day, geometry.get_month_length(date.month, date.year))
            case PatternKind.MONTHLY_WEEKDAY:
                if date.is_intercalary:
                    return False
                nth = nth_weekday_of_month(
                    geometry, date.year, date.month, pattern.month_week or 1, pattern.month_weekday or 0
                )
                return nth is not None and nth.day == date.day
            case PatternKind.YEARLY:
                if date.is_intercalary:
                    return False
                target_month = min(pattern.year_month or date.month, geometry.months_per_year)
                target_day = min(pattern.year_day or date.day, geometry.get_month_length(target_month, date.year))
                return date.month == target_month and date.day == target_day
            case _:
                return True


def generate_occurrences(
    start_date: CalendarDate,
    pattern: RecurringPattern,
    range_start: CalendarDate,
    range_end: CalendarDate,
    calculus: CalendarCalculus,
) -> list[RecurrenceOccurrence]:
    """Generate occurrences with the configured iteration cap."""
    return RecurrenceGenerator().generate_occurrences(start_date, pattern, range_start, range_end, calculus)
