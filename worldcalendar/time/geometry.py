"""
Immutable calendar geometry: one definition plus its derived tables.

A ``CalendarGeometry`` is the snapshot a ``CalendarCalculus`` swaps when the
calendar changes. All conversion arithmetic lives here so a single call
never mixes two calendar versions.
"""

from __future__ import annotations

import math

from ..caching.lru_cache import LRUCache
from ..exceptions import ErrorContext, InvalidDateError
from ..schemas.calendar import CalendarDefinition, CalendarIntercalary
from ..structured_logging.enhanced_logging_config import get_logger
from . import time_utils
from .types import CalendarDate, TimeOfDay
from .year_layout import YearCycle, YearLayout, build_year_layout, is_leap_year, leap_cycle_years

logger = get_logger(__name__)


class CalendarGeometry:
    """Day-index arithmetic over a single calendar definition."""

    def __init__(self, calendar: CalendarDefinition, *, cache_size: int = 512, precompute_window: int = 10):
        self.calendar = calendar
        self.seconds_per_day = time_utils.get_seconds_per_day(calendar)
        self.seconds_per_hour = time_utils.get_seconds_per_hour(calendar)
        self.days_per_week = time_utils.get_days_per_week(calendar)
        self.months_per_year = time_utils.get_months_per_year(calendar)
        self._layouts: LRUCache[int, YearLayout] = LRUCache(max_size=cache_size)

        period = leap_cycle_years(calendar)
        cycle_layouts = [build_year_layout(calendar, year) for year in range(period)]
        self._day_cycle = YearCycle(period, [layout.length for layout in cycle_layouts])
        self._weekday_cycle = YearCycle(period, [layout.weekday_length for layout in cycle_layouts])
        self._epoch_start = self._day_cycle.start_of(calendar.year.epoch)
        self._epoch_weekday_start = self._weekday_cycle.start_of(calendar.year.epoch)
        self.epoch_offset_seconds = self._compute_epoch_offset()

        current = calendar.year.current_year
        for year in range(current - precompute_window, current + precompute_window + 1):
            self.layout(year)

    # Year and month lengths

    def layout(self, year: int) -> YearLayout:
        return self._layouts.get_or_set(year, lambda: build_year_layout(self.calendar, year))

    def is_leap_year(self, year: int) -> bool:
        return is_leap_year(self.calendar, year)

    def get_year_length(self, year: int) -> int:
        return self.layout(year).length

    def get_month_length(self, month: int, year: int) -> int:
        if not 1 <= month <= self.months_per_year:
            return 0
        return self.layout(year).month_lengths[month - 1]

    def get_intercalary_days_after_month(self, year: int, month: int) -> list[CalendarIntercalary]:
        if not 1 <= month <= self.months_per_year:
            return []
        return list(self.layout(year).intercalary_blocks[month - 1])

    def cache_stats(self) -> dict[str, object]:
        return self._layouts.get_stats()

    # Interpretation modes

    def _compute_epoch_offset(self) -> int:
        """
        Seconds between world time zero and the start of the epoch year.

        Only non-zero for real-time-based calendars, where it is the summed
        length of every year from ``epoch_year`` up to ``current_year``
        (negative when current_year precedes epoch_year).
        """
        world_time = self.calendar.world_time
        if world_time is None or world_time.interpretation != "real-time-based":
            return 0
        days = self._day_cycle.start_of(world_time.current_year) - self._day_cycle.start_of(world_time.epoch_year)
        return days * self.seconds_per_day

    # Day index conversion

    def days_to_date(self, total_days: int) -> CalendarDate:
        """Convert a signed count of days since the epoch into a date without time."""
        absolute_day = self._epoch_start + total_days
        year = self._day_cycle.year_containing(absolute_day)
        remaining = absolute_day - self._day_cycle.start_of(year)
        layout = self.layout(year)

        for month, month_length in enumerate(layout.month_lengths, start=1):
            if remaining < month_length:
                day = remaining + 1
                return CalendarDate(year, month, day, self.calculate_weekday(year, month, day))
            remaining -= month_length

            for block in layout.intercalary_blocks[month - 1]:
                if remaining < block.days:
                    return CalendarDate(year, month, remaining + 1, 0, intercalary=block.name)
                remaining -= block.days

        raise InvalidDateError(
            "Day index fell outside its year layout",
            ErrorContext(calendar_id=self.calendar.id, operation="days_to_date"),
            details={"total_days": total_days, "year": year},
        )

    def date_to_days(self, date: CalendarDate) -> int:
        """Convert a date into a signed count of days since the epoch."""
        layout = self.layout(date.year)
        total = self._day_cycle.start_of(date.year) - self._epoch_start
        for month in range(1, date.month):
            total += layout.month_span(month)

        if date.intercalary is None:
            return total + date.day - 1

        total += layout.month_lengths[date.month - 1]
        for block in layout.intercalary_blocks[date.month - 1]:
            if block.name == date.intercalary:
                return total + date.day - 1
            total += block.days

        raise InvalidDateError(
            f"No intercalary block '{date.intercalary}' follows month {date.month} in year {date.year}",
            ErrorContext(calendar_id=self.calendar.id, operation="date_to_days"),
            date=date,
        )

    def calculate_weekday(self, year: int, month: int, day: int) -> int:
        """Weekday index, counting only weekday-contributing days since the epoch."""
        layout = self.layout(year)
        contributing = self._weekday_cycle.start_of(year) - self._epoch_weekday_start
        for prior in range(1, month):
            contributing += layout.weekday_month_span(prior)
        contributing += day - 1
        return time_utils.normalize_weekday(contributing + self.calendar.year.start_day, self.calendar)

    # World time

    def world_time_to_date(self, world_time: float) -> CalendarDate:
        total_seconds = math.floor(world_time + self.epoch_offset_seconds)
        total_days, seconds_in_day = divmod(total_seconds, self.seconds_per_day)

        hour, seconds_in_hour = divmod(seconds_in_day, self.seconds_per_hour)
        minute, second = divmod(seconds_in_hour, self.calendar.time.seconds_in_minute)

        return self.days_to_date(total_days).with_time(TimeOfDay(hour, minute, second))

    def date_to_world_time(self, date: CalendarDate) -> int:
        total_seconds = self.date_to_days(date) * self.seconds_per_day
        if date.time is not None:
            total_seconds += date.time.hour * self.seconds_per_hour
            total_seconds += date.time.minute * self.calendar.time.seconds_in_minute
            total_seconds += date.time.second
        return total_seconds - self.epoch_offset_seconds

    # Arithmetic

    def add_days(self, date: CalendarDate, days: int) -> CalendarDate:
        return self.days_to_date(self.date_to_days(date) + days).with_time(date.time)

    def add_months(self, date: CalendarDate, months: int) -> CalendarDate:
        target_month, target_year = time_utils.normalize_month(date.month + months, date.year, self.calendar)
        target_day = min(date.day, self.get_month_length(target_month, target_year))
        return CalendarDate(
            target_year,
            target_month,
            target_day,
            self.calculate_weekday(target_year, target_month, target_day),
            time=date.time,
        )

    def add_years(self, date: CalendarDate, years: int) -> CalendarDate:
        target_year = date.year + years
        target_day = min(date.day, self.get_month_length(date.month, target_year))
        return CalendarDate(
            target_year,
            date.month,
            target_day,
            self.calculate_weekday(target_year, date.month, target_day),
            time=date.time,
        )

    def add_hours(self, date: CalendarDate, hours: int) -> CalendarDate:
        current = date.time or TimeOfDay()
        extra_days, new_hour = divmod(current.hour + hours, self.calendar.time.hours_in_day)
        result = date.with_time(TimeOfDay(new_hour, current.minute, current.second))
        if extra_days:
            result = self.add_days(result, extra_days)
        return result

    def add_minutes(self, date: CalendarDate, minutes: int) -> CalendarDate:
        current = date.time or TimeOfDay()
        extra_hours, new_minute = divmod(current.minute + minutes, self.calendar.time.minutes_in_hour)
        result = date.with_time(TimeOfDay(current.hour, new_minute, current.second))
        if extra_hours:
            result = self.add_hours(result, extra_hours)
        return result

    def is_valid_date(self, date: CalendarDate) -> bool:
        if not 1 <= date.month <= self.months_per_year or date.day < 1:
            return False
        if date.intercalary is None:
            return date.day <= self.get_month_length(date.month, date.year)
        blocks = self.layout(date.year).intercalary_blocks[date.month - 1]
        return any(block.name == date.intercalary and date.day <= block.days for block in blocks)
