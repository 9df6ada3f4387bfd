"""
Calendar calculus: conversion between world time and calendar dates.

``CalendarCalculus`` is the public surface. It holds one immutable
``CalendarGeometry`` snapshot and replaces it wholesale on
``update_calendar``; each public call reads the snapshot once, so concurrent
readers always see a single consistent calendar.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..config import get_config
from ..config.models import CalculusConfig
from ..exceptions import CalendarConfigurationError, ErrorContext
from ..schemas.calendar import CalendarDefinition, CalendarIntercalary
from ..structured_logging.enhanced_logging_config import get_logger
from .geometry import CalendarGeometry
from .time_utils import weeks_to_days
from .types import CalendarDate

logger = get_logger(__name__)


def _coerce_definition(calendar: CalendarDefinition | Mapping[str, Any]) -> CalendarDefinition:
    if isinstance(calendar, CalendarDefinition):
        return calendar
    try:
        return CalendarDefinition.model_validate(dict(calendar))
    except ValidationError as error:
        raise CalendarConfigurationError(
            "Calendar definition failed validation",
            ErrorContext(calendar_id=str(calendar.get("id")), operation="update_calendar"),
            details={"errors": error.errors(include_url=False)},
        ) from error


class CalendarCalculus:
    """Authoritative converter between world time and calendar dates."""

    def __init__(
        self,
        calendar: CalendarDefinition | Mapping[str, Any],
        *,
        config: CalculusConfig | None = None,
    ) -> None:
        self._config = config or get_config().calculus
        self._swap_lock = threading.Lock()
        self._geometry = self._build_geometry(_coerce_definition(calendar))
        logger.debug(
            "Calendar calculus initialized",
            calendar_id=self._geometry.calendar.id,
            year_cache_size=self._config.year_cache_size,
            epoch_offset_seconds=self._geometry.epoch_offset_seconds,
        )

    def _build_geometry(self, calendar: CalendarDefinition) -> CalendarGeometry:
        return CalendarGeometry(
            calendar,
            cache_size=self._config.year_cache_size,
            precompute_window=self._config.precompute_window,
        )

    @property
    def geometry(self) -> CalendarGeometry:
        """The current immutable snapshot."""
        return self._geometry

    @property
    def calendar_id(self) -> str:
        return self._geometry.calendar.id

    def update_calendar(self, calendar: CalendarDefinition | Mapping[str, Any]) -> None:
        """
        Replace the active calendar definition.

        The new geometry is fully built before it becomes visible; callers
        never observe a half-updated calendar.

        Raises:
            CalendarConfigurationError: If a raw mapping fails validation
        """
        definition = _coerce_definition(calendar)
        geometry = self._build_geometry(definition)
        with self._swap_lock:
            previous = self._geometry.calendar.id
            self._geometry = geometry
        logger.info("Calendar definition replaced", previous_calendar_id=previous, calendar_id=definition.id)

    def get_calendar(self) -> CalendarDefinition:
        """Return a deep copy of the active definition."""
        return self._geometry.calendar.model_copy(deep=True)

    def world_time_to_date(self, world_time: float) -> CalendarDate:
        return self._geometry.world_time_to_date(world_time)

    def date_to_world_time(self, date: CalendarDate) -> int:
        return self._geometry.date_to_world_time(date)

    def date_to_days(self, date: CalendarDate) -> int:
        return self._geometry.date_to_days(date)

    def days_to_date(self, total_days: int) -> CalendarDate:
        return self._geometry.days_to_date(total_days)

    def epoch_offset(self) -> int:
        """Seconds added to world time before an epoch-based conversion."""
        return self._geometry.epoch_offset_seconds

    def add_days(self, date: CalendarDate, days: int) -> CalendarDate:
        return self._geometry.add_days(date, days)

    def add_weeks(self, date: CalendarDate, weeks: int) -> CalendarDate:
        geometry = self._geometry
        return geometry.add_days(date, weeks_to_days(weeks, geometry.calendar))

    def add_months(self, date: CalendarDate, months: int) -> CalendarDate:
        return self._geometry.add_months(date, months)

    def add_years(self, date: CalendarDate, years: int) -> CalendarDate:
        return self._geometry.add_years(date, years)

    def add_hours(self, date: CalendarDate, hours: int) -> CalendarDate:
        return self._geometry.add_hours(date, hours)

    def add_minutes(self, date: CalendarDate, minutes: int) -> CalendarDate:
        return self._geometry.add_minutes(date, minutes)

    def calculate_weekday(self, year: int, month: int, day: int) -> int:
        return self._geometry.calculate_weekday(year, month, day)

    def get_year_length(self, year: int) -> int:
        return self._geometry.get_year_length(year)

    def get_month_length(self, month: int, year: int) -> int:
        return self._geometry.get_month_length(month, year)

    def get_intercalary_days_after_month(self, year: int, month: int) -> list[CalendarIntercalary]:
        return self._geometry.get_intercalary_days_after_month(year, month)

    def is_leap_year(self, year: int) -> bool:
        return self._geometry.is_leap_year(year)

    def is_valid_date(self, date: CalendarDate) -> bool:
        return self._geometry.is_valid_date(date)

    def get_days_per_week(self) -> int:
        return self._geometry.days_per_week

    def get_months_per_year(self) -> int:
        return self._geometry.months_per_year

    def get_seconds_per_day(self) -> int:
        return self._geometry.seconds_per_day
