"""
Calendar definition schemas.

These models provide a typed wrapper around designer-authored calendar JSON
files so the calculus can rely on months, weekdays, leap rules, and
intercalary blocks being internally consistent. Field aliases accept the
camelCase keys used by existing calendar files.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

LeapRule = Literal["none", "gregorian", "custom"]
Interpretation = Literal["epoch-based", "real-time-based"]

_FROZEN = ConfigDict(frozen=True, extra="ignore")


def _alias(name: str, camel: str) -> AliasChoices:
    return AliasChoices(name, camel)


class TimeSettings(BaseModel):
    """Length of a day in the calendar's own units."""

    model_config = _FROZEN

    hours_in_day: int = Field(default=24, ge=1, validation_alias=_alias("hours_in_day", "hoursInDay"))
    minutes_in_hour: int = Field(default=60, ge=1, validation_alias=_alias("minutes_in_hour", "minutesInHour"))
    seconds_in_minute: int = Field(default=60, ge=1, validation_alias=_alias("seconds_in_minute", "secondsInMinute"))


class CalendarMonth(BaseModel):
    """Single month of the normal month grid."""

    model_config = _FROZEN

    name: str = Field(min_length=1)
    abbreviation: str | None = None
    days: int = Field(ge=1, le=366)
    description: str | None = None


class CalendarWeekday(BaseModel):
    """Single entry of the weekday cycle."""

    model_config = _FROZEN

    name: str = Field(min_length=1)
    abbreviation: str | None = None
    description: str | None = None


class LeapYearSettings(BaseModel):
    """Leap-year rule and where the extra days land."""

    model_config = _FROZEN

    rule: LeapRule = "none"
    interval: int | None = Field(default=None, ge=1)
    month: str | None = None
    extra_days: int = Field(default=1, ge=1, validation_alias=_alias("extra_days", "extraDays"))

    @model_validator(mode="after")
    def validate_custom_interval(self) -> LeapYearSettings:
        """A custom rule only makes sense with an interval."""
        if self.rule == "custom" and self.interval is None:
            raise ValueError("custom leap year rule requires an interval of at least 1")
        return self


class CalendarIntercalary(BaseModel):
    """A block of days inserted after a month, outside the month grid."""

    model_config = _FROZEN

    name: str = Field(min_length=1)
    after: str = Field(min_length=1)
    days: int = Field(default=1, ge=1)
    leap_year_only: bool = Field(default=False, validation_alias=_alias("leap_year_only", "leapYearOnly"))
    counts_for_weekdays: bool = Field(
        default=True, validation_alias=_alias("counts_for_weekdays", "countsForWeekdays")
    )
    description: str | None = None


class YearSettings(BaseModel):
    """Epoch, display current year, and weekday alignment of the epoch."""

    model_config = _FROZEN

    epoch: int = 0
    current_year: int = Field(default=1, validation_alias=_alias("current_year", "currentYear"))
    start_day: int = Field(default=0, ge=0, validation_alias=_alias("start_day", "startDay"))
    prefix: str = ""
    suffix: str = ""


class WorldTimeSettings(BaseModel):
    """How world time zero relates to the calendar's years."""

    model_config = _FROZEN

    interpretation: Interpretation = "epoch-based"
    epoch_year: int = Field(default=0, validation_alias=_alias("epoch_year", "epochYear"))
    current_year: int = Field(default=0, validation_alias=_alias("current_year", "currentYear"))


class CalendarDefinition(BaseModel):
    """
    Complete, immutable description of a calendar system.

    Validation runs once at construction; the calculus treats an instance as
    already consistent and never re-checks it on the conversion path.
    """

    model_config = _FROZEN

    id: str = Field(min_length=1)
    label: str | None = None
    description: str | None = None
    time: TimeSettings = Field(default_factory=TimeSettings)
    months: list[CalendarMonth] = Field(min_length=1)
    weekdays: list[CalendarWeekday] = Field(min_length=1)
    leap_year: LeapYearSettings = Field(
        default_factory=LeapYearSettings, validation_alias=_alias("leap_year", "leapYear")
    )
    intercalary: list[CalendarIntercalary] = Field(default_factory=list)
    year: YearSettings = Field(default_factory=YearSettings)
    world_time: WorldTimeSettings | None = Field(default=None, validation_alias=_alias("world_time", "worldTime"))

    @model_validator(mode="before")
    @classmethod
    def label_from_translations(cls, data: Any) -> Any:
        """Pick up the English label from a translations block when no label is given."""
        if isinstance(data, dict) and not data.get("label"):
            translations = data.get("translations")
            if isinstance(translations, dict):
                english = translations.get("en")
                if isinstance(english, dict) and english.get("label"):
                    data = {**data, "label": english["label"]}
        return data

    @field_validator("months")
    @classmethod
    def validate_month_names(cls, value: Sequence[CalendarMonth]) -> list[CalendarMonth]:
        """Month names must be unique."""
        names = [month.name for month in value]
        if len(set(names)) != len(names):
            raise ValueError("Month names must be unique")
        return list(value)

    @field_validator("weekdays")
    @classmethod
    def validate_weekday_names(cls, value: Sequence[CalendarWeekday]) -> list[CalendarWeekday]:
        """Weekday names must be unique."""
        names = [weekday.name for weekday in value]
        if len(set(names)) != len(names):
            raise ValueError("Weekday names must be unique")
        return list(value)

    @model_validator(mode="after")
    def validate_cross_references(self) -> CalendarDefinition:
        """Resolve every month reference and the start weekday index."""
        month_names = {month.name for month in self.months}

        if self.year.start_day >= len(self.weekdays):
            raise ValueError(f"Year startDay must be between 0 and {len(self.weekdays) - 1}")

        if self.leap_year.month is not None and self.leap_year.month not in month_names:
            raise ValueError(f"Leap year month '{self.leap_year.month}' does not exist")

        missing = [entry.after for entry in self.intercalary if entry.after not in month_names]
        if missing:
            raise ValueError(f"Intercalary days reference unknown months: {', '.join(sorted(set(missing)))}")
        return self

    @property
    def display_name(self) -> str:
        return self.label or self.id

    @property
    def month_names(self) -> list[str]:
        return [month.name for month in self.months]

    @property
    def weekday_names(self) -> list[str]:
        return [weekday.name for weekday in self.weekdays]

    def month_number(self, name: str) -> int:
        """Return the 1-based position of the named month.

        Raises:
            KeyError: If no month has that name
        """
        for index, month in enumerate(self.months, start=1):
            if month.name == name:
                return index
        raise KeyError(name)

    def weekday_index(self, name: str) -> int:
        """Return the 0-based index of the named weekday (case-insensitive)."""
        lowered = name.strip().lower()
        for index, weekday in enumerate(self.weekdays):
            if weekday.name.lower() == lowered:
                return index
        raise KeyError(name)

    @classmethod
    def load_file(cls, path: Path | str) -> CalendarDefinition:
        """Load a calendar definition from a JSON file."""
        with Path(path).open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        definition = cls.model_validate(payload)
        logger.debug("Calendar definition loaded", calendar_id=definition.id, path=str(path))
        return definition


def load_calendar_directory(directory: Path | str) -> dict[str, CalendarDefinition]:
    """Load every calendar definition in a directory keyed by calendar id."""

    dir_path = Path(directory)
    if not dir_path.exists():
        raise FileNotFoundError(f"Calendar directory {dir_path} does not exist")

    calendars: dict[str, CalendarDefinition] = {}
    for json_file in sorted(dir_path.glob("*.json")):
        definition = CalendarDefinition.load_file(json_file)
        if definition.id in calendars:
            raise ValueError(f"Duplicate calendar id '{definition.id}' in {json_file}")
        calendars[definition.id] = definition
    return calendars
