"""
Shared fixtures for the world calendar test suite.

Calendar definitions here are small on purpose: each one isolates a piece of
geometry (leap months, intercalary blocks, real-time interpretation) so that
expected day indices can be worked out by hand.
"""

import os
from pathlib import Path
from typing import Any

import pytest

os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")

from worldcalendar.config.models import CalculusConfig  # noqa: E402
from worldcalendar.schemas.calendar import CalendarDefinition  # noqa: E402
from worldcalendar.time.calculus import CalendarCalculus  # noqa: E402

# pylint: disable=redefined-outer-name  # Reason: pytest fixtures are used as function parameters, which triggers this warning

BUNDLED_CALENDARS = Path(__file__).resolve().parents[1] / "data" / "calendars"


def _weekdays(*names: str) -> list[dict[str, str]]:
    return [{"name": name} for name in names]


def _two_month_payload() -> dict[str, Any]:
    """Two 30-day months, five weekdays, epoch year 1."""
    return {
        "id": "two-month",
        "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
        "months": [{"name": "Early", "days": 30}, {"name": "Late", "days": 30}],
        "weekdays": _weekdays("Oneday", "Twoday", "Threeday", "Fourday", "Fiveday"),
        "leapYear": {"rule": "none"},
        "year": {"epoch": 1, "currentYear": 1, "startDay": 0},
    }


def _festival_payload() -> dict[str, Any]:
    """
    Three 10-day months with festivals and a 4-year leap cycle.

    Leap years (divisible by 4) add a day to Thawmoon and the Leapnight block.
    Fair advances the weekday cycle; Vigil and Leapnight do not.
    """
    return {
        "id": "festival",
        "label": "Festival Reckoning",
        "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
        "months": [
            {"name": "Frostmoon", "abbreviation": "Fro", "days": 10},
            {"name": "Thawmoon", "abbreviation": "Tha", "days": 10},
            {"name": "Sunmoon", "abbreviation": "Sun", "days": 10},
        ],
        "weekdays": _weekdays("Ash", "Birch", "Cedar", "Daub"),
        "leapYear": {"rule": "custom", "interval": 4, "month": "Thawmoon", "extraDays": 1},
        "intercalary": [
            {"name": "Fair", "after": "Frostmoon", "days": 1, "countsForWeekdays": True},
            {"name": "Vigil", "after": "Frostmoon", "days": 2, "countsForWeekdays": False},
            {"name": "Leapnight", "after": "Sunmoon", "days": 1, "leapYearOnly": True, "countsForWeekdays": False},
        ],
        "year": {"epoch": 0, "currentYear": 1, "startDay": 0, "prefix": "Y", "suffix": " AF"},
    }


def _real_time_payload() -> dict[str, Any]:
    """Twelve 30-day months; world time zero is year 100."""
    return {
        "id": "real-time",
        "time": {"hoursInDay": 24, "minutesInHour": 60, "secondsInMinute": 60},
        "months": [{"name": f"Month{number}", "days": 30} for number in range(1, 13)],
        "weekdays": _weekdays("A", "B", "C", "D", "E", "F", "G"),
        "leapYear": {"rule": "none"},
        "year": {"epoch": 0, "currentYear": 100, "startDay": 0},
        "worldTime": {"interpretation": "real-time-based", "epochYear": 0, "currentYear": 100},
    }


@pytest.fixture
def calculus_config() -> CalculusConfig:
    return CalculusConfig(year_cache_size=64, precompute_window=2)


@pytest.fixture
def gregorian_definition() -> CalendarDefinition:
    return CalendarDefinition.load_file(BUNDLED_CALENDARS / "gregorian.json")


@pytest.fixture
def gregorian(gregorian_definition, calculus_config) -> CalendarCalculus:
    """Gregorian calendar with world time zero at 1970-01-01 (a Thursday)."""
    return CalendarCalculus(gregorian_definition, config=calculus_config)


@pytest.fixture
def two_month(calculus_config) -> CalendarCalculus:
    return CalendarCalculus(_two_month_payload(), config=calculus_config)


@pytest.fixture
def festival_definition() -> CalendarDefinition:
    return CalendarDefinition.model_validate(_festival_payload())


@pytest.fixture
def festival(festival_definition, calculus_config) -> CalendarCalculus:
    return CalendarCalculus(festival_definition, config=calculus_config)


@pytest.fixture
def real_time(calculus_config) -> CalendarCalculus:
    return CalendarCalculus(_real_time_payload(), config=calculus_config)


@pytest.fixture
def two_month_payload() -> dict[str, Any]:
    """A fresh, mutable copy of the two-month calendar definition."""
    return _two_month_payload()


@pytest.fixture
def festival_payload() -> dict[str, Any]:
    return _festival_payload()
