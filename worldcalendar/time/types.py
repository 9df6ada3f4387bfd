"""Value types produced and consumed by the calendar calculus."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class TimeOfDay:
    """Time of day in the calendar's own hour/minute/second units."""

    hour: int = 0
    minute: int = 0
    second: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"hour": self.hour, "minute": self.minute, "second": self.second}


@dataclass(frozen=True, slots=True)
class CalendarDate:
    """
    A structured date in some calendar.

    ``day`` is the 1-based day within ``month``, or the 1-based slot within the
    intercalary block named by ``intercalary`` (which follows ``month``).
    ``weekday`` is 0 for intercalary days. ``time`` is None for date-only values.
    """

    year: int
    month: int
    day: int
    weekday: int = 0
    intercalary: str | None = None
    time: TimeOfDay | None = None

    @property
    def is_intercalary(self) -> bool:
        return self.intercalary is not None

    def replace(self, **changes: Any) -> CalendarDate:
        return replace(self, **changes)

    def with_time(self, time: TimeOfDay | None) -> CalendarDate:
        return replace(self, time=time)

    def date_only(self) -> CalendarDate:
        return replace(self, time=None)

    def sort_key(self) -> tuple[int, int, int, int, int, int, int]:
        """
        Ordering key that needs no calendar.

        Normal days of a month sort before the intercalary days that follow it.
        Intercalary blocks after the same month are not distinguished by name.
        """
        time = self.time or TimeOfDay()
        return (
            self.year,
            self.month,
            1 if self.is_intercalary else 0,
            self.day,
            time.hour,
            time.minute,
            time.second,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "weekday": self.weekday,
        }
        if self.intercalary is not None:
            payload["intercalary"] = self.intercalary
        if self.time is not None:
            payload["time"] = self.time.to_dict()
        return payload

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalendarDate:
        time_data = data.get("time")
        return cls(
            year=int(data["year"]),
            month=int(data["month"]),
            day=int(data["day"]),
            weekday=int(data.get("weekday", 0)),
            intercalary=data.get("intercalary"),
            time=TimeOfDay(**time_data) if time_data else None,
        )

    def __str__(self) -> str:
        base = f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
        if self.intercalary:
            base = f"{base} ({self.intercalary})"
        if self.time is not None:
            base = f"{base} {self.time.hour:02d}:{self.time.minute:02d}:{self.time.second:02d}"
        return base
