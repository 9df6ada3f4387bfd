"""
Per-year layout of a calendar and the leap cycle built from it.

A ``YearLayout`` lists the month lengths of one year (leap adjusted) and the
intercalary blocks that follow each month. Every length the calculus uses,
in either conversion direction, comes from here.

Leap rules depend only on ``year mod period`` (1 for ``none``, 400 for
``gregorian``, ``interval`` for ``custom``), so the start day of any year is
``(year // period) * cycle_days + prefix[year % period]``. ``YearCycle``
holds those prefix sums.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from itertools import accumulate

from ..schemas.calendar import CalendarDefinition, CalendarIntercalary

GREGORIAN_CYCLE_YEARS = 400


def is_leap_year(calendar: CalendarDefinition, year: int) -> bool:
    rule = calendar.leap_year.rule
    if rule == "gregorian":
        return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0
    if rule == "custom":
        interval = calendar.leap_year.interval
        return bool(interval) and year % interval == 0
    return False


def leap_cycle_years(calendar: CalendarDefinition) -> int:
    """Number of years after which the leap pattern repeats."""
    rule = calendar.leap_year.rule
    if rule == "gregorian":
        return GREGORIAN_CYCLE_YEARS
    if rule == "custom" and calendar.leap_year.interval:
        return calendar.leap_year.interval
    return 1


@dataclass(frozen=True, slots=True)
class YearLayout:
    """Month lengths and trailing intercalary blocks of a single year."""

    year: int
    leap: bool
    month_lengths: tuple[int, ...]
    intercalary_blocks: tuple[tuple[CalendarIntercalary, ...], ...]

    @property
    def length(self) -> int:
        """Total days, intercalary blocks included."""
        return sum(self.month_lengths) + sum(block.days for blocks in self.intercalary_blocks for block in blocks)

    @property
    def weekday_length(self) -> int:
        """Days that advance the weekday cycle."""
        return sum(self.month_lengths) + sum(
            block.days for blocks in self.intercalary_blocks for block in blocks if block.counts_for_weekdays
        )

    def month_span(self, month: int) -> int:
        """Days from the start of ``month`` to the start of the next month."""
        return self.month_lengths[month - 1] + sum(block.days for block in self.intercalary_blocks[month - 1])

    def weekday_month_span(self, month: int) -> int:
        return self.month_lengths[month - 1] + sum(
            block.days for block in self.intercalary_blocks[month - 1] if block.counts_for_weekdays
        )


def build_year_layout(calendar: CalendarDefinition, year: int) -> YearLayout:
    """Compute the layout of ``year``, applying the leap rule and leap-only blocks."""
    leap = is_leap_year(calendar, year)
    lengths = [month.days for month in calendar.months]
    if leap and calendar.leap_year.month is not None:
        leap_index = calendar.month_number(calendar.leap_year.month) - 1
        lengths[leap_index] += calendar.leap_year.extra_days

    blocks: list[list[CalendarIntercalary]] = [[] for _ in calendar.months]
    month_positions = {month.name: index for index, month in enumerate(calendar.months)}
    for entry in calendar.intercalary:
        if entry.leap_year_only and not leap:
            continue
        blocks[month_positions[entry.after]].append(entry)

    return YearLayout(
        year=year,
        leap=leap,
        month_lengths=tuple(lengths),
        intercalary_blocks=tuple(tuple(entries) for entries in blocks),
    )


class YearCycle:
    """Prefix sums of year lengths over one leap cycle."""

    def __init__(self, period: int, lengths: list[int]):
        if period != len(lengths):
            raise ValueError("one length per year of the cycle is required")
        self.period = period
        self.prefix = list(accumulate(lengths, initial=0))
        self.total = self.prefix[-1]

    def start_of(self, year: int) -> int:
        """Absolute day number of the first day of ``year``."""
        cycles, offset = divmod(year, self.period)
        return cycles * self.total + self.prefix[offset]

    def year_containing(self, absolute_day: int) -> int:
        """Year whose span holds the absolute day number."""
        cycles, remainder = divmod(absolute_day, self.total)
        offset = bisect_right(self.prefix, remainder) - 1
        return cycles * self.period + offset
