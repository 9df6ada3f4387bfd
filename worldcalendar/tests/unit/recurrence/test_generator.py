"""
Unit tests for recurrence occurrence generation.

Gregorian expectations assume 2024-01-01 is a Monday (weekday index 1).
"""

import pytest

from worldcalendar.exceptions import UnsupportedFrequencyError
from worldcalendar.recurrence.generator import RecurrenceGenerator, generate_occurrences, nth_weekday_of_month
from worldcalendar.recurrence.patterns import (
    RecurringPattern,
    create_daily_pattern,
    create_monthly_day_pattern,
    create_monthly_weekday_pattern,
    create_simple_pattern,
    create_weekly_pattern,
    create_yearly_pattern,
)
from worldcalendar.time.types import CalendarDate

# pylint: disable=redefined-outer-name  # Reason: pytest fixtures are used as function parameters, which triggers this warning


def _ymd(occurrences):
    return [(o.date.year, o.date.month, o.date.day) for o in occurrences]


@pytest.fixture
def generator():
    return RecurrenceGenerator()


def test_daily_every_other_day(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), create_daily_pattern(2), CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 10), gregorian
    )

    assert _ymd(occurrences) == [(2024, 1, day) for day in (1, 3, 5, 7, 9)]
    assert [o.index for o in occurrences] == [0, 1, 2, 3, 4]


def test_index_counts_advances_not_emitted_items(generator, gregorian):
    """Occurrences before the range still advance the index."""
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), create_daily_pattern(), CalendarDate(2024, 1, 5), CalendarDate(2024, 1, 8), gregorian
    )

    assert _ymd(occurrences) == [(2024, 1, day) for day in (5, 6, 7, 8)]
    assert [o.index for o in occurrences] == [4, 5, 6, 7]


def test_weekly_without_weekdays_uses_calendar_week(generator, gregorian, two_month):
    gregorian_weeks = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1),
        create_simple_pattern("weekly"),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 1, 31),
        gregorian,
    )
    five_day_weeks = generator.generate_occurrences(
        CalendarDate(1, 1, 1, 0), create_simple_pattern("weekly"), CalendarDate(1, 1, 1), CalendarDate(1, 1, 30), two_month
    )

    assert [day for _, _, day in _ymd(gregorian_weeks)] == [1, 8, 15, 22, 29]
    assert [day for _, _, day in _ymd(five_day_weeks)] == [1, 6, 11, 16, 21, 26]


def test_weekly_listed_weekdays_with_interval(generator, gregorian):
    """Monday and Wednesday every second week."""
    pattern = create_weekly_pattern([1, 3], interval=2)
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 31), gregorian
    )

    assert [day for _, _, day in _ymd(occurrences)] == [1, 3, 15, 17, 29, 31]
    assert {o.date.weekday for o in occurrences} == {1, 3}


def test_weekly_start_aligns_to_first_listed_weekday(generator, gregorian):
    """A Tuesday start with a Friday-only pattern begins on that Friday."""
    pattern = create_weekly_pattern(["Friday"], calendar=gregorian.get_calendar())
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 2, 2), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 20), gregorian
    )

    assert [day for _, _, day in _ymd(occurrences)] == [5, 12, 19]
    assert [o.index for o in occurrences] == [0, 1, 2]


def test_weekly_weekdays_skip_days_outside_the_weekday_cycle(generator, festival):
    """Stepping past Fair and Vigil still lands on the listed weekday."""
    pattern = create_weekly_pattern([3])
    occurrences = generator.generate_occurrences(
        CalendarDate(1, 1, 8, 3), pattern, CalendarDate(1, 1, 1), CalendarDate(1, 2, 6), festival
    )

    assert _ymd(occurrences) == [(1, 1, 8), (1, 2, 1), (1, 2, 5)]
    assert all(o.date.weekday == 3 and not o.date.is_intercalary for o in occurrences)


def test_weekly_start_on_uncounted_festival_day(generator, festival):
    """Thawmoon 1 follows Vigil and is the first Daub, so it is the first occurrence."""
    occurrences = generator.generate_occurrences(
        CalendarDate(1, 1, 1, 0, intercalary="Vigil"),
        create_weekly_pattern([3]),
        CalendarDate(1, 1, 1),
        CalendarDate(1, 2, 6),
        festival,
    )

    assert _ymd(occurrences) == [(1, 2, 1), (1, 2, 5)]
    assert [o.index for o in occurrences] == [0, 1]


def test_monthly_day_of_month(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 15, 1),
        create_monthly_day_pattern(15),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 4, 30),
        gregorian,
    )

    assert _ymd(occurrences) == [(2024, month, 15) for month in (1, 2, 3, 4)]


def test_monthly_day_clamps_to_short_months(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 31, 3),
        create_monthly_day_pattern(31),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 4, 30),
        gregorian,
    )

    assert _ymd(occurrences) == [(2024, 1, 31), (2024, 2, 29), (2024, 3, 31), (2024, 4, 30)]
    assert occurrences[2].date.weekday == gregorian.calculate_weekday(2024, 3, 31)


def test_monthly_day_uses_same_month_when_day_not_passed(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 10, 3),
        create_monthly_day_pattern(15),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 2, 28),
        gregorian,
    )

    assert _ymd(occurrences) == [(2024, 1, 15), (2024, 2, 15)]


def test_monthly_day_start_after_target_moves_to_next_month(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 20, 6),
        create_monthly_day_pattern(15),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 3, 31),
        gregorian,
    )

    assert _ymd(occurrences) == [(2024, 2, 15), (2024, 3, 15)]


def test_monthly_day_start_before_clamped_day_aligns_in_same_month(generator, gregorian):
    pattern = create_monthly_day_pattern(31)
    range_start, range_end = CalendarDate(2023, 1, 1), CalendarDate(2023, 4, 30)

    from_first = generator.generate_occurrences(CalendarDate(2023, 2, 1, 3), pattern, range_start, range_end, gregorian)
    from_last = generator.generate_occurrences(CalendarDate(2023, 2, 28, 2), pattern, range_start, range_end, gregorian)

    assert _ymd(from_first) == [(2023, 2, 28), (2023, 3, 31), (2023, 4, 30)]
    assert _ymd(from_first) == _ymd(from_last)


def test_second_monday_once_per_month(generator, gregorian):
    pattern = create_monthly_weekday_pattern(2, 1)
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 3, 31), gregorian
    )

    assert _ymd(occurrences) == [(2024, 1, 8), (2024, 2, 12), (2024, 3, 11)]
    assert all(o.date.weekday == 1 for o in occurrences)


def test_nth_weekday_skips_months_without_it(generator, gregorian):
    """February and March 2024 have no fifth Monday."""
    pattern = create_monthly_weekday_pattern(5, "Monday", calendar=gregorian.get_calendar())
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 4, 30), gregorian
    )

    assert _ymd(occurrences) == [(2024, 1, 29), (2024, 4, 29)]
    assert [o.index for o in occurrences] == [0, 1]


def test_nth_weekday_of_month_helper(gregorian):
    geometry = gregorian.geometry

    assert nth_weekday_of_month(geometry, 2024, 2, 2, 1) == CalendarDate(2024, 2, 12, 1)
    assert nth_weekday_of_month(geometry, 2024, 2, 5, 1) is None


def test_monthly_without_day_keeps_clamped_day(generator, gregorian):
    """Plain monthly stepping clamps once and keeps the clamped day afterwards."""
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 31, 3),
        create_simple_pattern("monthly"),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 3, 31),
        gregorian,
    )

    assert _ymd(occurrences) == [(2024, 1, 31), (2024, 2, 29), (2024, 3, 29)]


def test_yearly_leap_day_clamps_in_common_years(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 2, 29, 4),
        create_yearly_pattern(2, 29),
        CalendarDate(2024, 1, 1),
        CalendarDate(2029, 1, 1),
        gregorian,
    )

    assert _ymd(occurrences) == [
        (2024, 2, 29),
        (2025, 2, 28),
        (2026, 2, 28),
        (2027, 2, 28),
        (2028, 2, 29),
    ]


def test_yearly_leap_day_start_in_common_year_aligns_to_clamped_day(generator, gregorian):
    pattern = create_yearly_pattern(2, 29)
    range_start, range_end = CalendarDate(2023, 1, 1), CalendarDate(2025, 12, 31)

    from_january = generator.generate_occurrences(CalendarDate(2023, 1, 15, 0), pattern, range_start, range_end, gregorian)
    from_clamped = generator.generate_occurrences(CalendarDate(2023, 2, 28, 2), pattern, range_start, range_end, gregorian)

    assert _ymd(from_january) == [(2023, 2, 28), (2024, 2, 29), (2025, 2, 28)]
    assert _ymd(from_january) == _ymd(from_clamped)


def test_yearly_start_aligns_and_respects_interval(generator, gregorian):
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1),
        create_yearly_pattern(3, 15, interval=2),
        CalendarDate(2024, 1, 1),
        CalendarDate(2027, 12, 31),
        gregorian,
    )

    assert _ymd(occurrences) == [(2024, 3, 15), (2026, 3, 15)]


def test_exception_dates_are_flagged_not_dropped(generator, gregorian):
    pattern = create_daily_pattern(exceptions=[CalendarDate(2024, 1, 3)])
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 5), gregorian
    )

    assert len(occurrences) == 5
    assert [o.is_exception for o in occurrences] == [False, False, True, False, False]


def test_max_occurrences_counts_from_start(generator, gregorian):
    pattern = create_daily_pattern(max_occurrences=3)

    full = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 31), gregorian
    )
    clipped = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 2), CalendarDate(2024, 1, 31), gregorian
    )

    assert len(full) == 3
    assert _ymd(clipped) == [(2024, 1, 2), (2024, 1, 3)]


def test_end_date_stops_generation(generator, gregorian):
    pattern = create_daily_pattern(end_date=CalendarDate(2024, 1, 4))
    occurrences = generator.generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 31), gregorian
    )

    assert _ymd(occurrences)[-1] == (2024, 1, 4)
    assert len(occurrences) == 4


def test_iteration_cap_truncates_without_error(gregorian):
    occurrences = RecurrenceGenerator(max_iterations=50).generate_occurrences(
        CalendarDate(2024, 1, 1, 1),
        create_daily_pattern(),
        CalendarDate(2024, 1, 1),
        CalendarDate(2024, 12, 31),
        gregorian,
    )

    assert len(occurrences) == 50


def test_default_cap_is_ten_thousand(gregorian):
    occurrences = generate_occurrences(
        CalendarDate(2000, 1, 1, 6),
        create_daily_pattern(),
        CalendarDate(2000, 1, 1),
        CalendarDate(2100, 1, 1),
        gregorian,
    )

    assert len(occurrences) == 10_000


def test_zero_interval_pattern_is_bounded_by_cap(gregorian):
    pattern = RecurringPattern(frequency="daily", interval=0)
    occurrences = RecurrenceGenerator(max_iterations=25).generate_occurrences(
        CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 31), gregorian
    )

    assert len(occurrences) == 25
    assert {o.date for o in occurrences} == {CalendarDate(2024, 1, 1, 1)}


def test_unsupported_frequency_raises(generator, gregorian):
    pattern = RecurringPattern(frequency="fortnightly")

    with pytest.raises(UnsupportedFrequencyError) as exc_info:
        generator.generate_occurrences(
            CalendarDate(2024, 1, 1, 1), pattern, CalendarDate(2024, 1, 1), CalendarDate(2024, 1, 31), gregorian
        )

    assert exc_info.value.frequency == "fortnightly"


def test_generation_reads_one_calendar_snapshot(generator, gregorian, two_month_payload):
    """A pattern expanded after update_calendar uses the new geometry."""
    gregorian.update_calendar(two_month_payload)
    occurrences = generator.generate_occurrences(
        CalendarDate(1, 1, 1, 0), create_simple_pattern("weekly"), CalendarDate(1, 1, 1), CalendarDate(1, 2, 30), gregorian
    )

    assert len(occurrences) == 12
