"""CLI entrypoint for converting world time and expanding recurrence patterns."""

from __future__ import annotations

import argparse
import json
import re
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import get_config
from .exceptions import ErrorContext, InvalidDateError, WorldCalendarError, handle_exception
from .recurrence import RecurrenceGenerator, create_simple_pattern, resolve_weekday
from .schemas.calendar import CalendarDefinition, load_calendar_directory
from .structured_logging import bind_calendar_context, clear_calendar_context, get_logger, setup_enhanced_logging
from .time import CalendarCalculus, CalendarDate, TimeOfDay, format_date

logger = get_logger(__name__)

BUNDLED_CALENDARS = Path(__file__).parent / "data" / "calendars"

_DATE_PATTERN = re.compile(r"^(-?\d+)-(\d+)-(\d+)(?:#(.+))?$")


def parse_date(value: str) -> CalendarDate:
    """Parse ``YEAR-MONTH-DAY`` or ``YEAR-MONTH-DAY#Intercalary``."""
    match = _DATE_PATTERN.match(value.strip())
    if match is None:
        raise argparse.ArgumentTypeError(f"expected YEAR-MONTH-DAY[#INTERCALARY], got '{value}'")
    year, month, day, intercalary = match.groups()
    return CalendarDate(int(year), int(month), int(day), intercalary=intercalary)


def parse_world_time(value: str) -> int | float:
    """Parse world seconds, keeping integers exact at any magnitude."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number of seconds, got '{value}'") from None


def load_calendar(reference: str | None) -> CalendarDefinition:
    """Load a calendar from a JSON path, or by id from the bundled calendars."""
    reference = reference or get_config().clock.calendar_file or "gregorian"
    path = Path(reference)
    if path.is_file():
        return CalendarDefinition.load_file(path)

    bundled = load_calendar_directory(BUNDLED_CALENDARS)
    if reference not in bundled:
        raise FileNotFoundError(f"No calendar file or bundled calendar named '{reference}'")
    return bundled[reference]


def _normalize(date: CalendarDate, calculus: CalendarCalculus) -> CalendarDate:
    if not calculus.is_valid_date(date):
        raise InvalidDateError(
            f"{date} does not exist in calendar '{calculus.calendar_id}'",
            ErrorContext(calendar_id=calculus.calendar_id, operation="parse_date"),
            date=date,
        )
    if date.is_intercalary:
        return date
    return date.replace(weekday=calculus.calculate_weekday(date.year, date.month, date.day))


def _date_payload(date: CalendarDate, calendar: CalendarDefinition) -> dict[str, Any]:
    return {**date.to_dict(), "formatted": format_date(date, calendar, include_time=True)}


def cmd_to_date(args: argparse.Namespace, calculus: CalendarCalculus) -> dict[str, Any]:
    date = calculus.world_time_to_date(args.world_time)
    return _date_payload(date, calculus.geometry.calendar)


def cmd_to_time(args: argparse.Namespace, calculus: CalendarCalculus) -> dict[str, Any]:
    date = _normalize(args.date, calculus).with_time(TimeOfDay(args.hour, args.minute, args.second))
    return {"world_time": calculus.date_to_world_time(date), "date": _date_payload(date, calculus.geometry.calendar)}


def cmd_occurrences(args: argparse.Namespace, calculus: CalendarCalculus) -> dict[str, Any]:
    calendar = calculus.geometry.calendar
    start = _normalize(args.start, calculus)
    range_start = _normalize(args.range_start, calculus) if args.range_start else start
    range_end = _normalize(args.range_end, calculus) if args.range_end else calculus.add_years(range_start, 1)

    options: dict[str, Any] = {
        "max_occurrences": args.max_occurrences,
        "month_day": args.month_day,
        "month_week": args.month_week,
        "year_month": args.year_month,
        "year_day": args.year_day,
    }
    if args.weekdays:
        options["weekdays"] = tuple(
            sorted({resolve_weekday(_weekday_arg(item), calendar) for item in args.weekdays.split(",")})
        )
    if args.month_weekday is not None:
        options["month_weekday"] = resolve_weekday(_weekday_arg(args.month_weekday), calendar)

    pattern = create_simple_pattern(args.frequency, args.interval, **options)
    occurrences = RecurrenceGenerator().generate_occurrences(start, pattern, range_start, range_end, calculus)
    return {
        "pattern": pattern.to_dict(),
        "occurrences": [
            {
                "index": occurrence.index,
                "is_exception": occurrence.is_exception,
                "date": _date_payload(occurrence.date, calendar),
            }
            for occurrence in occurrences
        ],
    }


def cmd_info(args: argparse.Namespace, calculus: CalendarCalculus) -> dict[str, Any]:
    calendar = calculus.geometry.calendar
    year = args.year if args.year is not None else calendar.year.current_year
    return {
        "id": calendar.id,
        "name": calendar.display_name,
        "year": year,
        "is_leap_year": calculus.is_leap_year(year),
        "year_length": calculus.get_year_length(year),
        "days_per_week": calculus.get_days_per_week(),
        "seconds_per_day": calculus.get_seconds_per_day(),
        "epoch_offset": calculus.epoch_offset(),
        "months": [
            {
                "name": month.name,
                "days": calculus.get_month_length(number, year),
                "intercalary": [block.name for block in calculus.get_intercalary_days_after_month(year, number)],
            }
            for number, month in enumerate(calendar.months, start=1)
        ],
        "weekdays": calendar.weekday_names,
    }


def _weekday_arg(value: str) -> int | str:
    value = value.strip()
    return int(value) if value.isdigit() else value


COMMANDS = {
    "to-date": cmd_to_date,
    "to-time": cmd_to_time,
    "occurrences": cmd_occurrences,
    "info": cmd_info,
}


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Convert world time for custom calendars and expand recurrences.")
    parser.add_argument(
        "--calendar",
        default=None,
        help="Calendar JSON file or bundled calendar id (defaults to CLOCK_CALENDAR_FILE, then 'gregorian').",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    to_date = subparsers.add_parser("to-date", help="Convert world time in seconds to a calendar date.")
    to_date.add_argument("world_time", type=parse_world_time)

    to_time = subparsers.add_parser("to-time", help="Convert a calendar date to world time in seconds.")
    to_time.add_argument("date", type=parse_date, help="YEAR-MONTH-DAY or YEAR-MONTH-DAY#INTERCALARY")
    to_time.add_argument("--hour", type=int, default=0)
    to_time.add_argument("--minute", type=int, default=0)
    to_time.add_argument("--second", type=int, default=0)

    occurrences = subparsers.add_parser("occurrences", help="List the occurrences of a recurrence pattern.")
    occurrences.add_argument("frequency", help="daily, weekly, monthly or yearly")
    occurrences.add_argument("--start", type=parse_date, required=True)
    occurrences.add_argument("--range-start", type=parse_date, default=None)
    occurrences.add_argument("--range-end", type=parse_date, default=None)
    occurrences.add_argument("--interval", type=int, default=1)
    occurrences.add_argument("--max-occurrences", type=int, default=None)
    occurrences.add_argument("--weekdays", default=None, help="Comma separated weekday names or indices")
    occurrences.add_argument("--month-day", type=int, default=None)
    occurrences.add_argument("--month-week", type=int, default=None)
    occurrences.add_argument("--month-weekday", default=None)
    occurrences.add_argument("--year-month", type=int, default=None)
    occurrences.add_argument("--year-day", type=int, default=None)

    info = subparsers.add_parser("info", help="Describe the calendar geometry for a year.")
    info.add_argument("--year", type=int, default=None)

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_arguments(argv)
    setup_enhanced_logging(get_config().to_dict())

    bind_calendar_context(operation=args.command)
    try:
        calculus = CalendarCalculus(load_calendar(args.calendar))
        bind_calendar_context(calendar_id=calculus.calendar_id)
        result = COMMANDS[args.command](args, calculus)
    except (WorldCalendarError, ValidationError, OSError, ValueError) as exc:
        error = handle_exception(exc, ErrorContext(operation=args.command))
        logger.error("worldcalendar command failed", command=args.command, error=error.message)
        print(f"error: {error.message}", file=sys.stderr)
        return 1
    finally:
        clear_calendar_context()

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
