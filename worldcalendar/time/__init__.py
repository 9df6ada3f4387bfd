from .calculus import CalendarCalculus
from .formatting import add_ordinal_suffix, format_date, format_time
from .geometry import CalendarGeometry
from .time_service import DateChangedEvent, WorldClock
from .types import CalendarDate, TimeOfDay

__all__ = [
    "CalendarCalculus",
    "CalendarDate",
    "CalendarGeometry",
    "DateChangedEvent",
    "TimeOfDay",
    "WorldClock",
    "add_ordinal_suffix",
    "format_date",
    "format_time",
]
