from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from prometheus_client import Counter

from ..config import get_config
from ..exceptions import ClockStateError, ErrorContext
from ..structured_logging.enhanced_logging_config import get_logger
from .types import CalendarDate, TimeOfDay

if TYPE_CHECKING:  # pragma: no cover - only used for type hints
    from ..config.models import ClockConfig
    from .calculus import CalendarCalculus


logger = get_logger(__name__)

WORLD_CLOCK_ADVANCE_COUNTER = Counter(
    "worldcalendar_clock_advances_total",
    "Total number of world clock changes applied",
)
WORLD_CLOCK_SECONDS_COUNTER = Counter(
    "worldcalendar_clock_advanced_seconds_total",
    "Total world seconds the clock has moved forward",
)


@dataclass(frozen=True)
class DateChangedEvent:
    """Emitted to listeners after every world time change."""

    new_date: CalendarDate
    old_time: int
    new_time: int
    delta: int


DateChangedListener = Callable[[DateChangedEvent], None]


class WorldClock:
    """
    Linear world clock that reports its position as a calendar date.

    The clock owns the single world time value; every change is converted
    through the calculus synchronously and announced to listeners.
    """

    def __init__(
        self,
        calculus: CalendarCalculus,
        *,
        config: ClockConfig | None = None,
        state_path: Path | str | None = None,
    ) -> None:
        self._calculus = calculus
        self._config = config or get_config().clock
        resolved = state_path if state_path is not None else self._config.state_file
        self._state_file = Path(resolved) if resolved else None
        self._state_lock = threading.RLock()
        self._listeners: list[DateChangedListener] = []
        self._world_time = self._load_state()
        logger.debug(
            "World clock initialized",
            calendar_id=calculus.calendar_id,
            world_time=self._world_time,
            state_file=str(self._state_file) if self._state_file else None,
        )

    @property
    def world_time(self) -> int:
        with self._state_lock:
            return self._world_time

    def current_date(self) -> CalendarDate:
        """Return the calendar date for the current world time."""
        return self._calculus.world_time_to_date(self.world_time)

    def subscribe(self, listener: DateChangedListener) -> None:
        with self._state_lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: DateChangedListener) -> None:
        with self._state_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def set_world_time(self, world_time: int) -> DateChangedEvent:
        """Move the clock to an absolute world time and notify listeners."""
        with self._state_lock:
            old_time = self._world_time
            new_time = int(world_time)
            self._persist_state(new_time)
            self._world_time = new_time
            listeners = list(self._listeners)

        delta = new_time - old_time
        WORLD_CLOCK_ADVANCE_COUNTER.inc()
        if delta > 0:
            WORLD_CLOCK_SECONDS_COUNTER.inc(delta)

        event = DateChangedEvent(
            new_date=self._calculus.world_time_to_date(new_time),
            old_time=old_time,
            new_time=new_time,
            delta=delta,
        )
        logger.info(
            "World time changed",
            old_time=old_time,
            new_time=new_time,
            delta=delta,
            new_date=str(event.new_date),
        )
        for listener in listeners:
            listener(event)
        return event

    def advance_seconds(self, seconds: int) -> DateChangedEvent:
        return self.set_world_time(self.world_time + seconds)

    def advance_minutes(self, minutes: int) -> DateChangedEvent:
        return self.advance_seconds(minutes * self._calculus.geometry.calendar.time.seconds_in_minute)

    def advance_hours(self, hours: int) -> DateChangedEvent:
        return self.advance_seconds(hours * self._calculus.geometry.seconds_per_hour)

    def advance_days(self, days: int) -> DateChangedEvent:
        return self.set_current_date(self._calculus.add_days(self.current_date(), days))

    def advance_weeks(self, weeks: int) -> DateChangedEvent:
        return self.set_current_date(self._calculus.add_weeks(self.current_date(), weeks))

    def advance_months(self, months: int) -> DateChangedEvent:
        return self.set_current_date(self._calculus.add_months(self.current_date(), months))

    def advance_years(self, years: int) -> DateChangedEvent:
        return self.set_current_date(self._calculus.add_years(self.current_date(), years))

    def set_current_date(self, date: CalendarDate) -> DateChangedEvent:
        return self.set_world_time(self._calculus.date_to_world_time(date))

    def set_time_of_day(self, hour: int, minute: int = 0, second: int = 0) -> DateChangedEvent:
        """Keep the current date and replace its time of day."""
        return self.set_current_date(self.current_date().with_time(TimeOfDay(hour, minute, second)))

    def _load_state(self) -> int:
        """Load the persisted world time or fall back to the configured initial value."""

        if self._state_file is not None and self._state_file.exists():
            try:
                with self._state_file.open("r", encoding="utf-8") as handle:
                    payload = json.load(handle)
                return int(payload["world_time"])
            except (OSError, KeyError, ValueError, TypeError) as error:
                logger.error(
                    "Failed to load world clock state, falling back to configured initial time",
                    error=str(error),
                    state_file=str(self._state_file),
                )
        return self._config.initial_world_time

    def _persist_state(self, world_time: int) -> None:
        """Persist the world time atomically when a state file is configured."""

        if self._state_file is None:
            return

        payload = {"calendar_id": self._calculus.calendar_id, "world_time": world_time}
        tmp_path: str | None = None
        try:
            self._state_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(prefix="clock_", suffix=".json", dir=str(self._state_file.parent))
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self._state_file)
        except OSError as error:
            logger.error("Failed to persist world clock state", error=str(error), state_file=str(self._state_file))
            raise ClockStateError(
                "Failed to persist world clock state",
                ErrorContext(calendar_id=self._calculus.calendar_id, operation="persist_state"),
                state_file=str(self._state_file),
            ) from error
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
