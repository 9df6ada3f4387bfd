"""
Exception hierarchy for the world calendar engine.

Conversion and stepping code raises these with structured context so a
caller can report which calendar, date, or pattern caused the failure.
"""

import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ErrorContext:
    """
    Contextual information for error handling.

    Identifies the calendar and operation in flight when an error was raised.
    """

    calendar_id: str | None = None
    operation: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "calendar_id": self.calendar_id,
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class WorldCalendarError(Exception):
    """
    Base exception for all world calendar errors.

    Provides structured error handling with context and metadata
    for proper error categorization and debugging.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a world calendar error.

        Args:
            message: Technical error message
            context: Error context information
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}
        self.timestamp = datetime.now()

        self._log_error()

    def _log_error(self):
        """Log the error with structured context."""
        log_data = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }
        logger.error("World calendar error occurred", **log_data)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a plain dictionary for reporting."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context.to_dict(),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class CalendarConfigurationError(WorldCalendarError):
    """A calendar definition failed validation or cannot be loaded."""

    def __init__(self, message: str, context: ErrorContext | None = None, config_key: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key


class UnsupportedFrequencyError(WorldCalendarError):
    """A recurrence pattern names a frequency the generator cannot step."""

    def __init__(self, frequency: Any, context: ErrorContext | None = None, **kwargs):
        super().__init__(f"Unsupported recurrence frequency: {frequency}", context, **kwargs)
        self.frequency = frequency
        self.details["frequency"] = str(frequency)


class PatternValidationError(WorldCalendarError):
    """A pattern builder was handed values that cannot form a valid pattern."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        field: str | None = None,
        value: Any | None = None,
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.field = field
        self.value = value
        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = str(value)


class InvalidDateError(WorldCalendarError):
    """A date does not fit the geometry of the active calendar."""

    def __init__(self, message: str, context: ErrorContext | None = None, date: Any | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.date = date
        if date is not None:
            self.details["date"] = str(date)


class ClockStateError(WorldCalendarError):
    """The world clock state could not be loaded or persisted."""

    def __init__(self, message: str, context: ErrorContext | None = None, state_file: str | None = None, **kwargs):
        super().__init__(message, context, **kwargs)
        self.state_file = state_file
        if state_file:
            self.details["state_file"] = state_file


def handle_exception(exc: Exception, context: ErrorContext | None = None) -> WorldCalendarError:
    """
    Convert a generic exception to a world calendar error.

    Args:
        exc: The original exception
        context: Error context

    Returns:
        WorldCalendarError instance
    """
    if isinstance(exc, WorldCalendarError):
        return exc

    if isinstance(exc, ValueError | TypeError | OSError):
        return CalendarConfigurationError(str(exc), context, details={"original_type": type(exc).__name__})
    return WorldCalendarError(
        str(exc), context, details={"original_type": type(exc).__name__, "traceback": traceback.format_exc()}
    )
