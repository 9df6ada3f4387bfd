"""
Tests for the world calendar exception hierarchy.
"""

from worldcalendar.exceptions import (
    CalendarConfigurationError,
    ErrorContext,
    InvalidDateError,
    PatternValidationError,
    handle_exception,
)


def test_to_dict_carries_context_and_details():
    error = PatternValidationError(
        "month_day must be at least 1",
        ErrorContext(calendar_id="gregorian", operation="create_monthly_day_pattern"),
        field="month_day",
        value=0,
    )

    data = error.to_dict()

    assert set(data) == {"error_type", "message", "context", "details", "timestamp"}
    assert set(data["context"]) == {"calendar_id", "operation", "timestamp", "metadata"}
    assert data["error_type"] == "PatternValidationError"
    assert data["context"]["calendar_id"] == "gregorian"
    assert data["details"] == {"field": "month_day", "value": "0"}


def test_handle_exception_wraps_value_errors():
    error = handle_exception(ValueError("bad calendar"), ErrorContext(operation="info"))

    assert isinstance(error, CalendarConfigurationError)
    assert error.message == "bad calendar"
    assert error.context.operation == "info"
    assert error.details["original_type"] == "ValueError"


def test_handle_exception_passes_calendar_errors_through():
    original = InvalidDateError("February 2023 has no 29th", date="2023-02-29")

    assert handle_exception(original) is original
