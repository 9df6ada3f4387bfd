"""Structured logging for the world calendar engine."""

from .enhanced_logging_config import (
    bind_calendar_context,
    clear_calendar_context,
    configure_enhanced_structlog,
    detect_environment,
    get_current_context,
    get_logger,
    setup_enhanced_logging,
)

__all__ = [
    "bind_calendar_context",
    "clear_calendar_context",
    "configure_enhanced_structlog",
    "detect_environment",
    "get_current_context",
    "get_logger",
    "setup_enhanced_logging",
]
