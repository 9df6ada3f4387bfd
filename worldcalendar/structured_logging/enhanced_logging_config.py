"""
Structlog-based logging configuration for the world calendar engine.

Provides a processor chain with context variables (calendar id, operation),
key sanitization, and optional rotating file output per environment.
"""

import json
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)
from structlog.stdlib import BoundLogger, LoggerFactory

logger = structlog.get_logger(__name__)

_LOGGING_INITIALIZED = False
_LOGGING_SIGNATURE: str | None = None
_setup_lock = threading.Lock()

VALID_ENVIRONMENTS = ("unit_test", "local", "production")

LOG_FILE_NAME = "worldcalendar.log"


def detect_environment() -> str:
    """
    Detect the current environment based on various indicators.

    Returns:
        Environment name: "unit_test", "local", or "production"
    """
    if "pytest" in sys.modules or "pytest" in sys.argv[0]:
        return "unit_test"

    env = os.getenv("WORLDCALENDAR_ENV")
    if env and env in VALID_ENVIRONMENTS:
        return env

    logging_env = os.getenv("LOGGING_ENVIRONMENT", "")
    if logging_env in VALID_ENVIRONMENTS:
        return logging_env

    return "local"


def sanitize_sensitive_data(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Redact values stored under secret-looking keys, nested dictionaries included.

    Args:
        _logger: Logger instance (unused)
        _name: Logger name (unused)
        event_dict: Event dictionary to sanitize

    Returns:
        Sanitized event dictionary
    """
    sensitive_keys = ["password", "token", "secret", "credential", "api_key", "authorization"]

    def sanitize_dict(d: dict[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, dict):
                sanitized[key] = sanitize_dict(value)
            elif isinstance(key, str) and any(sensitive in key.lower() for sensitive in sensitive_keys):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        return sanitized

    return sanitize_dict(event_dict)


def _resolve_log_base(log_base: str) -> Path:
    """
    Resolve log_base path to absolute path relative to project root.

    Args:
        log_base: Relative or absolute path to log directory

    Returns:
        Absolute path to log directory
    """
    log_path = Path(log_base)
    if log_path.is_absolute():
        return log_path

    current_dir = Path.cwd()
    for parent in [current_dir] + list(current_dir.parents):
        if (parent / "pyproject.toml").exists():
            return parent / log_path
    return current_dir / log_path


def _parse_max_bytes(max_size: str | int) -> int:
    """Convert a rotation size such as "10MB" into bytes."""
    if not isinstance(max_size, str):
        return max_size
    if max_size.endswith("MB"):
        return int(max_size[:-2]) * 1024 * 1024
    if max_size.endswith("KB"):
        return int(max_size[:-2]) * 1024
    if max_size.endswith("B"):
        return int(max_size[:-1])
    return int(max_size)


def _setup_file_logging(environment: str, log_config: dict[str, Any], log_level: str) -> Path:
    """Attach a rotating file handler for the environment and return the log file path."""
    env_log_dir = _resolve_log_base(log_config.get("log_base", "logs")) / environment
    env_log_dir.mkdir(parents=True, exist_ok=True)
    log_path = env_log_dir / LOG_FILE_NAME

    handler = RotatingFileHandler(
        log_path,
        maxBytes=_parse_max_bytes(log_config.get("rotation_max_size", "10MB")),
        backupCount=log_config.get("rotation_backup_count", 5),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.set_name("worldcalendar_file")

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == "worldcalendar_file":
            root_logger.removeHandler(existing)
            existing.close()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    return log_path


def configure_enhanced_structlog(
    environment: str | None = None,
    log_level: str = "INFO",
    log_config: dict[str, Any] | None = None,
) -> None:
    """
    Configure structlog with context variables and key sanitization.

    Args:
        environment: Environment name (auto-detected if None)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_config: Logging configuration dictionary
    """
    if environment is None:
        environment = detect_environment()

    processors = [
        sanitize_sensitive_data,
        merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
    ]

    log_path: Path | None = None
    if log_config and not log_config.get("disable_logging", False):
        log_path = _setup_file_logging(environment, log_config, log_level)
    else:
        logging.getLogger().setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )

    if log_path is not None:
        structlog.get_logger(__name__).info("File logging configured", log_path=str(log_path))


def setup_enhanced_logging(config: dict[str, Any], *, force_reconfigure: bool = False) -> None:
    """
    Set up logging from an application configuration dictionary.

    Args:
        config: Configuration dictionary with a "logging" section
        force_reconfigure: When True, reconfigure even if logging was already set up
    """
    global _LOGGING_INITIALIZED  # pylint: disable=global-statement
    global _LOGGING_SIGNATURE  # pylint: disable=global-statement

    config_signature = json.dumps(config, sort_keys=True, default=str)

    with _setup_lock:
        if _LOGGING_INITIALIZED and not force_reconfigure:
            get_logger("worldcalendar.logging.setup").debug(
                "setup_enhanced_logging skipped; logging system already initialized",
                config_signature=_LOGGING_SIGNATURE,
            )
            return

        logging_config = config.get("logging", {})
        environment = logging_config.get("environment") or detect_environment()
        log_level = logging_config.get("level", "INFO")

        configure_enhanced_structlog(environment, log_level, logging_config)

        get_logger("worldcalendar.logging.enhanced").info(
            "Logging system initialized",
            environment=environment,
            log_level=log_level,
            log_base=logging_config.get("log_base", "logs"),
        )

        _LOGGING_INITIALIZED = True
        _LOGGING_SIGNATURE = config_signature


def bind_calendar_context(calendar_id: str | None = None, operation: str | None = None, **kwargs) -> None:
    """
    Bind calendar context to the current logging context.

    Args:
        calendar_id: Active calendar identifier
        operation: Name of the operation being performed
        **kwargs: Additional context variables
    """
    context_vars = {"calendar_id": calendar_id, "operation": operation, **kwargs}
    bind_contextvars(**{k: v for k, v in context_vars.items() if v is not None})


def clear_calendar_context() -> None:
    """Clear the current calendar context from logging."""
    clear_contextvars()


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    return structlog.contextvars.get_contextvars()


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a Structlog logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured Structlog logger instance
    """
    return structlog.get_logger(name)
