"""
Pydantic-based configuration models for the world calendar engine.

Each group reads its own environment prefix so the calculus, recurrence
generator, and world clock can be tuned independently.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_RECURRENCE_ITERATIONS = 10_000


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    log_base: str = Field(default="logs", description="Base log directory")
    rotation_max_size: str = Field(default="10MB", description="Log rotation max size")
    rotation_backup_count: int = Field(default=5, description="Number of backup log files")
    disable_logging: bool = Field(default=False, description="Disable file logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "production"]
        if v not in valid_environments:
            logger.error("Invalid logging environment", environment=v, valid_environments=valid_environments)
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}

    def to_logging_dict(self) -> dict[str, Any]:
        """Return the dictionary shape consumed by setup_enhanced_logging."""
        return {
            "environment": self.environment,
            "level": self.level,
            "log_base": self.log_base,
            "rotation_max_size": self.rotation_max_size,
            "rotation_backup_count": self.rotation_backup_count,
            "disable_logging": self.disable_logging,
        }


class CalculusConfig(BaseSettings):
    """Tuning for the per-calculus year layout memo table."""

    year_cache_size: int = Field(default=512, description="Maximum number of year layouts kept per calculus")
    precompute_window: int = Field(
        default=10,
        description="Years on either side of the calendar's current year warmed on load",
    )

    @field_validator("year_cache_size")
    @classmethod
    def validate_year_cache_size(cls, value: int) -> int:
        """The memo table must hold at least one year."""
        if value < 1:
            raise ValueError("year_cache_size must be at least 1")
        return value

    @field_validator("precompute_window")
    @classmethod
    def validate_precompute_window(cls, value: int) -> int:
        """A negative window has no meaning."""
        if value < 0:
            raise ValueError("precompute_window must not be negative")
        return value

    model_config = {"env_prefix": "CALCULUS_", "case_sensitive": False, "extra": "ignore"}


class RecurrenceConfig(BaseSettings):
    """Limits applied when expanding recurrence patterns."""

    max_iterations: int = Field(
        default=DEFAULT_MAX_RECURRENCE_ITERATIONS,
        description="Hard cap on stepping iterations per generation call",
    )
    materialize_years: int = Field(
        default=2,
        description="Years past the range start that recurring notes are materialized for",
    )

    @field_validator("max_iterations", "materialize_years")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Both limits must allow at least one step."""
        if value < 1:
            raise ValueError("value must be at least 1")
        return value

    model_config = {"env_prefix": "RECURRENCE_", "case_sensitive": False, "extra": "ignore"}


class ClockConfig(BaseSettings):
    """World clock configuration."""

    initial_world_time: int = Field(default=0, description="World time used when no persisted state exists")
    state_file: str | None = Field(
        default=None,
        description="Filesystem path used to persist the world time between restarts",
    )
    calendar_file: str | None = Field(default=None, description="Calendar definition loaded by the CLI by default")

    model_config = {"env_prefix": "CLOCK_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Access via get_config().
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    calculus: CalculusConfig = Field(default_factory=CalculusConfig)
    recurrence: RecurrenceConfig = Field(default_factory=RecurrenceConfig)
    clock: ClockConfig = Field(default_factory=ClockConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a plain dictionary."""
        return {
            "logging": self.logging.to_logging_dict(),
            "calculus": self.calculus.model_dump(),
            "recurrence": self.recurrence.model_dump(),
            "clock": self.clock.model_dump(),
        }
