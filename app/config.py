"""
Configuration for the plant care service
========================================
Main application runtime settings: database location, care-schedule
defaults, timezone used for calendar-day due tests, and the background
sweep cadence.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.domain.care_schedule import (
    DEFAULT_FERTILIZING_INTERVAL_DAYS,
    DEFAULT_PRUNING_INTERVAL_DAYS,
    DEFAULT_WATERING_INTERVAL_DAYS,
    CareSchedulePolicy,
)
from app.domain.exceptions import ConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


_DEFAULT_SECRET_KEY = "PlantCareDevSecretKey"


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("PLANTCARE_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("PLANTCARE_SECRET_KEY", _DEFAULT_SECRET_KEY))
    database_path: str = field(default_factory=lambda: os.getenv("PLANTCARE_DATABASE_PATH", "database/plantcare.db"))
    db_cache_size_kb: int = field(default_factory=lambda: _env_int("PLANTCARE_DB_CACHE_SIZE_KB", 8_000))

    # Care schedule defaults; plants may override the intervals individually.
    timezone: str = field(default_factory=lambda: os.getenv("PLANTCARE_TIMEZONE", "UTC"))
    watering_interval_days: int = field(
        default_factory=lambda: _env_int("PLANTCARE_WATERING_INTERVAL_DAYS", DEFAULT_WATERING_INTERVAL_DAYS)
    )
    fertilizing_interval_days: int = field(
        default_factory=lambda: _env_int("PLANTCARE_FERTILIZING_INTERVAL_DAYS", DEFAULT_FERTILIZING_INTERVAL_DAYS)
    )
    pruning_interval_days: int = field(
        default_factory=lambda: _env_int("PLANTCARE_PRUNING_INTERVAL_DAYS", DEFAULT_PRUNING_INTERVAL_DAYS)
    )

    sweep_interval_minutes: int = field(default_factory=lambda: _env_int("PLANTCARE_SWEEP_INTERVAL_MINUTES", 60))
    history_limit: int = field(default_factory=lambda: _env_int("PLANTCARE_HISTORY_LIMIT", 100))

    DEBUG: bool = field(default_factory=lambda: _env_bool("PLANTCARE_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("PLANTCARE_LOG_LEVEL", "INFO"))
    log_file_path: str = field(default_factory=lambda: os.getenv("PLANTCARE_LOG_FILE", "logs/plantcare.log"))
    audit_log_path: str = field(default_factory=lambda: os.getenv("PLANTCARE_AUDIT_LOG_PATH", "logs/audit.log"))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # SECURITY: Fail fast if using default secret key in production
        if self.environment == "production" and self.secret_key == _DEFAULT_SECRET_KEY:
            raise ConfigurationError(
                "Cannot use default secret key in production! "
                "Set PLANTCARE_SECRET_KEY environment variable to a secure random value."
            )

    @property
    def care_tzinfo(self) -> tzinfo:
        """Timezone in which 'today' is evaluated for due tests."""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigurationError(f"Unknown timezone {self.timezone!r}") from exc

    def care_policy(self) -> CareSchedulePolicy:
        """Build the default care policy from the configured intervals."""
        try:
            return CareSchedulePolicy.from_intervals(
                watering_days=int(self.watering_interval_days),
                fertilizing_days=int(self.fertilizing_interval_days),
                pruning_days=int(self.pruning_interval_days),
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DATABASE_PATH": self.database_path,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "DEBUG": self.DEBUG,
            "CARE_TIMEZONE": self.timezone,
        }


def validate_config(config: AppConfig) -> list[str]:
    """Return a list of configuration problems (empty when valid)."""
    problems: list[str] = []
    try:
        config.care_tzinfo
    except ConfigurationError as exc:
        problems.append(str(exc))
    try:
        config.care_policy()
    except ConfigurationError as exc:
        problems.append(str(exc))
    if config.sweep_interval_minutes < 1:
        problems.append("Sweep interval must be at least 1 minute")
    if config.history_limit < 1:
        problems.append("History limit must be at least 1")
    return problems


def setup_logging(debug: bool = False, log_file_path: str | None = "logs/plantcare.log") -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "plantcare_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "plantcare_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "plantcare_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_file_path and not has_file:
        log_dir = os.path.dirname(log_file_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "plantcare_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"plantcare_console", "plantcare_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("PLANTCARE_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    config = AppConfig()
    problems = validate_config(config)
    if problems:
        raise ConfigurationError("; ".join(problems))
    return config
