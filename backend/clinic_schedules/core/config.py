"""
Centralized configuration module for application-wide settings.

Settings are read from environment variables. The application factory
loads a ``.env`` file first (see ``clinic_schedules.main``), so everything
here only ever looks at ``os.environ``.
"""

import logging
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

TRUTHY_VALUES = ("true", "1", "yes")

# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Returns:
        ZoneInfo: Application timezone (defaults to UTC if not configured)

    Environment Variables:
        TZ: Timezone identifier (e.g., 'Asia/Manila', 'UTC')
            Default: 'UTC'

    All "today" computations (validFrom checks, the delete guard window,
    calendar is_today/is_past flags) use this single calendar.
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


# Global timezone instance - initialized once at import time
APP_TZ = get_app_timezone()


def now() -> datetime:
    """Current timestamp in the application timezone."""
    return datetime.now(APP_TZ)


def today() -> date:
    """Current calendar date in the application timezone."""
    return now().date()


def log_timezone_config():
    """
    Log the active timezone configuration.

    Should be called during application startup.
    """
    logger.info(
        "Timezone configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "tz_env_var": os.getenv("TZ", "UTC"),
            }
        },
    )


# ===========================
# Database Configuration
# ===========================


def get_database_url() -> str:
    """
    Get the SQLAlchemy database URL.

    Environment Variables:
        DATABASE_URL: Any SQLAlchemy URL
            Default: 'sqlite:///./clinic_schedules.db'
    """
    return os.getenv("DATABASE_URL", "sqlite:///./clinic_schedules.db")


# ===========================
# Logging Configuration
# ===========================


def _get_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in TRUTHY_VALUES


def get_logging_options() -> dict:
    """
    Get logging options for ``setup_logging``.

    Environment Variables:
        LOG_LEVEL: Logging level name (default 'INFO')
        LOG_JSON: Use JSON console output (default 'false')
        LOG_TO_FILE: Write rotating log files (default 'true')
        SQL_ECHO: Log SQLAlchemy queries with timing (default 'false')
    """
    return {
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "use_json_format": _get_flag("LOG_JSON", "false"),
        "log_to_file": _get_flag("LOG_TO_FILE", "true"),
        "enable_sql_echo": _get_flag("SQL_ECHO", "false"),
    }


# ===========================
# Availability Configuration
# ===========================


def get_default_window_days() -> int:
    """
    Get the default length of the forward-looking availability window.

    Environment Variables:
        DEFAULT_AVAILABILITY_WINDOW_DAYS: Positive integer (default 30)
    """
    raw = os.getenv("DEFAULT_AVAILABILITY_WINDOW_DAYS", "30")
    try:
        days = int(raw)
    except ValueError:
        logger.warning(
            f"Invalid DEFAULT_AVAILABILITY_WINDOW_DAYS '{raw}', using 30"
        )
        return 30
    if days < 1:
        logger.warning("DEFAULT_AVAILABILITY_WINDOW_DAYS must be >= 1, using 30")
        return 30
    return days


DEFAULT_AVAILABILITY_WINDOW_DAYS = get_default_window_days()
