"""Configuration management"""
import logging
import os
from datetime import timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from lifexp.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar day boundaries for streaks are computed in this timezone unless the
# caller passes one explicitly
DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "UTC")

# Extra hours past a daily/weekly cadence window that still extend a streak
STREAK_GRACE_PERIOD_HOURS: int = int(os.getenv("STREAK_GRACE_PERIOD_HOURS", "6"))

# Goals whose deadline is this close are reported as due soon
DUE_SOON_WINDOW_DAYS: int = int(os.getenv("DUE_SOON_WINDOW_DAYS", "3"))
DUE_SOON_WINDOW: timedelta = timedelta(days=DUE_SOON_WINDOW_DAYS)


def default_tz() -> ZoneInfo:
    """Timezone used for calendar-day streak decisions"""
    return ZoneInfo(DEFAULT_TIMEZONE)


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    try:
        ZoneInfo(DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown timezone: '{DEFAULT_TIMEZONE}'",
            config_key="DEFAULT_TIMEZONE",
            cause=e,
        )
    if STREAK_GRACE_PERIOD_HOURS < 0:
        raise ConfigurationError(
            "STREAK_GRACE_PERIOD_HOURS must not be negative",
            config_key="STREAK_GRACE_PERIOD_HOURS",
        )
    if DUE_SOON_WINDOW_DAYS <= 0:
        raise ConfigurationError(
            "DUE_SOON_WINDOW_DAYS must be positive",
            config_key="DUE_SOON_WINDOW_DAYS",
        )


def configure_logging() -> None:
    """Configure root logging for applications embedding the engine"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )
