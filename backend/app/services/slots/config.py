# backend/app/services/slots/config.py
"""
Availability configuration and time-string helpers.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

HOURS_FALLBACK_OPEN = "open"
HOURS_FALLBACK_CLOSED = "closed"
HOURS_FALLBACK_STRICT = "strict"

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class AvailabilityConfig:
    """
    Configuration for availability calculation.

    Attributes:
        default_currency: Currency used when neither request nor service names one
        default_duration_minutes: Slot length for services stored without a duration
        default_range_days: Range length when the caller gives no end
        hours_fallback: What to do when business hours are set but nothing parses
            ("open" = all hours open, "closed" = no slots, "strict" = config error)
    """
    default_currency: str = "USD"
    default_duration_minutes: int = 60
    default_range_days: int = 7
    hours_fallback: str = HOURS_FALLBACK_OPEN

    def __post_init__(self):
        """Validate configuration."""
        if self.hours_fallback not in (HOURS_FALLBACK_OPEN, HOURS_FALLBACK_CLOSED, HOURS_FALLBACK_STRICT):
            raise ValueError(f"hours_fallback must be open, closed or strict, got {self.hours_fallback}")
        if self.default_duration_minutes <= 0:
            raise ValueError(f"default_duration_minutes must be positive, got {self.default_duration_minutes}")
        if self.default_range_days < 1:
            raise ValueError(f"default_range_days must be at least 1, got {self.default_range_days}")


@lru_cache
def get_availability_config() -> AvailabilityConfig:
    """Build availability configuration from application settings (singleton)."""
    from ...config import settings

    return AvailabilityConfig(
        default_currency=settings.default_currency.upper(),
        default_duration_minutes=settings.default_duration_minutes,
        default_range_days=settings.default_range_days,
        hours_fallback=settings.business_hours_fallback,
    )


def time_str_to_minutes(value: str) -> Optional[int]:
    """
    Convert "HH:MM" to minutes from midnight.

    "24:00" is accepted as end of day. Returns None for anything else
    that is not a valid wall-clock time.
    """
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    hour_str, minute_str = parts
    if not (hour_str.isdigit() and minute_str.isdigit()):
        return None
    hour, minute = int(hour_str), int(minute_str)
    if minute > 59:
        return None
    total = hour * 60 + minute
    if total > MINUTES_PER_DAY:
        return None
    return total


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes from midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
