# backend/app/services/slots/business_hours.py
"""
Business hours normalization.

Stored business hours come in several shapes. They are keyed by weekday
(0 = Sunday ... 6 = Saturday) either as a list/tuple indexed by weekday or
as a mapping whose keys are weekday numbers, numeric strings ("0".."6")
or day names ("sun", "monday", ...).

Each weekday entry may be:
  - "09:00-17:00"
  - {"startMinutes": 540, "endMinutes": 1020}
  - {"start": 540, "end": 1020}
  - {"startTime": "09:00", "endTime": "17:00"}
  - ["09:00", "17:00"]

Entries are tried against an ordered list of matchers; the first one that
accepts the entry wins. Entries nobody accepts are dropped, which leaves
that weekday closed.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Optional

from .config import (
    HOURS_FALLBACK_CLOSED,
    HOURS_FALLBACK_OPEN,
    HOURS_FALLBACK_STRICT,
    MINUTES_PER_DAY,
    time_str_to_minutes,
)
from .errors import SlotConfigurationError
from .models import BusinessHours, DayHours

logger = logging.getLogger(__name__)

DAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

# Full interval for services without any hours constraint
ALL_DAY = DayHours(0, MINUTES_PER_DAY)


def weekday_index(day: date) -> int:
    """Weekday in business-hours numbering (0 = Sunday)."""
    return (day.weekday() + 1) % 7


# ── Matchers ────────────────────────────────────────────────────────────


def _as_minutes(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _interval(start: Optional[int], end: Optional[int]) -> Optional[DayHours]:
    if start is None or end is None:
        return None
    if not 0 <= start < end <= MINUTES_PER_DAY:
        return None
    return DayHours(start, end)


def _match_range_string(value: Any) -> Optional[DayHours]:
    """'09:00-17:00'"""
    if not isinstance(value, str):
        return None
    parts = value.split("-")
    if len(parts) != 2:
        return None
    return _interval(time_str_to_minutes(parts[0]), time_str_to_minutes(parts[1]))


def _match_minutes_fields(value: Any) -> Optional[DayHours]:
    """{'startMinutes': 540, 'endMinutes': 1020}"""
    if not isinstance(value, Mapping):
        return None
    return _interval(_as_minutes(value.get("startMinutes")), _as_minutes(value.get("endMinutes")))


def _match_start_end(value: Any) -> Optional[DayHours]:
    """{'start': 540, 'end': 1020} or {'start': '09:00', 'end': '17:00'}"""
    if not isinstance(value, Mapping):
        return None
    start, end = value.get("start"), value.get("end")
    if isinstance(start, str) and isinstance(end, str):
        return _interval(time_str_to_minutes(start), time_str_to_minutes(end))
    return _interval(_as_minutes(start), _as_minutes(end))


def _match_time_fields(value: Any) -> Optional[DayHours]:
    """{'startTime': '09:00', 'endTime': '17:00'}"""
    if not isinstance(value, Mapping):
        return None
    return _interval(time_str_to_minutes(value.get("startTime")), time_str_to_minutes(value.get("endTime")))


def _match_pair(value: Any) -> Optional[DayHours]:
    """['09:00', '17:00']"""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    return _interval(time_str_to_minutes(value[0]), time_str_to_minutes(value[1]))


MATCHERS: tuple[Callable[[Any], Optional[DayHours]], ...] = (
    _match_range_string,
    _match_minutes_fields,
    _match_start_end,
    _match_time_fields,
    _match_pair,
)


def parse_day_entry(value: Any) -> Optional[DayHours]:
    """Run an entry through the matchers. None = unusable entry."""
    if value is None:
        return None
    for matcher in MATCHERS:
        hours = matcher(value)
        if hours is not None:
            return hours
    return None


# ── Normalization ───────────────────────────────────────────────────────


def _weekday_key(key: Any) -> Optional[int]:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        idx = key
    elif isinstance(key, str):
        k = key.strip().lower()
        if k.isdigit():
            idx = int(k)
        elif k[:3] in DAY_NAMES and (len(k) == 3 or k.endswith("day")):
            idx = DAY_NAMES.index(k[:3])
        else:
            return None
    else:
        return None
    return idx if 0 <= idx <= 6 else None


def _entries(raw: Any):
    if isinstance(raw, Mapping):
        return raw.items()
    if isinstance(raw, (list, tuple)):
        return enumerate(raw)
    return ()


def normalize_business_hours(raw: Any) -> Optional[BusinessHours]:
    """
    Normalize raw business hours into {weekday: DayHours}.

    Returns:
        Mapping with one entry per open weekday, or None when raw is
        absent or not a single weekday entry could be parsed.
    """
    if not raw:
        return None

    out: BusinessHours = {}
    for key, value in _entries(raw):
        idx = _weekday_key(key)
        if idx is None:
            logger.debug("Skipping business hours key %r", key)
            continue
        hours = parse_day_entry(value)
        if hours is None:
            if value is not None:
                logger.debug("Skipping malformed business hours for weekday %s: %r", idx, value)
            continue
        out[idx] = hours

    return out or None


def resolve_business_hours(raw: Any, fallback: str = HOURS_FALLBACK_OPEN) -> Optional[BusinessHours]:
    """
    Normalize hours and apply the fallback policy.

    Returns:
        None when every hour of every day is open, otherwise the per-weekday
        map (possibly empty = closed every day).

    Raises:
        SlotConfigurationError: hours are set, nothing parses and the
            policy is strict.
    """
    if not raw:
        return None

    hours = normalize_business_hours(raw)
    if hours is not None:
        return hours

    if fallback == HOURS_FALLBACK_STRICT:
        raise SlotConfigurationError("Business hours are set but no weekday entry could be parsed")
    logger.warning("Unparseable business hours, falling back to %s", fallback)
    if fallback == HOURS_FALLBACK_CLOSED:
        return {}
    return None
