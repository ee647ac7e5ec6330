# backend/app/services/slots/blackout.py
"""
Blackout dates: whole calendar days without any slots.

Days are compared by their "YYYY-MM-DD" string so a blackout stored as a
datetime (with whatever time or offset) still hits the right day.
"""

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional

logger = logging.getLogger(__name__)


def date_key(value: Any) -> Optional[str]:
    """Canonical "YYYY-MM-DD" for a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date().isoformat()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10]).isoformat()
        except ValueError:
            logger.debug("Ignoring unparseable blackout date %r", value)
            return None
    return None


def blackout_keys(blackout_dates: Iterable[Any]) -> set[str]:
    keys = (date_key(value) for value in blackout_dates or ())
    return {key for key in keys if key is not None}


def filter_blackout_days(
    slots_by_day: dict[str, list],
    blackout_dates: Iterable[Any],
) -> dict[str, list]:
    """Drop every day whose date is blacked out."""
    blocked = blackout_keys(blackout_dates)
    if not blocked:
        return slots_by_day
    return {day: slots for day, slots in slots_by_day.items() if day not in blocked}
