# backend/app/services/slots/window.py
"""
Booking window: earliest and latest instants a slot may start at.

- min_advance_hours pushes the earliest instant forward from now,
  unless the request is an emergency booking.
- advance_booking_days caps how far ahead slots are offered;
  None means no cap.
"""

from datetime import datetime, timedelta
from typing import Optional

from .errors import SlotConfigurationError
from .models import BookingWindow


def resolve_window(
    now: datetime,
    min_advance_hours: int = 0,
    advance_booking_days: Optional[int] = None,
    is_emergency: bool = False,
) -> BookingWindow:
    """Compute the legal booking window relative to now."""
    if min_advance_hours < 0:
        raise SlotConfigurationError(f"min_advance_hours must be >= 0, got {min_advance_hours}")
    if advance_booking_days is not None and advance_booking_days < 0:
        raise SlotConfigurationError(f"advance_booking_days must be >= 0, got {advance_booking_days}")

    earliest = now if is_emergency else now + timedelta(hours=min_advance_hours)
    latest = None
    if advance_booking_days is not None:
        try:
            latest = now + timedelta(days=advance_booking_days)
        except OverflowError:
            latest = None  # beyond the last representable date: no cap
    return BookingWindow(earliest=earliest, latest=latest)


def clamp_range(
    window: BookingWindow,
    range_start: datetime,
    range_end: datetime,
) -> Optional[tuple[datetime, datetime]]:
    """
    Clamp the requested range to the window.

    Returns:
        (effective_start, effective_end), or None when nothing is left.
        An empty result is not an error.
    """
    return window.clamp(range_start, range_end)
