# backend/app/services/slots/daily_cap.py
"""Daily booking cap."""

from .models import TimeSlot


def enforce_daily_cap(
    slots_for_day: list[TimeSlot],
    existing_count: int,
    max_daily_bookings: int,
) -> list[TimeSlot]:
    """
    Block every slot of a day once it already holds max_daily_bookings.

    max_daily_bookings == 0 means unlimited. The cap is a hard ceiling for
    the whole day, independent of per-slot overlap.
    """
    if max_daily_bookings <= 0 or existing_count < max_daily_bookings:
        return slots_for_day
    return [slot.blocked() if slot.available else slot for slot in slots_for_day]
