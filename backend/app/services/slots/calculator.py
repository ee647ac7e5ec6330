# backend/app/services/slots/calculator.py
"""
Slot grid generation for a service.

Walks the effective range day by day and, inside each weekday's business
hours, lays out back-to-back slots of the service duration.

Per slot:
✓ business hours of the weekday
✓ effective window (slots starting outside it are not emitted)
✓ existing bookings plus buffer (slot marked unavailable)
✓ daily cap (whole day marked unavailable)

Not here:
✗ Blackout dates (see blackout.py)
✗ Pricing (see pricing.py)
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from .business_hours import ALL_DAY, resolve_business_hours, weekday_index
from .config import HOURS_FALLBACK_OPEN, minutes_to_time_str
from .daily_cap import enforce_daily_cap
from .errors import InvalidRangeError, SlotConfigurationError
from .models import BusinessHours, ExistingBooking, ServiceConfig, TimeSlot

logger = logging.getLogger(__name__)


def generate_slots(
    service: ServiceConfig,
    effective_start: datetime,
    effective_end: datetime,
    bookings: Iterable[ExistingBooking] = (),
    resource_filter: Any = None,
    hours_fallback: str = HOURS_FALLBACK_OPEN,
) -> list[TimeSlot]:
    """
    Generate the slot grid for [effective_start, effective_end].

    Returns:
        Slots in chronological order, available or not. Slots whose start
        lies outside the effective range are not included at all.

    Raises:
        SlotConfigurationError: duration, buffer or cap are invalid.
        InvalidRangeError: the range runs into the last representable date.
    """
    validate_service(service)

    if effective_start > effective_end:
        return []

    hours = resolve_business_hours(service.business_hours, hours_fallback)
    relevant = [b for b in bookings if _matches_resource(b, resource_filter)]

    duration = timedelta(minutes=service.duration_minutes)
    buffer = timedelta(minutes=service.buffer_minutes)

    slots: list[TimeSlot] = []
    day = effective_start.date()
    last_day = effective_end.date()

    try:
        while day <= last_day:
            day_slots = _day_slots(day, hours, duration, buffer, effective_start, effective_end, relevant)
            if day_slots:
                existing_count = _count_bookings_on(day, relevant)
                day_slots = enforce_daily_cap(day_slots, existing_count, service.max_daily_bookings)
                slots.extend(day_slots)
            day += timedelta(days=1)
    except OverflowError:
        raise InvalidRangeError(f"Range reaches past the last supported date ({last_day.isoformat()})")

    logger.debug(
        "Generated %d slots (%d available) for service %s",
        len(slots),
        sum(1 for s in slots if s.available),
        service.id,
    )
    return slots


def _day_slots(
    day: date,
    hours: Optional[BusinessHours],
    duration: timedelta,
    buffer: timedelta,
    effective_start: datetime,
    effective_end: datetime,
    bookings: list[ExistingBooking],
) -> list[TimeSlot]:
    """Candidate slots for one calendar day."""
    open_hours = ALL_DAY if hours is None else hours.get(weekday_index(day))
    if open_hours is None:
        return []  # closed weekday

    midnight = datetime.combine(day, datetime.min.time())
    open_at = midnight + timedelta(minutes=open_hours.start_minutes)
    close_at = midnight + timedelta(minutes=open_hours.end_minutes)

    # Only bookings that can reach into this day's hours matter
    nearby = [b for b in bookings if b.start < close_at + buffer and b.end + buffer > open_at]

    result: list[TimeSlot] = []
    start = open_at
    while start + duration <= close_at:
        end = start + duration
        if effective_start <= start <= effective_end:
            blocked = any(_conflicts(start, end, b, buffer) for b in nearby)
            result.append(TimeSlot(start=start, end=end, available=not blocked))
        start = end

    if not result:
        logger.debug(
            "No slots on %s within %s-%s",
            day.isoformat(),
            minutes_to_time_str(open_hours.start_minutes),
            minutes_to_time_str(open_hours.end_minutes),
        )
    return result


def _conflicts(start: datetime, end: datetime, booking: ExistingBooking, buffer: timedelta) -> bool:
    """Slot overlaps the booking or sits inside its buffer."""
    return start < booking.end + buffer and end + buffer > booking.start


def _matches_resource(booking: ExistingBooking, resource_filter: Any) -> bool:
    """
    Bookings tied to another resource don't block this one.
    Bookings without a resource block every resource.
    """
    if resource_filter is None or booking.resource_id is None:
        return True
    return str(booking.resource_id) == str(resource_filter)


def _count_bookings_on(day: date, bookings: list[ExistingBooking]) -> int:
    return sum(1 for b in bookings if b.start.date() == day)


def validate_service(service: ServiceConfig) -> None:
    duration = service.duration_minutes
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise SlotConfigurationError(
            f"Service {service.id}: duration_minutes must be a positive integer, got {duration!r}"
        )
    if service.buffer_minutes < 0:
        raise SlotConfigurationError(
            f"Service {service.id}: buffer_minutes must be >= 0, got {service.buffer_minutes}"
        )
    if service.max_daily_bookings < 0:
        raise SlotConfigurationError(
            f"Service {service.id}: max_daily_bookings must be >= 0, got {service.max_daily_bookings}"
        )
