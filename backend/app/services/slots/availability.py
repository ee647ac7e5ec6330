# backend/app/services/slots/availability.py
"""
Service availability for a date range.

Flow:
1. Load service config (not found -> ServiceNotFoundError)
2. Clamp the requested range to the booking window
3. Load existing bookings around the clamped range
4. Generate the slot grid (business hours, buffers, daily cap)
5. Drop blacked-out days
6. Optionally price once and attach the price to every available slot
7. Return only available slots grouped by day; empty days are omitted

Storage and promo lookup are injected, so everything below runs on
plain inputs and an explicit `now`.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol

from .blackout import filter_blackout_days
from .calculator import generate_slots, validate_service
from .config import AvailabilityConfig, get_availability_config
from .errors import InvalidRangeError, ServiceNotFoundError
from .models import (
    AvailabilityDay,
    AvailabilityRequest,
    AvailabilityResult,
    ExistingBooking,
    ServiceConfig,
    TimeSlot,
    day_bounds,
)
from .pricing import PromoResolver, annotate_days, compute_price_once
from .window import clamp_range, resolve_window

logger = logging.getLogger(__name__)


class AvailabilityStore(Protocol):
    """Read-only data access needed for availability."""

    def fetch_service_config(self, service_id: Any) -> Optional[ServiceConfig]:
        ...

    def fetch_bookings_in_range(
        self,
        service_id: Any,
        start: datetime,
        end: datetime,
        resource_filter: Any = None,
    ) -> list[ExistingBooking]:
        ...


def get_availability(
    request: AvailabilityRequest,
    store: AvailabilityStore,
    promo_resolver: Optional[PromoResolver] = None,
    config: AvailabilityConfig | None = None,
) -> AvailabilityResult:
    """
    Calculate available slots for a service.

    Raises:
        InvalidRangeError: range end before range start
        ServiceNotFoundError: unknown or non-bookable service
        SlotConfigurationError: service cannot produce slots
        AvailabilityUnavailableError: data store failure
    """
    config = config or get_availability_config()
    options = request.options
    now = options.now or datetime.now()

    if request.range_end < request.range_start:
        raise InvalidRangeError("Range end is before range start")

    # Step 1: Service
    service = store.fetch_service_config(request.service_id)
    if service is None:
        logger.info("Availability requested for unknown service %s", request.service_id)
        raise ServiceNotFoundError(request.service_id)
    validate_service(service)

    result = AvailabilityResult(
        service_id=service.id,
        slot_duration_minutes=service.duration_minutes,
    )

    # Step 2: Booking window
    window = resolve_window(
        now,
        service.min_advance_hours,
        service.advance_booking_days,
        options.emergency,
    )
    clamped = clamp_range(window, request.range_start, request.range_end)
    if clamped is None:
        logger.debug("Requested range outside booking window for service %s", service.id)
        return result
    effective_start, effective_end = clamped

    # Step 3: Existing bookings, whole days plus buffer on both sides
    try:
        buffer = timedelta(minutes=service.buffer_minutes)
        fetch_from = day_bounds(effective_start)[0] - buffer
        fetch_to = day_bounds(effective_end)[1] + buffer
    except OverflowError:
        raise InvalidRangeError("Range reaches past the last supported date")
    bookings = store.fetch_bookings_in_range(
        service.id, fetch_from, fetch_to, request.resource_filter
    )

    # Step 4: Slot grid
    slots = generate_slots(
        service,
        effective_start,
        effective_end,
        bookings,
        resource_filter=request.resource_filter,
        hours_fallback=config.hours_fallback,
    )

    # Step 5: Blackout days
    by_day = filter_blackout_days(_group_by_day(slots), service.blackout_dates)

    days = [
        AvailabilityDay(date=day, slots=[s for s in day_slots if s.available])
        for day, day_slots in sorted(by_day.items())
    ]
    days = [day for day in days if day.slots]

    # Step 6: Pricing
    if options.include_pricing:
        reference = days[0].slots[0].start if days else now
        price = compute_price_once(
            service,
            reference,
            promo_code=options.promo_code,
            currency=options.currency,
            promo_resolver=promo_resolver,
            default_currency=config.default_currency,
        )
        days = annotate_days(days, price)

    result.days = days
    logger.debug(
        "Service %s: %d available slots over %d days",
        service.id,
        result.slot_count,
        len(days),
    )
    return result


def _group_by_day(slots: list[TimeSlot]) -> dict[str, list[TimeSlot]]:
    grouped: dict[str, list[TimeSlot]] = defaultdict(list)
    for slot in slots:
        grouped[slot.day.isoformat()].append(slot)
    return dict(grouped)
