# backend/app/routers/slots.py
"""
Availability API endpoint.

GET /bookings/availability - Available slots of a service, grouped by day
"""

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import (
    AvailabilityDayRead,
    AvailabilityResponse,
    SlotRead,
)
from ..services.discount_resolver import make_promo_resolver
from ..services.slots import SlotsDbStore, get_availability, get_availability_config
from ..services.slots.errors import (
    AvailabilityUnavailableError,
    InvalidRangeError,
    ServiceNotFoundError,
    SlotConfigurationError,
)
from ..services.slots.models import (
    AvailabilityOptions,
    AvailabilityRequest,
    AvailabilityResult,
    naive_local,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

TRUTHY = ("1", "true", "yes")


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    response_model_exclude_none=True,
)
def get_bookings_availability(
    service_id: str | None = Query(None, alias="serviceId"),
    date_param: str | None = Query(None, alias="date"),
    days: str | None = None,
    end: str | None = None,
    include_price: str | None = Query(None, alias="includePrice"),
    currency: str | None = None,
    promo_code: str | None = Query(None, alias="promoCode"),
    team_member_id: str | None = Query(None, alias="teamMemberId"),
    booking_type: str | None = Query(None, alias="bookingType"),
    db: Session = Depends(get_db),
):
    """Get available time slots for a service."""
    if not service_id:
        raise HTTPException(status_code=400, detail="Service ID is required")

    config = get_availability_config()
    now = datetime.now()
    pricing = (include_price or "").strip().lower() in TRUTHY

    try:
        range_start = _parse_instant(date_param, "date") if date_param else now
        if end:
            range_end = _parse_instant(end, "end")
        else:
            span = _parse_days(days, config.default_range_days)
            try:
                range_end = range_start + timedelta(days=span)
            except OverflowError:
                raise InvalidRangeError(f"days out of range: {span}")

        request = AvailabilityRequest(
            service_id=service_id,
            range_start=range_start,
            range_end=range_end,
            resource_filter=team_member_id or None,
            options=AvailabilityOptions(
                include_pricing=pricing,
                currency=(currency or "").strip() or None,
                promo_code=(promo_code or "").strip() or None,
                now=now,
                emergency=(booking_type or "").strip().upper() == "EMERGENCY",
            ),
        )
        result = get_availability(
            request,
            store=SlotsDbStore(db, config),
            promo_resolver=make_promo_resolver(db) if pricing else None,
            config=config,
        )
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ServiceNotFoundError:
        raise HTTPException(status_code=404, detail="Service not available for booking")
    except SlotConfigurationError as e:
        logger.warning("Service %s misconfigured: %s", service_id, e)
        raise HTTPException(status_code=422, detail=str(e))
    except AvailabilityUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to compute availability")

    return _to_response(result)


def _parse_instant(value: str, name: str) -> datetime:
    try:
        return naive_local(datetime.fromisoformat(value.strip()))
    except (ValueError, OverflowError):
        raise InvalidRangeError(f"Invalid {name}: {value!r}")


def _parse_days(value: str | None, default: int) -> int:
    """Range length in days; anything below 1 counts as 1."""
    if value is None or not value.strip():
        return default
    try:
        return max(1, int(value.strip()))
    except ValueError:
        raise InvalidRangeError(f"Invalid days: {value!r}")


def _to_response(result: AvailabilityResult) -> AvailabilityResponse:
    return AvailabilityResponse(
        service_id=str(result.service_id),
        slot_duration_minutes=result.slot_duration_minutes,
        days=[
            AvailabilityDayRead(
                date=day.date,
                slots=[
                    SlotRead(
                        start=slot.start,
                        end=slot.end,
                        available=slot.available,
                        price_minor_units=slot.price_minor_units,
                        currency=slot.currency,
                    )
                    for slot in day.slots
                ],
            )
            for day in result.days
        ],
    )
