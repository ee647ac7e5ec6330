# backend/app/services/slots/store.py
"""
SQLAlchemy-backed data access for availability.

Turns ORM rows into the plain dataclasses the calculation works on.
Any database failure surfaces as AvailabilityUnavailableError.
"""

import json
import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models.generated import Bookings as DBBooking, Services as DBService
from .blackout import date_key
from .config import AvailabilityConfig, get_availability_config
from .errors import AvailabilityUnavailableError
from .models import ExistingBooking, ServiceConfig, naive_local

logger = logging.getLogger(__name__)

ACTIVE_BOOKING_STATUSES = ("pending", "confirmed")


class SlotsDbStore:
    """Read-only view of services and bookings for availability."""

    def __init__(self, db: Session, config: AvailabilityConfig | None = None):
        self.db = db
        self.config = config or get_availability_config()

    # ── Services ─────────────────────────────────────────────────────────

    def fetch_service_config(self, service_id: Any) -> Optional[ServiceConfig]:
        """Bookable service by ID, or None if unknown, inactive or not bookable."""
        pk = _int_id(service_id)
        if pk is None:
            return None

        try:
            service = self.db.get(DBService, pk)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load service %s", service_id)
            raise AvailabilityUnavailableError("Failed to compute availability") from exc

        if not service or not service.is_active or not service.booking_enabled:
            return None
        return self._to_config(service)

    def _to_config(self, service: DBService) -> ServiceConfig:
        duration = service.duration_min
        if duration is None:
            duration = self.config.default_duration_minutes

        return ServiceConfig(
            id=service.id,
            duration_minutes=duration,
            business_hours=_load_json(service.business_hours, "business_hours", service.id),
            buffer_minutes=service.buffer_min or 0,
            max_daily_bookings=service.max_daily_bookings or 0,
            min_advance_hours=service.min_advance_hours or 0,
            advance_booking_days=service.advance_booking_days,
            blackout_dates=_blackout_dates(service.blackout_dates, service.id),
            base_price_minor_units=round((service.price or 0) * 100),
            currency=service.currency,
        )

    # ── Bookings ─────────────────────────────────────────────────────────

    def fetch_bookings_in_range(
        self,
        service_id: Any,
        start: datetime,
        end: datetime,
        resource_filter: Any = None,
    ) -> list[ExistingBooking]:
        """
        Active bookings of the service overlapping [start, end].

        With a resource filter, bookings of other team members are left
        out; bookings without a team member are always included.
        """
        # Coarse day filter in SQL (one day of lookback for overnight
        # bookings), exact overlap check after parsing.
        date_from = (start.date() - timedelta(days=1)).isoformat()
        date_to = end.date().isoformat()

        filters = [
            DBBooking.service_id == service_id,
            DBBooking.status.in_(ACTIVE_BOOKING_STATUSES),
            func.date(DBBooking.date_start) >= date_from,
            func.date(DBBooking.date_start) <= date_to,
        ]
        if resource_filter is not None:
            member_id = _int_id(resource_filter)
            if member_id is None:
                filters.append(DBBooking.team_member_id.is_(None))
            else:
                filters.append(
                    (DBBooking.team_member_id == member_id) | (DBBooking.team_member_id.is_(None))
                )

        try:
            rows = self.db.query(DBBooking).filter(*filters).all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to load bookings for service %s", service_id)
            raise AvailabilityUnavailableError("Failed to compute availability") from exc

        bookings = []
        for row in rows:
            booking = _to_booking(row)
            if booking is None:
                continue
            if booking.start < end and booking.end > start:
                bookings.append(booking)
        return bookings


# ── Helpers ──────────────────────────────────────────────────────────────


def _int_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _load_json(raw: Optional[str], field: str, service_id: int) -> Any:
    """
    Decode a JSON column. Text that is not JSON is returned as-is so the
    business hours fallback policy gets to decide about it.
    """
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Service %s: %s is not valid JSON", service_id, field)
        return raw


def _blackout_dates(raw: Optional[str], service_id: int) -> frozenset[date]:
    values = _load_json(raw, "blackout_dates", service_id)
    if not isinstance(values, list):
        return frozenset()
    keys = (date_key(value) for value in values)
    return frozenset(date.fromisoformat(key) for key in keys if key is not None)


def _to_booking(row: DBBooking) -> Optional[ExistingBooking]:
    try:
        start = naive_local(datetime.fromisoformat(row.date_start))
        if row.date_end:
            end = naive_local(datetime.fromisoformat(row.date_end))
        else:
            end = start + timedelta(minutes=row.duration_minutes or 0)
    except (TypeError, ValueError):
        logger.warning("Skipping booking %s with unparseable dates", row.id)
        return None
    return ExistingBooking(start=start, end=end, resource_id=row.team_member_id)
