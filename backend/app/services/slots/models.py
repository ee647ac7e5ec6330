# backend/app/services/slots/models.py
"""
Plain data carriers for availability calculation.

Everything here is built per request and thrown away afterwards.
Instants are naive datetimes already expressed in the service's
operating wall clock; the core never converts timezones.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Any, Optional


@dataclass(frozen=True)
class DayHours:
    """Open interval of one weekday, in minutes from midnight."""
    start_minutes: int
    end_minutes: int


# weekday index (0 = Sunday ... 6 = Saturday) -> DayHours
BusinessHours = dict[int, DayHours]


@dataclass(frozen=True)
class ServiceConfig:
    """
    Read-only view of a bookable service.

    Attributes:
        duration_minutes: Length of one slot
        business_hours: Raw hours config as stored (any supported shape)
        buffer_minutes: Idle time required around existing bookings
        max_daily_bookings: Daily cap, 0 = unlimited
        min_advance_hours: Lead time before a slot may start
        advance_booking_days: How far ahead bookings are allowed, None = no limit
        blackout_dates: Days on which nothing is offered
        base_price_minor_units: Price before promo, in minor units
    """
    id: Any
    duration_minutes: int
    business_hours: Any = None
    buffer_minutes: int = 0
    max_daily_bookings: int = 0
    min_advance_hours: int = 0
    advance_booking_days: Optional[int] = None
    blackout_dates: frozenset[date] = frozenset()
    base_price_minor_units: int = 0
    currency: Optional[str] = None


@dataclass(frozen=True)
class ExistingBooking:
    start: datetime
    end: datetime
    resource_id: Any = None


@dataclass(frozen=True)
class TimeSlot:
    start: datetime
    end: datetime
    available: bool = True
    price_minor_units: Optional[int] = None
    currency: Optional[str] = None

    @property
    def day(self) -> date:
        return self.start.date()

    def blocked(self) -> "TimeSlot":
        return replace(self, available=False)

    def priced(self, amount_minor_units: int, currency: str) -> "TimeSlot":
        return replace(self, price_minor_units=amount_minor_units, currency=currency)


@dataclass(frozen=True)
class BookingWindow:
    """Legal booking window. latest=None means no upper clamp."""
    earliest: datetime
    latest: Optional[datetime] = None

    def clamp(
        self,
        range_start: datetime,
        range_end: datetime,
    ) -> Optional[tuple[datetime, datetime]]:
        """
        Intersect the requested range with the window.

        Returns:
            (effective_start, effective_end) or None when the result is empty.
        """
        effective_start = max(range_start, self.earliest)
        effective_end = range_end if self.latest is None else min(range_end, self.latest)
        if effective_start > effective_end:
            return None
        return effective_start, effective_end


@dataclass(frozen=True)
class PromoDiscount:
    """Resolved promo. amount_minor_units is a signed adjustment (negative = discount)."""
    label: str
    amount_minor_units: int


@dataclass(frozen=True)
class Price:
    amount_minor_units: int
    currency: str
    base_minor_units: int = 0
    adjustments: tuple[PromoDiscount, ...] = ()


@dataclass(frozen=True)
class AvailabilityOptions:
    include_pricing: bool = False
    currency: Optional[str] = None
    promo_code: Optional[str] = None
    now: Optional[datetime] = None
    emergency: bool = False


@dataclass(frozen=True)
class AvailabilityRequest:
    service_id: Any
    range_start: datetime
    range_end: datetime
    resource_filter: Any = None
    options: AvailabilityOptions = field(default_factory=AvailabilityOptions)


@dataclass
class AvailabilityDay:
    date: str  # "YYYY-MM-DD"
    slots: list[TimeSlot] = field(default_factory=list)


@dataclass
class AvailabilityResult:
    service_id: Any
    slot_duration_minutes: int
    days: list[AvailabilityDay] = field(default_factory=list)

    @property
    def slot_count(self) -> int:
        return sum(len(day.slots) for day in self.days)


def day_bounds(dt: datetime) -> tuple[datetime, datetime]:
    """Start of the calendar day and start of the next one."""
    start = datetime.combine(dt.date(), datetime.min.time())
    return start, start + timedelta(days=1)


def naive_local(dt: datetime) -> datetime:
    """Aware datetimes are moved to the local wall clock and stripped of tzinfo."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)
