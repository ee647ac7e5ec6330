"""
Tests for the availability orchestration layer.
"""

from datetime import date, datetime, time, timedelta

import pytest

from backend.app.services.slots.availability import get_availability
from backend.app.services.slots.errors import (
    AvailabilityUnavailableError,
    InvalidRangeError,
    ServiceNotFoundError,
    SlotConfigurationError,
)
from backend.app.services.slots.models import (
    AvailabilityOptions,
    AvailabilityRequest,
    ExistingBooking,
    PromoDiscount,
)

MONDAY = datetime(2025, 1, 6)
SUNDAY_BEFORE = MONDAY - timedelta(days=1)


def _request(start=MONDAY, end=None, resource=None, **options):
    options.setdefault("now", SUNDAY_BEFORE)
    return AvailabilityRequest(
        service_id="svc-1",
        range_start=start,
        range_end=end or start + timedelta(days=1),
        resource_filter=resource,
        options=AvailabilityOptions(**options),
    )


def _all_slots(result):
    return [slot for day in result.days for slot in day.slots]


def _raise_unavailable(*args, **kwargs):
    raise AvailabilityUnavailableError("Failed to compute availability")


class TestGetAvailability:

    def test_groups_available_slots_by_day(self, make_service, make_store, config):
        store = make_store([make_service()])
        result = get_availability(_request(end=MONDAY + timedelta(days=2)), store, config=config)

        assert result.service_id == "svc-1"
        assert result.slot_duration_minutes == 60
        assert [d.date for d in result.days] == ["2025-01-06", "2025-01-07"]
        assert all(len(d.slots) == 8 for d in result.days)

    def test_only_available_slots_are_returned(self, make_service, make_store, config):
        booking = ExistingBooking(start=MONDAY.replace(hour=10), end=MONDAY.replace(hour=11))
        store = make_store([make_service()], [booking])
        result = get_availability(_request(), store, config=config)

        slots = _all_slots(result)
        assert all(s.available for s in slots)
        assert time(10) not in [s.start.time() for s in slots]
        assert len(slots) == 7

    def test_days_without_available_slots_are_omitted(self, make_service, make_store, config):
        service = make_service(max_daily_bookings=1)
        booking = ExistingBooking(start=MONDAY.replace(hour=18), end=MONDAY.replace(hour=19))
        store = make_store([service], [booking])
        result = get_availability(_request(end=MONDAY + timedelta(days=2)), store, config=config)

        assert [d.date for d in result.days] == ["2025-01-07"]

    def test_unknown_service(self, make_store, config):
        with pytest.raises(ServiceNotFoundError):
            get_availability(_request(), make_store(), config=config)

    def test_unknown_service_does_no_work(self, make_store, config):
        store = make_store()
        with pytest.raises(ServiceNotFoundError):
            get_availability(_request(), store, config=config)
        assert store.booking_calls == []

    def test_range_end_before_start(self, make_service, make_store, config):
        with pytest.raises(InvalidRangeError):
            get_availability(_request(end=MONDAY - timedelta(hours=1)), make_store([make_service()]), config=config)

    def test_bad_duration_is_configuration_error(self, make_service, make_store, config):
        store = make_store([make_service(duration_minutes=0)])
        with pytest.raises(SlotConfigurationError):
            get_availability(_request(), store, config=config)

    def test_fetches_whole_days_plus_buffer(self, make_service, make_store, config):
        store = make_store([make_service(buffer_minutes=30)])
        get_availability(_request(start=MONDAY.replace(hour=12), resource="5"), store, config=config)

        _, start, end, resource = store.booking_calls[0]
        assert start == MONDAY - timedelta(minutes=30)
        assert end == MONDAY + timedelta(days=2, minutes=30)
        assert resource == "5"

    def test_range_on_last_representable_day(self, make_service, make_store, config):
        last_day = datetime(9999, 12, 31)
        request = _request(start=last_day, end=last_day.replace(hour=23))
        with pytest.raises(InvalidRangeError):
            get_availability(request, make_store([make_service()]), config=config)

    def test_store_failure_propagates(self, make_service, make_store, config):
        store = make_store([make_service()])
        store.fetch_bookings_in_range = _raise_unavailable
        with pytest.raises(AvailabilityUnavailableError):
            get_availability(_request(), store, config=config)


class TestBookingWindow:

    def test_inverted_window_gives_empty_result(self, make_service, make_store, config):
        service = make_service(advance_booking_days=1)
        store = make_store([service])
        request = _request(start=MONDAY + timedelta(days=7))
        result = get_availability(request, store, config=config)

        assert result.days == []
        assert store.booking_calls == []

    def test_min_advance_hides_early_slots(self, make_service, make_store, config):
        service = make_service(min_advance_hours=3)
        result = get_availability(_request(now=MONDAY.replace(hour=8)), make_store([service]), config=config)

        assert _all_slots(result)[0].start.time() == time(11)

    def test_min_advance_beyond_range(self, make_service, make_store, config):
        service = make_service(min_advance_hours=48)
        result = get_availability(_request(now=MONDAY.replace(hour=8)), make_store([service]), config=config)

        assert result.days == []

    def test_emergency_bypasses_min_advance(self, make_service, make_store, config):
        service = make_service(min_advance_hours=48)
        request = _request(now=MONDAY.replace(hour=8), emergency=True)
        result = get_availability(request, make_store([service]), config=config)

        assert [s.start.time() for s in _all_slots(result)] == [time(h) for h in range(9, 17)]

    def test_advance_days_cap(self, make_service, make_store, config):
        service = make_service(advance_booking_days=2)
        request = _request(end=MONDAY + timedelta(days=7), now=MONDAY)
        result = get_availability(request, make_store([service]), config=config)

        # Window ends Wednesday 00:00
        assert [d.date for d in result.days] == ["2025-01-06", "2025-01-07"]


class TestBlackout:

    def test_blacked_out_day_is_removed(self, make_service, make_store, config):
        service = make_service(blackout_dates=frozenset({date(2025, 1, 6)}))
        result = get_availability(_request(end=MONDAY + timedelta(days=2)), make_store([service]), config=config)

        assert [d.date for d in result.days] == ["2025-01-07"]

    def test_all_days_blacked_out(self, make_service, make_store, config):
        service = make_service(blackout_dates=frozenset({date(2025, 1, 6), date(2025, 1, 7)}))
        result = get_availability(_request(end=MONDAY + timedelta(days=2)), make_store([service]), config=config)

        assert result.days == []


class TestPricing:

    def test_no_pricing_by_default(self, make_service, make_store, config):
        result = get_availability(_request(), make_store([make_service()]), config=config)

        assert all(s.price_minor_units is None and s.currency is None for s in _all_slots(result))

    def test_base_price_on_every_slot(self, make_service, make_store, config):
        result = get_availability(_request(include_pricing=True), make_store([make_service()]), config=config)

        slots = _all_slots(result)
        assert slots
        assert {(s.price_minor_units, s.currency) for s in slots} == {(10000, "USD")}

    def test_promo_resolved_once_per_request(self, make_service, make_store, make_resolver, config):
        resolver = make_resolver(result=PromoDiscount(label="Promo SAVE15", amount_minor_units=-1500))
        request = _request(end=MONDAY + timedelta(days=5), include_pricing=True, promo_code="SAVE15")
        result = get_availability(request, make_store([make_service()]), promo_resolver=resolver, config=config)

        slots = _all_slots(result)
        assert len(slots) == 40
        assert resolver.calls == [("SAVE15", "svc-1")]
        assert {s.price_minor_units for s in slots} == {8500}

    def test_unknown_promo_omits_prices(self, make_service, make_store, make_resolver, config):
        resolver = make_resolver(result=None)
        request = _request(include_pricing=True, promo_code="NOPE")
        result = get_availability(request, make_store([make_service()]), promo_resolver=resolver, config=config)

        slots = _all_slots(result)
        assert len(slots) == 8
        assert all(s.price_minor_units is None for s in slots)

    def test_failing_resolver_omits_prices(self, make_service, make_store, make_resolver, config):
        resolver = make_resolver(error=RuntimeError("promo service down"))
        request = _request(include_pricing=True, promo_code="WELCOME10")
        result = get_availability(request, make_store([make_service()]), promo_resolver=resolver, config=config)

        slots = _all_slots(result)
        assert len(slots) == 8
        assert all(s.price_minor_units is None for s in slots)

    def test_requested_currency(self, make_service, make_store, config):
        request = _request(include_pricing=True, currency="eur")
        result = get_availability(request, make_store([make_service()]), config=config)

        assert {s.currency for s in _all_slots(result)} == {"EUR"}
