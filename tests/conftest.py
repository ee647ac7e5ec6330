"""
Shared fixtures: in-memory collaborators and a service factory.
"""

from dataclasses import replace
from datetime import datetime

import pytest

from backend.app.services.slots.config import AvailabilityConfig
from backend.app.services.slots.models import ServiceConfig

# 2025-01-06 is a Monday
MONDAY = datetime(2025, 1, 6)

WEEKDAY_HOURS = {str(day): "09:00-17:00" for day in range(1, 6)}  # Mon-Fri


class InMemoryStore:
    """Minimal stub matching AvailabilityStore."""

    def __init__(self, services=None, bookings=None):
        self.services = {s.id: s for s in services or []}
        self.bookings = list(bookings or [])
        self.booking_calls = []

    def fetch_service_config(self, service_id):
        return self.services.get(service_id)

    def fetch_bookings_in_range(self, service_id, start, end, resource_filter=None):
        self.booking_calls.append((service_id, start, end, resource_filter))
        return [b for b in self.bookings if b.start < end and b.end > start]


class CountingResolver:
    """Promo resolver that records every call."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def __call__(self, code, service_id):
        self.calls.append((code, service_id))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def config():
    return AvailabilityConfig(default_currency="USD")


@pytest.fixture
def make_service():
    def _make(**overrides):
        service = ServiceConfig(
            id="svc-1",
            duration_minutes=60,
            business_hours=WEEKDAY_HOURS,
            base_price_minor_units=10000,
        )
        return replace(service, **overrides)

    return _make


@pytest.fixture
def make_store():
    return InMemoryStore


@pytest.fixture
def make_resolver():
    return CountingResolver
