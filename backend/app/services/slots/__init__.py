# backend/app/services/slots/__init__.py
"""
Slots calculation module.

Pure calculation (business hours, booking window, slot grid, daily cap,
blackout days, pricing) plus the SQLAlchemy store that feeds it.
"""

from .config import AvailabilityConfig, get_availability_config
from .business_hours import normalize_business_hours, resolve_business_hours
from .window import resolve_window, clamp_range
from .calculator import generate_slots
from .daily_cap import enforce_daily_cap
from .blackout import filter_blackout_days
from .pricing import compute_price_once
from .availability import get_availability
from .store import SlotsDbStore

__all__ = [
    "AvailabilityConfig",
    "get_availability_config",
    "normalize_business_hours",
    "resolve_business_hours",
    "resolve_window",
    "clamp_range",
    "generate_slots",
    "enforce_daily_cap",
    "filter_blackout_days",
    "compute_price_once",
    "get_availability",
    "SlotsDbStore",
]
