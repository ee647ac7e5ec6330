# backend/app/services/slots/pricing.py
"""
Slot price calculation.

One price is computed per availability request and attached to every
available slot, so a request returning 200 slots does one promo lookup,
not 200.

price = max(0, base_price + promo_adjustment)

Pricing never fails the request: a promo code that cannot be resolved
(unknown, expired, or the resolver raised) yields no price at all and
the slots go out unpriced.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from .models import AvailabilityDay, Price, PromoDiscount, ServiceConfig

logger = logging.getLogger(__name__)

PromoResolver = Callable[[str, Any], Optional[PromoDiscount]]


def resolve_currency(
    service: ServiceConfig,
    requested: Optional[str],
    default_currency: str,
) -> str:
    """Request currency, then service currency, then the default."""
    return (requested or service.currency or default_currency).strip().upper()


def compute_price_once(
    service: ServiceConfig,
    reference_instant: datetime,
    promo_code: Optional[str] = None,
    currency: Optional[str] = None,
    promo_resolver: Optional[PromoResolver] = None,
    default_currency: str = "USD",
) -> Optional[Price]:
    """
    Compute the price of one slot of the service.

    The price does not vary with time: every slot of the request gets the
    same snapshot. reference_instant only identifies that snapshot in logs.

    Args:
        service: Service being priced
        reference_instant: Start of the first available slot (or now)
        promo_code: Optional promo code, already trimmed
        currency: Requested currency override
        promo_resolver: (code, service_id) -> PromoDiscount | None

    Returns:
        Price, or None when the promo could not be applied.
    """
    adjustments: list[PromoDiscount] = []

    if promo_code:
        if promo_resolver is None:
            logger.warning("Promo code given for service %s but no resolver configured", service.id)
            return None
        try:
            promo = promo_resolver(promo_code, service.id)
        except Exception:
            logger.exception("Promo resolution failed for service %s", service.id)
            return None
        if promo is None:
            logger.warning("Unknown promo code %r for service %s, omitting prices", promo_code, service.id)
            return None
        adjustments.append(promo)

    base = service.base_price_minor_units
    total = max(0, base + sum(a.amount_minor_units for a in adjustments))

    logger.debug(
        "Priced service %s at %s: base=%d total=%d",
        service.id,
        reference_instant.isoformat(),
        base,
        total,
    )
    return Price(
        amount_minor_units=total,
        currency=resolve_currency(service, currency, default_currency),
        base_minor_units=base,
        adjustments=tuple(adjustments),
    )


def annotate_days(days: list[AvailabilityDay], price: Optional[Price]) -> list[AvailabilityDay]:
    """Attach the same price snapshot to every available slot."""
    if price is None:
        return days
    for day in days:
        day.slots = [
            slot.priced(price.amount_minor_units, price.currency) if slot.available else slot
            for slot in day.slots
        ]
    return days
