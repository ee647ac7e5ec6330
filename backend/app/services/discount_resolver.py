# backend/app/services/discount_resolver.py
"""
Promo code resolution for slot pricing.

Rule: promos do NOT stack. Among all rows matching the code the single
biggest discount wins.

- service promo: promo_codes WHERE service_id = X
- global promo:  promo_codes WHERE service_id IS NULL

A row gives either discount_percent (of the service base price) or a
fixed amount_minor. The result is a negative adjustment in minor units.
"""

import logging
from datetime import date
from typing import Any, Callable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.generated import (
    PromoCodes as DBPromoCode,
    Services as DBService,
)
from .slots.models import PromoDiscount

logger = logging.getLogger(__name__)


def find_promo(
    db: Session,
    code: str,
    service_id: Any,
    today: Optional[date] = None,
) -> Optional[PromoDiscount]:
    """
    Find the best applicable promo for a service.

    Returns:
        PromoDiscount, or None if the code is unknown, inactive, expired
        or does not apply to the service.
    """
    code = (code or "").strip().upper()
    if not code:
        return None
    today_str = (today or date.today()).isoformat()

    service = db.get(DBService, service_id)
    if not service:
        return None
    base_minor = round((service.price or 0) * 100)

    promos = (
        db.query(DBPromoCode)
        .filter(
            func.upper(DBPromoCode.code) == code,
            DBPromoCode.is_active == 1,
            (DBPromoCode.service_id == service.id) | (DBPromoCode.service_id.is_(None)),
        )
        .all()
    )

    best: Optional[PromoDiscount] = None

    for promo in promos:
        # Check valid_from
        if promo.valid_from and promo.valid_from[:10] > today_str:
            continue
        # Check valid_to
        if promo.valid_to and promo.valid_to[:10] < today_str:
            continue

        amount = _discount_minor(promo, base_minor)
        if amount <= 0:
            continue
        if best is None or amount > -best.amount_minor_units:
            best = PromoDiscount(
                label=promo.label or f"Promo {code}",
                amount_minor_units=-amount,
            )

    if best is None:
        logger.info("Promo code %s not applicable to service %s", code, service.id)
    return best


def _discount_minor(promo: DBPromoCode, base_minor: int) -> int:
    """Discount size in minor units (positive)."""
    if promo.discount_percent:
        return round(base_minor * promo.discount_percent / 100)
    return promo.amount_minor or 0


def make_promo_resolver(db: Session, today: Optional[date] = None) -> Callable[[str, Any], Optional[PromoDiscount]]:
    """Bind find_promo to a session: (code, service_id) -> PromoDiscount | None."""

    def resolve(code: str, service_id: Any) -> Optional[PromoDiscount]:
        return find_promo(db, code, service_id, today)

    return resolve
