"""Cart totals and currency conversion.

``compute_totals`` is the only place totals are derived; checkout, the cart
quote endpoint and the stored order all go through it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from storefront.core.config import settings

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    shipping: Decimal
    total: Decimal


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def shipping_for(subtotal: Decimal) -> Decimal:
    if subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return Decimal("0.00")
    return quantize(settings.FLAT_SHIPPING_FEE)


def compute_totals(lines: Iterable) -> Totals:
    """Totals over re-validated lines (anything with ``unit_price`` and ``quantity``)."""
    subtotal = quantize(sum((line.unit_price * line.quantity for line in lines), Decimal("0")))
    shipping = shipping_for(subtotal)
    return Totals(subtotal=subtotal, shipping=shipping, total=subtotal + shipping)


def to_minor_units(amount: Decimal) -> int:
    """Major currency units to the integer cents Stripe expects, rounding half-up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
