"""Checkout: from a submitted cart to a pending order and a Stripe redirect.

Steps, each aborting the whole checkout on failure:

1. Intake checks on the email and the item list.
2. Re-validation of every line against the catalog (existence, active flag,
   price within tolerance).
3. Totals from the stored prices; client totals are never used.
4. Stripe Checkout Session creation.
5. Pending order persistence keyed by the Stripe session id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from storefront.core.errors import EmptyCart, InvalidEmail
from storefront.schemas import CheckoutItem, CheckoutRequest
from storefront.services.catalog import revalidate_cart
from storefront.services.orders import create_pending_order
from storefront.services.payments import StripeGateway, build_session_params
from storefront.services.pricing import Totals, compute_totals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    url: str
    session_id: str
    order_id: int


def validate_intake(request: CheckoutRequest) -> tuple[str, list[CheckoutItem]]:
    # deliberately loose, the payment page collects the real address
    if not request.email or "@" not in request.email:
        raise InvalidEmail()
    if not request.items:
        raise EmptyCart()
    return request.email, request.items


def quote_cart(db: Session, items: list[CheckoutItem] | None) -> Totals:
    if not items:
        raise EmptyCart()
    return compute_totals(revalidate_cart(db, items))


def place_order(db: Session, gateway: StripeGateway, request: CheckoutRequest) -> CheckoutResult:
    email, items = validate_intake(request)
    logger.info("Checkout started for %d item(s)", len(items))

    lines = revalidate_cart(db, items)
    totals = compute_totals(lines)

    session = gateway.create_checkout_session(build_session_params(lines, totals, email))
    order = create_pending_order(db, session.id, email, lines, totals)

    return CheckoutResult(url=session.url, session_id=session.id, order_id=order.id)
