"""Re-validation of a submitted cart against the live catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.errors import (
    PriceMismatch,
    ProductInactive,
    ProductNotFound,
    ProductsNotFound,
)
from storefront.db.models import Product
from storefront.schemas import CheckoutItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidatedLine:
    """A cart line bound to its catalog row; ``unit_price`` is the stored price."""

    product: Product
    quantity: int
    unit_price: Decimal
    image_url: str | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


def revalidate_cart(db: Session, items: list[CheckoutItem]) -> list[ValidatedLine]:
    """Bind every submitted item to its current catalog row.

    Fails on the first item that is missing, inactive, or whose submitted price
    drifted from the stored one by more than the configured tolerance. There
    is no partial result.
    """
    product_ids = [item.id for item in items]
    rows = db.execute(select(Product).where(Product.id.in_(product_ids))).scalars().all()

    if len(rows) != len(items):
        logger.warning("Checkout rejected: %d of %d products found", len(rows), len(items))
        raise ProductsNotFound()

    products = {p.id: p for p in rows}
    lines: list[ValidatedLine] = []

    for item in items:
        product = products.get(item.id)
        if product is None:
            logger.warning("Checkout rejected: product %s not found", item.id)
            raise ProductNotFound(item.id)
        if not product.active:
            logger.warning("Checkout rejected: product %s is inactive", product.id)
            raise ProductInactive(product.name)
        if abs(Decimal(product.price) - item.price) > settings.PRICE_TOLERANCE:
            logger.warning(
                "Checkout rejected: price for product %s is %s, cart has %s",
                product.id, product.price, item.price,
            )
            raise PriceMismatch()

        lines.append(
            ValidatedLine(
                product=product,
                quantity=item.quantity,
                unit_price=Decimal(product.price),
                image_url=product.image_url or item.image_url,
            )
        )

    return lines
