"""Cart re-validation against the catalog."""

from decimal import Decimal

import pytest

from storefront.core.errors import PriceMismatch, ProductInactive, ProductsNotFound
from storefront.schemas import CheckoutItem
from storefront.services.catalog import revalidate_cart


def _item(product_id: int, price: str, quantity: int = 1) -> CheckoutItem:
    return CheckoutItem(id=product_id, name="client name", price=Decimal(price), quantity=quantity)


class TestRevalidateCart:

    def test_binds_stored_products(self, db, catalog):
        lines = revalidate_cart(db, [_item(1, "79.00"), _item(3, "18.00", 2)])
        assert [line.product.id for line in lines] == [1, 3]
        assert lines[1].quantity == 2
        assert lines[1].line_total == Decimal("36.00")

    def test_uses_stored_price_within_tolerance(self, db, catalog):
        lines = revalidate_cart(db, [_item(1, "79.009")])
        assert lines[0].unit_price == Decimal("79.00")

    def test_difference_of_exactly_one_cent_is_accepted(self, db, catalog):
        lines = revalidate_cart(db, [_item(1, "78.99")])
        assert lines[0].unit_price == Decimal("79.00")

    def test_price_drift_rejected(self, db, catalog):
        with pytest.raises(PriceMismatch):
            revalidate_cart(db, [_item(1, "79.00"), _item(2, "25.00")])

    def test_unknown_product_rejected(self, db, catalog):
        with pytest.raises(ProductsNotFound, match="could not be found"):
            revalidate_cart(db, [_item(1, "79.00"), _item(99, "10.00")])

    def test_duplicate_lines_rejected(self, db, catalog):
        with pytest.raises(ProductsNotFound):
            revalidate_cart(db, [_item(1, "79.00"), _item(1, "79.00")])

    def test_inactive_product_rejected_by_name(self, db, catalog):
        with pytest.raises(ProductInactive, match="Glow Massage Candle is no longer available"):
            revalidate_cart(db, [_item(4, "22.00")])

    def test_falls_back_to_client_image(self, db, catalog):
        item = CheckoutItem(id=2, price=Decimal("28.00"), quantity=1, imageUrl="https://img.test/client.jpg")
        lines = revalidate_cart(db, [item])
        assert lines[0].image_url == "https://img.test/client.jpg"
