"""Unit tests for totals and minor-unit conversion."""

from decimal import Decimal
from types import SimpleNamespace

from storefront.services.pricing import compute_totals, shipping_for, to_minor_units


def _line(price: str, quantity: int = 1):
    return SimpleNamespace(unit_price=Decimal(price), quantity=quantity)


class TestComputeTotals:

    def test_free_shipping_at_or_above_threshold(self):
        totals = compute_totals([_line("79.00")])
        assert totals.subtotal == Decimal("79.00")
        assert totals.shipping == Decimal("0.00")
        assert totals.total == Decimal("79.00")

    def test_exactly_fifty_ships_free(self):
        totals = compute_totals([_line("25.00", 2)])
        assert totals.shipping == Decimal("0.00")

    def test_flat_fee_below_threshold(self):
        totals = compute_totals([_line("18.00"), _line("24.00")])
        assert totals.subtotal == Decimal("42.00")
        assert totals.shipping == Decimal("10.00")
        assert totals.total == Decimal("52.00")

    def test_quantity_multiplies_unit_price(self):
        totals = compute_totals([_line("18.00", 3)])
        assert totals.subtotal == Decimal("54.00")

    def test_total_is_subtotal_plus_shipping(self):
        totals = compute_totals([_line("12.34", 2), _line("0.99", 5)])
        assert totals.total == totals.subtotal + totals.shipping

    def test_recomputing_gives_identical_totals(self):
        lines = [_line("19.99", 2), _line("5.50")]
        assert compute_totals(lines) == compute_totals(lines)

    def test_shipping_for_just_under_threshold(self):
        assert shipping_for(Decimal("49.99")) == Decimal("10.00")


class TestToMinorUnits:

    def test_whole_amount(self):
        assert to_minor_units(Decimal("79.00")) == 7900

    def test_cents(self):
        assert to_minor_units(Decimal("19.99")) == 1999

    def test_half_cent_rounds_up(self):
        assert to_minor_units(Decimal("0.125")) == 13
        assert to_minor_units(Decimal("1.005")) == 101

    def test_below_half_rounds_down(self):
        assert to_minor_units(Decimal("1.004")) == 100

    def test_zero(self):
        assert to_minor_units(Decimal("0")) == 0
