"""Tests for cart totals and the cart view model."""

from decimal import Decimal

from storefront.schemas.cart import CartLine, CartView
from storefront.services.cart_totals import compute_totals


def _line(product_id, price, quantity):
    return CartLine(product_id=product_id, price=Decimal(price), quantity=quantity)


class TestComputeTotals:
    def test_empty_list(self):
        totals = compute_totals([])
        assert totals.total == Decimal("0")
        assert totals.item_count == 0

    def test_sums_price_times_quantity(self):
        items = [_line(1, "12.50", 2), _line(2, "4.25", 3), _line(3, "1.00", 1)]
        totals = compute_totals(items)
        assert totals.total == Decimal("12.50") * 2 + Decimal("4.25") * 3 + Decimal("1.00")
        assert totals.item_count == 6

    def test_no_float_drift(self):
        totals = compute_totals([_line(1, "0.10", 3)])
        assert totals.total == Decimal("0.30")


class TestCartView:
    def test_empty_is_zero_value(self):
        cart = CartView.empty()
        assert cart.items == []
        assert cart.total == 0
        assert cart.item_count == 0

    def test_from_items_recomputes_totals(self):
        cart = CartView.from_items([_line(1, "2.50", 4)])
        assert cart.total == Decimal("10.00")
        assert cart.item_count == 4

    def test_line_id_mirrors_product_id(self):
        assert _line(7, "1", 1).id == 7

    def test_json_uses_camel_case_and_rounds_total(self):
        cart = CartView.from_items([_line(1, "0.005", 1)])
        data = cart.model_dump(mode="json", by_alias=True)
        assert set(data) == {"items", "total", "itemCount"}
        assert set(data["items"][0]) == {
            "productId",
            "id",
            "name",
            "price",
            "image",
            "quantity",
            "inStock",
        }
        assert data["total"] == 0.01
        # Unrounded internally
        assert cart.total == Decimal("0.005")

    def test_find(self):
        cart = CartView.from_items([_line(3, "1", 2), _line(1, "1", 5)])
        assert cart.find(1).quantity == 5
        assert cart.find(42) is None
