"""Tests for the anonymous (local storage) cart."""

import json
import logging
from decimal import Decimal

import pytest

from conftest import quantities
from storefront.client.local_store import FileStorage, LocalCartStore
from storefront.schemas.cart import CartLine, CartView


class BrokenStorage(dict):
    """Storage whose writes fail, like a full browser quota."""

    def __setitem__(self, key, value):
        raise OSError("quota exceeded")


def _cart(*lines):
    return CartView.from_items(
        CartLine(product_id=pid, name=f"Product {pid}", price=Decimal(price), quantity=qty)
        for pid, price, qty in lines
    )


class TestLoad:
    def test_missing_key_is_empty_cart(self):
        assert LocalCartStore({}).load() == CartView.empty()

    def test_unparsable_blob_is_empty_cart(self):
        store = LocalCartStore({"tempCart": "{not json"})
        assert store.load() == CartView.empty()

    def test_wrong_shape_is_empty_cart(self):
        assert LocalCartStore({"tempCart": "[1, 2]"}).load() == CartView.empty()
        assert LocalCartStore({"tempCart": '{"items": 3}'}).load() == CartView.empty()

    def test_drops_malformed_lines_and_recomputes_totals(self):
        blob = {
            "items": [
                {"productId": 1, "id": 1, "name": "Tea", "price": 4.25, "quantity": 2, "inStock": True},
                {"productId": 2, "name": "Broken", "price": 1, "quantity": 0},
                {"name": "No id", "price": 1, "quantity": 1},
                "garbage",
            ],
            "total": 9999,
            "itemCount": 42,
        }
        cart = LocalCartStore({"tempCart": json.dumps(blob)}).load()

        assert [line.product_id for line in cart.items] == [1]
        assert cart.total == Decimal("8.50")
        assert cart.item_count == 2

    def test_merges_duplicate_products(self):
        blob = {
            "items": [
                {"productId": 3, "name": "Mug", "price": 12.5, "quantity": 1},
                {"productId": 3, "name": "Mug", "price": 12.5, "quantity": 2},
            ]
        }
        cart = LocalCartStore({"tempCart": json.dumps(blob)}).load()
        assert quantities(cart) == {3: 3}

    def test_drops_lines_without_name_or_price(self):
        blob = {
            "items": [
                {"productId": 1, "name": "Tea", "quantity": 1},
                {"productId": 2, "price": 3.5, "quantity": 1},
                {"productId": 3, "name": "Mug", "price": None, "quantity": 1},
                {"productId": 4, "name": "Bowl", "price": 4.25, "quantity": 2},
            ]
        }
        cart = LocalCartStore({"tempCart": json.dumps(blob)}).load()

        assert quantities(cart) == {4: 2}
        assert cart.total == Decimal("8.50")


class TestSaveAndClear:
    def test_round_trip_uses_persisted_layout(self):
        storage = {}
        store = LocalCartStore(storage)
        store.save(_cart((5, "12.50", 2)))

        raw = json.loads(storage["tempCart"])
        assert raw == {
            "items": [
                {
                    "productId": 5,
                    "id": 5,
                    "name": "Product 5",
                    "price": 12.5,
                    "image": None,
                    "quantity": 2,
                    "inStock": False,
                }
            ],
            "total": 25.0,
            "itemCount": 2,
        }
        assert quantities(store.load()) == {5: 2}

    def test_custom_key(self):
        storage = {}
        LocalCartStore(storage, key="guest").save(_cart((1, "1", 1)))
        assert list(storage) == ["guest"]

    def test_clear_removes_payload(self):
        storage = {}
        store = LocalCartStore(storage)
        store.save(_cart((1, "1", 1)))
        store.clear()
        assert "tempCart" not in storage
        # Clearing twice is fine
        store.clear()
        assert store.load() == CartView.empty()

    def test_save_failure_is_logged_not_raised(self, caplog):
        store = LocalCartStore(BrokenStorage())
        with caplog.at_level(logging.ERROR):
            store.save(_cart((1, "1", 1)))
        assert "Failed to save local cart" in caplog.text


class TestFileStorage:
    def test_persists_across_instances(self, tmp_path):
        LocalCartStore(FileStorage(tmp_path)).save(_cart((9, "3.00", 4)))

        cart = LocalCartStore(FileStorage(tmp_path)).load()
        assert quantities(cart) == {9: 4}
        assert (tmp_path / "tempCart.json").exists()

    def test_mapping_behaviour(self, tmp_path):
        storage = FileStorage(tmp_path / "nested")
        assert len(storage) == 0
        with pytest.raises(KeyError):
            storage["missing"]

        storage["a"] = "1"
        assert storage["a"] == "1"
        assert list(storage) == ["a"]

        del storage["a"]
        assert "a" not in storage
        with pytest.raises(KeyError):
            del storage["a"]

    def test_undecodable_file_is_empty_cart(self, tmp_path):
        (tmp_path / "tempCart.json").write_bytes(b"\xff\xfe\x00garbage")

        store = LocalCartStore(FileStorage(tmp_path))
        assert store.load() == CartView.empty()

        store.save(_cart((2, "1.50", 1)))
        assert quantities(store.load()) == {2: 1}
