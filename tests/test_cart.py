"""Tests for the cart aggregate."""

from decimal import Decimal

import pytest

from storefront.core.errors import (
    CartItemNotFoundError,
    InvalidQuantityError,
    OutOfStockError,
    ProductNotFoundError,
)
from storefront.models.cart import GuestCartLine
from storefront.models.product import UpdateProductRequest


def _expected_total(cart):
    return sum((item.unit_price * item.quantity for item in cart.items), Decimal("0"))


class TestCartCreation:
    def test_cart_is_created_lazily(self, carts):
        cart = carts.get_cart("user-1")

        assert cart.user_id == "user-1"
        assert cart.items == []
        assert cart.total == Decimal("0")
        assert carts.get_cart("user-1") is cart

    def test_count_without_cart(self, carts):
        assert carts.item_count("nobody") == 0


class TestAddItem:
    def test_add_new_item(self, carts):
        cart = carts.add_item("user-1", "prod-a", 1)

        assert len(cart.items) == 1
        assert cart.items[0].product_name == "Product A"
        assert cart.items[0].unit_price == Decimal("10")
        assert cart.total == Decimal("10")

    def test_add_merges_same_product(self, carts):
        carts.add_item("user-1", "prod-a", 1)
        cart = carts.add_item("user-1", "prod-a", 1)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.total == Decimal("20")

    def test_add_beyond_stock_leaves_cart_unchanged(self, carts):
        with pytest.raises(OutOfStockError):
            carts.add_item("user-1", "prod-a", 3)

        assert carts.get_cart("user-1").items == []

    def test_merged_quantity_is_checked_against_stock(self, carts):
        carts.add_item("user-1", "prod-a", 2)

        with pytest.raises(OutOfStockError):
            carts.add_item("user-1", "prod-a", 1)

        cart = carts.get_cart("user-1")
        assert cart.items[0].quantity == 2
        assert cart.total == Decimal("20")

    def test_add_refreshes_price_snapshot(self, carts, products):
        carts.add_item("user-1", "prod-c", 1)
        products.update_product("prod-c", UpdateProductRequest(price=Decimal("250")))

        cart = carts.add_item("user-1", "prod-c", 1)

        assert cart.items[0].unit_price == Decimal("250")
        assert cart.total == Decimal("500")

    def test_add_unknown_product(self, carts):
        with pytest.raises(ProductNotFoundError):
            carts.add_item("user-1", "missing", 1)

    def test_insertion_order_is_kept(self, carts):
        carts.add_item("user-1", "prod-c", 1)
        carts.add_item("user-1", "prod-a", 1)
        cart = carts.add_item("user-1", "prod-c", 1)

        assert [i.product_id for i in cart.items] == ["prod-c", "prod-a"]


class TestUpdateQuantity:
    def test_update_quantity(self, carts):
        carts.add_item("user-1", "prod-c", 1)
        cart = carts.update_item_quantity("user-1", "prod-c", 4)

        assert cart.items[0].quantity == 4
        assert cart.total == Decimal("1200")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_below_one_is_invalid(self, carts, quantity):
        carts.add_item("user-1", "prod-a", 1)

        with pytest.raises(InvalidQuantityError):
            carts.update_item_quantity("user-1", "prod-a", quantity)

    def test_quantity_above_stock(self, carts):
        carts.add_item("user-1", "prod-a", 1)

        with pytest.raises(OutOfStockError):
            carts.update_item_quantity("user-1", "prod-a", 3)

        assert carts.get_cart("user-1").items[0].quantity == 1

    def test_update_item_not_in_cart(self, carts):
        with pytest.raises(CartItemNotFoundError):
            carts.update_item_quantity("user-1", "prod-a", 1)


class TestRemoveAndClear:
    def test_remove_item(self, carts):
        carts.add_item("user-1", "prod-a", 1)
        carts.add_item("user-1", "prod-b", 1)
        cart = carts.remove_item("user-1", "prod-a")

        assert [i.product_id for i in cart.items] == ["prod-b"]
        assert cart.total == Decimal("5")

    def test_remove_absent_item_is_noop(self, carts):
        carts.add_item("user-1", "prod-a", 1)
        cart = carts.remove_item("user-1", "prod-c")

        assert len(cart.items) == 1
        assert cart.total == Decimal("10")

    def test_clear(self, carts):
        carts.add_item("user-1", "prod-a", 2)
        cart = carts.clear_cart("user-1")

        assert cart.items == []
        assert cart.total == Decimal("0")


class TestMergeGuestCart:
    def test_merge_into_existing_and_new_lines(self, carts):
        carts.add_item("user-1", "prod-c", 1)
        cart = carts.merge_guest_cart(
            "user-1",
            [GuestCartLine(product_id="prod-c", quantity=2), GuestCartLine(product_id="prod-a", quantity=1)],
        )

        quantities = {i.product_id: i.quantity for i in cart.items}
        assert quantities == {"prod-c": 3, "prod-a": 1}
        assert cart.total == Decimal("910")

    def test_lines_over_stock_are_skipped(self, carts):
        carts.add_item("user-1", "prod-a", 2)
        cart = carts.merge_guest_cart(
            "user-1",
            [GuestCartLine(product_id="prod-a", quantity=1), GuestCartLine(product_id="prod-b", quantity=4)],
        )

        assert [(i.product_id, i.quantity) for i in cart.items] == [("prod-a", 2)]

    def test_deleted_products_are_skipped(self, carts, products):
        products.delete_product("prod-b")
        cart = carts.merge_guest_cart("user-1", [GuestCartLine(product_id="prod-b", quantity=1)])

        assert cart.items == []


class TestTotalInvariant:
    def test_total_matches_items_after_each_mutation(self, carts):
        operations = [
            lambda: carts.add_item("user-1", "prod-a", 1),
            lambda: carts.add_item("user-1", "prod-c", 3),
            lambda: carts.update_item_quantity("user-1", "prod-c", 2),
            lambda: carts.add_item("user-1", "prod-b", 1),
            lambda: carts.remove_item("user-1", "prod-a"),
            lambda: carts.merge_guest_cart("user-1", [GuestCartLine(product_id="prod-a", quantity=2)]),
            lambda: carts.clear_cart("user-1"),
        ]

        for operation in operations:
            cart = operation()
            assert cart.total == _expected_total(cart)

    def test_item_count(self, carts):
        carts.add_item("user-1", "prod-a", 2)
        carts.add_item("user-1", "prod-c", 3)

        assert carts.item_count("user-1") == 5
