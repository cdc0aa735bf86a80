"""Tests for order placement, cancellation and the status machine."""

from decimal import Decimal

import pytest

from storefront.core.errors import (
    EmptyCartError,
    ForbiddenError,
    InvalidStatusTransitionError,
    NotCancellableError,
    OrderNotFoundError,
    OutOfStockError,
    ProductNotFoundError,
)
from storefront.models.order import OrderStatus, PaymentMethod
from storefront.models.product import UpdateProductRequest


class TestPlaceOrder:
    def test_scenario_totals_stock_and_cart(self, checkout, carts, products, address):
        carts.add_item("user-1", "prod-a", 2)
        carts.add_item("user-1", "prod-b", 1)

        order = checkout.place_order("user-1", address, PaymentMethod.GATEWAY)

        assert order.items_price == Decimal("25")
        assert order.tax_price == Decimal("4.5")
        assert order.shipping_price == Decimal("50")
        assert order.total_price == Decimal("79.5")
        assert order.status == OrderStatus.PENDING
        assert order.currency == "INR"
        assert products.stock_of("prod-a") == 0
        assert products.stock_of("prod-b") == 0
        assert carts.get_cart("user-1").items == []

    def test_order_items_are_snapshots(self, checkout, carts, products, address):
        carts.add_item("user-1", "prod-a", 1)
        order = checkout.place_order("user-1", address, PaymentMethod.GATEWAY)

        products.update_product("prod-a", UpdateProductRequest(name="Renamed", price=Decimal("99")))

        item = order.items[0]
        assert item.name == "Product A"
        assert item.unit_price == Decimal("10")
        assert item.image == "/a.jpg"
        assert item.total_price == Decimal("10")
        with pytest.raises(Exception):
            item.quantity = 5

    def test_free_shipping_over_threshold(self, checkout, carts, address):
        carts.add_item("user-1", "prod-c", 2)

        order = checkout.place_order("user-1", address, PaymentMethod.CASH_ON_DELIVERY)

        assert order.items_price == Decimal("600")
        assert order.shipping_price == Decimal("0")
        assert order.tax_price == Decimal("108.00")
        assert order.total_price == Decimal("708")

    def test_threshold_itself_still_pays_shipping(self, checkout, pricing):
        tax, shipping = checkout.price_breakdown(Decimal("500"))

        assert tax == Decimal("90.00")
        assert shipping == Decimal("50")

    def test_empty_cart_fails_without_touching_stock(self, checkout, products, address):
        with pytest.raises(EmptyCartError):
            checkout.place_order("user-1", address, PaymentMethod.GATEWAY)

        assert products.stock_of("prod-a") == 2
        assert products.stock_of("prod-c") == 10

    def test_out_of_stock_line_aborts_whole_checkout(self, checkout, carts, products, orders, address):
        carts.add_item("user-1", "prod-c", 5)
        carts.add_item("user-1", "prod-b", 1)
        # another shopper takes the last B first
        products.reserve("prod-b", 1)

        with pytest.raises(OutOfStockError):
            checkout.place_order("user-1", address, PaymentMethod.GATEWAY)

        assert products.stock_of("prod-c") == 10
        assert len(carts.get_cart("user-1").items) == 2
        assert orders.orders == {}

    def test_vanished_product_aborts_checkout(self, checkout, carts, products, address):
        carts.add_item("user-1", "prod-c", 1)
        carts.add_item("user-1", "prod-a", 1)
        products.delete_product("prod-a")

        with pytest.raises(ProductNotFoundError):
            checkout.place_order("user-1", address, PaymentMethod.GATEWAY)

        assert products.stock_of("prod-c") == 10

    def test_order_uses_price_at_reservation(self, checkout, carts, products, address):
        carts.add_item("user-1", "prod-c", 1)
        products.update_product("prod-c", UpdateProductRequest(price=Decimal("320")))

        order = checkout.place_order("user-1", address, PaymentMethod.GATEWAY)

        assert order.items[0].unit_price == Decimal("320")
        assert order.items_price == Decimal("320")


class TestCancelOrder:
    def test_cancel_restores_stock(self, checkout, place, products, customer):
        order = place(lines=(("prod-a", 2), ("prod-c", 3)))
        assert products.stock_of("prod-a") == 0

        cancelled = checkout.cancel_order(order.order_id, customer)

        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        assert products.stock_of("prod-a") == 2
        assert products.stock_of("prod-c") == 10

    def test_admin_can_cancel_any_order(self, checkout, place, admin):
        order = place()

        assert checkout.cancel_order(order.order_id, admin).status == OrderStatus.CANCELLED

    def test_other_user_is_forbidden(self, checkout, place, products, other_customer):
        order = place()

        with pytest.raises(ForbiddenError):
            checkout.cancel_order(order.order_id, other_customer)

        assert products.stock_of("prod-a") == 1

    def test_processing_order_can_be_cancelled(self, checkout, place, customer):
        order = place()
        checkout.update_status(order.order_id, OrderStatus.PROCESSING)

        assert checkout.cancel_order(order.order_id, customer).status == OrderStatus.CANCELLED

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_shipped_or_delivered_is_not_cancellable(self, checkout, place, products, customer, status):
        order = place()
        checkout.update_status(order.order_id, status)

        with pytest.raises(NotCancellableError):
            checkout.cancel_order(order.order_id, customer)

        assert products.stock_of("prod-a") == 1

    def test_second_cancel_does_not_release_twice(self, checkout, place, products, customer):
        order = place()
        checkout.cancel_order(order.order_id, customer)

        with pytest.raises(NotCancellableError):
            checkout.cancel_order(order.order_id, customer)

        assert products.stock_of("prod-a") == 2

    def test_unknown_order(self, checkout, customer):
        with pytest.raises(OrderNotFoundError):
            checkout.cancel_order("ORD-NOPE", customer)


class TestUpdateStatus:
    def test_walk_the_chain(self, checkout, place):
        order = place()

        checkout.update_status(order.order_id, OrderStatus.PROCESSING)
        checkout.update_status(order.order_id, OrderStatus.SHIPPED, tracking_number="TRK123")
        delivered = checkout.update_status(order.order_id, OrderStatus.DELIVERED)

        assert delivered.status == OrderStatus.DELIVERED
        assert delivered.tracking_number == "TRK123"
        assert delivered.is_delivered is True
        assert delivered.delivered_at is not None

    def test_status_given_as_string(self, checkout, place):
        order = place()

        assert checkout.update_status(order.order_id, "shipped").status == OrderStatus.SHIPPED

    def test_undefined_status_is_rejected(self, checkout, place):
        order = place()

        with pytest.raises(ValueError):
            checkout.update_status(order.order_id, "lost")

    def test_cannot_move_backwards(self, checkout, place):
        order = place()
        checkout.update_status(order.order_id, OrderStatus.SHIPPED)

        with pytest.raises(InvalidStatusTransitionError):
            checkout.update_status(order.order_id, OrderStatus.PROCESSING)

    def test_delivered_is_terminal(self, checkout, place):
        order = place()
        checkout.update_status(order.order_id, OrderStatus.DELIVERED)

        with pytest.raises(InvalidStatusTransitionError):
            checkout.update_status(order.order_id, OrderStatus.DELIVERED)

    def test_cancelled_is_terminal(self, checkout, place, customer):
        order = place()
        checkout.cancel_order(order.order_id, customer)

        with pytest.raises(InvalidStatusTransitionError):
            checkout.update_status(order.order_id, OrderStatus.PROCESSING)

    def test_cancelling_through_status_releases_stock(self, checkout, place, products):
        order = place(lines=(("prod-a", 2),))

        checkout.update_status(order.order_id, OrderStatus.CANCELLED)

        assert products.stock_of("prod-a") == 2


class TestMarkPaid:
    def test_mark_paid_moves_to_processing(self, checkout, place, customer):
        order = place()

        paid = checkout.mark_paid(order.order_id, customer, payment_id="pay_1", gateway_order_id="gw_1")

        assert paid.is_paid is True
        assert paid.paid_at is not None
        assert paid.status == OrderStatus.PROCESSING
        assert paid.payment_result.payment_id == "pay_1"

    def test_only_owner_can_pay(self, checkout, place, admin):
        order = place()

        with pytest.raises(ForbiddenError):
            checkout.mark_paid(order.order_id, admin, payment_id="pay_1")

    def test_cannot_pay_twice(self, checkout, place, customer):
        order = place()
        checkout.mark_paid(order.order_id, customer, payment_id="pay_1")

        with pytest.raises(InvalidStatusTransitionError):
            checkout.mark_paid(order.order_id, customer, payment_id="pay_2")

    def test_cannot_pay_cancelled_order(self, checkout, place, customer):
        order = place()
        checkout.cancel_order(order.order_id, customer)

        with pytest.raises(InvalidStatusTransitionError):
            checkout.mark_paid(order.order_id, customer, payment_id="pay_1")


class TestOrderQueries:
    def test_owner_and_admin_can_view(self, checkout, place, customer, admin, other_customer):
        order = place()

        assert checkout.get_order(order.order_id, customer).order_id == order.order_id
        assert checkout.get_order(order.order_id, admin).order_id == order.order_id
        with pytest.raises(ForbiddenError):
            checkout.get_order(order.order_id, other_customer)

    def test_list_own_orders(self, checkout, place, customer):
        place(lines=(("prod-a", 1),))
        place(lines=(("prod-c", 1),))
        place(user_id="user-2", lines=(("prod-b", 1),))

        orders, total = checkout.list_orders(customer, page=1, limit=1)

        assert total == 2
        assert len(orders) == 1

    def test_list_all_requires_admin(self, checkout, place, customer, admin):
        place()
        place(user_id="user-2", lines=(("prod-b", 1),))

        with pytest.raises(ForbiddenError):
            checkout.list_orders(customer, all_users=True)

        orders, total = checkout.list_orders(admin, all_users=True, status=OrderStatus.PENDING)
        assert total == 2


class TestAdminOrderUpkeep:
    def test_update_details_keeps_status(self, checkout, place, address):
        order = place()
        new_address = address.model_copy(update={"city": "Mysuru"})

        updated = checkout.update_order(order.order_id, shipping_address=new_address, tracking_number="TRK9")

        assert updated.shipping_address.city == "Mysuru"
        assert updated.tracking_number == "TRK9"
        assert updated.status == OrderStatus.PENDING

    def test_deleting_active_order_returns_stock(self, checkout, place, products, orders):
        order = place(lines=(("prod-a", 2),))

        checkout.delete_order(order.order_id)

        assert products.stock_of("prod-a") == 2
        assert order.order_id not in orders.orders

    def test_deleting_delivered_order_keeps_stock(self, checkout, place, products):
        order = place(lines=(("prod-a", 2),))
        checkout.update_status(order.order_id, OrderStatus.DELIVERED)

        checkout.delete_order(order.order_id)

        assert products.stock_of("prod-a") == 0

    def test_delete_unknown_order(self, checkout):
        with pytest.raises(OrderNotFoundError):
            checkout.delete_order("ORD-NOPE")
