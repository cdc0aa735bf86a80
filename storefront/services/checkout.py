"""
Checkout and order lifecycle

Converts a user's cart into an order while reserving inventory, and runs the
order status machine afterwards:

    pending -> processing -> shipped -> delivered

with ``cancelled`` reachable from pending and processing only. Cancelling
an order is the compensating step for checkout: every reserved line is
released back to stock.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..core.config import Settings, settings as default_settings
from ..core.errors import (
    EmptyCartError,
    ForbiddenError,
    InvalidStatusTransitionError,
    NotCancellableError,
)
from ..database.carts import CartDatabase, cart_db
from ..database.orders import OrderDatabase, order_db
from ..database.products import ProductDatabase, product_db
from ..models.order import (
    CANCELLABLE_STATUSES,
    STATUS_SEQUENCE,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentResult,
    ShippingAddress,
)
from ..security.auth import Caller

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class CheckoutService:
    """Coordinates cart, inventory and order stores"""

    def __init__(
        self,
        products: ProductDatabase = product_db,
        carts: CartDatabase = cart_db,
        orders: OrderDatabase = order_db,
        settings: Settings = default_settings,
    ):
        self.products = products
        self.carts = carts
        self.orders = orders
        self.settings = settings

    def price_breakdown(self, items_price: Decimal) -> tuple[Decimal, Decimal]:
        """
        Returns:
            Tuple of (tax, shipping) for an items subtotal
        """
        tax = (items_price * self.settings.tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)
        shipping = self.settings.shipping_for(items_price)
        return tax, shipping

    def place_order(
        self,
        user_id: str,
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> Order:
        """
        Place an order from the user's cart.

        All lines are reserved in one all-or-nothing step, so a failing line
        leaves every product's stock untouched.

        Raises:
            EmptyCartError: if the cart has no items
            ProductNotFoundError: if a product in the cart no longer exists
            OutOfStockError: if any line exceeds the available stock
        """
        cart = self.carts.get_cart(user_id)
        if not cart.items:
            raise EmptyCartError(user_id)

        snapshots = self.products.reserve_all(
            (item.product_id, item.quantity) for item in cart.items
        )

        order_items = [
            OrderItem(
                product_id=snap.product_id,
                name=snap.name,
                quantity=snap.quantity,
                unit_price=snap.unit_price,
                image=snap.image,
                total_price=snap.unit_price * snap.quantity,
            )
            for snap in snapshots
        ]

        items_price = sum((item.total_price for item in order_items), Decimal("0"))
        tax_price, shipping_price = self.price_breakdown(items_price)

        order = self.orders.create_order(
            user_id=user_id,
            items=order_items,
            items_price=items_price,
            tax_price=tax_price,
            shipping_price=shipping_price,
            currency=self.settings.currency,
            shipping_address=shipping_address,
            payment_method=payment_method,
        )

        self.carts.clear_cart(user_id)

        logger.info(
            f"Order {order.order_id} placed by {user_id}: "
            f"{len(order_items)} line(s), total {order.total_price} {order.currency}"
        )
        return order

    def get_order(self, order_id: str, actor: Caller) -> Order:
        order = self.orders.require_order(order_id)
        if not actor.can_access(order.user_id):
            raise ForbiddenError("Not authorized to view this order")
        return order

    def list_orders(
        self,
        actor: Caller,
        all_users: bool = False,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        if all_users and not actor.is_admin:
            raise ForbiddenError("Not authorized - Admin only")
        user_id = None if all_users else actor.user_id
        return self.orders.list_orders(user_id=user_id, status=status, page=page, limit=limit)

    def cancel_order(self, order_id: str, actor: Caller) -> Order:
        """
        Cancel an order and release its reserved stock.

        Raises:
            ForbiddenError: if the actor is neither owner nor admin
            NotCancellableError: once the order has shipped, been delivered
                or already been cancelled
        """
        order = self.orders.require_order(order_id)
        if not actor.can_access(order.user_id):
            raise ForbiddenError("Not authorized to cancel this order")
        return self._cancel(order)

    def _cancel(self, order: Order) -> Order:
        if order.status not in CANCELLABLE_STATUSES:
            raise NotCancellableError(order.order_id, order.status.value)

        for item in order.items:
            self.products.release(item.product_id, item.quantity)

        order.status = OrderStatus.CANCELLED
        order.cancelled_at = datetime.utcnow()
        self.orders.save(order)

        logger.info(f"Order {order.order_id} cancelled, {len(order.items)} line(s) returned to stock")
        return order

    def update_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        tracking_number: Optional[str] = None,
    ) -> Order:
        """
        Move an order forward along the fulfilment chain (admin).

        Moving to ``cancelled`` goes through the same stock release as a
        customer cancellation.
        """
        order = self.orders.require_order(order_id)
        new_status = OrderStatus(new_status)

        if new_status == OrderStatus.CANCELLED:
            return self._cancel(order)

        if order.status not in STATUS_SEQUENCE or (
            STATUS_SEQUENCE.index(new_status) <= STATUS_SEQUENCE.index(order.status)
        ):
            raise InvalidStatusTransitionError(order_id, order.status.value, new_status.value)

        previous = order.status
        order.status = new_status
        if tracking_number:
            order.tracking_number = tracking_number
        if new_status == OrderStatus.DELIVERED:
            order.is_delivered = True
            order.delivered_at = datetime.utcnow()
        self.orders.save(order)

        logger.info(f"Order {order_id} moved from {previous.value} to {new_status.value}")
        return order

    def update_order(
        self,
        order_id: str,
        shipping_address: Optional[ShippingAddress] = None,
        tracking_number: Optional[str] = None,
    ) -> Order:
        """Admin correction of delivery details; status is left alone"""
        order = self.orders.require_order(order_id)
        if shipping_address is not None:
            order.shipping_address = shipping_address
        if tracking_number is not None:
            order.tracking_number = tracking_number
        self.orders.save(order)
        logger.info(f"Order {order_id} details updated")
        return order

    def delete_order(self, order_id: str) -> None:
        """
        Remove an order (admin).

        An order that still holds reserved stock gives it back first.
        """
        order = self.orders.require_order(order_id)
        if order.status in CANCELLABLE_STATUSES:
            for item in order.items:
                self.products.release(item.product_id, item.quantity)
        self.orders.delete_order(order_id)
        logger.info(f"Order {order_id} deleted while {order.status.value}")

    def mark_paid(
        self,
        order_id: str,
        actor: Caller,
        payment_id: str,
        gateway_order_id: Optional[str] = None,
    ) -> Order:
        """
        Record a confirmed payment and start processing the order.

        Only the owner can pay for an order, and only while it is pending.
        """
        order = self.orders.require_order(order_id)
        if order.user_id != actor.user_id:
            raise ForbiddenError("Not authorized to update this order")
        if order.status != OrderStatus.PENDING or order.is_paid:
            raise InvalidStatusTransitionError(order_id, order.status.value, OrderStatus.PROCESSING.value)

        now = datetime.utcnow()
        order.is_paid = True
        order.paid_at = now
        order.payment_result = PaymentResult(
            payment_id=payment_id,
            gateway_order_id=gateway_order_id,
            status="completed",
            updated_at=now,
        )
        order.status = OrderStatus.PROCESSING
        self.orders.save(order)

        logger.info(f"Order {order_id} paid with {payment_id}")
        return order


# Singleton instance
checkout_service = CheckoutService()
