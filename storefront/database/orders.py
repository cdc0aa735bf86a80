"""Order storage for the storefront"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..core.errors import OrderNotFoundError
from ..models.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    ShippingAddress,
)


class OrderDatabase:
    """In-memory order storage"""

    def __init__(self):
        self.orders: dict[str, Order] = {}

    def reset(self) -> None:
        self.orders = {}

    def create_order(
        self,
        user_id: str,
        items: Iterable[OrderItem],
        items_price: Decimal,
        tax_price: Decimal,
        shipping_price: Decimal,
        currency: str,
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> Order:
        """Persist a new pending order"""
        now = datetime.utcnow()
        order = Order(
            order_id=f"ORD-{uuid.uuid4().hex[:8].upper()}",
            user_id=user_id,
            status=OrderStatus.PENDING,
            items=tuple(items),
            items_price=items_price,
            tax_price=tax_price,
            shipping_price=shipping_price,
            total_price=items_price + tax_price + shipping_price,
            currency=currency,
            shipping_address=shipping_address,
            payment_method=payment_method,
            created_at=now,
            updated_at=now,
        )

        self.orders[order.order_id] = order
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def require_order(self, order_id: str) -> Order:
        order = self.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    def save(self, order: Order) -> Order:
        order.updated_at = datetime.utcnow()
        self.orders[order.order_id] = order
        return order

    def delete_order(self, order_id: str) -> Order:
        order = self.require_order(order_id)
        del self.orders[order_id]
        return order

    def list_orders(
        self,
        user_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        """
        List orders, newest first.

        Returns:
            Tuple of (orders for the page, total count)
        """
        orders = list(self.orders.values())
        if user_id is not None:
            orders = [o for o in orders if o.user_id == user_id]
        if status is not None:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: o.created_at, reverse=True)

        total = len(orders)
        offset = (page - 1) * limit
        return orders[offset : offset + limit], total

    def has_delivered_purchase(self, user_id: str, product_id: str) -> bool:
        """Whether the user has a delivered order containing the product"""
        return any(
            o.user_id == user_id
            and o.status == OrderStatus.DELIVERED
            and o.contains_product(product_id)
            for o in self.orders.values()
        )


# Singleton instance
order_db = OrderDatabase()
