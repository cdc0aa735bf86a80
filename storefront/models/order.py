"""Order models for the storefront"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Fulfilment chain; cancellation sits outside it
STATUS_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

CANCELLABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


class PaymentMethod(str, Enum):
    GATEWAY = "gateway"
    CASH_ON_DELIVERY = "cash_on_delivery"


class ShippingAddress(BaseModel):
    """Shipping address for order"""
    name: str = Field(min_length=1)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = "IN"
    phone: Optional[str] = None


class PaymentResult(BaseModel):
    """Opaque payment reference recorded once the gateway confirms payment"""
    payment_id: str
    gateway_order_id: Optional[str] = None
    status: str = "completed"
    updated_at: datetime


class OrderItem(BaseModel):
    """Item in an order, snapshotted at checkout"""
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    image: Optional[str] = None
    total_price: Decimal

    class Config:
        frozen = True


class Order(BaseModel):
    """Placed order"""
    order_id: str
    user_id: str
    status: OrderStatus = OrderStatus.PENDING
    items: tuple[OrderItem, ...]
    items_price: Decimal
    tax_price: Decimal
    shipping_price: Decimal
    total_price: Decimal
    currency: str
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    payment_result: Optional[PaymentResult] = None
    is_paid: bool = False
    paid_at: Optional[datetime] = None
    tracking_number: Optional[str] = None
    is_delivered: bool = False
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def contains_product(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self.items)


class CheckoutRequest(BaseModel):
    """Request to place an order from the caller's cart"""
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.GATEWAY


class UpdateOrderStatusRequest(BaseModel):
    """Request to update order status (admin)"""
    status: OrderStatus
    tracking_number: Optional[str] = Field(None, min_length=1)


class UpdateOrderRequest(BaseModel):
    """Admin correction of delivery details. Status changes go through the status route."""
    shipping_address: Optional[ShippingAddress] = None
    tracking_number: Optional[str] = Field(None, min_length=1)


class PaymentConfirmation(BaseModel):
    """Signed callback data forwarded by the client after paying"""
    gateway_order_id: str
    payment_id: str
    signature: str


class OrderResponse(BaseModel):
    order: Order
    message: Optional[str] = None


class OrderListResponse(BaseModel):
    orders: list[Order]
    page: int
    limit: int
    total_pages: int
    total_orders: int
