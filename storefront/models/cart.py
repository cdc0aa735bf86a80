"""Cart models for the storefront"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class CartItem(BaseModel):
    """Line item in a shopping cart"""
    product_id: str
    product_name: str
    image: Optional[str] = None
    quantity: int = Field(ge=1)
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    """Shopping cart, one per user"""
    user_id: str
    items: list[CartItem] = []
    total: Decimal = Decimal("0")
    created_at: datetime
    updated_at: datetime

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find_item(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.product_id == product_id), None)


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity. Zero and negatives are rejected by the cart."""
    quantity: int


class GuestCartLine(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)


class MergeCartRequest(BaseModel):
    """Anonymous pre-login cart lines to fold into the user's cart"""
    items: list[GuestCartLine] = Field(min_length=1)


class CartResponse(BaseModel):
    """Cart API response"""
    cart: Cart
    message: Optional[str] = None


class CartCountResponse(BaseModel):
    count: int
