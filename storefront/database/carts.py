"""Cart storage for the storefront"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from ..core.errors import (
    CartItemNotFoundError,
    InvalidQuantityError,
    OutOfStockError,
    ProductNotFoundError,
)
from ..models.cart import Cart, CartItem, GuestCartLine
from ..models.product import Product
from .products import ProductDatabase, product_db

logger = logging.getLogger(__name__)


class CartDatabase:
    """
    In-memory cart storage, one cart per user.

    Carts are created lazily on first access. Every mutation ends with a
    total recomputation, so ``cart.total`` always equals the sum of
    ``quantity * unit_price`` over its items.
    """

    def __init__(self, products: ProductDatabase = product_db):
        self.products = products
        self.carts: dict[str, Cart] = {}

    def reset(self) -> None:
        self.carts = {}

    def get_cart(self, user_id: str) -> Cart:
        """Get the user's cart, creating an empty one on first access"""
        cart = self.carts.get(user_id)
        if cart is None:
            now = datetime.utcnow()
            cart = Cart(user_id=user_id, items=[], created_at=now, updated_at=now)
            self.carts[user_id] = cart
        return cart

    def add_item(self, user_id: str, product_id: str, quantity: int = 1) -> Cart:
        """Add an item to the cart, merging with an existing line for the same product"""
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        product = self.products.require_product(product_id)
        cart = self.get_cart(user_id)
        existing_item = cart.find_item(product_id)

        new_quantity = quantity + (existing_item.quantity if existing_item else 0)
        if new_quantity > product.stock:
            raise OutOfStockError(product_id, new_quantity, product.stock, name=product.name)

        if existing_item:
            existing_item.quantity = new_quantity
            self._refresh_snapshot(existing_item, product)
        else:
            cart.items.append(self._new_item(product, quantity))

        self._recalculate_total(cart)
        return cart

    def update_item_quantity(self, user_id: str, product_id: str, quantity: int) -> Cart:
        """Set the quantity of an existing cart line"""
        if quantity < 1:
            raise InvalidQuantityError(quantity)

        product = self.products.require_product(product_id)
        if quantity > product.stock:
            raise OutOfStockError(product_id, quantity, product.stock, name=product.name)

        cart = self.get_cart(user_id)
        item = cart.find_item(product_id)
        if not item:
            raise CartItemNotFoundError(product_id)

        item.quantity = quantity
        self._refresh_snapshot(item, product)

        self._recalculate_total(cart)
        return cart

    def remove_item(self, user_id: str, product_id: str) -> Cart:
        """Remove an item from the cart. Absent products are ignored."""
        cart = self.get_cart(user_id)
        cart.items = [item for item in cart.items if item.product_id != product_id]
        self._recalculate_total(cart)
        return cart

    def clear_cart(self, user_id: str) -> Cart:
        """Clear all items from cart"""
        cart = self.get_cart(user_id)
        cart.items = []
        self._recalculate_total(cart)
        return cart

    def merge_guest_cart(self, user_id: str, lines: Iterable[GuestCartLine]) -> Cart:
        """
        Fold an anonymous pre-login cart into the user's cart.

        Lines for deleted products, or that would take a line past the
        available stock, are skipped rather than rejected.
        """
        cart = self.get_cart(user_id)
        skipped = 0

        for line in lines:
            try:
                product = self.products.require_product(line.product_id)
            except ProductNotFoundError:
                skipped += 1
                continue

            existing_item = cart.find_item(line.product_id)
            if existing_item:
                new_quantity = existing_item.quantity + line.quantity
                if new_quantity > product.stock:
                    skipped += 1
                    continue
                existing_item.quantity = new_quantity
                self._refresh_snapshot(existing_item, product)
            else:
                if line.quantity > product.stock:
                    skipped += 1
                    continue
                cart.items.append(self._new_item(product, line.quantity))

        if skipped:
            logger.info(f"Merged guest cart for user {user_id}, skipped {skipped} line(s)")

        self._recalculate_total(cart)
        return cart

    def item_count(self, user_id: str) -> int:
        cart = self.carts.get(user_id)
        return cart.item_count if cart else 0

    @staticmethod
    def _new_item(product: Product, quantity: int) -> CartItem:
        return CartItem(
            product_id=product.id,
            product_name=product.name,
            image=product.primary_image,
            quantity=quantity,
            unit_price=product.price,
        )

    @staticmethod
    def _refresh_snapshot(item: CartItem, product: Product) -> None:
        item.unit_price = product.price
        item.product_name = product.name
        item.image = product.primary_image

    def _recalculate_total(self, cart: Cart) -> None:
        """Recalculate cart total"""
        cart.total = sum((item.line_total for item in cart.items), Decimal("0"))
        cart.updated_at = datetime.utcnow()


# Singleton instance
cart_db = CartDatabase()
