"""Storefront exceptions.

Raised by the stores and services when a business rule is violated.
The API layer translates them into HTTP responses using ``status_code``.
"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code = 500
    kind = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Raised when a product, cart, order or review doesn't exist."""

    status_code = 404
    kind = "not_found"

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__("Product", product_id)


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str):
        super().__init__("Order", order_id)


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: str):
        super().__init__("Review", review_id)


class CartItemNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__("Cart item", product_id)


class OutOfStockError(StorefrontError):
    """Raised when a requested quantity exceeds the available stock."""

    status_code = 400
    kind = "out_of_stock"

    def __init__(self, product_id: str, requested: int, available: int, name: Optional[str] = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        label = name or product_id
        super().__init__(f"Insufficient stock for {label}. Requested: {requested}, available: {available}")


class InvalidQuantityError(StorefrontError):
    status_code = 400
    kind = "invalid_quantity"

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__(f"Quantity must be at least 1, got {quantity}")


class EmptyCartError(StorefrontError):
    status_code = 400
    kind = "empty_cart"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("Cart is empty")


class ForbiddenError(StorefrontError):
    """Raised when the caller is neither the owner nor an administrator."""

    status_code = 403
    kind = "forbidden"


class NotCancellableError(StorefrontError):
    status_code = 400
    kind = "not_cancellable"

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Order {order_id} cannot be cancelled once {status}")


class InvalidStatusTransitionError(StorefrontError):
    status_code = 400
    kind = "invalid_status_transition"

    def __init__(self, order_id: str, current: str, requested: str):
        self.order_id = order_id
        self.current = current
        self.requested = requested
        super().__init__(f"Order {order_id} cannot move from {current} to {requested}")


class AlreadyReviewedError(StorefrontError):
    status_code = 400
    kind = "already_reviewed"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("You have already reviewed this product")


class NotPurchasedError(StorefrontError):
    status_code = 403
    kind = "not_purchased"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("You can only review products you have purchased")


class PaymentVerificationError(StorefrontError):
    status_code = 400
    kind = "payment_verification_failed"


class AlreadyMarkedHelpfulError(StorefrontError):
    status_code = 400
    kind = "already_marked_helpful"

    def __init__(self, review_id: str):
        self.review_id = review_id
        super().__init__("You already marked this review as helpful")


class RefundError(StorefrontError):
    status_code = 400
    kind = "refund_failed"
