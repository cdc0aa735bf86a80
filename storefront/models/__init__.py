# Storefront Models

from .product import (
    Product,
    ProductSnapshot,
    CreateProductRequest,
    UpdateProductRequest,
    LowStockResponse,
    ProductSearchResponse,
)
from .cart import (
    Cart,
    CartItem,
    AddToCartRequest,
    UpdateCartItemRequest,
    GuestCartLine,
    MergeCartRequest,
    CartResponse,
    CartCountResponse,
)
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentResult,
    ShippingAddress,
    CheckoutRequest,
    UpdateOrderRequest,
    UpdateOrderStatusRequest,
    PaymentConfirmation,
    OrderResponse,
    OrderListResponse,
)
from .review import (
    Review,
    ReviewStatus,
    CreateReviewRequest,
    UpdateReviewRequest,
    ReviewResponse,
    ReviewListResponse,
)

__all__ = [
    "Product",
    "ProductSnapshot",
    "CreateProductRequest",
    "UpdateProductRequest",
    "LowStockResponse",
    "ProductSearchResponse",
    "Cart",
    "CartItem",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "GuestCartLine",
    "MergeCartRequest",
    "CartResponse",
    "CartCountResponse",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PaymentResult",
    "ShippingAddress",
    "CheckoutRequest",
    "UpdateOrderRequest",
    "UpdateOrderStatusRequest",
    "PaymentConfirmation",
    "OrderResponse",
    "OrderListResponse",
    "Review",
    "ReviewStatus",
    "CreateReviewRequest",
    "UpdateReviewRequest",
    "ReviewResponse",
    "ReviewListResponse",
]
