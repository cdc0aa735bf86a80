# Services

from .checkout import CheckoutService, checkout_service
from .reviews import ReviewService, review_service

__all__ = ["CheckoutService", "checkout_service", "ReviewService", "review_service"]
