"""Product reviews and rating statistics"""

import logging
from datetime import datetime
from typing import Optional

from ..core.errors import AlreadyMarkedHelpfulError, AlreadyReviewedError, ForbiddenError, NotPurchasedError
from ..database.orders import OrderDatabase, order_db
from ..database.products import ProductDatabase, product_db
from ..database.reviews import ReviewDatabase, review_db
from ..models.review import Review, ReviewStatus
from ..security.auth import Caller

logger = logging.getLogger(__name__)


class ReviewService:
    """Review eligibility and product rating upkeep"""

    def __init__(
        self,
        products: ProductDatabase = product_db,
        orders: OrderDatabase = order_db,
        reviews: ReviewDatabase = review_db,
    ):
        self.products = products
        self.orders = orders
        self.reviews = reviews

    def create_review(self, actor: Caller, product_id: str, rating: int, title: str, comment: str) -> Review:
        """
        Raises:
            ProductNotFoundError: if the product doesn't exist
            NotPurchasedError: without a delivered order containing the product
            AlreadyReviewedError: on a second review of the same product
        """
        self.products.require_product(product_id)

        if not self.orders.has_delivered_purchase(actor.user_id, product_id):
            raise NotPurchasedError(product_id)

        if self.reviews.find_by_user_and_product(actor.user_id, product_id):
            raise AlreadyReviewedError(product_id)

        review = self.reviews.create_review(actor.user_id, product_id, rating, title, comment)
        self._refresh_rating(product_id)
        return review

    def update_review(
        self,
        review_id: str,
        actor: Caller,
        rating: Optional[int] = None,
        title: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Review:
        review = self.reviews.require_review(review_id)
        if review.user_id != actor.user_id:
            raise ForbiddenError("Not authorized to update this review")

        if rating is not None:
            review.rating = rating
        if title is not None:
            review.title = title
        if comment is not None:
            review.comment = comment
        review.updated_at = datetime.utcnow()

        self._refresh_rating(review.product_id)
        return review

    def delete_review(self, review_id: str, actor: Caller) -> None:
        review = self.reviews.require_review(review_id)
        if not actor.can_access(review.user_id):
            raise ForbiddenError("Not authorized to delete this review")

        self.reviews.delete_review(review_id)
        self._refresh_rating(review.product_id)

    def mark_helpful(self, review_id: str, actor: Caller) -> Review:
        review = self.reviews.require_review(review_id)
        if actor.user_id in review.helpful_by:
            raise AlreadyMarkedHelpfulError(review_id)
        review.helpful_by.append(actor.user_id)
        return review

    def moderate(self, review_id: str, actor: Caller, status: ReviewStatus) -> Review:
        """
        Approve or reject a review (admin).

        Rejected reviews drop out of the product listing and its rating.
        """
        if not actor.is_admin:
            raise ForbiddenError("Not authorized - Admin only")

        review = self.reviews.require_review(review_id)
        review.status = ReviewStatus(status)
        review.updated_at = datetime.utcnow()

        self._refresh_rating(review.product_id)
        logger.info(f"Review {review_id} {review.status.value} by {actor.user_id}")
        return review

    def product_reviews(self, product_id: str) -> list[Review]:
        self.products.require_product(product_id)
        return [r for r in self.reviews.list_for_product(product_id) if r.is_visible]

    def _refresh_rating(self, product_id: str) -> None:
        reviews = [r for r in self.reviews.list_for_product(product_id) if r.is_visible]
        count = len(reviews)
        average = round(sum(r.rating for r in reviews) / count, 2) if count else 0.0
        self.products.record_rating(product_id, average, count)
        logger.debug(f"Product {product_id} rating now {average} over {count} review(s)")


# Singleton instance
review_service = ReviewService()
