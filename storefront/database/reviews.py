"""Review storage for the storefront"""

import uuid
from datetime import datetime
from typing import Optional

from ..core.errors import ReviewNotFoundError
from ..models.review import Review


class ReviewDatabase:
    """In-memory review storage"""

    def __init__(self):
        self.reviews: dict[str, Review] = {}

    def reset(self) -> None:
        self.reviews = {}

    def create_review(self, user_id: str, product_id: str, rating: int, title: str, comment: str) -> Review:
        now = datetime.utcnow()
        review = Review(
            review_id=f"REV-{uuid.uuid4().hex[:8].upper()}",
            user_id=user_id,
            product_id=product_id,
            rating=rating,
            title=title,
            comment=comment,
            created_at=now,
            updated_at=now,
        )
        self.reviews[review.review_id] = review
        return review

    def get_review(self, review_id: str) -> Optional[Review]:
        return self.reviews.get(review_id)

    def require_review(self, review_id: str) -> Review:
        review = self.get_review(review_id)
        if not review:
            raise ReviewNotFoundError(review_id)
        return review

    def find_by_user_and_product(self, user_id: str, product_id: str) -> Optional[Review]:
        return next(
            (r for r in self.reviews.values() if r.user_id == user_id and r.product_id == product_id),
            None,
        )

    def list_for_product(self, product_id: str) -> list[Review]:
        reviews = [r for r in self.reviews.values() if r.product_id == product_id]
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return reviews

    def list_for_user(self, user_id: str) -> list[Review]:
        reviews = [r for r in self.reviews.values() if r.user_id == user_id]
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return reviews

    def delete_review(self, review_id: str) -> Review:
        review = self.require_review(review_id)
        del self.reviews[review_id]
        return review


# Singleton instance
review_db = ReviewDatabase()
