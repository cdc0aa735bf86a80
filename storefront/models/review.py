"""Review models for the storefront"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


class ReviewStatus(str, Enum):
    """Moderation state; only approved reviews are listed and rated"""
    APPROVED = "approved"
    REJECTED = "rejected"


class Review(BaseModel):
    """Product review left by a customer"""
    review_id: str
    user_id: str
    product_id: str
    rating: int = Field(ge=1, le=5)
    title: str
    comment: str
    status: ReviewStatus = ReviewStatus.APPROVED
    helpful_by: list[str] = []
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def helpful_count(self) -> int:
        return len(self.helpful_by)

    @property
    def is_visible(self) -> bool:
        return self.status == ReviewStatus.APPROVED


class CreateReviewRequest(BaseModel):
    product_id: str
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=120)
    comment: str = Field(min_length=1, max_length=2000)


class UpdateReviewRequest(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=120)
    comment: Optional[str] = Field(None, min_length=1, max_length=2000)


class ReviewResponse(BaseModel):
    review: Review
    message: Optional[str] = None


class ReviewListResponse(BaseModel):
    reviews: list[Review]
    average_rating: float
    review_count: int
