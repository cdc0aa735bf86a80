"""Review API routes for the storefront"""

from fastapi import APIRouter, Depends

from ..database.reviews import review_db
from ..models.review import (
    CreateReviewRequest,
    Review,
    ReviewResponse,
    ReviewStatus,
    UpdateReviewRequest,
)
from ..security.auth import Caller, require_admin, require_user
from ..services.reviews import ReviewService, review_service

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])


def get_review_service() -> ReviewService:
    return review_service


@router.post("", response_model=ReviewResponse, status_code=201)
async def create_review(
    request: CreateReviewRequest,
    caller: Caller = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    """Review a product the caller has received"""
    review = service.create_review(
        caller,
        product_id=request.product_id,
        rating=request.rating,
        title=request.title,
        comment=request.comment,
    )
    return ReviewResponse(review=review, message="Review created successfully")


@router.get("/mine", response_model=list[Review])
async def list_my_reviews(caller: Caller = Depends(require_user)):
    """List the caller's reviews"""
    return review_db.list_for_user(caller.user_id)


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: str,
    request: UpdateReviewRequest,
    caller: Caller = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    """Edit the caller's review"""
    review = service.update_review(
        review_id,
        caller,
        rating=request.rating,
        title=request.title,
        comment=request.comment,
    )
    return ReviewResponse(review=review, message="Review updated successfully")


@router.delete("/{review_id}")
async def delete_review(
    review_id: str,
    caller: Caller = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    """Delete a review (owner or admin)"""
    service.delete_review(review_id, caller)
    return {"message": "Review deleted successfully"}


@router.post("/{review_id}/helpful", response_model=ReviewResponse)
async def mark_review_helpful(
    review_id: str,
    caller: Caller = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    """Mark a review as helpful, once per user"""
    review = service.mark_helpful(review_id, caller)
    return ReviewResponse(review=review, message="Marked as helpful")


@router.put("/{review_id}/approve", response_model=ReviewResponse)
async def approve_review(
    review_id: str,
    caller: Caller = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    """Approve a review (admin only)"""
    review = service.moderate(review_id, caller, ReviewStatus.APPROVED)
    return ReviewResponse(review=review, message="Review approved successfully")


@router.put("/{review_id}/reject", response_model=ReviewResponse)
async def reject_review(
    review_id: str,
    caller: Caller = Depends(require_admin),
    service: ReviewService = Depends(get_review_service),
):
    """Reject a review; it stops counting towards the product rating (admin only)"""
    review = service.moderate(review_id, caller, ReviewStatus.REJECTED)
    return ReviewResponse(review=review, message="Review rejected")
