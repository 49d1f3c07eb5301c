"""
Reputation API endpoints.

Leave a rating (and optionally a review) for another user, and read a
user's average rating and written feedback.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import current_user
from cardex.db.database import get_session
from cardex.services import reputation

router = APIRouter(prefix="/reviews", tags=["reviews"])


class FeedbackRequest(BaseModel):
    """Request model for leaving feedback."""

    rating: int = Field(..., description="Rating from 1 (worst) to 5 (best)", examples=[5])
    review: str | None = Field(
        default=None,
        description="Optional written review",
        examples=["Fast shipping, card as described"],
    )


class AverageRatingResponse(BaseModel):
    """A user's average rating."""

    user: str
    average: float | None = Field(
        default=None,
        description="Mean of every rater's latest rating, or null if none",
    )
    message: str = ""


class FeedbackResponse(BaseModel):
    """A user's written reviews, keyed by reviewer."""

    user: str
    reviews: dict[str, str] = Field(default_factory=dict)
    message: str = ""


class ReviewStatusResponse(BaseModel):
    """Outcome message for feedback writes."""

    msg: str


@router.post("/{user}", response_model=ReviewStatusResponse)
async def leave_feedback(
    user: str,
    request: FeedbackRequest,
    rater: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ReviewStatusResponse:
    """
    Rate a user and optionally review them.

    A repeat rating or review from the same user replaces the earlier one.
    Fails with 400 if the rating is outside 1-5.
    """
    await reputation.rate_user(session, user, rater, request.rating)
    if request.review:
        await reputation.review_user(session, user, rater, request.review)
    return ReviewStatusResponse(msg="Feedback successfully left!")


@router.get("/{user}/average", response_model=AverageRatingResponse)
async def view_average_rating(
    user: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AverageRatingResponse:
    """Get a user's average rating."""
    average = await reputation.average_rating(session, user)
    if average is None:
        return AverageRatingResponse(user=user, message="No ratings found!")
    return AverageRatingResponse(user=user, average=average)


@router.get("/{user}/feedback", response_model=FeedbackResponse)
async def view_feedback(
    user: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> FeedbackResponse:
    """Get every written review of a user."""
    reviews = await reputation.get_feedback(session, user)
    if reviews is None:
        return FeedbackResponse(user=user, message="No reviews found!")
    return FeedbackResponse(user=user, reviews=reviews)
