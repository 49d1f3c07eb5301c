"""
Discovery API endpoint.

Recommends an available photocard to the acting user and warns when the
card's owner has a poor average rating.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import current_user
from cardex.config import settings
from cardex.db.database import get_session
from cardex.services import discovery, reputation

router = APIRouter(prefix="/discover", tags=["discover"])


class DiscoverResponse(BaseModel):
    """A recommended photocard and its owner."""

    msg: str
    photocard: str
    owner: str
    owner_rating: float | None = Field(
        default=None,
        description="Owner's average rating, or null if nobody has rated them",
    )
    poor_rating: bool = Field(
        default=False,
        description="True if the owner's average rating is below the warning threshold",
    )


@router.get("", response_model=DiscoverResponse)
async def discover(
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DiscoverResponse:
    """
    Recommend a photocard the acting user has not seen and does not own.

    Returns 403 once every discoverable card has been recommended.
    """
    await discovery.ensure_user_discovery(session, user)
    recommended = await discovery.recommend(session, user)

    average = await reputation.average_rating(session, recommended.owner)
    poor = average is not None and average < settings.low_rating_threshold

    msg = "Photocard recommended!"
    if poor:
        msg = "Photocard recommended, but the owner has a poor rating!"

    return DiscoverResponse(
        msg=msg,
        photocard=recommended.card_id,
        owner=recommended.owner,
        owner_rating=average,
        poor_rating=poor,
    )
