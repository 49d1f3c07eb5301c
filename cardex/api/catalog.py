"""
Catalog and collection API endpoints.

Composes the card registry, collection ledger and discovery engine:

- The system catalog: cards tagged with the system owner, listed in the
  system collection.
- User collections: a user's copy of a catalog card carries the user's
  name as a tag in place of the system tag. Ownership checks are tag checks.
- Availability: an owner marks a card "Available" and places it in the
  discovery pool.

Each workflow spans several components and runs in one request session.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.api.deps import current_user, tag_query
from cardex.config import settings
from cardex.db.database import get_session
from cardex.models.card import Card
from cardex.models.failure import ConflictError, NotFoundError
from cardex.services import card_registry, collection_ledger, discovery

router = APIRouter(tags=["catalog"])


class CardResponse(BaseModel):
    """A single photocard."""

    id: str
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(id=card.id, tags=list(card.tags))


class CardListResponse(BaseModel):
    """Response model for catalog views and searches."""

    cards: list[CardResponse]
    count: int


class CardCreateRequest(BaseModel):
    """Request model for adding a card to the system catalog."""

    tags: list[str] = Field(
        ...,
        min_length=1,
        description="Tags identifying the photocard",
        examples=[["red", "rare"]],
    )


class StatusResponse(BaseModel):
    """Outcome message for write operations."""

    msg: str
    id: str | None = None


def _card_list(cards: list[Card]) -> CardListResponse:
    return CardListResponse(cards=[CardResponse.from_card(c) for c in cards], count=len(cards))


async def _remove_card_everywhere(session: AsyncSession, owner: str, card_id: str) -> None:
    await card_registry.remove_card(session, card_id)
    await discovery.remove_card_entries(session, card_id)
    await collection_ledger.remove_item(session, owner, card_id)


# --- System catalog ---


@router.post("/photocards", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
async def add_system_photocard(
    request: CardCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """
    Add a photocard to the system catalog.

    The card is tagged with the system owner and listed in the system
    collection. Fails with 409 if a card with the same tag set exists.
    """
    tags = [*request.tags, settings.system_owner]
    card_id = await card_registry.add_card(session, tags)
    await collection_ledger.add_item(session, collection_ledger.SYSTEM_OWNER, card_id)
    return StatusResponse(msg="Photocard added successfully!", id=card_id)


@router.get("/photocards/{card_id}", response_model=CardResponse)
async def get_photocard(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Get a single photocard by id."""
    card = await card_registry.get_card(session, card_id)
    if card is None:
        raise NotFoundError(f"Photocard {card_id} not found")
    return CardResponse.from_card(card)


@router.delete("/photocards/{card_id}", response_model=StatusResponse)
async def delete_system_photocard(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Remove a photocard from the system catalog."""
    await _remove_card_everywhere(session, collection_ledger.SYSTEM_OWNER, card_id)
    return StatusResponse(msg="Photocard deleted!", id=card_id)


@router.post("/photocards/{card_id}/tags/{tag}", response_model=StatusResponse)
async def add_system_tag(
    card_id: str,
    tag: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Tag a catalog photocard."""
    await card_registry.add_tag(session, card_id, tag)
    return StatusResponse(msg="Tag added!", id=card_id)


@router.delete("/photocards/{card_id}/tags/{tag}", response_model=StatusResponse)
async def remove_system_tag(
    card_id: str,
    tag: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Untag a catalog photocard."""
    await card_registry.remove_tag(session, card_id, tag)
    return StatusResponse(msg="Tag removed!", id=card_id)


@router.get("/catalog/system", response_model=CardListResponse)
async def view_system_catalog(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardListResponse:
    """List every photocard in the system catalog."""
    return _card_list(await card_registry.search_cards(session, [settings.system_owner]))


@router.get("/catalog/system/search", response_model=CardListResponse)
async def search_system_catalog(
    tags: Annotated[list[str], Depends(tag_query)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardListResponse:
    """Search the system catalog for photocards carrying all of the given tags."""
    required = [*tags, settings.system_owner]
    return _card_list(await card_registry.search_cards(session, required))


@router.get("/catalog/{owner}", response_model=CardListResponse)
async def view_user_collection(
    owner: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardListResponse:
    """List every photocard in a user's collection."""
    return _card_list(await card_registry.search_cards(session, [owner]))


@router.get("/catalog/{owner}/search", response_model=CardListResponse)
async def search_user_collection(
    owner: str,
    tags: Annotated[list[str], Depends(tag_query)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardListResponse:
    """Search a user's collection for photocards carrying all of the given tags."""
    return _card_list(await card_registry.search_cards(session, [*tags, owner]))


# --- User collections ---


@router.post(
    "/collection/cards/{card_id}",
    response_model=StatusResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_to_collection(
    card_id: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """
    Add a copy of a catalog photocard to the acting user's collection.

    The copy carries the source's tags plus the user's name, without the
    system tag. Fails with 409 if the user already holds an identical copy.
    """
    source = await card_registry.get_card(session, card_id)
    if source is None:
        raise NotFoundError(f"Photocard {card_id} to be duplicated not found")

    copy_tags = [t for t in source.tags if t != settings.system_owner] + [user]
    existing = await card_registry.find_exact_match(session, copy_tags)
    if existing is not None:
        raise ConflictError(
            "Photocard is already in your collection", detail=f"Existing card: {existing.id}"
        )

    copy_id = await card_registry.duplicate_card(session, card_id, user)
    await card_registry.remove_tag(session, copy_id, settings.system_owner)
    await collection_ledger.add_item(session, user, copy_id)
    return StatusResponse(msg="Photocard successfully added to collection!", id=copy_id)


@router.delete("/collection/cards/{card_id}", response_model=StatusResponse)
async def remove_from_collection(
    card_id: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Remove a photocard the acting user owns. Fails with 403 for anyone else's card."""
    await card_registry.assert_has_tag(session, card_id, user)
    await _remove_card_everywhere(session, user, card_id)
    return StatusResponse(msg="Photocard successfully removed from collection!", id=card_id)


@router.post("/collection/cards/{card_id}/tags/{tag}", response_model=StatusResponse)
async def add_user_tag(
    card_id: str,
    tag: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Tag a photocard the acting user owns."""
    await card_registry.assert_has_tag(session, card_id, user)
    await card_registry.add_tag(session, card_id, tag)
    return StatusResponse(msg="Tag added!", id=card_id)


@router.delete("/collection/cards/{card_id}/tags/{tag}", response_model=StatusResponse)
async def remove_user_tag(
    card_id: str,
    tag: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Untag a photocard the acting user owns."""
    await card_registry.assert_has_tag(session, card_id, user)
    await card_registry.remove_tag(session, card_id, tag)
    return StatusResponse(msg="Tag removed!", id=card_id)


@router.post("/collection/cards/{card_id}/available", response_model=StatusResponse)
async def mark_available(
    card_id: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Make a photocard the acting user owns discoverable by other users."""
    await card_registry.assert_has_tag(session, card_id, user)
    await card_registry.add_tag(session, card_id, settings.available_tag)
    await discovery.make_discoverable(session, user, card_id)
    return StatusResponse(msg="Photocard successfully marked as available!", id=card_id)


@router.delete("/collection/cards/{card_id}/available", response_model=StatusResponse)
async def mark_unavailable(
    card_id: str,
    user: Annotated[str, Depends(current_user)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> StatusResponse:
    """Withdraw a photocard from discovery. Fails with 403 if it is not available."""
    await card_registry.assert_has_tag(session, card_id, user)
    await card_registry.assert_has_tag(session, card_id, settings.available_tag)
    await card_registry.remove_tag(session, card_id, settings.available_tag)
    await discovery.make_undiscoverable(session, user, card_id)
    return StatusResponse(msg="Photocard successfully marked as unavailable!", id=card_id)
