"""
Discovery engine.

Recommends cards other owners have made discoverable, never repeating a
card to the same user.

Two records are involved:
- The discoverable pool: (owner, card) pairs an owner opted into.
- Each user's seen-set: cards already recommended to them. It only grows.

Recommendation is uniform over the current candidates: pool entries whose
card the user has not seen and whose owner is not the user. There is no
weighting across owners.
"""

import logging
import random

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.db.upsert import ensure_row, insert_if_missing
from cardex.models.db import DiscoverableEntryDB, SeenCardDB, UserDiscoveryDB
from cardex.models.discovery import Recommendation
from cardex.models.failure import ForbiddenError

logger = logging.getLogger(__name__)


async def make_discoverable(session: AsyncSession, owner: str, card_id: str) -> None:
    """Add a card to the discovery pool. Marking the same pair twice is a no-op."""
    await insert_if_missing(session, DiscoverableEntryDB, owner=owner, card_id=card_id)
    logger.debug("Card %s of %s is discoverable", card_id, owner)


async def make_undiscoverable(session: AsyncSession, owner: str, card_id: str) -> None:
    """Remove a card from the discovery pool. No-op if it was not in it."""
    await session.execute(
        delete(DiscoverableEntryDB).where(
            DiscoverableEntryDB.owner == owner,
            DiscoverableEntryDB.card_id == card_id,
        )
    )
    logger.debug("Card %s of %s is no longer discoverable", card_id, owner)


async def remove_card_entries(session: AsyncSession, card_id: str) -> int:
    """
    Drop every pool entry for a card, whoever the owner.

    Called when the card itself is removed. Returns the number of entries dropped.
    """
    result = await session.execute(
        delete(DiscoverableEntryDB).where(DiscoverableEntryDB.card_id == card_id)
    )
    # rowcount is available on DELETE results; type stubs incomplete for async
    return int(result.rowcount)  # type: ignore[attr-defined]


async def ensure_user_discovery(session: AsyncSession, user: str) -> int:
    """
    Create an empty discovery record for a user if none exists.

    Idempotent. Returns the record's id.
    """
    return await ensure_row(session, UserDiscoveryDB, user=user)


async def _get_discovery_id(session: AsyncSession, user: str) -> int | None:
    return await session.scalar(select(UserDiscoveryDB.id).where(UserDiscoveryDB.user == user))


async def seen_cards(session: AsyncSession, user: str) -> list[str]:
    """Cards already recommended to a user, oldest first."""
    result = await session.execute(
        select(SeenCardDB.card_id)
        .join(UserDiscoveryDB, UserDiscoveryDB.id == SeenCardDB.discovery_id)
        .where(UserDiscoveryDB.user == user)
        .order_by(SeenCardDB.id)
    )
    return list(result.scalars().all())


async def recommend(
    session: AsyncSession,
    user: str,
    rng: random.Random | None = None,
) -> Recommendation:
    """
    Recommend a card the user has not seen and does not own.

    The chosen card is appended to the user's seen-set, so it will not be
    recommended to them again.

    Args:
        session: Active database session
        user: The user asking for a recommendation
        rng: Random source for the pick. Defaults to the `random` module.

    Raises:
        ForbiddenError: If the user has no discovery record (call
            ensure_user_discovery first), or if no candidates remain.
    """
    discovery_id = await _get_discovery_id(session, user)
    if discovery_id is None:
        raise ForbiddenError(f"User discovery for {user} does not exist")

    seen = select(SeenCardDB.card_id).where(SeenCardDB.discovery_id == discovery_id)
    result = await session.execute(
        select(DiscoverableEntryDB.card_id, DiscoverableEntryDB.owner)
        .where(
            DiscoverableEntryDB.card_id.not_in(seen),
            DiscoverableEntryDB.owner != user,
        )
        .order_by(DiscoverableEntryDB.id)
    )
    candidates = result.all()
    if not candidates:
        raise ForbiddenError("No recommendations available")

    card_id, owner = (rng or random).choice(candidates)

    session.add(SeenCardDB(discovery_id=discovery_id, card_id=card_id))
    await session.flush()

    logger.debug(
        "Recommended card %s of %s to %s (%d candidates)", card_id, owner, user, len(candidates)
    )
    return Recommendation(card_id=card_id, owner=owner)
