"""
Card registry.

Owns canonical card identity. A card is identified solely by its set of
tags, and no two live cards may carry the same tag set:

    {"red", "rare"} and ["rare", "red"] and ["red", "rare", "red"]

all name the same card. Exact-match detection compares true sets by
cardinality and mutual containment, never list equality, so tag order and
repeated tags do not affect identity.

Tags are stored as written (repeats included). Normalizing them on write
would silently change what callers see, so repeats are kept and only the
comparison treats them as a set.

The uniqueness check and the insert are two statements. Two concurrent
adds of the same tag set can both succeed; callers accept that race.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import delete, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cardex.models.card import Card
from cardex.models.db import CardDB, CardTagDB
from cardex.models.failure import ConflictError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def tag_sets_match(a: Iterable[str], b: Iterable[str]) -> bool:
    """
    Check whether two tag collections name the same card.

    Both sides are reduced to true sets; they match when the sets have
    the same size and each contains the other.
    """
    set_a = set(a)
    set_b = set(b)
    return len(set_a) == len(set_b) and set_a <= set_b and set_b <= set_a


def card_to_model(card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(id=card.id, tags=tuple(t.tag for t in card.tags))


async def _load_card(session: AsyncSession, card_id: str) -> CardDB | None:
    result = await session.execute(
        select(CardDB)
        .where(CardDB.id == card_id)
        .options(selectinload(CardDB.tags))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_card(session: AsyncSession, card_id: str) -> Card | None:
    """
    Get a card by id.

    Returns None if no live card has this id.
    """
    card = await _load_card(session, card_id)
    return card_to_model(card) if card else None


async def search_cards(session: AsyncSession, required_tags: Iterable[str]) -> list[Card]:
    """
    Find every card carrying all of the required tags.

    A card matches when its tag set is a superset of required_tags. With no
    required tags every card matches. Used both for general tag search and
    for collection views (required tag = owner name).

    Returns:
        Matching cards, oldest first.
    """
    required = set(required_tags)

    # Tags may have changed through Core statements since a card was loaded
    stmt = (
        select(CardDB)
        .options(selectinload(CardDB.tags))
        .execution_options(populate_existing=True)
    )
    if required:
        matching_ids = (
            select(CardTagDB.card_id)
            .where(CardTagDB.tag.in_(required))
            .group_by(CardTagDB.card_id)
            .having(func.count(distinct(CardTagDB.tag)) == len(required))
        )
        stmt = stmt.where(CardDB.id.in_(matching_ids))

    result = await session.execute(stmt.order_by(CardDB.seq))
    return [card_to_model(card) for card in result.scalars().all()]


async def find_exact_match(session: AsyncSession, tags: Iterable[str]) -> Card | None:
    """
    Find the live card whose tag set is exactly `tags`, if any.

    Narrows candidates with a superset search, then applies the
    set-equality comparison.
    """
    wanted = set(tags)
    for candidate in await search_cards(session, wanted):
        if tag_sets_match(candidate.tags, wanted):
            return candidate
    return None


async def add_card(session: AsyncSession, tags: Iterable[str]) -> str:
    """
    Register a new card.

    Raises:
        ConflictError: If a live card already has exactly this tag set.

    Returns:
        The new card's id.
    """
    tag_list = list(tags)

    existing = await find_exact_match(session, tag_list)
    if existing is not None:
        msg = f"A photocard with tags {sorted(set(tag_list))} already exists"
        raise ConflictError(msg, detail=f"Existing card: {existing.id}")

    card = CardDB(tags=[CardTagDB(tag=tag) for tag in tag_list])
    session.add(card)
    await session.flush()

    logger.info("Registered card %s with %d tags", card.id, len(tag_list))
    return card.id


async def remove_card(session: AsyncSession, card_id: str) -> None:
    """
    Remove a card and its tags.

    Collection items and discoverable entries that reference the card
    are not touched; callers clean those up.

    Raises:
        NotFoundError: If no live card has this id.
    """
    card = await _load_card(session, card_id)
    if card is None:
        raise NotFoundError(f"Photocard {card_id} not found")

    await session.delete(card)
    await session.flush()
    logger.info("Removed card %s", card_id)


async def duplicate_card(session: AsyncSession, card_id: str, distinguishing_tag: str) -> str:
    """
    Create a copy of a card with one extra tag.

    The copy carries the source's tags plus `distinguishing_tag`, and is
    registered like any other card.

    Raises:
        NotFoundError: If the source card does not exist.
        ConflictError: If the resulting tag set already exists.

    Returns:
        The copy's id.
    """
    source = await get_card(session, card_id)
    if source is None:
        raise NotFoundError(f"Photocard {card_id} to be duplicated not found")

    return await add_card(session, [*source.tags, distinguishing_tag])


async def add_tag(session: AsyncSession, card_id: str, tag: str) -> None:
    """
    Append a tag to a card.

    Does nothing if the card does not exist.
    """
    exists = await session.scalar(select(CardDB.id).where(CardDB.id == card_id))
    if exists is None:
        return

    session.add(CardTagDB(card_id=card_id, tag=tag))
    await session.flush()
    logger.debug("Tagged card %s with %r", card_id, tag)


async def remove_tag(session: AsyncSession, card_id: str, tag: str) -> None:
    """
    Remove every occurrence of a tag from a card.

    Removing a tag the card does not carry is a no-op.
    """
    await session.execute(
        delete(CardTagDB).where(CardTagDB.card_id == card_id, CardTagDB.tag == tag)
    )
    logger.debug("Removed tag %r from card %s", tag, card_id)


async def assert_has_tag(session: AsyncSession, card_id: str, tag: str) -> None:
    """
    Check that a card carries a tag.

    Used by callers to check per-card ownership (the owner's name is a
    tag on the card) before allowing a mutation. A missing card carries
    no tags.

    Raises:
        ForbiddenError: If the card lacks the tag.
    """
    found = await session.scalar(
        select(CardTagDB.id).where(CardTagDB.card_id == card_id, CardTagDB.tag == tag).limit(1)
    )
    if found is None:
        raise ForbiddenError(f"Photocard {card_id} is not tagged {tag!r}")
