"""
Collection ledger.

Tracks the authoritative list of card references each principal holds,
including the shared system catalog. Collections are created lazily on
first write and are multisets: the same card id may appear more than once.

Viewing a collection goes through the card registry's tag search (a
card carries its owner's name as a tag). The ledger is the membership
record that does not depend on tags.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.config import settings
from cardex.db.upsert import ensure_row
from cardex.models.db import CollectionDB, CollectionItemDB

logger = logging.getLogger(__name__)

SYSTEM_OWNER = settings.system_owner


async def ensure_collection(session: AsyncSession, owner: str) -> int:
    """
    Create an empty collection for `owner` if none exists.

    Idempotent. Returns the collection's id.
    """
    return await ensure_row(session, CollectionDB, owner=owner)


async def add_item(session: AsyncSession, owner: str, card_id: str) -> None:
    """Append a card reference to an owner's collection, creating it if needed."""
    collection_id = await ensure_collection(session, owner)
    session.add(CollectionItemDB(collection_id=collection_id, card_id=card_id))
    await session.flush()
    logger.debug("Added card %s to collection of %s", card_id, owner)


async def remove_item(session: AsyncSession, owner: str, card_id: str) -> None:
    """
    Remove every reference to a card from an owner's collection.

    Creates the collection if needed. Removing a card that is not in the
    collection is a no-op.
    """
    collection_id = await ensure_collection(session, owner)
    await session.execute(
        delete(CollectionItemDB).where(
            CollectionItemDB.collection_id == collection_id,
            CollectionItemDB.card_id == card_id,
        )
    )
    logger.debug("Removed card %s from collection of %s", card_id, owner)


async def list_items(session: AsyncSession, owner: str) -> list[str]:
    """
    Get the card references in an owner's collection, in insertion order.

    An owner with no collection has an empty one.
    """
    result = await session.execute(
        select(CollectionItemDB.card_id)
        .join(CollectionDB, CollectionDB.id == CollectionItemDB.collection_id)
        .where(CollectionDB.owner == owner)
        .order_by(CollectionItemDB.id)
    )
    return list(result.scalars().all())
