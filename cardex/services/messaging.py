"""
Messaging ledger.

Keeps one message thread per ordered (sender, receiver) pair, with a
single read flag per thread, and a block list per user.

Blocking is stored one way but enforced both ways on send: if either
party has blocked the other, the message is refused. Reading a thread
only marks that direction as read; the reverse thread keeps its own flag.
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.db.upsert import ensure_row
from cardex.models.db import BlockedUserDB, BlockRecordDB, MessageDB, MessageThreadDB
from cardex.models.failure import ConflictError, ForbiddenError, NotFoundError
from cardex.models.thread import Thread

logger = logging.getLogger(__name__)


# --- Blocking ---


async def ensure_block_record(session: AsyncSession, user: str) -> int:
    """Create an empty block list for a user if none exists. Returns its id."""
    return await ensure_row(session, BlockRecordDB, user=user)


async def blocked_users(session: AsyncSession, user: str) -> list[str]:
    """Users blocked by `user`, in the order they were blocked."""
    result = await session.execute(
        select(BlockedUserDB.target)
        .join(BlockRecordDB, BlockRecordDB.id == BlockedUserDB.record_id)
        .where(BlockRecordDB.user == user)
        .order_by(BlockedUserDB.id)
    )
    return list(result.scalars().all())


async def is_blocked(session: AsyncSession, user: str, target: str) -> bool:
    """Check whether `user` has blocked `target`."""
    found = await session.scalar(
        select(BlockedUserDB.id)
        .join(BlockRecordDB, BlockRecordDB.id == BlockedUserDB.record_id)
        .where(BlockRecordDB.user == user, BlockedUserDB.target == target)
        .limit(1)
    )
    return found is not None


async def block_user(session: AsyncSession, user: str, target: str) -> None:
    """
    Add `target` to `user`'s block list.

    Raises:
        ConflictError: If `target` is already blocked.
    """
    record_id = await ensure_block_record(session, user)
    if await is_blocked(session, user, target):
        raise ConflictError(f"User {target} is already blocked")

    session.add(BlockedUserDB(record_id=record_id, target=target))
    await session.flush()
    logger.info("%s blocked %s", user, target)


async def unblock_user(session: AsyncSession, user: str, target: str) -> None:
    """
    Remove `target` from `user`'s block list.

    Raises:
        NotFoundError: If `target` is not blocked.
    """
    record_id = await ensure_block_record(session, user)
    if not await is_blocked(session, user, target):
        raise NotFoundError(f"User {target} is not blocked")

    await session.execute(
        delete(BlockedUserDB).where(
            BlockedUserDB.record_id == record_id,
            BlockedUserDB.target == target,
        )
    )
    logger.info("%s unblocked %s", user, target)


# --- Threads ---


async def _get_thread(session: AsyncSession, sender: str, receiver: str) -> MessageThreadDB | None:
    result = await session.execute(
        select(MessageThreadDB)
        .where(MessageThreadDB.sender == sender, MessageThreadDB.receiver == receiver)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def send_message(session: AsyncSession, sender: str, receiver: str, text: str) -> None:
    """
    Append a message to the sender->receiver thread.

    Creates the thread on first send. New content marks the thread unread,
    even if earlier content was read.

    Raises:
        ForbiddenError: If the sender has blocked the receiver, or the
            receiver has blocked the sender.
    """
    if await is_blocked(session, sender, receiver):
        raise ForbiddenError(f"{sender} has blocked {receiver}")
    if await is_blocked(session, receiver, sender):
        raise ForbiddenError(f"{receiver} has blocked {sender}")

    thread_id = await ensure_row(session, MessageThreadDB, sender=sender, receiver=receiver)
    session.add(MessageDB(thread_id=thread_id, text=text))
    await session.execute(
        update(MessageThreadDB).where(MessageThreadDB.id == thread_id).values(read=False)
    )
    await session.flush()
    logger.debug("Message from %s to %s appended to thread %d", sender, receiver, thread_id)


async def read_thread(session: AsyncSession, sender: str, receiver: str) -> Thread:
    """
    Read the sender->receiver thread and mark it as read.

    Raises:
        NotFoundError: If the sender has never messaged the receiver.
    """
    thread = await _get_thread(session, sender, receiver)
    if thread is None:
        raise NotFoundError(f"No messages from {sender} to {receiver}")

    await session.execute(
        update(MessageThreadDB).where(MessageThreadDB.id == thread.id).values(read=True)
    )

    result = await session.execute(
        select(MessageDB.text).where(MessageDB.thread_id == thread.id).order_by(MessageDB.id)
    )
    return Thread(
        sender=sender,
        receiver=receiver,
        messages=list(result.scalars().all()),
        read=True,
    )
