"""
SQLAlchemy ORM models for persistent storage.

Each record-keeping component owns its own tables. Cross-component
references (a collection item pointing at a card, a discoverable entry
pointing at a card) are plain id columns, not foreign keys: deleting a
card leaves them in place until the caller cleans them up.

Per-record lists (tags, collection items, seen cards, blocked users,
messages) are child rows so that every append or removal is a single
atomic statement. Their autoincrement id preserves insertion order.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def new_card_id() -> str:
    """Generate an opaque card id."""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# --- Card Registry ---


class CardDB(Base):
    """
    A photocard, identified by its set of tags.

    No two live cards may carry the same tag set. This is enforced by the
    registry, not by a database constraint.

    `seq` is the insertion key: searches list cards in `seq` order. The
    opaque `id` is what callers see.
    """

    __tablename__ = "cards"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True, default=new_card_id)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    tags: Mapped[list["CardTagDB"]] = relationship(
        back_populates="card",
        cascade="all, delete-orphan",
        order_by="CardTagDB.id",
    )

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id})>"


class CardTagDB(Base):
    """A single tag on a card. Duplicate tags on one card are allowed."""

    __tablename__ = "card_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    tag: Mapped[str] = mapped_column(String(255), index=True)

    card: Mapped["CardDB"] = relationship(back_populates="tags")

    def __repr__(self) -> str:
        return f"<CardTagDB(card={self.card_id}, tag={self.tag})>"


# --- Collection Ledger ---


class CollectionDB(Base):
    """A principal's collection of card references (the system owner included)."""

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<CollectionDB(id={self.id}, owner={self.owner})>"


class CollectionItemDB(Base):
    """One card reference in a collection. A collection is a multiset."""

    __tablename__ = "collection_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("collections.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(32), index=True)

    def __repr__(self) -> str:
        return f"<CollectionItemDB(collection={self.collection_id}, card={self.card_id})>"


# --- Discovery Engine ---


class UserDiscoveryDB(Base):
    """A user's discovery record."""

    __tablename__ = "user_discoveries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<UserDiscoveryDB(id={self.id}, user={self.user})>"


class SeenCardDB(Base):
    """A card already recommended to a user. Grows monotonically."""

    __tablename__ = "seen_cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    discovery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_discoveries.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(32), index=True)

    def __repr__(self) -> str:
        return f"<SeenCardDB(discovery={self.discovery_id}, card={self.card_id})>"


class DiscoverableEntryDB(Base):
    """A card its owner has placed in the discovery pool."""

    __tablename__ = "discoverable_entries"
    __table_args__ = (UniqueConstraint("owner", "card_id", name="uq_discoverable_owner_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(String(32), index=True)

    def __repr__(self) -> str:
        return f"<DiscoverableEntryDB(owner={self.owner}, card={self.card_id})>"


# --- Messaging Ledger ---


class BlockRecordDB(Base):
    """A user's block list."""

    __tablename__ = "block_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<BlockRecordDB(id={self.id}, user={self.user})>"


class BlockedUserDB(Base):
    """One blocked user on a block list."""

    __tablename__ = "blocked_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("block_records.id", ondelete="CASCADE"), index=True
    )
    target: Mapped[str] = mapped_column(String(255), index=True)

    def __repr__(self) -> str:
        return f"<BlockedUserDB(record={self.record_id}, target={self.target})>"


class MessageThreadDB(Base):
    """
    The directional message log from one sender to one receiver.

    sender->receiver and receiver->sender are distinct threads, each with
    its own read flag.
    """

    __tablename__ = "message_threads"
    __table_args__ = (UniqueConstraint("sender", "receiver", name="uq_thread_sender_receiver"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender: Mapped[str] = mapped_column(String(255), index=True)
    receiver: Mapped[str] = mapped_column(String(255), index=True)
    read: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<MessageThreadDB(sender={self.sender}, receiver={self.receiver})>"


class MessageDB(Base):
    """A single message in a thread."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("message_threads.id", ondelete="CASCADE"), index=True
    )
    text: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<MessageDB(thread={self.thread_id}, id={self.id})>"


# --- Reputation Ledger ---


class ReputationRecordDB(Base):
    """Ratings and reviews left for one user."""

    __tablename__ = "reputation_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<ReputationRecordDB(id={self.id}, user={self.user})>"


class RatingDB(Base):
    """One rater's 1-5 rating of a user. Last write wins."""

    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("record_id", "rater", name="uq_rating_record_rater"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("reputation_records.id", ondelete="CASCADE"), index=True
    )
    rater: Mapped[str] = mapped_column(String(255))
    value: Mapped[int] = mapped_column(Integer)

    def __repr__(self) -> str:
        return f"<RatingDB(record={self.record_id}, rater={self.rater}, value={self.value})>"


class ReviewDB(Base):
    """One rater's text review of a user. Last write wins."""

    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("record_id", "rater", name="uq_review_record_rater"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("reputation_records.id", ondelete="CASCADE"), index=True
    )
    rater: Mapped[str] = mapped_column(String(255))
    text: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<ReviewDB(record={self.record_id}, rater={self.rater})>"
