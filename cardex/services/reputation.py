"""
Reputation ledger.

Per-user ratings (1-5) and text reviews, one of each per rater. A repeat
rating or review from the same rater replaces the previous one.

The average is recomputed from the stored ratings on every call.
"""

import logging
from statistics import fmean

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.config import MAX_RATING, MIN_RATING
from cardex.db.upsert import ensure_row, upsert
from cardex.models.db import RatingDB, ReputationRecordDB, ReviewDB
from cardex.models.failure import InvalidArgumentError

logger = logging.getLogger(__name__)


async def ensure_reputation_record(session: AsyncSession, user: str) -> int:
    """Create an empty reputation record for a user if none exists. Returns its id."""
    return await ensure_row(session, ReputationRecordDB, user=user)


async def _get_record_id(session: AsyncSession, user: str) -> int | None:
    return await session.scalar(
        select(ReputationRecordDB.id).where(ReputationRecordDB.user == user)
    )


def validate_rating(value: int) -> None:
    """
    Check a rating value.

    Raises:
        InvalidArgumentError: If value is not an integer in [MIN_RATING, MAX_RATING].
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"Rating must be an integer, got {value!r}")
    if value < MIN_RATING or value > MAX_RATING:
        raise InvalidArgumentError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


async def rate_user(session: AsyncSession, user: str, rater: str, value: int) -> None:
    """
    Record `rater`'s rating of `user`, replacing any earlier one.

    Raises:
        InvalidArgumentError: If value is outside [1, 5].
    """
    validate_rating(value)
    record_id = await ensure_reputation_record(session, user)
    await upsert(
        session, RatingDB, ["record_id", "rater"], record_id=record_id, rater=rater, value=value
    )
    logger.debug("%s rated %s %d", rater, user, value)


async def review_user(session: AsyncSession, user: str, rater: str, text: str) -> None:
    """Record `rater`'s review of `user`, replacing any earlier one."""
    record_id = await ensure_reputation_record(session, user)
    await upsert(
        session, ReviewDB, ["record_id", "rater"], record_id=record_id, rater=rater, text=text
    )
    logger.debug("%s reviewed %s", rater, user)


async def get_ratings(session: AsyncSession, user: str) -> dict[str, int]:
    """All ratings of a user, keyed by rater."""
    result = await session.execute(
        select(RatingDB.rater, RatingDB.value)
        .join(ReputationRecordDB, ReputationRecordDB.id == RatingDB.record_id)
        .where(ReputationRecordDB.user == user)
    )
    return {rater: value for rater, value in result.all()}


async def average_rating(session: AsyncSession, user: str) -> float | None:
    """
    Unweighted mean of every rater's current rating of a user.

    Returns None if the user has no ratings.
    """
    ratings = await get_ratings(session, user)
    if not ratings:
        return None
    return fmean(ratings.values())


async def get_feedback(session: AsyncSession, user: str) -> dict[str, str] | None:
    """
    Text reviews of a user, keyed by rater.

    Returns None if nobody has rated or reviewed the user yet.
    """
    record_id = await _get_record_id(session, user)
    if record_id is None:
        return None

    result = await session.execute(
        select(ReviewDB.rater, ReviewDB.text)
        .where(ReviewDB.record_id == record_id)
        .order_by(ReviewDB.id)
    )
    return {rater: text for rater, text in result.all()}
