"""Tests for the reputation ledger."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.models.db import ReputationRecordDB
from cardex.models.failure import InvalidArgumentError
from cardex.services.reputation import (
    average_rating,
    get_feedback,
    get_ratings,
    rate_user,
    review_user,
    validate_rating,
)


class TestValidateRating:
    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_in_range(self, value: int) -> None:
        validate_rating(value)

    @pytest.mark.parametrize("value", [0, 6, -1, 100])
    def test_out_of_range(self, value: int) -> None:
        with pytest.raises(InvalidArgumentError):
            validate_rating(value)

    @pytest.mark.parametrize("value", [True, 3.5, "3", None])
    def test_not_an_integer(self, value: object) -> None:
        with pytest.raises(InvalidArgumentError):
            validate_rating(value)  # type: ignore[arg-type]


class TestRateUser:
    async def test_out_of_range_writes_nothing(self, session: AsyncSession) -> None:
        """A rejected rating does not create a record."""
        with pytest.raises(InvalidArgumentError):
            await rate_user(session, "alice", "bob", 6)

        assert await average_rating(session, "alice") is None
        assert await get_feedback(session, "alice") is None

    async def test_average_scenario(self, session: AsyncSession) -> None:
        """A repeat rating replaces the rater's earlier value."""
        await rate_user(session, "u", "r1", 5)
        await rate_user(session, "u", "r2", 1)
        assert await average_rating(session, "u") == pytest.approx(3.0)

        await rate_user(session, "u", "r1", 2)

        assert await average_rating(session, "u") == pytest.approx(1.5)
        assert await get_ratings(session, "u") == {"r1": 2, "r2": 1}

    async def test_record_created_once(self, session: AsyncSession) -> None:
        await rate_user(session, "u", "r1", 4)
        await rate_user(session, "u", "r2", 4)
        await review_user(session, "u", "r1", "great")

        result = await session.execute(
            select(func.count())
            .select_from(ReputationRecordDB)
            .where(ReputationRecordDB.user == "u")
        )
        assert result.scalar_one() == 1

    async def test_users_isolated(self, session: AsyncSession) -> None:
        await rate_user(session, "u", "r1", 5)
        await rate_user(session, "v", "r1", 1)

        assert await average_rating(session, "u") == pytest.approx(5.0)
        assert await average_rating(session, "v") == pytest.approx(1.0)


class TestAverageRating:
    async def test_no_record(self, session: AsyncSession) -> None:
        assert await average_rating(session, "nobody") is None

    async def test_reviews_only(self, session: AsyncSession) -> None:
        """A record with reviews but no ratings has no average."""
        await review_user(session, "u", "r1", "nice")

        assert await average_rating(session, "u") is None


class TestFeedback:
    async def test_no_record(self, session: AsyncSession) -> None:
        assert await get_feedback(session, "nobody") is None

    async def test_rated_but_not_reviewed(self, session: AsyncSession) -> None:
        """An existing record without reviews has empty feedback."""
        await rate_user(session, "u", "r1", 3)

        assert await get_feedback(session, "u") == {}

    async def test_review_last_write_wins(self, session: AsyncSession) -> None:
        await review_user(session, "u", "r1", "slow shipping")
        await review_user(session, "u", "r2", "great trade")
        await review_user(session, "u", "r1", "shipping was fine in the end")

        assert await get_feedback(session, "u") == {
            "r1": "shipping was fine in the end",
            "r2": "great trade",
        }
