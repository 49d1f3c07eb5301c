"""Tests for the database bootstrap job."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardex.db import database
from cardex.jobs import init_db as init_db_job
from cardex.models.db import CollectionDB
from cardex.services.collection_ledger import list_items


class TestEnsureSystemCollection:
    async def test_creates_system_collection(self, async_engine, session: AsyncSession) -> None:
        factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

        with patch.object(database, "async_session_factory", factory):
            await init_db_job.ensure_system_collection()
            await init_db_job.ensure_system_collection()

        result = await session.execute(select(CollectionDB.owner))
        assert result.scalars().all() == ["System"]
        assert await list_items(session, "System") == []


class TestRunInit:
    @pytest.mark.parametrize("reset", [False, True])
    async def test_run_init(self, reset: bool) -> None:
        """Tables are created, and dropped first only on reset."""
        with (
            patch.object(init_db_job, "drop_db", new=AsyncMock()) as drop,
            patch.object(init_db_job, "init_db", new=AsyncMock()) as create,
            patch.object(init_db_job, "ensure_system_collection", new=AsyncMock()) as ensure,
        ):
            await init_db_job.run_init(reset=reset)

        assert drop.await_count == (1 if reset else 0)
        create.assert_awaited_once()
        ensure.assert_awaited_once()
