"""
Engine and unit-of-work plumbing.

Core operations only flush. Commit and rollback happen here, once per
request (`get_session`) or once per job step (`session_scope`).
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardex.config import settings
from cardex.models.db import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict[str, Any]:
    # SQLite has no server connection to go stale
    if make_url(database_url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    One unit of work: commit on success, roll back on a database error.

    Known failures raised by the core pass through untouched; the session
    closes without committing them.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            logger.warning("Rolling back unit of work after database error")
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: a request-scoped session from `session_scope`."""
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """Create every table the ledgers use. Existing tables are left alone."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """
    Drop every ledger table.

    WARNING: Destroys all data.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
