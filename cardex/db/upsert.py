"""
Single-statement upsert primitives.

Every "create if absent, then mutate" record in the core goes through
these helpers so that the create step is one INSERT ... ON CONFLICT
statement instead of a read followed by a write. This narrows the race
window between concurrent requests; it does not make multi-statement
workflows atomic.

Supports the PostgreSQL (production) and SQLite (tests) dialects.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from cardex.models.db import Base

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(session: AsyncSession, model: type[Base]) -> Any:
    dialect = session.get_bind().dialect.name
    try:
        insert = _DIALECT_INSERTS[dialect]
    except KeyError:
        msg = f"Upserts are not supported on the '{dialect}' dialect"
        raise RuntimeError(msg) from None
    return insert(model)


async def insert_if_missing(session: AsyncSession, model: type[Base], **values: Any) -> None:
    """
    Insert a row unless one already violates a unique constraint.

    Args:
        session: Active database session
        model: ORM model to insert into
        **values: Column values; must include the model's unique key
    """
    stmt = _insert_for(session, model).values(**values).on_conflict_do_nothing()
    await session.execute(stmt)


async def ensure_row(session: AsyncSession, model: type[Base], **keys: Any) -> int:
    """
    Insert-if-missing by unique key, then return the row's id.

    Idempotent: calling it twice leaves exactly one row for the key.
    """
    await insert_if_missing(session, model, **keys)
    result = await session.execute(
        select(model.id).where(  # type: ignore[attr-defined]
            *(getattr(model, column) == value for column, value in keys.items())
        )
    )
    return int(result.scalar_one())


async def upsert(
    session: AsyncSession,
    model: type[Base],
    conflict_columns: list[str],
    **values: Any,
) -> None:
    """
    Insert a row, or overwrite the non-key columns of the existing one.

    Args:
        session: Active database session
        model: ORM model to upsert into
        conflict_columns: Columns of the unique constraint that identifies the row
        **values: Column values, including the conflict columns
    """
    update_values = {k: v for k, v in values.items() if k not in conflict_columns}
    stmt = (
        _insert_for(session, model)
        .values(**values)
        .on_conflict_do_update(index_elements=conflict_columns, set_=update_values)
    )
    await session.execute(stmt)
    logger.debug("Upserted %s on %s", model.__tablename__, conflict_columns)
