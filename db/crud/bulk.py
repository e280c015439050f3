"""
Dialect-aware bulk write helpers.

The pipeline writes either insert-if-absent or full-row upserts. Both are
expressed with ``INSERT ... ON CONFLICT`` which PostgreSQL and SQLite share,
so the statement constructor is picked from the session's bound dialect.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

logger = logging.getLogger(__name__)


def _insert(session: AsyncSession, model: type[SQLModel]):
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    raise NotImplementedError(f"Bulk upserts are not supported for dialect '{dialect}'")


def to_rows(items: Iterable[SQLModel | dict[str, Any]]) -> list[dict[str, Any]]:
    """Normalize model instances and plain dicts into insertable value dicts."""
    return [item if isinstance(item, dict) else item.model_dump() for item in items]


async def insert_ignore(
    session: AsyncSession,
    model: type[SQLModel],
    items: Sequence[SQLModel | dict[str, Any]],
) -> int:
    """Insert rows, skipping any whose primary key already exists.

    Returns:
        Number of rows actually inserted.
    """
    rows = to_rows(items)
    if not rows:
        return 0

    stmt = _insert(session, model).values(rows).on_conflict_do_nothing()
    result = await session.execute(stmt)
    await session.flush()
    return max(result.rowcount, 0)


async def upsert(
    session: AsyncSession,
    model: type[SQLModel],
    item: SQLModel | dict[str, Any],
    index_elements: Sequence[str],
    exclude_from_update: Sequence[str] = ("id",),
) -> None:
    """Insert a row or overwrite every non-key column of the conflicting row."""
    (row,) = to_rows([item])
    stmt = _insert(session, model).values(row)
    update_columns = {
        name: stmt.excluded[name] for name in row if name not in index_elements and name not in exclude_from_update
    }
    stmt = stmt.on_conflict_do_update(index_elements=list(index_elements), set_=update_columns)
    await session.execute(stmt)
    await session.flush()
