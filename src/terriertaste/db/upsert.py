"""Dialect-aware INSERT for ON CONFLICT upserts.

PostgreSQL and SQLite both support ``INSERT ... ON CONFLICT``; SQLAlchemy
exposes it through each dialect's own ``insert()`` construct.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def upsert_insert(db: AsyncSession, model: Any) -> Any:  # noqa: ANN401
    """Return an ``insert(model)`` that supports ``on_conflict_do_*`` for the session's dialect."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    msg = f"Upserts are not supported on the {dialect} dialect"
    raise NotImplementedError(msg)
