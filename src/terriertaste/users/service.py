"""Preference store: one preferences row per user, written only by upserts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from terriertaste.db.models import Preferences
from terriertaste.db.upsert import upsert_insert

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def ensure_default_preferences(db: AsyncSession, user_id: int) -> None:
    """Create the empty preferences row for ``user_id`` unless one already exists."""
    stmt = upsert_insert(db, Preferences).values(
        user_id=user_id,
        dietary_prefs=[],
        favorite_cuisines=[],
        home_location="",
    )
    stmt = stmt.on_conflict_do_nothing(index_elements=["user_id"])
    await db.execute(stmt)


async def get_preferences(db: AsyncSession, user_id: int) -> Preferences:
    """Get user preferences, creating defaults if they don't exist."""
    await ensure_default_preferences(db, user_id)
    result = await db.execute(select(Preferences).where(Preferences.user_id == user_id))
    return result.scalar_one()


async def replace_preferences(
    db: AsyncSession,
    user_id: int,
    dietary_prefs: list[str],
    favorite_cuisines: list[str],
    home_location: str,
) -> Preferences:
    """
    Full-replace the user's preferences.

    Every field is overwritten; there is no merge with the previous values.
    """
    stmt = upsert_insert(db, Preferences).values(
        user_id=user_id,
        dietary_prefs=dietary_prefs,
        favorite_cuisines=favorite_cuisines,
        home_location=home_location,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id"],
        set_={
            "dietary_prefs": stmt.excluded.dietary_prefs,
            "favorite_cuisines": stmt.excluded.favorite_cuisines,
            "home_location": stmt.excluded.home_location,
        },
    )
    await db.execute(stmt)
    logger.info("preferences_replaced", user_id=user_id)

    result = await db.execute(
        select(Preferences).where(Preferences.user_id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()
