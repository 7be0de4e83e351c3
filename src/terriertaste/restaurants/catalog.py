"""Restaurant catalog writes and lookups.

Two dedup keys exist and are kept apart on purpose:

- user-added restaurants dedup on ``external_place_id`` (atomic, via the
  unique constraint), and
- seeded restaurants dedup on exact (name, address), see
  ``terriertaste.restaurants.seed``.

A user-added restaurant without an external id is always a new row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from terriertaste.db.models import Restaurant
from terriertaste.db.upsert import upsert_insert

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class FilterOptions:
    """Distinct values present in the catalog, for filter dropdowns."""

    cuisines: list[str] = field(default_factory=list)
    prices: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)


async def get_restaurant_id_by_place_id(db: AsyncSession, external_place_id: str) -> int | None:
    """Catalog id of the restaurant with this external place id, if any."""
    result = await db.execute(select(Restaurant.id).where(Restaurant.external_place_id == external_place_id))
    return result.scalar_one_or_none()


async def get_restaurant_id_by_name_address(db: AsyncSession, name: str, address: str) -> int | None:
    """Catalog id of the first restaurant with exactly this name and address, if any."""
    result = await db.execute(
        select(Restaurant.id)
        .where(Restaurant.name == name, Restaurant.address == address)
        .order_by(Restaurant.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def add_restaurant(
    db: AsyncSession,
    creator_id: int | None,
    name: str | None,
    cuisine: str | None = "",
    price: str | None = "",
    location: str | None = "",
    address: str | None = "",
    lat: float | None = None,
    lng: float | None = None,
    external_place_id: str | None = None,
) -> tuple[int, bool]:
    """
    Add a restaurant to the catalog.

    Returns:
        Tuple of (restaurant_id, created). ``created`` is False when a
        restaurant with the same non-empty ``external_place_id`` already
        existed; its id is returned and nothing is inserted.

    Raises:
        ValueError: If ``name`` is missing or blank.
    """
    if not name or not name.strip():
        msg = "Restaurant name is required."
        raise ValueError(msg)

    values = {
        "name": name,
        "cuisine": cuisine or "",
        "price": price or "",
        "location": location or "",
        "address": address or "",
        "lat": lat,
        "lng": lng,
        "external_place_id": external_place_id or None,
        "created_by": creator_id,
    }

    if not values["external_place_id"]:
        restaurant = Restaurant(**values)
        db.add(restaurant)
        await db.flush()
        logger.info("restaurant_added", restaurant_id=restaurant.id, created_by=creator_id)
        return restaurant.id, True

    stmt = (
        upsert_insert(db, Restaurant)
        .values(**values)
        .on_conflict_do_nothing(index_elements=["external_place_id"])
        .returning(Restaurant.id)
    )
    inserted_id = (await db.execute(stmt)).scalar_one_or_none()
    if inserted_id is not None:
        logger.info("restaurant_added", restaurant_id=inserted_id, created_by=creator_id)
        return inserted_id, True

    existing_id = await get_restaurant_id_by_place_id(db, values["external_place_id"])
    if existing_id is None:
        msg = f"Restaurant with place id {values['external_place_id']} vanished after conflict"
        raise RuntimeError(msg)
    logger.info("restaurant_deduplicated", restaurant_id=existing_id, external_place_id=values["external_place_id"])
    return existing_id, False


async def list_filter_options(db: AsyncSession) -> FilterOptions:
    """Sorted distinct non-empty cuisines, prices and locations."""

    async def _distinct(column: object) -> list[str]:
        result = await db.execute(select(column).where(column != "").distinct().order_by(column))  # type: ignore[arg-type, operator]
        return [value for value in result.scalars().all() if value]

    return FilterOptions(
        cuisines=await _distinct(Restaurant.cuisine),
        prices=await _distinct(Restaurant.price),
        locations=await _distinct(Restaurant.location),
    )
