"""Curated "Top 20" seed data, attributed to the Terrier Taste Rankings curator."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.auth.password import hash_password
from terriertaste.db.models import Restaurant, User
from terriertaste.db.upsert import upsert_insert
from terriertaste.restaurants.catalog import get_restaurant_id_by_name_address
from terriertaste.restaurants.reviews import upsert_review
from terriertaste.users.service import ensure_default_preferences

logger = structlog.get_logger()

CURATOR_EMAIL = "top20@terriertaste.dev"
CURATOR_NAME = "Terrier Taste Rankings"
CURATOR_PASSWORD = "terrier-top20"
SEED_COMMENT = "Featured in Terrier Taste Top 20"

TOP_RESTAURANTS: list[dict] = [
    {
        "name": "O Ya",
        "cuisine": "Japanese",
        "price": "$$$$",
        "location": "Leather District",
        "address": "9 East St, Boston, MA 02111",
        "lat": 42.3524,
        "lng": -71.0546,
        "rating": 5,
    },
    {
        "name": "Oleana",
        "cuisine": "Eastern Mediterranean",
        "price": "$$$",
        "location": "Cambridge",
        "address": "134 Hampshire St, Cambridge, MA 02139",
        "lat": 42.3706,
        "lng": -71.0989,
        "rating": 5,
    },
    {
        "name": "Giulia",
        "cuisine": "Italian",
        "price": "$$$",
        "location": "Cambridge",
        "address": "1682 Massachusetts Ave, Cambridge, MA 02138",
        "lat": 42.3823,
        "lng": -71.1237,
        "rating": 5,
    },
    {
        "name": "Sarma",
        "cuisine": "Middle Eastern",
        "price": "$$$",
        "location": "Somerville",
        "address": "249 Pearl St, Somerville, MA 02145",
        "lat": 42.3792,
        "lng": -71.096,
        "rating": 5,
    },
    {
        "name": "Mamma Maria",
        "cuisine": "Italian",
        "price": "$$$$",
        "location": "North End",
        "address": "3 N Square, Boston, MA 02113",
        "lat": 42.3633,
        "lng": -71.0541,
        "rating": 5,
    },
    {
        "name": "Neptune Oyster",
        "cuisine": "Seafood",
        "price": "$$$",
        "location": "North End",
        "address": "63 Salem St, Boston, MA 02113",
        "lat": 42.3648,
        "lng": -71.0559,
        "rating": 5,
    },
    {
        "name": "Menton",
        "cuisine": "French",
        "price": "$$$$",
        "location": "Seaport",
        "address": "354 Congress St, Boston, MA 02210",
        "lat": 42.3511,
        "lng": -71.0483,
        "rating": 5,
    },
    {
        "name": "Toro",
        "cuisine": "Spanish",
        "price": "$$$",
        "location": "South End",
        "address": "1704 Washington St, Boston, MA 02118",
        "lat": 42.3388,
        "lng": -71.0756,
        "rating": 5,
    },
    {
        "name": "Tasting Counter",
        "cuisine": "Modern American",
        "price": "$$$$",
        "location": "Somerville",
        "address": "14 Tyler St, Somerville, MA 02143",
        "lat": 42.3805,
        "lng": -71.0939,
        "rating": 5,
    },
    {
        "name": "Uni",
        "cuisine": "Japanese",
        "price": "$$$$",
        "location": "Back Bay",
        "address": "370 Commonwealth Ave, Boston, MA 02215",
        "lat": 42.3495,
        "lng": -71.0867,
        "rating": 5,
    },
    {
        "name": "Craigie On Main",
        "cuisine": "New American",
        "price": "$$$$",
        "location": "Cambridge",
        "address": "853 Main St, Cambridge, MA 02139",
        "lat": 42.3656,
        "lng": -71.1043,
        "rating": 5,
    },
    {
        "name": "Myers + Chang",
        "cuisine": "Asian Fusion",
        "price": "$$",
        "location": "South End",
        "address": "1145 Washington St, Boston, MA 02118",
        "lat": 42.3431,
        "lng": -71.066,
        "rating": 4,
    },
    {
        "name": "Little Donkey",
        "cuisine": "Global Tapas",
        "price": "$$$",
        "location": "Cambridge",
        "address": "505 Massachusetts Ave, Cambridge, MA 02139",
        "lat": 42.3645,
        "lng": -71.1031,
        "rating": 4,
    },
    {
        "name": "The Capital Grille",
        "cuisine": "Steakhouse",
        "price": "$$$$",
        "location": "Back Bay",
        "address": "900 Boylston St, Boston, MA 02115",
        "lat": 42.3491,
        "lng": -71.0822,
        "rating": 4,
    },
    {
        "name": "Asta",
        "cuisine": "Modern American",
        "price": "$$$",
        "location": "Back Bay",
        "address": "47 Massachusetts Ave, Boston, MA 02115",
        "lat": 42.3519,
        "lng": -71.0895,
        "rating": 4,
    },
    {
        "name": "Deuxave",
        "cuisine": "French",
        "price": "$$$$",
        "location": "Back Bay",
        "address": "371 Commonwealth Ave, Boston, MA 02115",
        "lat": 42.3496,
        "lng": -71.089,
        "rating": 4,
    },
    {
        "name": "Bistro du Midi",
        "cuisine": "French",
        "price": "$$$$",
        "location": "Back Bay",
        "address": "272 Boylston St, Boston, MA 02116",
        "lat": 42.3509,
        "lng": -71.0765,
        "rating": 4,
    },
    {
        "name": "Yvonne's",
        "cuisine": "New American",
        "price": "$$$",
        "location": "Downtown Crossing",
        "address": "2 Winter Pl, Boston, MA 02108",
        "lat": 42.3554,
        "lng": -71.0613,
        "rating": 4,
    },
    {
        "name": "Row 34",
        "cuisine": "Seafood",
        "price": "$$$",
        "location": "Seaport",
        "address": "383 Congress St, Boston, MA 02210",
        "lat": 42.351,
        "lng": -71.0426,
        "rating": 4,
    },
    {
        "name": "Pammy's",
        "cuisine": "Italian",
        "price": "$$$",
        "location": "Cambridge",
        "address": "928 Massachusetts Ave, Cambridge, MA 02139",
        "lat": 42.3658,
        "lng": -71.1059,
        "rating": 4,
    },
]


async def ensure_curator(db: AsyncSession) -> int:
    """Return the curator's user id, creating the account on first run."""
    result = await db.execute(select(User.id).where(User.email == CURATOR_EMAIL))
    curator_id = result.scalar_one_or_none()
    if curator_id is None:
        stmt = upsert_insert(db, User).values(
            name=CURATOR_NAME,
            email=CURATOR_EMAIL,
            password_hash=hash_password(CURATOR_PASSWORD),
        )
        await db.execute(stmt.on_conflict_do_nothing(index_elements=["email"]))
        result = await db.execute(select(User.id).where(User.email == CURATOR_EMAIL))
        curator_id = result.scalar_one()

    await ensure_default_preferences(db, curator_id)
    return curator_id


async def seed_top_restaurants(db: AsyncSession) -> int:
    """
    Seed the curated restaurants and the curator's reviews of them.

    Restaurants are matched on exact (name, address); curator reviews are
    upserted, so edits to a curated rating replace the earlier seed review.
    Safe to run on every start. Returns the number of entries processed.
    """
    curator_id = await ensure_curator(db)

    seeded = 0
    for entry in TOP_RESTAURANTS:
        restaurant_id = await get_restaurant_id_by_name_address(db, entry["name"], entry["address"])
        if restaurant_id is None:
            restaurant = Restaurant(
                name=entry["name"],
                cuisine=entry["cuisine"],
                price=entry["price"],
                location=entry["location"],
                address=entry["address"],
                lat=entry["lat"],
                lng=entry["lng"],
                external_place_id=None,
                created_by=curator_id,
            )
            db.add(restaurant)
            await db.flush()
            restaurant_id = restaurant.id

        await upsert_review(db, curator_id, restaurant_id, entry["rating"], SEED_COMMENT)
        seeded += 1

    await db.commit()
    logger.info("restaurants_seeded", count=seeded, curator_id=curator_id)
    return seeded
