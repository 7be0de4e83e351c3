"""Tests for the curated restaurant seeder."""

from __future__ import annotations

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.db.models import Preferences, Restaurant, Review, User
from terriertaste.restaurants import seed
from terriertaste.restaurants.seed import (
    CURATOR_EMAIL,
    CURATOR_PASSWORD,
    SEED_COMMENT,
    TOP_RESTAURANTS,
    seed_top_restaurants,
)


async def _snapshot(db: AsyncSession) -> tuple[list[tuple], list[tuple]]:
    restaurants = (await db.execute(
        select(Restaurant.id, Restaurant.name, Restaurant.address).order_by(Restaurant.id)
    )).all()
    reviews = (await db.execute(
        select(Review.id, Review.user_id, Review.restaurant_id, Review.rating, Review.comment).order_by(Review.id)
    )).all()
    return [tuple(r) for r in restaurants], [tuple(r) for r in reviews]


class TestSeeder:
    async def test_seeds_curated_list(self, db_session: AsyncSession):
        processed = await seed_top_restaurants(db_session)
        assert processed == len(TOP_RESTAURANTS) == 20

        restaurants, reviews = await _snapshot(db_session)
        assert len(restaurants) == 20
        assert len(reviews) == 20
        assert {r[4] for r in reviews} == {SEED_COMMENT}

        curator = (await db_session.execute(select(User).where(User.email == CURATOR_EMAIL))).scalar_one()
        assert {r[1] for r in reviews} == {curator.id}
        prefs = (await db_session.execute(
            select(func.count()).select_from(Preferences).where(Preferences.user_id == curator.id)
        )).scalar_one()
        assert prefs == 1

    async def test_idempotent_over_repeated_runs(self, db_session: AsyncSession):
        await seed_top_restaurants(db_session)
        once = await _snapshot(db_session)
        for _ in range(3):
            await seed_top_restaurants(db_session)
        assert await _snapshot(db_session) == once

        users = (await db_session.execute(
            select(func.count()).select_from(User).where(User.email == CURATOR_EMAIL)
        )).scalar_one()
        assert users == 1

    async def test_rerun_updates_edited_rating(self, db_session: AsyncSession, monkeypatch):
        await seed_top_restaurants(db_session)
        target = TOP_RESTAURANTS[0]
        edited = [{**target, "rating": 1}, *TOP_RESTAURANTS[1:]]
        monkeypatch.setattr(seed, "TOP_RESTAURANTS", edited)

        await seed_top_restaurants(db_session)
        db_session.expire_all()
        rows = (await db_session.execute(
            select(Review.rating)
            .join(Restaurant, Restaurant.id == Review.restaurant_id)
            .where(Restaurant.name == target["name"], Restaurant.address == target["address"])
        )).scalars().all()
        assert rows == [1]
        assert (await db_session.execute(select(func.count()).select_from(Review))).scalar_one() == 20

    async def test_reuses_restaurant_with_same_name_and_address(self, db_session: AsyncSession):
        target = TOP_RESTAURANTS[0]
        existing = Restaurant(name=target["name"], address=target["address"], cuisine=target["cuisine"])
        db_session.add(existing)
        await db_session.commit()

        await seed_top_restaurants(db_session)
        matches = (await db_session.execute(
            select(Restaurant.id).where(Restaurant.name == target["name"], Restaurant.address == target["address"])
        )).scalars().all()
        assert matches == [existing.id]


class TestSeededListing:
    async def test_curator_can_log_in(self, client: AsyncClient, db_session: AsyncSession):
        await seed_top_restaurants(db_session)
        response = await client.post("/api/auth/login", json={
            "email": CURATOR_EMAIL,
            "password": CURATOR_PASSWORD,
        })
        assert response.status_code == 200

    async def test_seeded_restaurants_listed_by_rating(self, client: AsyncClient, db_session: AsyncSession):
        await seed_top_restaurants(db_session)
        response = await client.get("/api/restaurants", params={"limit": 100})
        rows = response.json()["restaurants"]
        assert len(rows) == 20
        ratings = [row["average_rating"] for row in rows]
        assert ratings == sorted(ratings, reverse=True)
        assert all(row["review_count"] == 1 for row in rows)
