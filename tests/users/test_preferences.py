"""Tests for the preference store."""

from __future__ import annotations

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.auth.service import register_user
from terriertaste.db.models import Preferences
from terriertaste.users.service import ensure_default_preferences, get_preferences, replace_preferences


class TestPreferencesApi:
    async def test_update_accepts_camel_case(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/auth/preferences", json={
            "dietaryPrefs": ["vegetarian"],
            "favoriteCuisines": ["Thai", "Italian"],
            "homeLocation": "Allston",
        })
        assert response.status_code == 200
        assert response.json()["preferences"] == {
            "dietary_prefs": ["vegetarian"],
            "favorite_cuisines": ["Thai", "Italian"],
            "home_location": "Allston",
        }

        me = await authed_client.get("/api/auth/me")
        assert me.json()["preferences"]["favorite_cuisines"] == ["Thai", "Italian"]

    async def test_update_is_full_replace(self, authed_client: AsyncClient):
        await authed_client.put("/api/auth/preferences", json={
            "dietaryPrefs": ["vegan"],
            "favoriteCuisines": ["Thai"],
            "homeLocation": "Allston",
        })
        response = await authed_client.put("/api/auth/preferences", json={"favoriteCuisines": ["Korean"]})
        assert response.json()["preferences"] == {
            "dietary_prefs": [],
            "favorite_cuisines": ["Korean"],
            "home_location": "",
        }

    async def test_non_list_values_stored_as_empty(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/auth/preferences", json={
            "dietaryPrefs": "vegan",
            "favoriteCuisines": {"Thai": True},
            "homeLocation": None,
        })
        assert response.status_code == 200
        assert response.json()["preferences"] == {
            "dietary_prefs": [],
            "favorite_cuisines": [],
            "home_location": "",
        }

    async def test_update_requires_auth(self, client: AsyncClient):
        response = await client.put("/api/auth/preferences", json={"favoriteCuisines": ["Thai"]})
        assert response.status_code == 401


class TestPreferencesService:
    async def test_one_row_per_user(self, db_session: AsyncSession):
        user = await register_user(db_session, "Rhett", "rhett@bu.edu", "terrier-pass-1")
        await ensure_default_preferences(db_session, user.id)
        await replace_preferences(db_session, user.id, ["vegan"], ["Thai"], "Fenway")
        await replace_preferences(db_session, user.id, [], ["Korean"], "Allston")
        await db_session.commit()

        count = (await db_session.execute(
            select(func.count()).select_from(Preferences).where(Preferences.user_id == user.id)
        )).scalar_one()
        assert count == 1

    async def test_defaults_do_not_overwrite(self, db_session: AsyncSession):
        user = await register_user(db_session, "Rhett", "rhett@bu.edu", "terrier-pass-1")
        await replace_preferences(db_session, user.id, ["vegan"], ["Thai"], "Fenway")
        await ensure_default_preferences(db_session, user.id)
        await db_session.commit()

        db_session.expire_all()
        prefs = await get_preferences(db_session, user.id)
        assert prefs.dietary_prefs == ["vegan"]
        assert prefs.home_location == "Fenway"
