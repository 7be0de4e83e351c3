"""Tests for email registration."""

from __future__ import annotations

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.auth.service import EmailAlreadyRegisteredError, register_user
from terriertaste.db.models import Preferences, User


class TestRegistration:
    async def test_register_success(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={
            "name": "Rhett",
            "email": "rhett@bu.edu",
            "password": "terrier-pass-1",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["name"] == "Rhett"
        assert data["user"]["email"] == "rhett@bu.edu"
        assert "password_hash" not in data["user"]
        assert data["preferences"] == {"dietary_prefs": [], "favorite_cuisines": [], "home_location": ""}

    async def test_register_token_authenticates(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={
            "name": "Rhett",
            "email": "rhett@bu.edu",
            "password": "terrier-pass-1",
        })
        token = response.json()["token"]
        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["user"]["email"] == "rhett@bu.edu"

    async def test_email_stored_lowercase(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={
            "name": "Rhett",
            "email": "Rhett@BU.edu",
            "password": "terrier-pass-1",
        })
        assert response.status_code == 201
        assert response.json()["user"]["email"] == "rhett@bu.edu"

    async def test_duplicate_email_case_variant_conflicts(self, client: AsyncClient, db_session: AsyncSession):
        """A second registration differing only in case gets 409 and leaves one row."""
        first = await client.post("/api/auth/register", json={
            "name": "A",
            "email": "a@bu.edu",
            "password": "terrier-pass-1",
        })
        assert first.status_code == 201

        second = await client.post("/api/auth/register", json={
            "name": "A again",
            "email": "A@BU.EDU",
            "password": "terrier-pass-2",
        })
        assert second.status_code == 409

        count = (await db_session.execute(
            select(func.count()).select_from(User).where(User.email == "a@bu.edu")
        )).scalar_one()
        assert count == 1

    async def test_register_weak_password_rejected(self, client: AsyncClient, db_session: AsyncSession):
        response = await client.post("/api/auth/register", json={
            "name": "Weak",
            "email": "weak@bu.edu",
            "password": "short",
        })
        assert response.status_code == 400
        assert "password" in response.json()["detail"].lower()
        count = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
        assert count == 0

    async def test_register_blank_name_rejected(self, client: AsyncClient, db_session: AsyncSession):
        response = await client.post("/api/auth/register", json={
            "name": "   ",
            "email": "blank@bu.edu",
            "password": "terrier-pass-1",
        })
        assert response.status_code == 422
        count = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
        assert count == 0

    async def test_register_name_is_trimmed(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={
            "name": "  Rhett  ",
            "email": "rhett@bu.edu",
            "password": "terrier-pass-1",
        })
        assert response.status_code == 201
        assert response.json()["user"]["name"] == "Rhett"

    async def test_register_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={"email": "x@bu.edu"})
        assert response.status_code == 422

    async def test_register_malformed_email(self, client: AsyncClient):
        response = await client.post("/api/auth/register", json={
            "name": "Bad",
            "email": "not-an-email",
            "password": "terrier-pass-1",
        })
        assert response.status_code == 422


class TestRegisterService:
    async def test_creates_default_preferences(self, db_session: AsyncSession):
        user = await register_user(db_session, "Rhett", "rhett@bu.edu", "terrier-pass-1")
        await db_session.commit()

        prefs = (await db_session.execute(
            select(Preferences).where(Preferences.user_id == user.id)
        )).scalar_one()
        assert prefs.dietary_prefs == []
        assert prefs.favorite_cuisines == []
        assert prefs.home_location == ""

    async def test_duplicate_raises(self, db_session: AsyncSession):
        await register_user(db_session, "A", "a@bu.edu", "terrier-pass-1")
        await db_session.commit()

        with pytest.raises(EmailAlreadyRegisteredError):
            await register_user(db_session, "B", " A@bu.edu ", "terrier-pass-1")

    async def test_concurrent_registrations_leave_one_row(self, client: AsyncClient, db_session: AsyncSession):
        payload = {"name": "Race", "email": "race@bu.edu", "password": "terrier-pass-1"}
        responses = await asyncio.gather(
            client.post("/api/auth/register", json=payload),
            client.post("/api/auth/register", json=payload),
        )
        assert sorted(r.status_code for r in responses) == [201, 409]

        count = (await db_session.execute(
            select(func.count()).select_from(User).where(User.email == "race@bu.edu")
        )).scalar_one()
        assert count == 1
