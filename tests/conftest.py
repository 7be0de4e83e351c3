"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.config import get_settings
from terriertaste.database import close_db, create_tables, get_session, init_db
from terriertaste.main import create_app
from terriertaste.redis_client import close_redis, init_redis

DEFAULT_PASSWORD = "terrier-pass-1"


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> Generator[str, None, None]:
    """Point the settings at a fresh SQLite file with Redis and seeding disabled."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'terrier-taste.db'}"
    monkeypatch.setenv("TT_DATABASE_URL", url)
    monkeypatch.setenv("TT_REDIS_URL", "")
    monkeypatch.setenv("TT_SEED_ON_STARTUP", "false")
    monkeypatch.setenv("TT_LOG_FORMAT", "console")
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def database(database_url: str) -> AsyncGenerator[str, None]:
    """Initialized engine with every table created."""
    await init_db(database_url)
    await init_redis("")
    await create_tables()
    yield database_url
    await close_redis()
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: str) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for setup and assertions.

    Commit writes before calling the API: the app uses its own connections.
    """
    async for session in get_session():
        yield session


@pytest_asyncio.fixture
async def client(database: str) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to a fresh app over the test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register(
    client: AsyncClient,
    email: str = "diner@example.com",
    name: str = "Diner",
    password: str = DEFAULT_PASSWORD,
) -> dict:
    """Register through the API and return the response body."""
    response = await client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
    })
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def add_restaurant(client: AsyncClient, token: str, **fields: object) -> int:
    """Add a restaurant through the API and return its id."""
    payload = {"cuisine": "", "price": "", "location": "", "address": ""}
    payload.update(fields)
    response = await client.post("/api/restaurants", json=payload, headers=auth_headers(token))
    assert response.status_code in (200, 201), response.text
    return response.json()["restaurantId"]


async def review(client: AsyncClient, token: str, restaurant_id: int, rating: object, comment: str = "") -> int:
    """Submit a review through the API and return the status code."""
    response = await client.post(
        f"/api/restaurants/{restaurant_id}/reviews",
        json={"rating": rating, "comment": comment},
        headers=auth_headers(token),
    )
    return response.status_code


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    """A registered user: the register response plus the password used."""
    data = await register(client)
    return {**data, "password": DEFAULT_PASSWORD}


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client sending the registered user's bearer token."""
    client.headers["Authorization"] = f"Bearer {registered_user['token']}"
    return client
