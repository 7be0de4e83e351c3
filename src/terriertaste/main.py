"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from terriertaste.auth.router import router as auth_router
from terriertaste.config import get_settings
from terriertaste.database import close_db, create_tables, get_session, init_db
from terriertaste.health.router import router as health_router
from terriertaste.middleware import setup_middleware
from terriertaste.redis_client import close_redis, init_redis
from terriertaste.restaurants.router import router as restaurants_router
from terriertaste.restaurants.seed import seed_top_restaurants

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    if settings.create_tables_on_startup:
        await create_tables()

    # Curated seed data (idempotent)
    if settings.seed_on_startup:
        try:
            async for db in get_session():
                await seed_top_restaurants(db)
        except Exception:
            logger.warning("restaurant_seeding_failed", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Terrier Taste API",
        description="Backend API for Terrier Taste, a shared Boston restaurant ranking",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(restaurants_router)

    return app


app = create_app()
