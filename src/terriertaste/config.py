"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with TT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="TT_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///./data/terrier-taste.db"
    redis_url: str = ""  # empty disables Redis-backed rate limiting
    cors_origins: list[str] = ["http://localhost:5173"]
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Auth / Password ---
    password_min_length: int = 8
    password_max_length: int = 128

    # --- Restaurants ---
    listing_default_limit: int = 50

    # --- Startup ---
    create_tables_on_startup: bool = True
    seed_on_startup: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
