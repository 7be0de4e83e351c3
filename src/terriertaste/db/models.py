"""ORM models for users, sessions, preferences, restaurants and reviews.

Average rating and review count are never stored; they are computed from
``reviews`` on every read (see ``terriertaste.restaurants.listing``).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from terriertaste.db.base import Base, BigIntPK, utcnow


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table. Emails are stored lowercased."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Session(Base):
    """Opaque session token. Only the SHA-256 digest of the token is stored."""

    __tablename__ = "sessions"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Preferences(Base):
    """Per-user dietary and cuisine preferences. Exactly one row per user."""

    __tablename__ = "preferences"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    dietary_prefs: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    favorite_cuisines: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    home_location: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Restaurant(Base):
    """A restaurant in the catalog, added by a user or by the seeder."""

    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    cuisine: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    price: Mapped[str] = mapped_column(String(16), nullable=False, default="", server_default="")
    location: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    address: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    # NULL when absent; unique constraints ignore NULLs in both PostgreSQL and SQLite.
    external_place_id: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    created_by: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Review ledger
# ---------------------------------------------------------------------------


class Review(Base):
    """One rating + comment per (user, restaurant)."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id", name="uq_reviews_user_restaurant"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    restaurant_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
