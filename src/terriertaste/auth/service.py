"""
Authentication business logic.

Handles user registration, credential checks and user lookups. Session
tokens live in ``terriertaste.auth.sessions``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from terriertaste.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from terriertaste.db.models import User
from terriertaste.users.service import ensure_default_preferences

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class EmailAlreadyRegisteredError(ValueError):
    """Raised when registering an email that already has an account."""


class InvalidCredentialsError(ValueError):
    """Raised when an email/password pair does not match a user."""


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively; store and compare them lowercased."""
    return email.strip().lower()


def _is_email_conflict(exc: IntegrityError) -> bool:
    """True when the integrity error comes from the users email constraint."""
    detail = str(exc.orig).lower()
    return "email" in detail and ("unique" in detail or "duplicate" in detail)


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(db: AsyncSession, name: str, email: str, password: str) -> User:
    """
    Register a new user with email + password and create default preferences.

    Raises:
        PasswordStrengthError: If the password is too short or too long.
        EmailAlreadyRegisteredError: If the email (any case) is already taken,
            including when a concurrent registration wins the race to insert.
    """
    validate_password_strength(password)
    email = normalize_email(email)

    if await get_user_by_email(db, email) is not None:
        msg = "An account with that email already exists."
        raise EmailAlreadyRegisteredError(msg)

    user = User(name=name.strip(), email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if _is_email_conflict(e):
            msg = "An account with that email already exists."
            raise EmailAlreadyRegisteredError(msg) from e
        raise

    await ensure_default_preferences(db, user.id)
    logger.info("user_registered", user_id=user.id, email=email)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check an email + password pair.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        msg = "Invalid email or password."
        raise InvalidCredentialsError(msg)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()

    await ensure_default_preferences(db, user.id)
    logger.info("user_logged_in", user_id=user.id)
    return user
