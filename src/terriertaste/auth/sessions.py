"""
Opaque session tokens.

A token is 32 random bytes, URL-safe encoded, handed to the client once.
The sessions table stores its SHA-256 digest, so a leaked table cannot be
replayed as bearer tokens.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select

from terriertaste.db.models import Session, User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a raw session token."""
    return hashlib.sha256(token.encode()).hexdigest()


async def create_session(db: AsyncSession, user_id: int) -> str:
    """Create a session for ``user_id`` and return the raw token."""
    token = secrets.token_urlsafe(32)
    db.add(Session(token_hash=hash_token(token), user_id=user_id))
    await db.flush()
    return token


async def authenticate(db: AsyncSession, token: str | None) -> User | None:
    """Resolve a raw token to its user, or None for absent or unknown tokens."""
    if not token:
        return None
    result = await db.execute(
        select(User).join(Session, Session.user_id == User.id).where(Session.token_hash == hash_token(token))
    )
    return result.scalar_one_or_none()


async def revoke_session(db: AsyncSession, token: str | None) -> bool:
    """Delete the session for ``token``. Returns True if a session was removed."""
    if not token:
        return False
    result = await db.execute(delete(Session).where(Session.token_hash == hash_token(token)))
    revoked = bool(result.rowcount)
    if revoked:
        logger.info("session_revoked")
    return revoked
