"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.auth.sessions import authenticate
from terriertaste.database import get_session
from terriertaste.db.models import User

_bearer = HTTPBearer(auto_error=False)


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> str | None:
    """Raw bearer token from the Authorization header, if any."""
    return credentials.credentials if credentials else None


async def get_optional_user(
    token: str | None = Depends(bearer_token),
    db: AsyncSession = Depends(get_session),
) -> User | None:
    """Resolve the viewer for endpoints that work with or without a session."""
    return await authenticate(db, token)


async def get_current_user(
    user: User | None = Depends(get_optional_user),
) -> User:
    """
    Require a valid session token and return its User.

    Raises 401 before the endpoint touches the catalog or the review ledger.
    """
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
