"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.auth.dependencies import bearer_token, get_current_user
from terriertaste.auth.password import PasswordStrengthError
from terriertaste.auth.schemas import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    PreferencesEnvelope,
    PreferencesResponse,
    PreferencesUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from terriertaste.auth.service import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    authenticate_user,
    register_user,
)
from terriertaste.auth.sessions import create_session, revoke_session
from terriertaste.database import get_session
from terriertaste.db.models import User
from terriertaste.users.service import get_preferences, replace_preferences

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


async def _issue_session(db: AsyncSession, user: User) -> AuthResponse:
    """Create a session token and build the auth response."""
    token = await create_session(db, user.id)
    preferences = await get_preferences(db, user.id)
    await db.commit()

    return AuthResponse(
        token=token,
        user=UserResponse.model_validate(user),
        preferences=PreferencesResponse.model_validate(preferences),
    )


# ---------------------------------------------------------------------------
# Email auth
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Register with name + email + password."""
    try:
        user = await register_user(db, name=body.name, email=body.email, password=body.password)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("registration_failed", email=body.email)
        raise HTTPException(status_code=500, detail="Unable to register right now.") from e

    return await _issue_session(db, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> AuthResponse:
    """Login with email + password."""
    try:
        user = await authenticate_user(db, body.email, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    return await _issue_session(db, user)


@router.post("/logout", status_code=204)
async def logout(
    token: str | None = Depends(bearer_token),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Revoke the presented session token. Succeeds even without one."""
    if await revoke_session(db, token):
        await db.commit()
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Current user and preferences
# ---------------------------------------------------------------------------


@router.get("/me", response_model=MeResponse)
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MeResponse:
    """Get the signed-in user and their preferences."""
    preferences = await get_preferences(db, user.id)
    await db.commit()
    return MeResponse(
        user=UserResponse.model_validate(user),
        preferences=PreferencesResponse.model_validate(preferences),
    )


@router.put("/preferences", response_model=PreferencesEnvelope)
async def update_preferences(
    body: PreferencesUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PreferencesEnvelope:
    """Replace the signed-in user's preferences."""
    preferences = await replace_preferences(
        db,
        user.id,
        dietary_prefs=body.dietary_prefs,
        favorite_cuisines=body.favorite_cuisines,
        home_location=body.home_location,
    )
    await db.commit()
    return PreferencesEnvelope(preferences=PreferencesResponse.model_validate(preferences))
