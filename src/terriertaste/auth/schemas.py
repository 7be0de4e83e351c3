"""Request/response schemas for authentication and preference endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator


# ---------------------------------------------------------------------------
# Email auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Email registration request."""

    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:  # noqa: ANN401
        """Trim surrounding whitespace before the length check."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


# ---------------------------------------------------------------------------
# Users and preferences
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public identity of the signed-in user."""

    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class PreferencesResponse(BaseModel):
    """Stored preferences of a user."""

    dietary_prefs: list[str] = Field(default_factory=list)
    favorite_cuisines: list[str] = Field(default_factory=list)
    home_location: str = ""

    model_config = {"from_attributes": True}


class PreferencesUpdateRequest(BaseModel):
    """Full replacement of a user's preferences. Accepts camelCase or snake_case keys."""

    dietary_prefs: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("dietaryPrefs", "dietary_prefs")
    )
    favorite_cuisines: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("favoriteCuisines", "favorite_cuisines")
    )
    home_location: str = Field("", validation_alias=AliasChoices("homeLocation", "home_location"))

    @field_validator("dietary_prefs", "favorite_cuisines", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:  # noqa: ANN401
        """Anything that is not a list is stored as an empty list."""
        return v if isinstance(v, list) else []

    @field_validator("home_location", mode="before")
    @classmethod
    def coerce_location(cls, v: Any) -> Any:  # noqa: ANN401
        """A missing or null home location is stored as an empty string."""
        return "" if v is None else v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class AuthResponse(BaseModel):
    """Returned after registration or login."""

    token: str
    user: UserResponse
    preferences: PreferencesResponse


class MeResponse(BaseModel):
    """Current user with preferences."""

    user: UserResponse
    preferences: PreferencesResponse


class PreferencesEnvelope(BaseModel):
    """Wrapper returned by the preferences update endpoint."""

    preferences: PreferencesResponse
