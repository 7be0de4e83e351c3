"""Request/response schemas for restaurant and review endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class RestaurantCreateRequest(BaseModel):
    """Add a restaurant. Only ``name`` is required; it is checked by the service."""

    name: str | None = None
    cuisine: str | None = ""
    price: str | None = ""
    location: str | None = ""
    address: str | None = ""
    lat: float | None = None
    lng: float | None = None
    external_place_id: str | None = Field(
        None,
        validation_alias=AliasChoices("externalPlaceId", "googlePlaceId", "external_place_id"),
    )


class RestaurantCreateResponse(BaseModel):
    """Id of the created (or already stored) restaurant."""

    restaurant_id: int = Field(serialization_alias="restaurantId")
    message: str | None = None


class RestaurantResponse(BaseModel):
    """A listing row: restaurant fields, aggregates and the viewer's own review."""

    id: int
    name: str
    cuisine: str
    price: str
    location: str
    address: str
    lat: float | None = None
    lng: float | None = None
    external_place_id: str | None = None
    created_by: int | None = None
    created_at: datetime
    average_rating: float = 0
    review_count: int = 0
    user_rating: int | None = None
    user_comment: str | None = None

    model_config = {"from_attributes": True}


class RestaurantListResponse(BaseModel):
    """Listing envelope. No total count is returned."""

    restaurants: list[RestaurantResponse]


class FilterOptionsResponse(BaseModel):
    """Distinct filter values present in the catalog."""

    cuisines: list[str]
    prices: list[str]
    locations: list[str]

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


class ReviewSubmitRequest(BaseModel):
    """Submit or overwrite the caller's review. The rating is taken raw and checked by the service."""

    rating: Any = None
    comment: str | None = None


class ReviewResponse(BaseModel):
    """A stored review."""

    id: int
    user_id: int
    restaurant_id: int
    rating: int
    comment: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RestaurantReviewResponse(ReviewResponse):
    """A review with the reviewer's display name."""

    reviewer_name: str


class UserReviewResponse(ReviewResponse):
    """One of the caller's reviews with restaurant details."""

    restaurant_name: str
    restaurant_cuisine: str
    restaurant_location: str
    restaurant_price: str


class RestaurantReviewListResponse(BaseModel):
    """Reviews of one restaurant, newest first."""

    reviews: list[RestaurantReviewResponse]


class UserReviewListResponse(BaseModel):
    """The caller's reviews, newest first."""

    reviews: list[UserReviewResponse]


class UserRatingResponse(BaseModel):
    """The caller's own review of one restaurant, or null."""

    review: ReviewResponse | None = None


class MessageResponse(BaseModel):
    """Plain acknowledgment."""

    message: str
