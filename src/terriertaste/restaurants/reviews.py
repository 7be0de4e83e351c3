"""
Review ledger: one rating + comment per (user, restaurant).

Writes are a single ``INSERT ... ON CONFLICT (user_id, restaurant_id) DO
UPDATE``. The first write fixes the review's id and created_at; later writes
replace only rating and comment. Two concurrent submissions for the same pair
therefore can never produce two rows.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from terriertaste.db.models import Restaurant, Review, User
from terriertaste.db.upsert import upsert_insert

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

MIN_RATING = 1
MAX_RATING = 5


class InvalidRatingError(ValueError):
    """Raised when a rating is not an integer in [1, 5]."""


class RestaurantNotFoundError(LookupError):
    """Raised when reviewing a restaurant id that is not in the catalog."""


def validate_rating(rating: object) -> int:
    """
    Return ``rating`` as an int if it is an integer-valued number in [1, 5].

    ``4`` and ``4.0`` are accepted; ``4.5``, ``6``, ``None``, booleans and
    non-finite floats are not.
    """
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        msg = "Rating must be between 1 and 5."
        raise InvalidRatingError(msg)
    if not math.isfinite(rating) or rating != int(rating) or not MIN_RATING <= rating <= MAX_RATING:
        msg = "Rating must be between 1 and 5."
        raise InvalidRatingError(msg)
    return int(rating)


@dataclass(frozen=True)
class RestaurantReview:
    """A review with the reviewer's display name."""

    id: int
    user_id: int
    restaurant_id: int
    rating: int
    comment: str
    created_at: datetime
    reviewer_name: str


@dataclass(frozen=True)
class UserReview:
    """One of a user's own reviews, with the restaurant fields needed for display."""

    id: int
    user_id: int
    restaurant_id: int
    rating: int
    comment: str
    created_at: datetime
    restaurant_name: str
    restaurant_cuisine: str
    restaurant_location: str
    restaurant_price: str


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def upsert_review(
    db: AsyncSession,
    user_id: int,
    restaurant_id: int,
    rating: int,
    comment: str,
) -> Review:
    """Insert or overwrite the (user, restaurant) review. No validation."""
    stmt = upsert_insert(db, Review).values(
        user_id=user_id,
        restaurant_id=restaurant_id,
        rating=rating,
        comment=comment,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "restaurant_id"],
        set_={"rating": stmt.excluded.rating, "comment": stmt.excluded.comment},
    )
    await db.execute(stmt)

    result = await db.execute(
        select(Review)
        .where(Review.user_id == user_id, Review.restaurant_id == restaurant_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def submit_review(
    db: AsyncSession,
    user_id: int,
    restaurant_id: int,
    rating: object,
    comment: str | None = None,
) -> Review:
    """
    Record ``user_id``'s review of ``restaurant_id``.

    Validation happens before any write. Resubmitting overwrites rating and
    comment in place, so retries are idempotent.

    Raises:
        InvalidRatingError: If the rating is not an integer in [1, 5].
        RestaurantNotFoundError: If the restaurant does not exist.
    """
    clean_rating = validate_rating(rating)
    clean_comment = comment or ""

    exists = await db.execute(select(Restaurant.id).where(Restaurant.id == restaurant_id))
    if exists.scalar_one_or_none() is None:
        msg = f"Restaurant {restaurant_id} not found"
        raise RestaurantNotFoundError(msg)

    review = await upsert_review(db, user_id, restaurant_id, clean_rating, clean_comment)
    logger.info("review_saved", user_id=user_id, restaurant_id=restaurant_id, rating=clean_rating)
    return review


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_user_review(db: AsyncSession, user_id: int, restaurant_id: int) -> Review | None:
    """The user's own review of a restaurant, if any."""
    result = await db.execute(
        select(Review).where(Review.user_id == user_id, Review.restaurant_id == restaurant_id)
    )
    return result.scalar_one_or_none()


async def list_restaurant_reviews(db: AsyncSession, restaurant_id: int) -> list[RestaurantReview]:
    """All reviews of a restaurant with reviewer names, newest first."""
    result = await db.execute(
        select(Review, User.name)
        .join(User, User.id == Review.user_id)
        .where(Review.restaurant_id == restaurant_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return [
        RestaurantReview(
            id=review.id,
            user_id=review.user_id,
            restaurant_id=review.restaurant_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            reviewer_name=reviewer_name,
        )
        for review, reviewer_name in result.all()
    ]


async def list_user_reviews(db: AsyncSession, user_id: int) -> list[UserReview]:
    """A user's reviews joined with restaurant details, newest first."""
    result = await db.execute(
        select(Review, Restaurant)
        .join(Restaurant, Restaurant.id == Review.restaurant_id)
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return [
        UserReview(
            id=review.id,
            user_id=review.user_id,
            restaurant_id=review.restaurant_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            restaurant_name=restaurant.name,
            restaurant_cuisine=restaurant.cuisine,
            restaurant_location=restaurant.location,
            restaurant_price=restaurant.price,
        )
        for review, restaurant in result.all()
    ]
