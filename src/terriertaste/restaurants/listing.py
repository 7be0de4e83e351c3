"""Restaurant listing with rating aggregates computed on read.

The listing joins each restaurant to:

- the per-restaurant aggregate of the review ledger (average rating and
  review count, both 0 when there are no reviews), and
- the viewer's own review, when a viewer is given.

Because ``reviews`` is unique on (user_id, restaurant_id), the viewer join
adds at most one row per restaurant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Float, and_, func, literal, null, select
from sqlalchemy.orm import aliased

from terriertaste.db.models import Restaurant, Review
from terriertaste.restaurants.filters import ListingFilters, Page

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class RestaurantListing:
    """A restaurant row annotated with its aggregates and the viewer's review."""

    id: int
    name: str
    cuisine: str
    price: str
    location: str
    address: str
    lat: float | None
    lng: float | None
    external_place_id: str | None
    created_by: int | None
    created_at: datetime
    average_rating: float
    review_count: int
    user_rating: int | None = None
    user_comment: str | None = None


def build_listing_query(
    filters: ListingFilters,
    page: Page,
    viewer_id: int | None = None,
) -> Select:  # type: ignore[type-arg]
    """Compose the listing SELECT for the given filters, page and viewer."""
    stats = (
        select(
            Review.restaurant_id.label("restaurant_id"),
            func.avg(Review.rating, type_=Float).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .group_by(Review.restaurant_id)
        .subquery("review_stats")
    )
    average_rating = func.coalesce(stats.c.average_rating, literal(0))
    review_count = func.coalesce(stats.c.review_count, literal(0))

    query = select(
        Restaurant,
        average_rating.label("average_rating"),
        review_count.label("review_count"),
    ).outerjoin(stats, stats.c.restaurant_id == Restaurant.id)

    if viewer_id is not None:
        own = aliased(Review, name="viewer_review")
        query = query.add_columns(
            own.rating.label("user_rating"),
            own.comment.label("user_comment"),
        ).outerjoin(own, and_(own.restaurant_id == Restaurant.id, own.user_id == viewer_id))
    else:
        query = query.add_columns(null().label("user_rating"), null().label("user_comment"))

    predicates = filters.predicates()
    if predicates:
        query = query.where(and_(*predicates))

    return (
        query.order_by(average_rating.desc(), Restaurant.created_at.desc(), Restaurant.id.desc())
        .limit(page.limit)
        .offset(page.offset)
    )


async def list_restaurants(
    db: AsyncSession,
    filters: ListingFilters | None = None,
    page: Page | None = None,
    viewer_id: int | None = None,
) -> list[RestaurantListing]:
    """
    Return the restaurants matching every supplied filter.

    Sorted by average rating (desc), then newest first. Never fails on an
    empty result and has no side effects.
    """
    query = build_listing_query(filters or ListingFilters(), page or Page(), viewer_id)
    result = await db.execute(query)

    listings = []
    for restaurant, avg_rating, count, user_rating, user_comment in result.all():
        listings.append(
            RestaurantListing(
                id=restaurant.id,
                name=restaurant.name,
                cuisine=restaurant.cuisine,
                price=restaurant.price,
                location=restaurant.location,
                address=restaurant.address,
                lat=restaurant.lat,
                lng=restaurant.lng,
                external_place_id=restaurant.external_place_id,
                created_by=restaurant.created_by,
                created_at=restaurant.created_at,
                # PostgreSQL returns AVG over integers as Decimal.
                average_rating=float(avg_rating),
                review_count=int(count),
                user_rating=user_rating,
                user_comment=user_comment,
            )
        )
    return listings
