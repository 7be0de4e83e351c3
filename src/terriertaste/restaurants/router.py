"""Restaurant router: all /api/restaurants/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from terriertaste.auth.dependencies import get_current_user, get_optional_user
from terriertaste.config import get_settings
from terriertaste.database import get_session
from terriertaste.db.models import User
from terriertaste.restaurants.catalog import add_restaurant, list_filter_options
from terriertaste.restaurants.filters import ListingFilters, parse_page
from terriertaste.restaurants.listing import list_restaurants
from terriertaste.restaurants.reviews import (
    InvalidRatingError,
    RestaurantNotFoundError,
    get_user_review,
    list_restaurant_reviews,
    list_user_reviews,
    submit_review,
)
from terriertaste.restaurants.schemas import (
    FilterOptionsResponse,
    MessageResponse,
    RestaurantCreateRequest,
    RestaurantCreateResponse,
    RestaurantListResponse,
    RestaurantResponse,
    RestaurantReviewListResponse,
    RestaurantReviewResponse,
    ReviewResponse,
    ReviewSubmitRequest,
    UserRatingResponse,
    UserReviewListResponse,
    UserReviewResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@router.get("", response_model=RestaurantListResponse)
async def get_restaurants(
    search: str | None = None,
    cuisine: str | None = None,
    price: str | None = None,
    location: str | None = None,
    limit: str | None = None,
    offset: str | None = None,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_session),
) -> RestaurantListResponse:
    """List restaurants with average rating, review count and the viewer's own review."""
    settings = get_settings()
    listings = await list_restaurants(
        db,
        filters=ListingFilters.from_query(search, cuisine, price, location),
        page=parse_page(limit, offset, default_limit=settings.listing_default_limit),
        viewer_id=viewer.id if viewer else None,
    )
    return RestaurantListResponse(
        restaurants=[RestaurantResponse.model_validate(listing) for listing in listings],
    )


@router.get("/filters", response_model=FilterOptionsResponse)
async def get_filter_options(
    db: AsyncSession = Depends(get_session),
) -> FilterOptionsResponse:
    """Distinct cuisines, prices and locations in the catalog."""
    options = await list_filter_options(db)
    return FilterOptionsResponse.model_validate(options)


@router.post("", response_model=RestaurantCreateResponse, status_code=201, response_model_exclude_none=True)
async def create_restaurant(
    body: RestaurantCreateRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> RestaurantCreateResponse:
    """Add a restaurant, or return the stored one with the same external place id."""
    try:
        restaurant_id, created = await add_restaurant(
            db,
            creator_id=user.id,
            name=body.name,
            cuisine=body.cuisine,
            price=body.price,
            location=body.location,
            address=body.address,
            lat=body.lat,
            lng=body.lng,
            external_place_id=body.external_place_id,
        )
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("restaurant_add_failed", user_id=user.id)
        raise HTTPException(status_code=500, detail="Unable to save the restaurant right now.") from e

    if not created:
        response.status_code = 200
        return RestaurantCreateResponse(restaurant_id=restaurant_id, message="Restaurant already stored.")
    return RestaurantCreateResponse(restaurant_id=restaurant_id)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@router.get("/user/me", response_model=UserReviewListResponse)
async def get_my_reviews(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserReviewListResponse:
    """The caller's reviews with restaurant details, newest first."""
    reviews = await list_user_reviews(db, user.id)
    return UserReviewListResponse(reviews=[UserReviewResponse.model_validate(r) for r in reviews])


@router.get("/{restaurant_id}/reviews", response_model=RestaurantReviewListResponse)
async def get_restaurant_reviews(
    restaurant_id: int,
    db: AsyncSession = Depends(get_session),
) -> RestaurantReviewListResponse:
    """All reviews of a restaurant, newest first."""
    reviews = await list_restaurant_reviews(db, restaurant_id)
    return RestaurantReviewListResponse(reviews=[RestaurantReviewResponse.model_validate(r) for r in reviews])


@router.post("/{restaurant_id}/reviews", response_model=MessageResponse, status_code=201)
async def post_review(
    restaurant_id: int,
    body: ReviewSubmitRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Submit or overwrite the caller's review of a restaurant."""
    try:
        await submit_review(db, user.id, restaurant_id, body.rating, body.comment)
        await db.commit()
    except InvalidRatingError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except RestaurantNotFoundError as e:
        raise HTTPException(status_code=404, detail="Restaurant not found") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("review_save_failed", user_id=user.id, restaurant_id=restaurant_id)
        raise HTTPException(status_code=500, detail="Unable to save the review right now.") from e

    return MessageResponse(message="Review saved.")


@router.get("/{restaurant_id}/user-rating", response_model=UserRatingResponse)
async def get_my_rating(
    restaurant_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserRatingResponse:
    """The caller's own review of one restaurant."""
    review = await get_user_review(db, user.id, restaurant_id)
    return UserRatingResponse(review=ReviewResponse.model_validate(review) if review else None)
