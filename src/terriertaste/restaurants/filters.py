"""Listing filters and limit/offset parsing.

Every filter is optional. Only the filters that were supplied become SQL
predicates, and the predicates are AND-combined by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import or_

from terriertaste.db.models import Restaurant

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0


def _blank_to_none(value: str | None) -> str | None:
    return value if value else None


@dataclass(frozen=True)
class ListingFilters:
    """Optional restaurant filters. An empty string means "not supplied"."""

    search: str | None = None
    cuisine: str | None = None
    price: str | None = None
    location: str | None = None

    @classmethod
    def from_query(
        cls,
        search: str | None = None,
        cuisine: str | None = None,
        price: str | None = None,
        location: str | None = None,
    ) -> ListingFilters:
        """Build filters from raw query-string values."""
        return cls(
            search=_blank_to_none(search),
            cuisine=_blank_to_none(cuisine),
            price=_blank_to_none(price),
            location=_blank_to_none(location),
        )

    def predicates(self) -> list[ColumnElement[bool]]:
        """
        SQL predicates for the supplied filters only.

        - search: case-insensitive substring of name OR cuisine; ``%`` and
          ``_`` in the term match literally.
        - cuisine, price, location: exact, case-sensitive equality.
        """
        clauses: list[ColumnElement[bool]] = []
        if self.search is not None:
            clauses.append(
                or_(
                    Restaurant.name.icontains(self.search, autoescape=True),
                    Restaurant.cuisine.icontains(self.search, autoescape=True),
                )
            )
        if self.cuisine is not None:
            clauses.append(Restaurant.cuisine == self.cuisine)
        if self.price is not None:
            clauses.append(Restaurant.price == self.price)
        if self.location is not None:
            clauses.append(Restaurant.location == self.location)
        return clauses


@dataclass(frozen=True)
class Page:
    """A limit/offset window over the listing."""

    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET


def _parse_non_negative(raw: str | int | None) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value >= 0 else None


def parse_page(
    limit: str | int | None,
    offset: str | int | None,
    default_limit: int = DEFAULT_LIMIT,
) -> Page:
    """
    Parse raw limit/offset values.

    Missing, non-integer and negative values fall back to the defaults. A
    limit of 0 also falls back to ``default_limit``, since an empty page is
    never what a caller wants.
    """
    parsed_limit = _parse_non_negative(limit)
    parsed_offset = _parse_non_negative(offset)
    return Page(
        limit=parsed_limit or default_limit,
        offset=parsed_offset if parsed_offset is not None else DEFAULT_OFFSET,
    )
