"""Unit tests for listing filters, page parsing and rating validation."""

import math

import pytest

from terriertaste.restaurants.filters import ListingFilters, Page, parse_page
from terriertaste.restaurants.reviews import InvalidRatingError, validate_rating


class TestListingFilters:
    def test_no_filters_no_predicates(self):
        assert ListingFilters().predicates() == []

    def test_blank_query_values_are_ignored(self):
        filters = ListingFilters.from_query(search="", cuisine="", price=None, location="")
        assert filters == ListingFilters()
        assert filters.predicates() == []

    def test_one_predicate_per_supplied_filter(self):
        filters = ListingFilters.from_query(search="pho", cuisine="Thai", price="$$", location="Allston")
        assert len(filters.predicates()) == 4

    def test_search_matches_name_or_cuisine(self):
        (clause,) = ListingFilters(search="pho").predicates()
        sql = str(clause).lower()
        assert "restaurants.name" in sql
        assert "restaurants.cuisine" in sql
        assert " or " in sql


class TestParsePage:
    def test_defaults(self):
        assert parse_page(None, None) == Page(limit=50, offset=0)

    def test_valid_values(self):
        assert parse_page("10", "20") == Page(limit=10, offset=20)

    @pytest.mark.parametrize("raw", ["abc", "-5", "0", "", "1.5"])
    def test_bad_limit_falls_back(self, raw):
        assert parse_page(raw, None).limit == 50

    @pytest.mark.parametrize("raw", ["abc", "-1", ""])
    def test_bad_offset_falls_back(self, raw):
        assert parse_page(None, raw).offset == 0

    def test_custom_default_limit(self):
        assert parse_page(None, None, default_limit=25).limit == 25


class TestValidateRating:
    @pytest.mark.parametrize("rating", [1, 3, 5, 4.0])
    def test_accepts_integers_in_range(self, rating):
        assert validate_rating(rating) == int(rating)

    @pytest.mark.parametrize("rating", [0, 6, -1, 4.5, None, "4", True, math.nan, math.inf])
    def test_rejects_everything_else(self, rating):
        with pytest.raises(InvalidRatingError):
            validate_rating(rating)
