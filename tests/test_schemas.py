"""
Travel Planner Backend — Schema Tests
=======================================

Pagination arithmetic and the wire format (camelCase aliases).
"""

import pytest
from pydantic import ValidationError

from app.schemas.country import (
    ContinentSummary,
    CountryFilters,
    PageRequest,
    PaginationMeta,
)


class TestPaginationMeta:

    @pytest.mark.parametrize(
        "page, limit, total, total_pages, has_next, has_prev",
        [
            (1, 20, 0, 0, False, False),
            (1, 20, 20, 1, False, False),
            (1, 20, 21, 2, True, False),
            (2, 20, 21, 2, False, True),
            (3, 10, 21, 3, False, True),
            (5, 10, 21, 3, False, True),
        ],
    )
    def test_compute(self, page, limit, total, total_pages, has_next, has_prev):
        meta = PaginationMeta.compute(PageRequest(page=page, limit=limit), total)

        assert meta.total_pages == total_pages
        assert meta.has_next is has_next
        assert meta.has_prev is has_prev

    def test_serialized_with_camel_case(self):
        meta = PaginationMeta.compute(PageRequest(), 3)

        assert meta.model_dump(by_alias=True) == {
            "page": 1,
            "limit": 20,
            "total": 3,
            "totalPages": 1,
            "hasNext": False,
            "hasPrev": False,
        }


class TestPageRequest:

    def test_offset(self):
        assert PageRequest(page=3, limit=25).offset == 50

    @pytest.mark.parametrize("field", ["page", "limit"])
    def test_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            PageRequest(**{field: 0})


class TestCountryFilters:

    def test_blank_values_become_none(self):
        filters = CountryFilters(continent="", region="  ", search=" fr ")

        assert filters.continent is None
        assert filters.region is None
        assert filters.search == "fr"


def test_continent_summary_accepts_alias_and_field_name():
    assert ContinentSummary(name="Asia", countryCount=2) == ContinentSummary(
        name="Asia", country_count=2
    )
