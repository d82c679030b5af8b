"""
Travel Planner Backend — Country Repository Tests
===================================================

Predicate builders are checked by compiling the clauses; the query methods
run against the seeded SQLite database from conftest.
"""

import pytest

from app.repositories.country_repository import (
    build_country_predicate,
    code_predicate,
    popular_predicate,
)
from app.schemas.country import CountryFilters


class TestPredicateBuilders:

    def test_no_filters_no_clauses(self):
        assert build_country_predicate(CountryFilters()) == []

    def test_one_clause_per_present_filter(self):
        clauses = build_country_predicate(
            CountryFilters(continent="Europe", region="Western", search="fr")
        )
        assert len(clauses) == 3

    def test_continent_compares_lowercased(self):
        (clause,) = build_country_predicate(CountryFilters(continent="Europe"))
        sql = str(clause.compile(compile_kwargs={"literal_binds": True}))

        assert "lower(countries.continent)" in sql
        assert "'europe'" in sql

    def test_region_is_escaped_substring(self):
        (clause,) = build_country_predicate(CountryFilters(region="100%"))
        sql = str(clause)

        assert "countries.region" in sql
        assert "LIKE" in sql
        assert "ESCAPE" in sql

    def test_search_spans_name_and_both_codes(self):
        (clause,) = build_country_predicate(CountryFilters(search="us"))
        sql = str(clause)

        for column in ("countries.name", "countries.code", "countries.code3"):
            assert column in sql
        assert " OR " in sql

    def test_code_predicate_uppercases_input(self):
        (clause,) = code_predicate(" usa ")
        sql = str(clause.compile(compile_kwargs={"literal_binds": True}))

        assert "upper(countries.code)" in sql
        assert "upper(countries.code3)" in sql
        assert "'USA'" in sql


class TestCountryRepository:

    @pytest.mark.asyncio
    async def test_count_all(self, repository):
        assert await repository.count() == 10

    @pytest.mark.asyncio
    async def test_count_with_predicate(self, repository):
        predicate = build_country_predicate(CountryFilters(continent="EUROPE"))
        assert await repository.count(predicate) == 4

    @pytest.mark.asyncio
    async def test_find_many_orders_by_name(self, repository, seeded_names):
        rows = await repository.find_many()
        assert [row.name for row in rows] == seeded_names

    @pytest.mark.asyncio
    async def test_find_many_offset_and_limit(self, repository, seeded_names):
        rows = await repository.find_many(offset=2, limit=3)
        assert [row.name for row in rows] == seeded_names[2:5]

    @pytest.mark.asyncio
    async def test_find_first_by_either_code(self, repository):
        by_alpha2 = await repository.find_first(code_predicate("ke"))
        by_alpha3 = await repository.find_first(code_predicate("KEN"))

        assert by_alpha2.name == by_alpha3.name == "Kenya"
        assert by_alpha2.languages == ["English", "Swahili"]

    @pytest.mark.asyncio
    async def test_find_first_missing(self, repository):
        assert await repository.find_first(code_predicate("QQ")) is None

    @pytest.mark.asyncio
    async def test_popular_predicate(self, repository):
        rows = await repository.find_many(popular_predicate())

        assert len(rows) == 8
        assert all(row.is_popular_destination for row in rows)

    @pytest.mark.asyncio
    async def test_group_by_continent(self, repository):
        groups = await repository.group_by_continent()

        assert groups == [
            ("Africa", 1),
            ("Asia", 1),
            ("Europe", 4),
            ("North America", 2),
            ("Oceania", 1),
            ("South America", 1),
        ]

    @pytest.mark.asyncio
    async def test_is_connected_reads_gate(self, repository):
        assert repository.is_connected() is True
        repository._state.mark_disconnected("OperationalError")
        assert repository.is_connected() is False
