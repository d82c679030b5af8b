"""
Travel Planner Backend — Cache Key Tests
==========================================
"""

from app.schemas.country import CountryFilters, PageRequest
from app.services import cache_keys


class TestCountryCodeKey:

    def test_uppercased_and_trimmed(self):
        assert cache_keys.country_code_key(" usa ") == "country:code:USA"

    def test_alpha2_and_alpha3_are_distinct_keys(self):
        assert cache_keys.country_code_key("us") != cache_keys.country_code_key("usa")


class TestFilteredKey:

    def test_layout(self):
        key = cache_keys.filtered_key(CountryFilters(continent="Asia"), PageRequest(page=2, limit=5))

        assert key == (
            'countries:filtered:{"filters":{"continent":"asia","region":null,"search":null},'
            '"pagination":{"limit":5,"page":2}}'
        )

    def test_filter_case_does_not_matter(self):
        upper = CountryFilters(continent="Europe", search="GER")
        lower = CountryFilters(continent="europe", search="ger")

        assert cache_keys.filtered_key(upper, PageRequest()) == cache_keys.filtered_key(
            lower, PageRequest()
        )

    def test_construction_order_does_not_matter(self):
        a = CountryFilters(search="fr", continent="Europe")
        b = CountryFilters(continent="Europe", search="fr")

        assert cache_keys.filtered_key(a, PageRequest()) == cache_keys.filtered_key(b, PageRequest())

    def test_blank_filter_equals_absent_filter(self):
        blank = CountryFilters(region="   ")

        assert cache_keys.filtered_key(blank, PageRequest()) == cache_keys.filtered_key(
            CountryFilters(), PageRequest()
        )

    def test_pagination_is_part_of_key(self):
        first = cache_keys.filtered_key(CountryFilters(), PageRequest(page=1))
        second = cache_keys.filtered_key(CountryFilters(), PageRequest(page=2))

        assert first != second


def test_aggregate_keys():
    assert set(cache_keys.AGGREGATE_KEYS) == {
        "countries:all",
        "countries:continents",
        "countries:popular",
    }
