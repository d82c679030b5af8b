"""
Cache key policy for country reference data.

Fixed keys cover the aggregates; per-code and per-listing keys are derived.
Listing keys embed a JSON serialization of the filters and page request with
sorted keys and compact separators, so two logically identical requests map
to byte-identical keys no matter how their objects were built.
"""

import json

from app.schemas.country import CountryFilters, PageRequest

ALL_COUNTRIES = "countries:all"
CONTINENTS = "countries:continents"
POPULAR_COUNTRIES = "countries:popular"
COUNTRY_BY_CODE_PREFIX = "country:code:"
FILTERED_PREFIX = "countries:filtered:"

# Keys dropped by CountryService.invalidate_cache(). Per-code and filtered
# entries are not tracked and expire by TTL.
AGGREGATE_KEYS = (ALL_COUNTRIES, CONTINENTS, POPULAR_COUNTRIES)


def country_code_key(code: str) -> str:
    return f"{COUNTRY_BY_CODE_PREFIX}{code.strip().upper()}"


def filtered_key(filters: CountryFilters, page: PageRequest) -> str:
    payload = {"filters": filters.cache_payload(), "pagination": page.cache_payload()}
    return FILTERED_PREFIX + json.dumps(payload, sort_keys=True, separators=(",", ":"))
