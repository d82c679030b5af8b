"""
Travel Planner Backend — Fallback Country Dataset
===================================================

What:  A fixed set of country records served while the database is unreachable.
Why:   The planner UI needs country pickers to work even when the store is
       down; a handful of popular destinations keeps the core flows usable.
How:   Module-level tuple of frozen CountryResponse values plus pure helpers
       that reproduce the store's filtering, lookup and grouping semantics.
Who:   CountryService, only on its Disconnected branch.

Nothing here is cached or persisted. Each disconnected call recomputes from
the tuple, which is small enough that this costs microseconds.
"""

from collections import Counter
from typing import Iterable, List, Optional

from app.schemas.country import ContinentSummary, CountryFilters, CountryResponse

FALLBACK_COUNTRIES = (
    CountryResponse(
        code="US",
        code3="USA",
        name="United States",
        official_name="United States of America",
        capital="Washington, D.C.",
        continent="North America",
        region="Northern America",
        languages=["English"],
        currencies=["USD"],
        calling_codes=["+1"],
        is_popular_destination=True,
        flag="🇺🇸",
        latitude=39.8283,
        longitude=-98.5795,
    ),
    CountryResponse(
        code="CA",
        code3="CAN",
        name="Canada",
        official_name="Canada",
        capital="Ottawa",
        continent="North America",
        region="Northern America",
        languages=["English", "French"],
        currencies=["CAD"],
        calling_codes=["+1"],
        is_popular_destination=True,
        flag="🇨🇦",
        latitude=56.1304,
        longitude=-106.3468,
    ),
    CountryResponse(
        code="GB",
        code3="GBR",
        name="United Kingdom",
        official_name="United Kingdom of Great Britain and Northern Ireland",
        capital="London",
        continent="Europe",
        region="Northern Europe",
        languages=["English"],
        currencies=["GBP"],
        calling_codes=["+44"],
        is_popular_destination=True,
        flag="🇬🇧",
        latitude=55.3781,
        longitude=-3.4360,
    ),
    CountryResponse(
        code="FR",
        code3="FRA",
        name="France",
        official_name="French Republic",
        capital="Paris",
        continent="Europe",
        region="Western Europe",
        languages=["French"],
        currencies=["EUR"],
        calling_codes=["+33"],
        is_popular_destination=True,
        flag="🇫🇷",
        latitude=46.2276,
        longitude=2.2137,
    ),
    CountryResponse(
        code="DE",
        code3="DEU",
        name="Germany",
        official_name="Federal Republic of Germany",
        capital="Berlin",
        continent="Europe",
        region="Western Europe",
        languages=["German"],
        currencies=["EUR"],
        calling_codes=["+49"],
        is_popular_destination=True,
        flag="🇩🇪",
        latitude=51.1657,
        longitude=10.4515,
    ),
    CountryResponse(
        code="JP",
        code3="JPN",
        name="Japan",
        official_name="Japan",
        capital="Tokyo",
        continent="Asia",
        region="Eastern Asia",
        languages=["Japanese"],
        currencies=["JPY"],
        calling_codes=["+81"],
        is_popular_destination=True,
        flag="🇯🇵",
        latitude=36.2048,
        longitude=138.2529,
    ),
    CountryResponse(
        code="AU",
        code3="AUS",
        name="Australia",
        official_name="Commonwealth of Australia",
        capital="Canberra",
        continent="Oceania",
        region="Australia and New Zealand",
        languages=["English"],
        currencies=["AUD"],
        calling_codes=["+61"],
        is_popular_destination=True,
        flag="🇦🇺",
        latitude=-25.2744,
        longitude=133.7751,
    ),
)


def country_matches(country: CountryResponse, filters: CountryFilters) -> bool:
    """
    In-memory equivalent of the repository's SQL predicate.

    continent: case-insensitive equality
    region:    case-insensitive substring
    search:    case-insensitive substring of name, code or code3
    """
    if filters.continent and country.continent.lower() != filters.continent.lower():
        return False
    if filters.region and filters.region.lower() not in country.region.lower():
        return False
    if filters.search:
        term = filters.search.lower()
        if not (
            term in country.name.lower()
            or term in country.code.lower()
            or term in country.code3.lower()
        ):
            return False
    return True


def sorted_by_name(countries: Iterable[CountryResponse]) -> List[CountryResponse]:
    return sorted(countries, key=lambda c: c.name)


def filter_countries(filters: CountryFilters) -> List[CountryResponse]:
    """Fallback records matching `filters`, ascending by name."""
    return sorted_by_name(c for c in FALLBACK_COUNTRIES if country_matches(c, filters))


def find_country(code: str) -> Optional[CountryResponse]:
    """Fallback record whose alpha-2 or alpha-3 code equals `code`, ignoring case."""
    wanted = code.strip().upper()
    for country in FALLBACK_COUNTRIES:
        if country.code.upper() == wanted or country.code3.upper() == wanted:
            return country
    return None


def continent_summaries() -> List[ContinentSummary]:
    """Fallback records grouped by continent, counted, ascending by continent name."""
    counts = Counter(c.continent for c in FALLBACK_COUNTRIES)
    return [
        ContinentSummary(name=name, country_count=count)
        for name, count in sorted(counts.items())
    ]
