"""
Travel Planner Backend — Country Service (Cache-Aside Orchestrator)
=====================================================================

What:  Read API for country reference data: filtered pages, code lookup,
       continent summaries, full and popular lists, cache invalidation.
Why:   Keeps cache policy, fallback substitution and pagination math in one
       place, independent of HTTP concerns.
How:   Composes a store gateway (CountryRepository) and a CacheBackend, both
       injected at construction.
Who:   Built once in the lifespan handler; called by the country routes.

Read Path:
    ┌────────────┐  hit   ┌──────────────────────────────┐
    │ cache.get  │───────▶│ return cached value as-is    │
    └─────┬──────┘        └──────────────────────────────┘
          │ miss
          ▼
    ┌────────────────────┐  no   ┌──────────────────────────────┐
    │ store connected?   │──────▶│ fallback dataset, NOT cached │
    └─────┬──────────────┘       └──────────────────────────────┘
          │ yes
          ▼
    ┌────────────┐   ┌────────────┐   ┌──────────────────┐
    │ query store│──▶│ cache.set  │──▶│ return           │
    └────────────┘   └────────────┘   └──────────────────┘

Concurrency:
    Every call is a linear chain of awaits. Two concurrent misses on the same
    key both query the store and both write the cache; that stampede is
    accepted. The service holds no mutable state of its own.

Error Handling Strategy:
    NotFoundError propagates untouched. Store and cache failures arrive as
    UpstreamServiceError from the gateways; they are logged with the
    operation name and re-raised unchanged. A disconnected store is not an
    error: it selects the fallback branch.
"""

import asyncio
import logging
from typing import Any, List

from app.cache import CacheBackend
from app.exceptions import NotFoundError, TravelPlannerError
from app.models.country import Country
from app.repositories.country_repository import (
    CountryRepository,
    build_country_predicate,
    code_predicate,
    popular_predicate,
)
from app.schemas.country import (
    ContinentListResponse,
    ContinentSummary,
    CountryFilters,
    CountryListResponse,
    CountryResponse,
    PageRequest,
    PaginationMeta,
)
from app.services import cache_keys, fallback_countries

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 60 * 60 * 24  # 24 hours in seconds

COUNTRIES_MESSAGE = "Countries retrieved successfully"
CONTINENTS_MESSAGE = "Continents retrieved successfully"
FALLBACK_SUFFIX = " (fallback data)"


class CountryService:
    """
    Business logic layer for country reference data.

    Responsibilities:
        - list_countries(): filtered, paginated listing
        - get_country_by_code(): alpha-2 / alpha-3 lookup
        - list_continents(): continent names with country counts
        - list_all_countries(): every country, by name
        - list_popular_countries(): popular destinations, by name
        - invalidate_cache(): drop the aggregate cache entries
    """

    def __init__(
        self,
        repository: CountryRepository,
        cache: CacheBackend,
        ttl_seconds: int = DEFAULT_CACHE_TTL,
    ):
        self.repository = repository
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    @property
    def using_fallback(self) -> bool:
        return not self.repository.is_connected()

    # ══════════════════════════════════════════════════════════════════════
    # Listing
    # ══════════════════════════════════════════════════════════════════════

    async def list_countries(
        self,
        filters: CountryFilters,
        page: PageRequest,
    ) -> CountryListResponse:
        """
        One page of countries matching `filters`, ascending by name.

        Cache hit: the stored envelope is returned unchanged, including the
        timestamp of when it was first built.
        Store disconnected: filtered and paginated from the fallback dataset,
        message suffixed with "(fallback data)", never cached.
        Store connected: count + page query sharing one predicate, cached
        under the filtered key for the configured TTL.

        Raises:
            UpstreamServiceError: store or cache failed
        """
        cache_key = cache_keys.filtered_key(filters, page)

        try:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Countries retrieved from cache: %s", cache_key)
                return CountryListResponse.model_validate(cached)

            if not self.repository.is_connected():
                return self._fallback_country_page(filters, page)

            predicate = build_country_predicate(filters)
            total = await self.repository.count(predicate)
            rows = await self.repository.find_many(
                predicate, offset=page.offset, limit=page.limit
            )

            result = CountryListResponse(
                message=COUNTRIES_MESSAGE,
                meta=PaginationMeta.compute(page, total),
                data=[to_country_response(row) for row in rows],
            )
            await self._store(cache_key, result.model_dump(mode="json", by_alias=True))
            return result

        except TravelPlannerError as e:
            logger.error("Error retrieving countries: %s", e.message, exc_info=True)
            raise

    async def list_all_countries(self) -> List[CountryResponse]:
        """
        Every country, ascending by name.

        Store disconnected: the whole fallback dataset, not cached. This keeps
        the disconnected behaviour of all read operations uniform.
        """
        key = cache_keys.ALL_COUNTRIES
        try:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug("All countries retrieved from cache")
                return [CountryResponse.model_validate(item) for item in cached]

            if not self.repository.is_connected():
                logger.warning("Using fallback countries data - database not connected")
                return fallback_countries.sorted_by_name(fallback_countries.FALLBACK_COUNTRIES)

            rows = await self.repository.find_many()
            countries = [to_country_response(row) for row in rows]
            await self._store(key, _dump_list(countries))
            return countries

        except TravelPlannerError as e:
            logger.error("Error retrieving all countries: %s", e.message, exc_info=True)
            raise

    async def list_popular_countries(self) -> List[CountryResponse]:
        """Countries flagged as popular destinations, ascending by name."""
        key = cache_keys.POPULAR_COUNTRIES
        try:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug("Popular countries retrieved from cache")
                return [CountryResponse.model_validate(item) for item in cached]

            if not self.repository.is_connected():
                logger.warning("Using fallback popular countries - database not connected")
                return fallback_countries.sorted_by_name(
                    c for c in fallback_countries.FALLBACK_COUNTRIES if c.is_popular_destination
                )

            rows = await self.repository.find_many(popular_predicate())
            countries = [to_country_response(row) for row in rows]
            await self._store(key, _dump_list(countries))
            return countries

        except TravelPlannerError as e:
            logger.error("Error retrieving popular countries: %s", e.message, exc_info=True)
            raise

    # ══════════════════════════════════════════════════════════════════════
    # Lookup
    # ══════════════════════════════════════════════════════════════════════

    async def get_country_by_code(self, code: str) -> CountryResponse:
        """
        Look a country up by ISO alpha-2 or alpha-3 code, ignoring case.

        "us", "US" and "USA" all resolve to the same record; the cache key is
        built from the uppercased input, so each spelling length gets its own
        entry pointing at the same data.

        Raises:
            NotFoundError: no record has this code (→ 404)
            UpstreamServiceError: store or cache failed
        """
        cache_key = cache_keys.country_code_key(code)

        try:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Country retrieved from cache: %s", cache_key)
                return CountryResponse.model_validate(cached)

            if not self.repository.is_connected():
                logger.warning(
                    "Using fallback country data for code: %s - database not connected", code
                )
                country = fallback_countries.find_country(code)
                if country is None:
                    raise NotFoundError(resource="country", resource_id=code)
                return country

            row = await self.repository.find_first(code_predicate(code))
            if row is None:
                raise NotFoundError(resource="country", resource_id=code)

            country = to_country_response(row)
            await self._store(cache_key, country.model_dump(mode="json", by_alias=True))
            return country

        except NotFoundError:
            raise
        except TravelPlannerError as e:
            logger.error(
                "Error retrieving country by code %s: %s", code, e.message, exc_info=True
            )
            raise

    # ══════════════════════════════════════════════════════════════════════
    # Aggregates
    # ══════════════════════════════════════════════════════════════════════

    async def list_continents(self) -> ContinentListResponse:
        """
        Continents with their country counts, ascending by name.

        Only the summary list is cached; the envelope (and its timestamp) is
        rebuilt on every call.
        """
        key = cache_keys.CONTINENTS
        try:
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug("Continents retrieved from cache")
                return ContinentListResponse(
                    message=CONTINENTS_MESSAGE,
                    data=[ContinentSummary.model_validate(item) for item in cached],
                )

            if not self.repository.is_connected():
                logger.warning("Using fallback continents data - database not connected")
                return ContinentListResponse(
                    message=CONTINENTS_MESSAGE + FALLBACK_SUFFIX,
                    data=fallback_countries.continent_summaries(),
                )

            groups = await self.repository.group_by_continent()
            summaries = [
                ContinentSummary(name=continent, country_count=count)
                for continent, count in groups
            ]
            await self._store(key, _dump_list(summaries))
            return ContinentListResponse(message=CONTINENTS_MESSAGE, data=summaries)

        except TravelPlannerError as e:
            logger.error("Error retrieving continents: %s", e.message, exc_info=True)
            raise

    async def invalidate_cache(self) -> None:
        """
        Drop the aggregate entries (all, continents, popular).

        Per-code and filtered listing entries are not tracked and stay until
        their TTL lapses.
        """
        try:
            await asyncio.gather(*(self.cache.delete(key) for key in cache_keys.AGGREGATE_KEYS))
        except TravelPlannerError as e:
            logger.error("Error invalidating cache: %s", e.message, exc_info=True)
            raise
        logger.info("Country cache invalidated successfully")

    # ══════════════════════════════════════════════════════════════════════
    # Helpers
    # ══════════════════════════════════════════════════════════════════════

    def _fallback_country_page(
        self,
        filters: CountryFilters,
        page: PageRequest,
    ) -> CountryListResponse:
        logger.warning("Using fallback countries data - database not connected")
        matches = fallback_countries.filter_countries(filters)
        return CountryListResponse(
            message=COUNTRIES_MESSAGE + FALLBACK_SUFFIX,
            meta=PaginationMeta.compute(page, len(matches)),
            data=matches[page.offset:page.offset + page.limit],
        )

    async def _store(self, key: str, value: Any) -> None:
        await self.cache.set(key, value, self.ttl_seconds)
        logger.debug("Cached with key: %s", key)


def to_country_response(row: Country) -> CountryResponse:
    """Map an ORM row to the public model."""
    return CountryResponse(
        code=row.code,
        code3=row.code3,
        name=row.name,
        official_name=row.official_name,
        capital=row.capital,
        continent=row.continent,
        region=row.region,
        languages=tuple(row.languages or ()),
        currencies=tuple(row.currencies or ()),
        calling_codes=tuple(row.calling_codes or ()),
        is_popular_destination=row.is_popular_destination,
        flag=row.flag,
        latitude=row.latitude,
        longitude=row.longitude,
    )


def _dump_list(items) -> List[Any]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]
