"""
Travel Planner Backend — Country Route Handlers
=================================================

What:  HTTP surface of the country reference data.
Why:   The planner UI uses these for country pickers, continent tabs and the
       destination search box.
How:   Extracts query parameters, delegates to CountryService, returns JSON.
Who:   Called by the frontend; the invalidate endpoint by operators.

Route Order:
    The fixed paths (/all, /popular, /continents/list) are registered before
    /{code}, otherwise "all" would be treated as a country code.

Caching Strategy:
    Server-side caching lives in CountryService. Here we only add a short
    Cache-Control on single-country lookups, which change rarely.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response

from app.schemas.country import (
    ContinentListResponse,
    CountryFilters,
    CountryListResponse,
    CountryResponse,
    ErrorResponse,
    MessageResponse,
    PageRequest,
)
from app.security import require_access_token
from app.services.country_service import CountryService

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/countries", tags=["Countries"])

MAX_PAGE_SIZE = 100


def get_country_service(request: Request) -> CountryService:
    """FastAPI dependency: the CountryService built during startup."""
    return request.app.state.country_service


@router.get(
    "",
    response_model=CountryListResponse,
    responses={
        200: {"description": "Successfully retrieved countries", "model": CountryListResponse},
        422: {"description": "Invalid query parameters"},
        503: {"description": "Database or cache unavailable", "model": ErrorResponse},
    },
    summary="Get all countries",
    description=(
        "Retrieve a list of countries with optional filtering by continent, region, "
        "or search term. Results are paginated and ordered by name."
    ),
)
async def list_countries(
    response: Response,
    page: int = Query(default=1, ge=1, description="Page number for pagination", examples=[1]),
    limit: int = Query(
        default=20, ge=1, le=MAX_PAGE_SIZE,
        description=f"Number of countries per page (max {MAX_PAGE_SIZE})",
        examples=[20],
    ),
    continent: Optional[str] = Query(
        default=None,
        description="Filter countries by continent (exact, case-insensitive)",
        examples=["Europe"],
    ),
    region: Optional[str] = Query(
        default=None,
        description="Filter countries by region (substring, case-insensitive)",
        examples=["Western"],
    ),
    search: Optional[str] = Query(
        default=None,
        description="Search countries by name or code",
        examples=["france"],
    ),
    service: CountryService = Depends(get_country_service),
) -> CountryListResponse:
    result = await service.list_countries(
        CountryFilters(continent=continent, region=region, search=search),
        PageRequest(page=page, limit=limit),
    )
    response.headers["X-Total-Count"] = str(result.meta.total)
    return result


@router.get(
    "/all",
    response_model=List[CountryResponse],
    summary="Get every country",
    description="Unpaginated list of all countries ordered by name.",
)
async def list_all_countries(
    service: CountryService = Depends(get_country_service),
) -> List[CountryResponse]:
    return await service.list_all_countries()


@router.get(
    "/popular",
    response_model=List[CountryResponse],
    summary="Get popular destinations",
    description="Countries flagged as popular travel destinations, ordered by name.",
)
async def list_popular_countries(
    service: CountryService = Depends(get_country_service),
) -> List[CountryResponse]:
    return await service.list_popular_countries()


@router.get(
    "/continents/list",
    response_model=ContinentListResponse,
    summary="Get list of continents",
    description="Retrieve a list of all continents with country counts.",
)
async def list_continents(
    service: CountryService = Depends(get_country_service),
) -> ContinentListResponse:
    return await service.list_continents()


@router.post(
    "/cache/invalidate",
    response_model=MessageResponse,
    responses={
        401: {"description": "Missing or invalid access token", "model": ErrorResponse},
    },
    summary="Invalidate aggregate country caches",
    description=(
        "Drops the cached all-countries, continents and popular lists. "
        "Requires a bearer access token."
    ),
)
async def invalidate_cache(
    claims: dict = Depends(require_access_token),
    service: CountryService = Depends(get_country_service),
) -> MessageResponse:
    logger.info("Country cache invalidation requested by %s", claims.get("sub"))
    await service.invalidate_cache()
    return MessageResponse(message="Country cache invalidated successfully")


@router.get(
    "/{code}",
    response_model=CountryResponse,
    responses={
        200: {"description": "Successfully retrieved country details", "model": CountryResponse},
        404: {"description": "Country not found", "model": ErrorResponse},
    },
    summary="Get country by code",
    description=(
        "Retrieve detailed information about a specific country using its "
        "ISO 3166-1 alpha-2 (e.g. \"US\") or alpha-3 (e.g. \"USA\") code."
    ),
)
async def get_country_by_code(
    code: str,
    response: Response,
    service: CountryService = Depends(get_country_service),
) -> CountryResponse:
    result = await service.get_country_by_code(code)
    response.headers["Cache-Control"] = "public, max-age=3600"
    return result
