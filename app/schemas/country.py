"""
Travel Planner Backend — Pydantic Request/Response Schemas
============================================================

What:  Pydantic models defining the API contract and the typed inputs of the
       country service.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
How:   FastAPI serializes the response models; the country service builds them
       and stores their JSON form in the cache.
Who:   Used by route handlers, CountryService, and the fallback dataset.

Design Decision:
    Field names are snake_case in Python and camelCase on the wire
    (`officialName`, `totalPages`, `countryCount`), matching what the travel
    planner frontend already consumes. Cached payloads are dumped by alias
    and validated back, so a cache hit yields the same model a miss would.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiModel(BaseModel):
    """Base for every model that crosses the HTTP boundary (camelCase aliases)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Domain Records
# ══════════════════════════════════════════════════════════════════════════


class CountryResponse(ApiModel):
    """
    What:  Public representation of one country.
    Who:   Returned by GET /api/countries/{code}, embedded in list responses,
           and used as the element type of the fallback dataset.

    Deeply immutable (frozen, tuple-valued lists): fallback records are shared
    module-level values handed straight to callers. Tuples serialize as JSON
    arrays.
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="ISO 3166-1 alpha-2 code", examples=["US"])
    code3: str = Field(description="ISO 3166-1 alpha-3 code", examples=["USA"])
    name: str = Field(description="Common display name")
    official_name: str = Field(description="Official state name")
    capital: Optional[str] = Field(default=None)
    continent: str
    region: str
    languages: Tuple[str, ...] = ()
    currencies: Tuple[str, ...] = ()
    calling_codes: Tuple[str, ...] = ()
    is_popular_destination: bool = False
    flag: Optional[str] = Field(default=None, description="Flag emoji")
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class ContinentSummary(ApiModel):
    """A continent and how many countries belong to it."""

    name: str
    country_count: int = Field(ge=0)


# ══════════════════════════════════════════════════════════════════════════
# Service Inputs
# ══════════════════════════════════════════════════════════════════════════


class CountryFilters(BaseModel):
    """
    What:  Closed set of listing filters.

    Semantics (all case-insensitive):
        continent: exact match
        region:    substring match
        search:    substring of name OR code OR code3

    A field left as None means no filtering on that dimension. Blank strings
    are normalised to None so `?region=` and no `region` share a cache key.
    """

    model_config = ConfigDict(frozen=True)

    continent: Optional[str] = None
    region: Optional[str] = None
    search: Optional[str] = None

    @field_validator("continent", "region", "search")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    def cache_payload(self) -> Dict[str, Optional[str]]:
        # Matching ignores case, so the key does too
        values = {"continent": self.continent, "region": self.region, "search": self.search}
        return {name: v.lower() if v is not None else None for name, v in values.items()}


class PageRequest(BaseModel):
    """
    1-based page number and page size.

    Only positivity is enforced here. The upper bound on `limit` is a
    presentation concern (the route caps it at 100).
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def cache_payload(self) -> Dict[str, int]:
        return {"page": self.page, "limit": self.limit}


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class PaginationMeta(ApiModel):
    """
    Pagination block of a listing response.

    Invariants: total_pages = ceil(total / limit), has_next = page < total_pages,
    has_prev = page > 1.
    """

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def compute(cls, page: PageRequest, total: int) -> "PaginationMeta":
        total_pages = math.ceil(total / page.limit)
        return cls(
            page=page.page,
            limit=page.limit,
            total=total,
            total_pages=total_pages,
            has_next=page.page < total_pages,
            has_prev=page.page > 1,
        )


class BaseResponse(ApiModel):
    """Standard envelope fields shared by every successful JSON response."""

    success: bool = True
    message: str
    timestamp: datetime = Field(default_factory=utcnow)


class CountryListResponse(BaseResponse):
    """
    What:  One page of countries.
    Who:   Returned by GET /api/countries and cached whole under the filtered
           key, timestamp included. A cache hit therefore reports the time the
           page was first built, not the time it was served.
    """

    meta: PaginationMeta
    data: List[CountryResponse]


class ContinentListResponse(BaseResponse):
    """Continents with country counts, ascending by name."""

    data: List[ContinentSummary]


class MessageResponse(BaseResponse):
    """Envelope without a payload, for maintenance actions."""

    pass


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "not_found", "unauthorized")
        message: Human-readable description for display to users
        details: Optional extra context
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.

    `mode` is "live" while the connectivity gate says Connected and
    "fallback" while the country service serves the built-in dataset.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    cache: str = Field(description="Cache backend status: available, unavailable")
    mode: str = Field(description="Country data source: live or fallback")
    uptime_seconds: float = Field(description="Seconds since service started")
