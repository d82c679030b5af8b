"""
Travel Planner Backend — Custom Exception Hierarchy
=====================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages, without leaking internals.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, gateways and security helpers; caught by global handlers.

Exception Hierarchy:
    TravelPlannerError (base)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── UpstreamServiceError     → 503 Service Unavailable (store or cache failed)

A store reported as disconnected is NOT an error: the country service switches
to the fallback dataset instead of raising.
"""

from typing import Any, Dict, Optional


class TravelPlannerError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(TravelPlannerError):
    """
    Raised when a protected endpoint receives no token, a malformed token,
    a token with a bad signature, or an expired token.

    HTTP: 401 Unauthorized, with `WWW-Authenticate: Bearer`
    The message never says which check failed.
    """

    def __init__(
        self,
        message: str = "Invalid or missing access token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TravelPlannerError):
    """
    Raised when a requested resource does not exist.

    When:    GET /api/countries/{code} with a code that matches neither the
             alpha-2 nor the alpha-3 column (or fallback record).
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with code '{resource_id}' not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class UpstreamServiceError(TravelPlannerError):
    """
    Raised when the relational store or the cache fails mid-operation.

    What:    A query, cache read or cache write raised. The gateway that talks
             to the library wraps the library exception in this type.
    HTTP:    503 Service Unavailable
    Recovery: None locally. No retries on the request path; the error is
             logged and surfaced immediately.

    Attributes:
        service: "database" or "cache"
    """

    def __init__(
        self,
        service: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["service"] = service
        super().__init__(
            message=message or f"The {service} is temporarily unavailable. Please try again later.",
            context=ctx,
        )
        self.service = service


class RateLimitExceededError(TravelPlannerError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
