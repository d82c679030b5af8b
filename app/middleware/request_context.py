"""
Travel Planner Backend — Request Context Middleware
=====================================================

What:  Tags every request with a correlation ID and writes one access-log line
       per response.
Why:   Country lookups fan out to cache and database; a shared ID ties the
       service's cache-hit / fallback / upstream-failure log lines to the
       request that caused them.
How:   The ID comes from the caller's X-Request-ID header when it looks sane,
       otherwise a fresh 8-character hex token. It lives in a ContextVar for
       the duration of the request and is echoed back in the response.

Access line:
    GET /api/countries 200 12.4ms [a1b2c3d4] from 10.0.0.7

/health is not logged; probes hit it every few seconds.
"""

import logging
import re
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

access_logger = logging.getLogger("travel_planner.access")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client-supplied IDs end up in log lines; anything else is replaced
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

UNLOGGED_PATHS = frozenset({"/health"})


def resolve_request_id(header_value: Optional[str]) -> str:
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns the request ID, measures duration, logs the outcome."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))
        token = request_id_var.set(rid)
        request.state.request_id = rid
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms:.1f}ms"

        path = request.url.path
        if path not in UNLOGGED_PATHS:
            status = response.status_code
            if status >= 500:
                level = logging.ERROR
            elif status >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            client_ip = request.client.host if request.client else "unknown"
            access_logger.log(
                level,
                "%s %s %d %.1fms [%s] from %s",
                request.method,
                path,
                status,
                duration_ms,
                rid,
                client_ip,
            )
        return response
