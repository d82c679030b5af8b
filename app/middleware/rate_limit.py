"""
Travel Planner Backend — Per-Client Rate Limiting
===================================================

What:  Sliding-window request limiter keyed by client IP.
Why:   The country endpoints are public and cheap to call in a loop; the
       limit keeps one client from monopolising the database behind them.
How:   Each client keeps a deque of request timestamps. Stamps older than
       the window are popped from the left, so the deque length is the
       number of requests in the last `window_seconds`.

The state is per process. Running several workers multiplies the effective
limit by the worker count.
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_context import request_id_var

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

# Idle clients are dropped from the table every this many admitted requests
SWEEP_INTERVAL = 1000


class SlidingWindowLimiter:
    """Counts hits per key over a trailing window."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._admitted = 0

    def hit(self, key: str) -> None:
        """
        Record one request for `key`.

        Raises:
            RateLimitExceededError: the key already has `max_requests` hits
                inside the window. The rejected request is not recorded.
        """
        now = self._clock()
        cutoff = now - self.window_seconds
        stamps = self._hits.setdefault(key, deque())
        while stamps and stamps[0] <= cutoff:
            stamps.popleft()

        if len(stamps) >= self.max_requests:
            retry_after = max(1, math.ceil(stamps[0] + self.window_seconds - now))
            raise RateLimitExceededError(
                retry_after=retry_after,
                context={"client": key, "hits": len(stamps)},
            )

        stamps.append(now)
        self._admitted += 1
        if self._admitted % SWEEP_INTERVAL == 0:
            self._sweep(cutoff)

    def _sweep(self, cutoff: float) -> None:
        idle = [key for key, stamps in self._hits.items() if not stamps or stamps[-1] <= cutoff]
        for key in idle:
            del self._hits[key]
        if idle:
            logger.debug("Dropped %d idle rate-limit entries", len(idle))

    def __len__(self) -> int:
        return len(self._hits)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects over-limit clients with 429 before any routing happens.

    Limits come from RATE_LIMIT_REQUESTS / RATE_LIMIT_WINDOW unless a
    limiter is passed in.
    """

    def __init__(self, app, limiter: Optional[SlidingWindowLimiter] = None):
        super().__init__(app)
        self.limiter = limiter if limiter is not None else SlidingWindowLimiter(
            settings.rate_limit_requests, settings.rate_limit_window
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        try:
            self.limiter.hit(client_ip)
        except RateLimitExceededError as exc:
            logger.warning(
                "Rate limit exceeded for %s: %s", client_ip, exc.context
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": {"retry_after": exc.retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )
        return await call_next(request)
