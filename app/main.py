"""
Travel Planner Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       dependency construction and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐      │
    │  │ Req Context  │→│Rate Limit│→│  GZip / CORS    │      │
    │  └──────────────┘ └──────────┘ └─────────────────┘      │
    │                                                         │
    │  Routes:                                                │
    │  ┌──────────────────────┐ ┌──────────────┐              │
    │  │ /api/countries/...   │ │ GET /health  │              │
    │  └──────────────────────┘ └──────────────┘              │
    │                                                         │
    │  Exception Handlers:                                    │
    │  ┌───────────────────────────────────────────────────┐  │
    │  │ NotFound→404 │ Auth→401 │ Upstream→503 │ else→500 │  │
    │  └───────────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (warn on missing JWT secret)
    3. Probe the database; an unreachable store selects fallback mode
    4. Build the cache backend (Redis or memory)
    5. Build CountryService with both injected, store on app.state

    Shutdown:
    1. Close the cache backend
    2. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app.cache import build_cache
from app.config import settings
from app.database import (
    DatabaseState,
    async_session_factory,
    dispose_engine,
    engine,
    probe_database,
)
from app.exceptions import (
    AuthenticationError,
    NotFoundError,
    TravelPlannerError,
    UpstreamServiceError,
)
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_context import RequestContextMiddleware, request_id_var
from app.repositories.country_repository import CountryRepository
from app.routes import countries, health
from app.services.country_service import CountryService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the object graph on startup and release it on shutdown.

    CountryService receives its repository and cache here, explicitly. No
    module-level service singleton exists, so tests can assemble their own.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Travel Planner Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Don't exit: public read endpoints still work without a JWT secret
        logger.error("Configuration error: %s", str(e))

    db_state = DatabaseState()
    await probe_database(
        engine,
        db_state,
        attempts=settings.db_connect_attempts,
        wait_seconds=settings.db_connect_wait,
    )

    cache = build_cache(settings.redis_url)
    if not await cache.ping():
        logger.warning("Cache backend '%s' did not answer ping at startup", cache.name)

    app.state.db_state = db_state
    app.state.country_service = CountryService(
        repository=CountryRepository(async_session_factory, db_state),
        cache=cache,
        ttl_seconds=settings.cache_ttl_seconds,
    )

    logger.info(
        "Country data source: %s", "database" if db_state.connected else "fallback dataset"
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Travel Planner Backend shutting down...")
    await cache.close()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        NotFoundError           → 404 Not Found
        AuthenticationError     → 401 Unauthorized
        UpstreamServiceError    → 503 Service Unavailable
        TravelPlannerError      → 500 Internal Server Error (catch-all for custom)
        Exception (fallback)    → 500 Internal Server Error

    Security: handlers never expose internal details (stack traces, SQL,
    cache keys) in the response. Context is logged server-side.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Authentication failed: %s", rid, exc.message)
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "request_id": rid,
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        """Store or cache failed mid-request. Generic message, context logged."""
        rid = request_id_var.get("")
        logger.error("[%s] Upstream failure: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=503,
            content={
                "error": "upstream_unavailable",
                "message": exc.message,
                "details": {"service": exc.service},
                "request_id": rid,
            },
        )

    @app.exception_handler(TravelPlannerError)
    async def handle_app_error(request: Request, exc: TravelPlannerError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all for truly unexpected errors. Stack trace logged, never returned."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance. `app.state.country_service`
    is populated by the lifespan handler; tests that skip the lifespan set it
    themselves.
    """
    app = FastAPI(
        title="Travel Planner API",
        description=(
            "Backend for the travel planner: country reference data with filtering, "
            "pagination and caching."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestContext → RateLimit → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Response-Time",
            "X-Total-Count",
            "Retry-After",
        ],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(countries.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
