"""
Travel Planner Backend — Database Engine & Connectivity Gate
=============================================================

What:  Async SQLAlchemy engine, session factory, declarative base, and the
       connectivity gate that decides between store-backed and fallback reads.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling at import time. The
       startup probe runs `SELECT 1` (retried with tenacity) and records the
       outcome in a DatabaseState object that the repository reads.
Who:   Used by the lifespan handler, CountryRepository, the health route and
       Alembic.
When:  Engine is created at module import; sessions are opened per query.

Connectivity Gate:
    ┌──────────────┐  probe ok   ┌───────────┐
    │   startup    │────────────▶│ Connected │──▶ store + cache
    │    probe     │             └───────────┘
    │ (N attempts) │  all failed ┌──────────────┐
    │              │────────────▶│ Disconnected │──▶ fallback dataset, no caching
    └──────────────┘             └──────────────┘

    There is no background health loop. The gate keeps the state the probe
    left it in until the process restarts.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from app.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite (used by tests and local runs) gets the dialect's default pool;
    pool sizing arguments only apply to server databases.
    """
    engine_kwargs = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.db_pool_size,          # Persistent connections (default: 20)
            max_overflow=settings.db_max_overflow,     # Extra connections for spikes (default: 10)
            pool_pre_ping=settings.db_pool_pre_ping,  # Validate before use (default: True)
            pool_recycle=3600,                         # Recycle after 1 hour
        )
    return create_async_engine(database_url, **engine_kwargs)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings.database_url)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the session closes,
# which the repository relies on when mapping rows to response models
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they register with the shared
    metadata object that Alembic reads for migrations.
    """
    pass


# ══════════════════════════════════════════════════════════════════════════
# Connectivity Gate
# ══════════════════════════════════════════════════════════════════════════

class DatabaseState:
    """
    Boolean connectivity flag read before every country service operation.

    Starts Disconnected; only a successful probe flips it. Reads are plain
    attribute access, so checking the gate never suspends.
    """

    def __init__(self, connected: bool = False):
        self.connected = connected
        self.last_error: Optional[str] = None

    def mark_connected(self) -> None:
        self.connected = True
        self.last_error = None

    def mark_disconnected(self, reason: str) -> None:
        self.connected = False
        self.last_error = reason

    def __repr__(self) -> str:
        return f"<DatabaseState(connected={self.connected})>"


async def probe_database(
    db_engine: AsyncEngine,
    state: DatabaseState,
    attempts: int = 3,
    wait_seconds: float = 1.0,
) -> bool:
    """
    Try to reach the database and record the outcome in `state`.

    What:    Runs `SELECT 1`, retrying up to `attempts` times with a fixed wait.
    When:    Once, during application startup.
    Returns: True when the store is reachable, False when the service should
             run in fallback mode. Connection failures are never raised: an
             unreachable database is a normal operating mode.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(wait_seconds),
        retry=retry_if_exception_type((SQLAlchemyError, OSError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    try:
        async for attempt in retrying:
            with attempt:
                async with db_engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
    except RetryError as e:
        cause = e.last_attempt.exception()
        state.mark_disconnected(type(cause).__name__)
        logger.warning(
            "Database unreachable after %d attempt(s) (%s); serving fallback data",
            attempts,
            type(cause).__name__,
        )
        return False

    state.mark_connected()
    logger.info("Database connection established")
    return True


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
