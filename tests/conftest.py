"""
Travel Planner Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any `app` import so the settings
       singleton, and the engine built from it, point at throwaway resources.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── country_rows:      plain dicts for the seeded countries table
    ├── db_engine:         aiosqlite engine on a tmp file, schema created, rows seeded
    ├── session_factory:   async_sessionmaker bound to db_engine
    ├── repository:        CountryRepository, gate Connected
    ├── broken_repository: CountryRepository whose database cannot be opened
    ├── memory_cache:      empty MemoryCache
    ├── country_service:   live CountryService (repository + memory_cache)
    ├── fallback_service:  CountryService with the gate Disconnected
    ├── test_client:       HTTPX AsyncClient over the live service
    ├── fallback_client:   HTTPX AsyncClient over the fallback service
    └── broken_client:     HTTPX AsyncClient whose store fails every query

ASGITransport does not run the lifespan, so the client fixtures install the
service on app.state themselves.
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="travel_test_"), "test.db")
)
os.environ["REDIS_URL"] = ""
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-0123456789"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from app.cache import MemoryCache  # noqa: E402
from app.database import Base, DatabaseState  # noqa: E402
from app.models.country import Country  # noqa: E402
from app.repositories.country_repository import CountryRepository  # noqa: E402
from app.services.country_service import CountryService  # noqa: E402
from app.services.fallback_countries import FALLBACK_COUNTRIES  # noqa: E402


# Seeded on top of the fallback set so live and fallback results differ
EXTRA_COUNTRIES = [
    {
        "code": "BR",
        "code3": "BRA",
        "name": "Brazil",
        "official_name": "Federative Republic of Brazil",
        "capital": "Brasília",
        "continent": "South America",
        "region": "South America",
        "languages": ["Portuguese"],
        "currencies": ["BRL"],
        "calling_codes": ["+55"],
        "is_popular_destination": False,
        "flag": "🇧🇷",
        "latitude": -14.235,
        "longitude": -51.9253,
    },
    {
        "code": "IT",
        "code3": "ITA",
        "name": "Italy",
        "official_name": "Italian Republic",
        "capital": "Rome",
        "continent": "Europe",
        "region": "Southern Europe",
        "languages": ["Italian"],
        "currencies": ["EUR"],
        "calling_codes": ["+39"],
        "is_popular_destination": True,
        "flag": "🇮🇹",
        "latitude": 41.8719,
        "longitude": 12.5674,
    },
    {
        "code": "KE",
        "code3": "KEN",
        "name": "Kenya",
        "official_name": "Republic of Kenya",
        "capital": "Nairobi",
        "continent": "Africa",
        "region": "Eastern Africa",
        "languages": ["English", "Swahili"],
        "currencies": ["KES"],
        "calling_codes": ["+254"],
        "is_popular_destination": False,
        "flag": "🇰🇪",
        "latitude": -0.0236,
        "longitude": 37.9062,
    },
]

# Names of the ten seeded countries in the order every listing returns them
_SEEDED_NAMES = [
    "Australia",
    "Brazil",
    "Canada",
    "France",
    "Germany",
    "Italy",
    "Japan",
    "Kenya",
    "United Kingdom",
    "United States",
]


@pytest.fixture
def seeded_names():
    return list(_SEEDED_NAMES)


@pytest.fixture
def country_rows():
    """Column dicts for every seeded country (fallback set + extras)."""
    rows = [c.model_dump(mode="json", by_alias=False) for c in FALLBACK_COUNTRIES]
    return rows + [dict(row) for row in EXTRA_COUNTRIES]


@pytest_asyncio.fixture
async def db_engine(tmp_path, country_rows):
    """
    A real SQLite database with the countries table created and seeded.

    One file per test keeps tests independent without transaction tricks.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'countries.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all([Country(**row) for row in country_rows])
        await session.commit()
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
def repository(session_factory):
    return CountryRepository(session_factory, DatabaseState(connected=True))


@pytest_asyncio.fixture
async def broken_repository(tmp_path):
    """
    Gate says Connected, but every query fails: the database file lives in a
    directory that does not exist.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'countries.db'}"
    )
    yield CountryRepository(
        async_sessionmaker(engine, expire_on_commit=False),
        DatabaseState(connected=True),
    )
    await engine.dispose()


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def country_service(repository, memory_cache):
    return CountryService(repository, memory_cache, ttl_seconds=300)


@pytest.fixture
def fallback_service(session_factory, memory_cache):
    """Store gate Disconnected: every read must come from the fallback set."""
    repo = CountryRepository(session_factory, DatabaseState(connected=False))
    return CountryService(repo, memory_cache, ttl_seconds=300)


@asynccontextmanager
async def client_for(service):
    """HTTPX client talking to the app with `service` installed on app.state."""
    from app.main import app

    previous = getattr(app.state, "country_service", None)
    app.state.country_service = service
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.state.country_service = previous


@pytest_asyncio.fixture
async def test_client(country_service):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    async with client_for(country_service) as client:
        yield client


@pytest_asyncio.fixture
async def fallback_client(fallback_service):
    async with client_for(fallback_service) as client:
        yield client


@pytest_asyncio.fixture
async def broken_client(broken_repository, memory_cache):
    """Gate Connected but every query fails: exercises the 503 mapping."""
    async with client_for(CountryService(broken_repository, memory_cache)) as client:
        yield client
