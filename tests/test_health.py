"""
Travel Planner Backend — Health Endpoint Tests
================================================

The health route probes the engine configured by DATABASE_URL (a temporary
SQLite file under test) and pings the cache of the installed service.
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

from app.database import engine


@pytest_asyncio.fixture(autouse=True)
async def release_app_engine():
    """Pooled aiosqlite connections are bound to the test's event loop."""
    yield
    await engine.dispose()


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_when_live(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["cache"] == "available"
        assert body["mode"] == "live"
        assert body["version"] == "1.0.0"

    @pytest.mark.asyncio
    async def test_degraded_in_fallback_mode(self, fallback_client):
        response = await fallback_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["mode"] == "fallback"

    @pytest.mark.asyncio
    async def test_degraded_when_cache_down(self, test_client, memory_cache):
        with patch.object(memory_cache, "ping", AsyncMock(return_value=False)):
            response = await test_client.get("/health")

        assert response.json()["status"] == "degraded"
        assert response.json()["cache"] == "unavailable"
