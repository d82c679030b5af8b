"""
Travel Planner Backend — Rate Limiter Tests
=============================================
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.exceptions import RateLimitExceededError
from app.middleware.rate_limit import RateLimitMiddleware, SlidingWindowLimiter


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowLimiter:

    def test_rejects_after_limit(self):
        limiter = SlidingWindowLimiter(max_requests=3, window_seconds=60, clock=FakeClock())
        for _ in range(3):
            limiter.hit("10.0.0.1")

        with pytest.raises(RateLimitExceededError) as exc_info:
            limiter.hit("10.0.0.1")

        assert exc_info.value.retry_after == 60
        assert exc_info.value.context["hits"] == 3

    def test_clients_are_independent(self):
        limiter = SlidingWindowLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        limiter.hit("10.0.0.1")
        limiter.hit("10.0.0.2")

        assert len(limiter) == 2

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowLimiter(max_requests=2, window_seconds=60, clock=clock)
        limiter.hit("a")
        clock.now = 30
        limiter.hit("a")

        clock.now = 45
        with pytest.raises(RateLimitExceededError) as exc_info:
            limiter.hit("a")
        assert exc_info.value.retry_after == 15

        # The first stamp has left the window
        clock.now = 60
        limiter.hit("a")


def build_app(limiter):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=limiter)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimitMiddleware:

    def test_injected_limiter_is_used_even_when_empty(self):
        limiter = SlidingWindowLimiter(max_requests=2, window_seconds=120)
        assert len(limiter) == 0

        middleware = RateLimitMiddleware(FastAPI(), limiter=limiter)

        assert middleware.limiter is limiter
        assert middleware.limiter.max_requests == 2

    @pytest.mark.asyncio
    async def test_429_with_retry_after(self):
        app = build_app(SlidingWindowLimiter(max_requests=2, window_seconds=120))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200
            response = await client.get("/ping")

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) >= 1
        body = response.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["details"]["retry_after"] == int(response.headers["Retry-After"])

    @pytest.mark.asyncio
    async def test_health_is_exempt(self):
        app = build_app(SlidingWindowLimiter(max_requests=1, window_seconds=120))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            statuses = [(await client.get("/health")).status_code for _ in range(3)]

        assert statuses == [200, 200, 200]
