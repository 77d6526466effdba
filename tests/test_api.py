"""
Tests for the FastAPI endpoints.

Runs the app against an in-memory service so no network or disk is touched.
"""

import pytest
from fastapi.testclient import TestClient

from weatherscape.app import main
from weatherscape.generation import GenerationError, ImageGenerator
from weatherscape.services import BackgroundService
from weatherscape.storage import (
    CacheOrchestrator,
    CircuitBreaker,
    LocalCache,
    MemoryStore,
    MockRemoteStore,
    RemoteCache,
)


class CountingGenerator(ImageGenerator):
    def __init__(self, fail: bool = False):
        self.calls = 0
        self.fail = fail

    async def generate(self, city, condition, is_day):
        self.calls += 1
        if self.fail:
            raise GenerationError("fal.ai request failed")
        return f"https://cdn.test/{city.lower()}-{self.calls}.png"


def build_service(generator) -> BackgroundService:
    local = LocalCache(MemoryStore())
    remote = RemoteCache(MockRemoteStore(), CircuitBreaker(name="remote:memory"), local_cache=local)
    return BackgroundService(CacheOrchestrator(local, remote, generator))


@pytest.fixture
def generator():
    return CountingGenerator()


@pytest.fixture
def client(monkeypatch, generator):
    monkeypatch.setattr(main, "background_service", build_service(generator))
    with TestClient(main.app) as test_client:
        yield test_client


class TestHealthEndpoints:
    """Test service metadata endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health_reports_breaker(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["remote"]["name"] == "remote:memory"
        assert body["remote"]["open"] is False

    def test_service_unavailable(self, monkeypatch):
        monkeypatch.setattr(main, "background_service", None)
        monkeypatch.setattr(main, "init_background_service", lambda: None)

        with TestClient(main.app) as test_client:
            assert test_client.get("/api/background", params={"city": "Tokyo", "condition": "Rain"}).status_code == 503
            assert test_client.get("/health").json()["status"] == "degraded"


class TestBackgroundEndpoints:
    """Test resolving and invalidating backgrounds."""

    def test_get_background_generates_once(self, client, generator):
        params = {"city": "Tokyo", "condition": "Rain", "is_day": "false"}

        first = client.get("/api/background", params=params)
        second = client.get("/api/background", params=params)

        assert first.status_code == 200
        body = first.json()
        assert body["cache_key"] == "tokyo_rain_night"
        assert body["image_ref"] == "https://cdn.test/tokyo-1.png"
        assert body["fallback"] == ["#1A1A2E", "#16213E", "#0F3460"]
        assert second.json()["image_ref"] == body["image_ref"]
        assert generator.calls == 1

    def test_missing_city_rejected(self, client):
        response = client.get("/api/background", params={"condition": "Rain"})

        assert response.status_code == 422

    def test_generation_failure_returns_fallback(self, monkeypatch):
        monkeypatch.setattr(main, "background_service", build_service(CountingGenerator(fail=True)))

        with TestClient(main.app) as test_client:
            response = test_client.get("/api/background", params={"city": "Oslo", "condition": "Snow"})

        assert response.status_code == 502
        assert response.json()["detail"]["fallback"] == ["#83a4d4", "#b6fbff", "#a8d5ff"]

    def test_unexpected_generator_error_returns_fallback(self, monkeypatch):
        class CrashingGenerator(ImageGenerator):
            async def generate(self, city, condition, is_day):
                raise KeyError("images")

        monkeypatch.setattr(main, "background_service", build_service(CrashingGenerator()))

        with TestClient(main.app) as test_client:
            response = test_client.get("/api/background", params={"city": "Oslo", "condition": "Snow"})

        assert response.status_code == 502
        assert "fallback" in response.json()["detail"]

    def test_invalidate_then_status(self, client):
        payload = {"city": "Oslo", "condition": "Snow", "is_day": True}
        client.get("/api/background", params={"city": "Oslo", "condition": "Snow"})

        before = client.get("/api/cache/status", params={"city": "Oslo", "condition": "Snow"}).json()
        invalidated = client.post("/api/background/invalidate", json=payload).json()
        after = client.get("/api/cache/status", params={"city": "Oslo", "condition": "Snow"}).json()

        assert before["cached_locally"] is True
        assert before["memoized"] is True
        assert invalidated == {"cache_key": "oslo_snow_day", "invalidated": True, "image_ref": None}
        assert after["cached_locally"] is False
        assert after["memoized"] is False

    def test_regenerate(self, client, generator):
        client.get("/api/background", params={"city": "Oslo", "condition": "Snow"})
        main.background_service.orchestrator.remote_cache.breaker.available = False

        body = client.post(
            "/api/background/regenerate", json={"city": "Oslo", "condition": "Snow"}
        ).json()

        assert body["image_ref"] == "https://cdn.test/oslo-2.png"
        assert generator.calls == 2

    def test_fallback_endpoint(self, client):
        body = client.get("/api/background/fallback", params={"condition": "Fog", "is_day": "false"}).json()

        assert body["colors"] == ["#2C3E50", "#34495E", "#5D6D7E"]
