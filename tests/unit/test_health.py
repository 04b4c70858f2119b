"""Tests for health check endpoints."""

import pytest
from fastapi.testclient import TestClient

from riskflow.api.routers import health
from riskflow.core.config import Settings


@pytest.fixture
def notifications_on(monkeypatch):
    monkeypatch.setattr(health, "get_settings", lambda: Settings(notifications_enabled=True))


@pytest.fixture
def redis_up(monkeypatch, notifications_on):
    monkeypatch.setattr(health, "check_redis", lambda: {"status": "healthy", "version": "7.2.0"})


@pytest.fixture
def redis_down(monkeypatch, notifications_on):
    monkeypatch.setattr(health, "check_redis", lambda: {"status": "unhealthy", "error": "Connection refused"})


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_basic_health_check(self, client: TestClient):
        """Test /health returns 200."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data

    def test_liveness_probe(self, client: TestClient):
        """Test /health/live returns 200."""
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_without_broker(self, client: TestClient):
        """Redis is not checked while notifications are disabled."""
        response = client.get("/health/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert set(data["checks"]) == {"database"}
        assert data["checks"]["database"]["dialect"] == "sqlite"

    def test_readiness_probe_healthy(self, client: TestClient, redis_up):
        """Test /health/ready when database and Redis are up."""
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert set(response.json()["checks"]) == {"database", "redis"}

    def test_readiness_probe_redis_down(self, client: TestClient, redis_down):
        """Test /health/ready returns 503 when Redis is unreachable."""
        response = client.get("/health/ready")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["failed"] == ["redis"]

    def test_health_detailed(self, client: TestClient, redis_up):
        """Test /health/detailed returns system info."""
        response = client.get("/health/detailed")
        assert response.status_code in [200, 503]
        data = response.json()
        assert set(data["checks"]) == {"database", "redis", "disk", "memory"}


class TestVerdict:
    """Overall status from individual checks."""

    @pytest.mark.parametrize("percent,expected", [
        (10.0, "healthy"),
        (85.0, "warning"),
        (94.9, "warning"),
        (95.0, "critical"),
    ])
    def test_usage_thresholds(self, percent, expected):
        assert health._usage_status(percent, 85, 95) == expected

    def test_warning_is_degraded(self):
        assert health._verdict({"disk": {"status": "warning"}}) == ("degraded", 200)

    def test_critical_is_unhealthy(self):
        checks = {"database": {"status": "healthy"}, "memory": {"status": "critical"}}
        assert health._verdict(checks) == ("unhealthy", 503)
