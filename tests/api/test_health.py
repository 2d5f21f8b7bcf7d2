"""Tests for health endpoints."""

from fastapi.testclient import TestClient


class TestHealth:
    """Tests for health and readiness checks."""

    def test_health(self, client: TestClient) -> None:
        """Health returns service name and version."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "storefront-api"
        assert data["version"]

    def test_ready_with_memory_backend(self, client: TestClient) -> None:
        """The in-memory backend is always ready."""
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "backend": "memory"}
