"""End-to-end tests for health endpoint."""

from fastapi.testclient import TestClient

from src.main import app


class TestHealthEndpoint:
    """Test health check endpoint."""

    def test_health_endpoint_returns_200(self, test_client):
        """Test GET /health returns 200."""
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_health_endpoint_needs_no_settings(self):
        """Health checks work even before settings are touched."""
        client = TestClient(app)
        response = client.get("/health")

        assert response.status_code == 200
