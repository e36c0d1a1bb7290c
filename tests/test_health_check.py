from unittest.mock import patch

import pytest

pytestmark = pytest.mark.integration


class TestHealthCheck:
    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        for service in ("database", "cache"):
            assert data["services"][service]["status"] == "up"
            assert "response_time_ms" in data["services"][service]

    def test_cache_down_reports_503(self, client):
        with patch("modules.core.views.cache.get", return_value=None):
            response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["services"]["cache"] == {"status": "down"}
        assert data["services"]["database"]["status"] == "up"

    def test_is_public(self, api_client):
        assert api_client.get("/health").status_code == 200
