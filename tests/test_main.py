"""Tests for main application endpoints"""


class TestRootEndpoint:
    """Test root endpoint functionality"""

    def test_root_endpoint_returns_200(self, client):
        response = client.get("/")
        assert response.status_code == 200

    def test_root_endpoint_contains_version(self, client):
        data = client.get("/").json()

        assert "version" in data
        assert "message" in data
        assert data["status"] == "running"

    def test_root_endpoint_shows_features(self, client):
        features = client.get("/").json()["features"]

        assert features["masking"] == "fal"
        assert features["inpainting_model"] == "fal-ai/flux-general/inpainting"
        assert features["database"] == "enabled"
        assert features["redis_cache"] == "disabled"


class TestHealthCheck:
    """Test health check endpoint"""

    def test_health_check_returns_200(self, client):
        assert client.get("/api/health").status_code == 200

    def test_health_check_includes_checks(self, client):
        data = client.get("/api/health").json()

        assert data["startup"]["required_services"] == {"fal": True, "database": True}
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["redis"]["status"] == "skipped"
        assert data["checks"]["fal_api"]["status"] == "skipped"
        assert "system" in data["checks"]
        assert "circuit_breaker" in data["checks"]

    def test_health_is_healthy_with_database(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"


class TestCORS:
    """Test CORS middleware configuration"""

    def test_cors_allows_configured_origin(self, client):
        response = client.get("/", headers={"Origin": "http://localhost:5173"})
        assert response.headers.get("access-control-allow-origin") == "http://localhost:5173"

    def test_cors_ignores_unknown_origin(self, client):
        response = client.get("/", headers={"Origin": "http://evil.test"})
        assert "access-control-allow-origin" not in response.headers


class TestUploadLimit:

    def test_oversized_request_is_413(self, client):
        response = client.post(
            "/api/tryon/scan",
            headers={"content-length": str(31 * 1024 * 1024)},
            content=b"x"
        )
        assert response.status_code == 413
        assert response.json()["error"] == "payload_too_large"
