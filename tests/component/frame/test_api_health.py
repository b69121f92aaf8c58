"""
Component Tests for Health and Service Descriptor
"""


class TestHealthEndpoint:
    """Tests for /health endpoint"""

    def test_health_check_success(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "frame_service"
        assert data["version"] == "1.0.0"
        assert data["dependencies"]["data_dir"] == "writable"
        assert data["dependencies"]["canvas"] == "configured"

    def test_health_includes_port(self, client):
        assert client.get("/health").json()["port"] == 3000


class TestServiceDescriptor:
    """Tests for GET /"""

    def test_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "frame_service"
        assert "GET /eink_pull" in data["endpoints"]
        assert "POST /upload" in data["endpoints"]
        assert "DELETE /photos" in data["endpoints"]

    def test_unknown_route(self, client):
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["status"] == 404
