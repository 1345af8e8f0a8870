"""
Smoke tests for the main blueprint and the application-wide handlers.

These verify that the application starts up correctly, the health check
responds and errors use the JSON envelope.
"""

import os


class TestHealthCheck:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self, client):
        """The health check should report a reachable database."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "database": "connected"}


class TestImages:
    def test_serves_uploaded_file(self, app, client):
        folder = app.config["UPLOAD_FOLDER"]
        os.makedirs(folder, exist_ok=True)
        with open(os.path.join(folder, "abc123.png"), "wb") as handle:
            handle.write(b"png-bytes")

        response = client.get("/images/abc123.png")
        assert response.status_code == 200
        assert response.data == b"png-bytes"

    def test_unknown_image_is_404(self, client):
        response = client.get("/images/missing.png")
        assert response.status_code == 404
        assert response.get_json()["error"]["kind"] == "not_found"


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        response = client.get("/no-such-route")
        assert response.status_code == 404
        assert response.get_json()["error"]["kind"] == "not_found"

    def test_method_not_allowed(self, client):
        response = client.put("/health")
        assert response.status_code == 405
        assert response.get_json()["error"]["kind"] == "method_not_allowed"


class TestCors:
    def test_allowed_origin_gets_headers(self, client):
        response = client.get("/health", headers={"Origin": "https://app.example"})
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_no_origin_no_headers(self, client):
        response = client.get("/health")
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_preflight_is_answered_without_a_token(self, client):
        response = client.options(
            "/opportunities/byUser",
            headers={
                "Origin": "https://app.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "POST" in response.headers["Access-Control-Allow-Methods"]
        allowed = response.headers["Access-Control-Allow-Headers"].lower()
        assert "authorization" in allowed
        assert "content-type" in allowed
