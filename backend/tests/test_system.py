"""Health check, CORS and error envelope tests."""


class TestHealth:

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["database"]["status"] == "healthy"


class TestCors:

    def test_allowed_origin_is_echoed(self, client):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
        assert "Authorization" in resp.headers["Access-Control-Allow-Headers"]

    def test_unknown_origin_gets_no_cors_headers(self, client):
        resp = client.get("/api/health", headers={"Origin": "https://evil.example"})
        assert "Access-Control-Allow-Origin" not in resp.headers


class TestErrorEnvelope:

    def test_unknown_route(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        body = resp.get_json()
        assert body == {
            "success": False,
            "status": 404,
            "message": "Route not found",
            "timestamp": body["timestamp"],
        }

    def test_method_not_allowed(self, client):
        resp = client.patch("/api/products")
        assert resp.status_code == 405
        assert resp.get_json()["success"] is False

    def test_non_object_json_body(self, client, admin_headers):
        resp = client.post("/api/categories", json=["not", "an", "object"], headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Invalid JSON payload"

    def test_unexpected_error_is_generic_500(self, client, container, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(container.products, "list", explode)

        resp = client.get("/api/products")
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["message"] == "Internal Server Error"
        assert "errors" not in body
        assert "secret internals" not in resp.get_data(as_text=True)
