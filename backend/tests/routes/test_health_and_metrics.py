"""Operational endpoints and cross-cutting middleware."""


class TestOperationalEndpoints:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "tutorbooking"

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        assert len(client.get("/health").headers["X-Request-ID"]) == 26

    def test_metrics_exposition(self, client):
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "tutorbooking_http_requests_total" in response.text

    def test_conflicts_are_counted(self, client, auth_headers):
        base = "/api/v1/instructor/tutor-bookings"
        body = {
            "learner_email": "ada@example.com",
            "scheduled_start": "2025-03-02T10:00:00Z",
            "scheduled_end": "2025-03-02T11:00:00Z",
        }
        client.post(base, json=body, headers=auth_headers)
        client.post(base, json=body, headers=auth_headers)

        metrics = client.get("/metrics").text
        assert 'tutorbooking_booking_conflicts_total{source="check"}' in metrics

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/v1/nope")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
        assert response.json()["status"] == 404
