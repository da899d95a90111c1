"""HTTP surface of /api/v1/instructor/tutor-bookings."""

from helpers import at, iso
import pytest

from tutorbooking.models.booking import TutorBooking

BASE = "/api/v1/instructor/tutor-bookings"


def _body(**overrides):
    body = {
        "learner_email": "ada@example.com",
        "learner_first_name": "Ada",
        "scheduled_start": iso(at(10)),
        "scheduled_end": iso(at(11)),
    }
    body.update(overrides)
    return body


@pytest.fixture
def created(client, auth_headers):
    response = client.post(BASE, json=_body(), headers=auth_headers)
    assert response.status_code == 201
    return response.json()


class TestAuthentication:
    def test_missing_header_is_401_envelope(self, client, tutor_profile):
        response = client.get(BASE)

        assert response.status_code == 401
        body = response.json()
        assert body["status"] == 401
        assert body["code"] == "NOT_AUTHENTICATED"
        assert body["message"] == "Authentication required"
        assert response.headers["X-Request-ID"]

    def test_user_without_profile_is_404(self, client, tutor_profile):
        response = client.get(BASE, headers={"X-Instructor-Id": "01HZZZZZZZZZZZZZZZZZZZZZZZ"})

        assert response.status_code == 404
        assert response.json()["code"] == "TUTOR_PROFILE_NOT_FOUND"

    def test_user_without_profile_is_404_even_with_bad_status(self, client, tutor_profile):
        response = client.post(
            BASE, json=_body(status="bogus"), headers={"X-Instructor-Id": "nobody"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "TUTOR_PROFILE_NOT_FOUND"


class TestCreateRoute:
    def test_create_returns_booking(self, created, tutor_profile):
        assert created["status"] == "confirmed"
        assert created["tutor_id"] == tutor_profile.id
        assert created["duration_minutes"] == 60
        assert created["hourly_rate_amount"] == 10000
        assert created["learner"]["email"] == "ada@example.com"
        assert created["learner"]["first_name"] == "Ada"
        assert created["scheduled_start"].startswith("2025-03-02T10:00:00")
        assert created["metadata"]["source"] == "instructor-dashboard"

    def test_overlap_is_409_envelope(self, client, auth_headers, created):
        response = client.post(
            BASE,
            json=_body(scheduled_start=iso(at(10, 30)), scheduled_end=iso(at(11, 30))),
            headers=auth_headers,
        )

        assert response.status_code == 409
        body = response.json()
        assert body["status"] == 409
        assert body["code"] == "BOOKING_CONFLICT"
        assert body["details"]["conflicting_public_ids"] == [created["public_id"]]

    def test_business_validation_is_422_with_code(self, client, auth_headers, tutor_profile):
        response = client.post(
            BASE,
            json=_body(scheduled_start=iso(at(11)), scheduled_end=iso(at(10))),
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_TIME_RANGE"

    def test_schema_validation_is_422_envelope(self, client, auth_headers, tutor_profile):
        response = client.post(
            BASE,
            json={"learner_email": "ada@example.com", "unexpected": True},
            headers=auth_headers,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = {tuple(error["loc"]) for error in body["details"]["errors"]}
        assert ("body", "scheduled_start") in fields
        assert ("body", "unexpected") in fields


class TestUpdateRoute:
    def test_patch_status(self, client, auth_headers, created):
        response = client.patch(
            f"{BASE}/{created['public_id']}", json={"status": "completed"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["completed_at"] is not None

    def test_patch_learner_email_returns_new_learner(self, client, auth_headers, created):
        response = client.patch(
            f"{BASE}/{created['public_id']}",
            json={"learner_email": "grace@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["learner"]["email"] == "grace@example.com"

        listed = client.get(BASE, params={"status": "all"}, headers=auth_headers).json()
        assert listed["items"][0]["learner"]["email"] == "grace@example.com"

    def test_invalid_transition(self, client, auth_headers, created):
        client.patch(f"{BASE}/{created['public_id']}", json={"status": "completed"}, headers=auth_headers)

        response = client.patch(
            f"{BASE}/{created['public_id']}", json={"status": "confirmed"}, headers=auth_headers
        )

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "INVALID_STATUS_TRANSITION"
        assert body["details"] == {"current_status": "completed", "requested_status": "confirmed"}

    def test_unknown_booking(self, client, auth_headers, tutor_profile):
        response = client.patch(f"{BASE}/missing", json={"topic": "x"}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "BOOKING_NOT_FOUND"


class TestDeleteRoute:
    def test_cancel(self, client, auth_headers, created):
        response = client.delete(
            f"{BASE}/{created['public_id']}", params={"reason": "Sick"}, headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "cancelled"
        assert body["metadata"]["cancellationReason"] == "Sick"

    def test_hard_delete_returns_null(self, client, auth_headers, created, db):
        response = client.delete(
            f"{BASE}/{created['public_id']}", params={"hard_delete": "true"}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() is None
        assert db.query(TutorBooking).count() == 0


class TestListRoute:
    def test_list_with_stats(self, client, auth_headers, created):
        client.post(
            BASE,
            json=_body(scheduled_start=iso(at(12)), scheduled_end=iso(at(13, 30))),
            headers=auth_headers,
        )

        response = client.get(BASE, params={"status": "all", "per_page": 1}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 1
        assert body["items"][0]["scheduled_start"].startswith("2025-03-02T12:00:00")
        assert body["pagination"] == {"page": 1, "per_page": 1, "total": 2, "total_pages": 2}
        assert body["stats"]["total"] == 2
        assert body["stats"]["revenue_minor"] == 25000

    def test_per_page_above_limit_is_rejected(self, client, auth_headers, tutor_profile):
        response = client.get(BASE, params={"per_page": 1000}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
