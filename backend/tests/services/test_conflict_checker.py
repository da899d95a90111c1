"""Conflict detection against stored bookings."""

from helpers import at
import pytest

from tutorbooking.schemas.booking import TutorBookingCreate
from tutorbooking.services.conflict_checker import ConflictChecker


@pytest.fixture
def checker(db):
    return ConflictChecker(db)


@pytest.fixture
def booking(booking_service, tutor_user_id, booking_payload):
    return booking_service.create_booking(tutor_user_id, TutorBookingCreate(**booking_payload()))


class TestConflictChecker:
    def test_reports_overlapping_booking(self, checker, booking, tutor_profile):
        conflicts = checker.check_booking_conflicts(tutor_profile.id, at(10, 30), at(11, 30))

        assert len(conflicts) == 1
        assert conflicts[0]["public_id"] == booking.public_id
        assert conflicts[0]["booking_id"] == booking.id
        assert conflicts[0]["scheduled_start"] == "2025-03-02T10:00:00+00:00"
        assert conflicts[0]["scheduled_end"] == "2025-03-02T11:00:00+00:00"

    def test_boundaries_are_half_open(self, checker, booking, tutor_profile):
        assert not checker.has_conflict(tutor_profile.id, at(11), at(12))
        assert not checker.has_conflict(tutor_profile.id, at(9), at(10))
        assert checker.has_conflict(tutor_profile.id, at(9), at(10, 1))

    def test_excluded_booking_is_ignored(self, checker, booking, tutor_profile):
        assert not checker.has_conflict(
            tutor_profile.id, at(10), at(11), exclude_booking_id=booking.id
        )

    def test_cancelled_bookings_never_conflict(
        self, checker, booking, booking_service, tutor_user_id, tutor_profile
    ):
        booking_service.cancel_booking(tutor_user_id, booking.public_id)
        assert not checker.has_conflict(tutor_profile.id, at(10), at(11))

    def test_scoped_to_tutor(self, checker, booking, other_tutor_profile):
        assert checker.check_booking_conflicts(other_tutor_profile.id, at(10), at(11)) == []
