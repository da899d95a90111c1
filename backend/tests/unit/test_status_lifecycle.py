"""Booking status normalization and the lifecycle transition table."""

import pytest

from tutorbooking.core.exceptions import InvalidStatusTransitionException, ValidationException
from tutorbooking.services.booking_service import (
    BOOKING_TRANSITIONS,
    assert_valid_booking_transition,
    normalize_booking_status,
)


class TestNormalizeBookingStatus:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("confirmed", "confirmed"),
            (" Requested ", "requested"),
            ("CANCELLED", "cancelled"),
            ("Completed", "completed"),
        ],
    )
    def test_known_values_are_canonicalized(self, raw, expected):
        assert normalize_booking_status(raw) == expected

    def test_unknown_value_is_rejected_by_default(self):
        with pytest.raises(ValidationException) as exc_info:
            normalize_booking_status("pending")

        assert exc_info.value.code == "INVALID_STATUS"
        assert exc_info.value.details["allowed"] == [
            "requested",
            "confirmed",
            "completed",
            "cancelled",
        ]

    def test_lenient_mode_coerces_to_requested(self):
        assert normalize_booking_status("pending", lenient=True) == "requested"

    def test_lenient_setting_is_read_at_call_time(self, lenient_status):
        assert normalize_booking_status("no-show") == "requested"

    def test_explicit_flag_overrides_setting(self, lenient_status):
        with pytest.raises(ValidationException):
            normalize_booking_status("no-show", lenient=False)


class TestTransitionTable:
    @pytest.mark.parametrize(
        "current, target",
        [
            ("requested", "confirmed"),
            ("requested", "cancelled"),
            ("confirmed", "completed"),
            ("confirmed", "cancelled"),
        ],
    )
    def test_allowed_edges(self, current, target):
        assert assert_valid_booking_transition(current, target) is True

    @pytest.mark.parametrize("status", list(BOOKING_TRANSITIONS))
    def test_same_status_is_a_no_op(self, status):
        assert assert_valid_booking_transition(status, status) is False

    @pytest.mark.parametrize(
        "current, target",
        [
            ("requested", "completed"),
            ("confirmed", "requested"),
            ("completed", "confirmed"),
            ("completed", "cancelled"),
            ("cancelled", "confirmed"),
            ("cancelled", "requested"),
        ],
    )
    def test_forbidden_edges(self, current, target):
        with pytest.raises(InvalidStatusTransitionException) as exc_info:
            assert_valid_booking_transition(current, target)

        assert exc_info.value.code == "INVALID_STATUS_TRANSITION"
        assert exc_info.value.details == {"current_status": current, "requested_status": target}

    def test_terminal_message_names_the_status(self):
        with pytest.raises(InvalidStatusTransitionException, match="terminal status: completed"):
            assert_valid_booking_transition("completed", "cancelled")

    def test_terminal_states_have_no_exits(self):
        assert BOOKING_TRANSITIONS["completed"] == frozenset()
        assert BOOKING_TRANSITIONS["cancelled"] == frozenset()
