"""Mapping of database race failures onto booking conflicts."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from tutorbooking.core.exceptions import BookingConflictException, ServiceException
from tutorbooking.services.booking_service import (
    CONCURRENT_CONFLICT_MESSAGE,
    EXCLUSION_CONSTRAINT_NAME,
    TutorBookingService,
    is_concurrent_booking_error,
)


class FakeDriverError(Exception):
    """Stand-in for a psycopg error carrying a SQLSTATE."""

    def __init__(self, message="", pgcode=None, constraint_name=None):
        super().__init__(message)
        self.pgcode = pgcode
        self.diag = MagicMock(constraint_name=constraint_name)


def _operational(pgcode=None, message="could not serialize access"):
    return OperationalError("UPDATE tutor_bookings ...", {}, FakeDriverError(message, pgcode=pgcode))


@pytest.fixture
def service():
    return TutorBookingService(
        MagicMock(),
        repository=MagicMock(),
        conflict_checker=MagicMock(),
        identity_resolver=MagicMock(),
        stats_aggregator=MagicMock(),
    )


class TestIsConcurrentBookingError:
    @pytest.mark.parametrize("pgcode", ["40001", "40P01", "23P01"])
    def test_race_sqlstates(self, pgcode):
        assert is_concurrent_booking_error(_operational(pgcode))

    def test_exclusion_constraint_by_name(self):
        orig = FakeDriverError("conflicting key value", constraint_name=EXCLUSION_CONSTRAINT_NAME)
        assert is_concurrent_booking_error(IntegrityError("INSERT ...", {}, orig))

    def test_deadlock_message_without_sqlstate(self):
        assert is_concurrent_booking_error(_operational(message="deadlock detected"))

    def test_unrelated_integrity_error(self):
        orig = FakeDriverError("duplicate key value", pgcode="23505", constraint_name="users_email_key")
        assert not is_concurrent_booking_error(IntegrityError("INSERT ...", {}, orig))

    def test_walks_the_cause_chain(self):
        wrapper = RuntimeError("transaction failed")
        wrapper.__cause__ = _operational("40001")
        assert is_concurrent_booking_error(wrapper)

    def test_plain_exception(self):
        assert not is_concurrent_booking_error(ValueError("nope"))


class TestTranslateDbError:
    def test_race_becomes_booking_conflict(self, service):
        translated = service._translate_db_error(_operational("40001"))

        assert isinstance(translated, BookingConflictException)
        assert translated.status_code == 409
        assert translated.message == CONCURRENT_CONFLICT_MESSAGE
        assert translated.details["reason"] == "concurrent_write"
        assert translated.details["conflicting_bookings"] == []

    def test_other_failures_become_service_errors(self, service):
        orig = FakeDriverError("disk full", pgcode="53100")
        translated = service._translate_db_error(OperationalError("INSERT", {}, orig))

        assert isinstance(translated, ServiceException)
        assert translated.status_code == 500

    def test_transaction_rolls_back_and_raises_conflict(self, service):
        service.db.commit.side_effect = _operational("40001")

        with pytest.raises(BookingConflictException):
            with service.transaction():
                pass

        service.db.rollback.assert_called_once()
