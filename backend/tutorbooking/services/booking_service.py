# backend/tutorbooking/services/booking_service.py
"""
Tutor Booking Service.

Owns the booking lifecycle for an authenticated instructor:
- Creating bookings (learner provisioning, rate defaults, conflict checks)
- Partial updates, including rescheduling and status transitions
- Cancellation and administrative hard deletion
- The paginated listing with dashboard statistics

Every write runs in a single transaction. On PostgreSQL that transaction
is SERIALIZABLE and backed by an exclusion constraint, so two concurrent
writers can never both commit overlapping bookings; the loser receives a
BookingConflictException.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.config import settings
from ..core.constants import CANCELLATION_REASON_KEY
from ..core.exceptions import (
    BookingConflictException,
    InvalidStatusTransitionException,
    NotFoundException,
    ValidationException,
)
from ..core.pagination import build_pagination, clamp_page, clamp_per_page
from ..core.timezone_utils import ensure_utc, minutes_between, to_storage
from ..database.session_utils import get_dialect_name
from ..models.booking import STATUS_TIMESTAMP_FIELDS, BookingStatus, TutorBooking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import TutorBookingRepository
from ..schemas.booking import TutorBookingCreate, TutorBookingUpdate
from .base import BaseService
from .booking_stats import BookingStatsAggregator
from .conflict_checker import ConflictChecker
from .identity_resolver import LearnerIdentityResolver
from .tutor_scoped import TutorScopedService

logger = logging.getLogger(__name__)

BOOKING_TRANSITIONS: Dict[str, frozenset[str]] = {
    BookingStatus.REQUESTED.value: frozenset(
        {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value}
    ),
    BookingStatus.CONFIRMED.value: frozenset(
        {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}
    ),
    BookingStatus.COMPLETED.value: frozenset(),
    BookingStatus.CANCELLED.value: frozenset(),
}

EXCLUSION_CONSTRAINT_NAME = "tutor_bookings_no_overlap_per_tutor"

# SQLSTATEs that mean a concurrent writer won the race for the tutor's time.
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"
EXCLUSION_VIOLATION = "23P01"
_CONFLICT_SQLSTATES = {SERIALIZATION_FAILURE, DEADLOCK_DETECTED, EXCLUSION_VIOLATION}

CONCURRENT_CONFLICT_MESSAGE = (
    "This time slot was booked by a concurrent request. Please refresh and try again."
)

_LEARNER_FIELDS = ("learner_email", "learner_first_name", "learner_last_name")


def normalize_booking_status(value: Optional[str], *, lenient: Optional[bool] = None) -> str:
    """
    Canonical lower-case status.

    Unknown values raise unless lenient mode is on, in which case they
    fall back to ``requested``.
    """
    normalized = (value or "").strip().lower()
    if normalized in BOOKING_TRANSITIONS:
        return normalized

    if settings.booking_lenient_status if lenient is None else lenient:
        logger.warning("Coercing unknown booking status %r to 'requested'", value)
        return BookingStatus.REQUESTED.value

    raise ValidationException(
        f"Invalid booking status: {value}",
        code="INVALID_STATUS",
        details={"status": value, "allowed": BookingStatus.values()},
    )


def assert_valid_booking_transition(current: str, target: str) -> bool:
    """
    Validate a lifecycle move.

    Returns False when ``target`` equals ``current`` (nothing to do) and
    True for an allowed transition.

    Raises:
        InvalidStatusTransitionException: the edge is not in BOOKING_TRANSITIONS
    """
    if current == target:
        return False
    if target not in BOOKING_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransitionException(current, target)
    return True


def _sqlstate(exc: BaseException) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _constraint_name(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None) if diag is not None else None
    if name:
        return str(name)
    return EXCLUSION_CONSTRAINT_NAME if EXCLUSION_CONSTRAINT_NAME in str(orig or exc) else ""


def is_concurrent_booking_error(exc: BaseException) -> bool:
    """True for serialization failures, deadlocks and overlap-constraint violations."""
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, DBAPIError):
            if _sqlstate(current) in _CONFLICT_SQLSTATES:
                return True
            if _constraint_name(current) == EXCLUSION_CONSTRAINT_NAME:
                return True
            if "deadlock detected" in str(current).lower():
                return True
        current = current.__cause__
    return False


class TutorBookingService(TutorScopedService):
    """
    Service layer for instructor-managed tutor bookings.

    Collaborators are injectable for tests; by default they share this
    service's session so everything joins the same transaction.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[TutorBookingRepository] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        identity_resolver: Optional[LearnerIdentityResolver] = None,
        stats_aggregator: Optional[BookingStatsAggregator] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock=clock)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.identity_resolver = identity_resolver or LearnerIdentityResolver(db)
        self.stats_aggregator = stats_aggregator or BookingStatsAggregator(
            db, repository=self.repository, clock=self.clock
        )

    # Transaction plumbing

    def _begin(self) -> None:
        if not settings.booking_serializable_writes:
            return
        if get_dialect_name(self.db) != "postgresql" or self.db.in_transaction():
            return
        self.db.connection(execution_options={"isolation_level": "SERIALIZABLE"})

    def _translate_db_error(self, exc: Exception) -> Exception:
        if is_concurrent_booking_error(exc):
            prometheus_metrics.inc_booking_conflict("database")
            self.logger.warning(f"Concurrent booking write rejected: {exc}")
            return BookingConflictException(
                CONCURRENT_CONFLICT_MESSAGE,
                details={"reason": "concurrent_write"},
            )
        return super()._translate_db_error(exc)

    # Helpers

    def _require_booking(self, public_id: str, tutor_id: str) -> TutorBooking:
        booking = self.repository.get_for_tutor(public_id, tutor_id)
        if not booking:
            raise NotFoundException(
                "Booking not found",
                code="BOOKING_NOT_FOUND",
                details={"public_id": public_id},
            )
        return booking

    @staticmethod
    def _validate_window(start: datetime, end: datetime) -> None:
        if end <= start:
            raise ValidationException(
                "Booking end time must be after its start time",
                code="INVALID_TIME_RANGE",
                details={"scheduled_start": start.isoformat(), "scheduled_end": end.isoformat()},
            )

    @staticmethod
    def _validate_rate(amount: int) -> int:
        if amount < 0:
            raise ValidationException(
                "Hourly rate cannot be negative",
                code="INVALID_RATE",
                details={"hourly_rate_amount": amount},
            )
        return amount

    @staticmethod
    def _validate_duration(minutes: int) -> int:
        if minutes <= 0:
            raise ValidationException(
                "Booking duration must be greater than zero",
                code="INVALID_DURATION",
                details={"duration_minutes": minutes},
            )
        return minutes

    @staticmethod
    def _normalize_currency(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        normalized = value.strip().upper()
        if len(normalized) != 3 or not normalized.isalpha():
            raise ValidationException(
                "Currency must be a 3-letter ISO-4217 code",
                code="INVALID_CURRENCY",
                details={"hourly_rate_currency": value},
            )
        return normalized

    def _ensure_no_conflict(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        conflicts = self.conflict_checker.check_booking_conflicts(
            tutor_id, start, end, exclude_booking_id=exclude_booking_id
        )
        if conflicts:
            prometheus_metrics.inc_booking_conflict("check")
            raise BookingConflictException(
                conflicting_bookings=[
                    {key: value for key, value in conflict.items() if key != "booking_id"}
                    for conflict in conflicts
                ]
            )

    # Operations

    @BaseService.measure_operation("create_booking")
    def create_booking(self, tutor_user_id: str, booking_data: TutorBookingCreate) -> TutorBooking:
        """
        Create a booking for the authenticated tutor.

        Args:
            tutor_user_id: Authenticated instructor user id
            booking_data: Validated request payload

        Returns:
            The persisted booking

        Raises:
            NotFoundException: the user has no tutor profile
            ValidationException: bad window, rate, duration, status or email
            BookingConflictException: the window overlaps an active booking
        """
        start = ensure_utc(booking_data.scheduled_start)
        end = ensure_utc(booking_data.scheduled_end)

        with self.transaction():
            profile = self._require_tutor_profile(tutor_user_id)
            status = normalize_booking_status(
                booking_data.status or settings.default_booking_status
            )
            self._validate_window(start, end)

            if booking_data.hourly_rate_amount is not None:
                rate = self._validate_rate(booking_data.hourly_rate_amount)
            else:
                rate = profile.hourly_rate_amount or 0
            currency = (
                self._normalize_currency(booking_data.hourly_rate_currency)
                or profile.hourly_rate_currency
                or settings.default_currency
            )

            learner_id = self.identity_resolver.resolve_learner(
                booking_data.learner_email,
                booking_data.learner_first_name,
                booking_data.learner_last_name,
            )

            if booking_data.duration_minutes is not None:
                duration = self._validate_duration(booking_data.duration_minutes)
            else:
                duration = self._validate_duration(minutes_between(start, end))

            if status != BookingStatus.CANCELLED.value:
                self._ensure_no_conflict(profile.id, start, end)

            now = self.clock.now()
            timestamps = {"requested_at": now}
            timestamps[STATUS_TIMESTAMP_FIELDS[status]] = now

            metadata = {
                "topic": booking_data.topic or settings.default_booking_topic,
                "notes": booking_data.notes,
                "source": settings.default_booking_source,
                **(booking_data.metadata or {}),
            }

            booking = self.repository.create(
                tutor_id=profile.id,
                learner_id=learner_id,
                scheduled_start=to_storage(start),
                scheduled_end=to_storage(end),
                duration_minutes=duration,
                hourly_rate_amount=rate,
                hourly_rate_currency=currency,
                status=status,
                meeting_url=booking_data.meeting_url,
                metadata_json=metadata,
                **timestamps,
            )

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            public_id=booking.public_id,
            tutor_id=profile.id,
            status=status,
        )
        return booking

    @BaseService.measure_operation("update_booking")
    def update_booking(
        self, tutor_user_id: str, public_id: str, update_data: TutorBookingUpdate
    ) -> TutorBooking:
        """
        Apply a partial update to one of the tutor's bookings.

        Rescheduling re-runs conflict detection (ignoring the booking
        itself); status changes go through the lifecycle table; learner
        contact changes re-resolve the learner identity.
        """
        changes = update_data.model_dump(exclude_unset=True)

        with self.transaction():
            profile = self._require_tutor_profile(tutor_user_id)
            booking = self._require_booking(public_id, profile.id)
            fields: Dict[str, Any] = {}

            current_start = ensure_utc(booking.scheduled_start)
            current_end = ensure_utc(booking.scheduled_end)
            start, end = current_start, current_end
            if changes.get("scheduled_start") is not None:
                start = ensure_utc(changes["scheduled_start"])
            if changes.get("scheduled_end") is not None:
                end = ensure_utc(changes["scheduled_end"])
            window_changed = start != current_start or end != current_end
            if window_changed:
                self._validate_window(start, end)
                fields["scheduled_start"] = to_storage(start)
                fields["scheduled_end"] = to_storage(end)

            if changes.get("duration_minutes") is not None:
                fields["duration_minutes"] = self._validate_duration(changes["duration_minutes"])
            elif window_changed:
                fields["duration_minutes"] = self._validate_duration(minutes_between(start, end))

            resulting_status = booking.status
            if changes.get("status") is not None:
                target = normalize_booking_status(changes["status"])
                if assert_valid_booking_transition(booking.status, target):
                    fields["status"] = target
                    fields[STATUS_TIMESTAMP_FIELDS[target]] = self.clock.now()
                    prometheus_metrics.inc_booking_transition(booking.status, target)
                    resulting_status = target

            if changes.get("hourly_rate_amount") is not None:
                fields["hourly_rate_amount"] = self._validate_rate(changes["hourly_rate_amount"])
            if changes.get("hourly_rate_currency") is not None:
                fields["hourly_rate_currency"] = self._normalize_currency(
                    changes["hourly_rate_currency"]
                )
            if "meeting_url" in changes:
                fields["meeting_url"] = changes["meeting_url"]

            metadata_updates: Dict[str, Any] = dict(changes.get("metadata") or {})
            for key in ("topic", "notes"):
                if key in changes:
                    metadata_updates[key] = changes[key]
            if metadata_updates:
                fields["metadata_json"] = {**booking.booking_metadata, **metadata_updates}

            if any(key in changes for key in _LEARNER_FIELDS):
                email = changes.get("learner_email") or booking.learner.email
                fields["learner_id"] = self.identity_resolver.resolve_learner(
                    email,
                    changes.get("learner_first_name"),
                    changes.get("learner_last_name"),
                )

            if window_changed and resulting_status != BookingStatus.CANCELLED.value:
                self._ensure_no_conflict(profile.id, start, end, exclude_booking_id=booking.id)

            if fields:
                booking = self.repository.apply_updates(booking, **fields)
            if "learner_id" in fields:
                self.db.refresh(booking, ["learner"])

        self.log_operation("update_booking", public_id=public_id, fields=sorted(fields))
        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self,
        tutor_user_id: str,
        public_id: str,
        hard_delete: bool = False,
        reason: Optional[str] = None,
    ) -> Optional[TutorBooking]:
        """
        Cancel a booking, or remove it outright.

        Args:
            tutor_user_id: Authenticated instructor user id
            public_id: Booking public id
            hard_delete: Physically delete instead of cancelling
            reason: Stored in metadata; defaults to the configured reason

        Returns:
            The cancelled booking, or None after a hard delete
        """
        with self.transaction():
            profile = self._require_tutor_profile(tutor_user_id)
            booking = self._require_booking(public_id, profile.id)

            if hard_delete:
                self.repository.delete_entity(booking)
                self.logger.warning(
                    "Booking hard-deleted",
                    extra={"public_id": public_id, "tutor_id": profile.id},
                )
                return None

            if booking.is_cancelled:
                return booking

            assert_valid_booking_transition(booking.status, BookingStatus.CANCELLED.value)
            prometheus_metrics.inc_booking_transition(booking.status, BookingStatus.CANCELLED.value)
            metadata = {
                **booking.booking_metadata,
                CANCELLATION_REASON_KEY: (reason or "").strip() or settings.default_cancellation_reason,
            }
            booking = self.repository.apply_updates(
                booking,
                status=BookingStatus.CANCELLED.value,
                cancelled_at=self.clock.now(),
                metadata_json=metadata,
            )

        self.log_operation("cancel_booking", public_id=public_id, tutor_id=profile.id)
        return booking

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        tutor_user_id: str,
        page: int = 1,
        per_page: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        One page of the tutor's bookings plus dashboard statistics.

        Statistics cover every booking of the tutor matching ``search``,
        regardless of the status filter or page.
        """
        profile = self._require_tutor_profile(tutor_user_id)
        status_filter = None
        if status and status.strip().lower() != "all":
            status_filter = normalize_booking_status(status)

        page = clamp_page(page)
        per_page = clamp_per_page(per_page)
        items, total = self.repository.list_for_tutor(
            profile.id,
            status=status_filter,
            search=search,
            page=page,
            per_page=per_page,
        )
        stats = self.stats_aggregator.summarize_for_tutor(profile.id, search=search)
        return {
            "items": items,
            "pagination": build_pagination(page, per_page, total),
            "stats": stats.to_dict(),
        }
