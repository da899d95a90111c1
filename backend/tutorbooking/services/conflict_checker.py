# backend/tutorbooking/services/conflict_checker.py
"""
Conflict Checker Service.

Detects overlaps between a candidate booking window and a tutor's
existing non-cancelled bookings. Windows are half-open, so a booking
ending at 11:00 and one starting at 11:00 do not conflict.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.timezone_utils import ensure_utc
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def intervals_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """True when [start_a, end_a) and [start_b, end_b) share any instant."""
    return ensure_utc(start_a) < ensure_utc(end_b) and ensure_utc(start_b) < ensure_utc(end_a)


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts.

    The overlap predicate is pushed down to the database and re-checked
    here, so rows the store returns loosely (timezone handling, inclusive
    comparisons on some backends) never produce a false conflict.
    """

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    @BaseService.measure_operation("check_booking_conflicts")
    def check_booking_conflicts(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List the tutor's bookings that collide with ``[start, end)``.

        Args:
            tutor_id: Tutor profile to check
            start: Candidate start
            end: Candidate end
            exclude_booking_id: Booking id to ignore (the booking being edited)

        Returns:
            One dict per conflicting booking
        """
        candidates = self.repository.get_overlapping_bookings(
            tutor_id, start, end, exclude_booking_id
        )

        conflicts = []
        for booking in candidates:
            if booking.id == exclude_booking_id:
                continue
            if intervals_overlap(start, end, booking.scheduled_start, booking.scheduled_end):
                conflicts.append(
                    {
                        "booking_id": booking.id,
                        "public_id": booking.public_id,
                        "scheduled_start": ensure_utc(booking.scheduled_start).isoformat(),
                        "scheduled_end": ensure_utc(booking.scheduled_end).isoformat(),
                        "status": booking.status,
                    }
                )

        if conflicts:
            self.logger.warning(
                f"Found {len(conflicts)} booking conflicts for tutor {tutor_id} "
                f"between {ensure_utc(start).isoformat()} and {ensure_utc(end).isoformat()}"
            )

        return conflicts

    def has_conflict(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return bool(self.check_booking_conflicts(tutor_id, start, end, exclude_booking_id))
