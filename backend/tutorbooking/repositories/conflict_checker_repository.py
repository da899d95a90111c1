# backend/tutorbooking/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository.

Works exclusively with booking data: roster slots never participate in
conflict detection. Only non-cancelled bookings occupy a tutor's time.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import to_storage
from ..models.booking import BookingStatus, TutorBooking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConflictCheckerRepository(BaseRepository[TutorBooking]):
    """Repository for conflict checking data access."""

    def __init__(self, db: Session):
        super().__init__(db, TutorBooking)
        self.logger = logging.getLogger(__name__)

    def get_overlapping_bookings(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[TutorBooking]:
        """
        Non-cancelled bookings of ``tutor_id`` whose half-open window
        intersects ``[start, end)``.

        Args:
            tutor_id: Tutor profile to check
            start: Candidate start (inclusive)
            end: Candidate end (exclusive)
            exclude_booking_id: Booking to leave out (the one being updated)

        Returns:
            Overlapping bookings ordered by start time
        """
        try:
            query = self.db.query(TutorBooking).filter(
                TutorBooking.tutor_id == tutor_id,
                TutorBooking.status != BookingStatus.CANCELLED.value,
                TutorBooking.scheduled_start < to_storage(end),
                TutorBooking.scheduled_end > to_storage(start),
            )
            if exclude_booking_id:
                query = query.filter(TutorBooking.id != exclude_booking_id)
            return query.order_by(TutorBooking.scheduled_start.asc()).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}") from e
