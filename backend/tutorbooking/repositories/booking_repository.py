# backend/tutorbooking/repositories/booking_repository.py
"""
Tutor Booking Repository.

Handles data access for bookings: ownership-scoped lookups, the
paginated instructor listing, and the grouped statistics query that
backs the dashboard counters.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import BigInteger, and_, case, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import to_storage
from ..models.booking import BookingStatus, TutorBooking
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_CANCELLED = BookingStatus.CANCELLED.value
_COMPLETED = BookingStatus.COMPLETED.value


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class TutorBookingRepository(BaseRepository[TutorBooking]):
    def __init__(self, db: Session):
        super().__init__(db, TutorBooking)

    def get_for_tutor(self, public_id: str, tutor_id: str) -> Optional[TutorBooking]:
        """Booking by public id, only when it belongs to ``tutor_id``."""
        try:
            return (
                self.db.query(TutorBooking)
                .options(joinedload(TutorBooking.learner))
                .filter(TutorBooking.public_id == public_id, TutorBooking.tutor_id == tutor_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking {public_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve booking: {str(e)}") from e

    def _apply_search(self, query: Query, search: Optional[str]) -> Query:
        term = (search or "").strip()
        if not term:
            return query
        pattern = f"%{_escape_like(term.lower())}%"
        return query.join(User, User.id == TutorBooking.learner_id).filter(
            or_(
                func.lower(User.email).like(pattern, escape="\\"),
                func.lower(User.first_name).like(pattern, escape="\\"),
                func.lower(User.last_name).like(pattern, escape="\\"),
                func.lower(TutorBooking.public_id).like(pattern, escape="\\"),
            )
        )

    def list_for_tutor(
        self,
        tutor_id: str,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 25,
    ) -> Tuple[List[TutorBooking], int]:
        """One page of the tutor's bookings, most recent start first."""
        query = self.db.query(TutorBooking).filter(TutorBooking.tutor_id == tutor_id)
        if status:
            query = query.filter(TutorBooking.status == status)
        query = self._apply_search(query, search)
        query = query.options(joinedload(TutorBooking.learner)).order_by(
            TutorBooking.scheduled_start.desc(), TutorBooking.id.desc()
        )
        return self._paginate(query, page, per_page)

    def get_stats_summary(
        self, tutor_id: str, now: datetime, search: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Dashboard counters for every booking of the tutor in one grouped query.

        Classification relative to ``now`` (first matching rule wins):
        cancelled status; completed status or ended before now; started at
        or before now; otherwise upcoming. Revenue sums
        round-half-up(rate * minutes / 60) over non-cancelled bookings with
        a positive rate and duration.
        """
        now_utc = to_storage(now)
        status = TutorBooking.status
        start = TutorBooking.scheduled_start
        end = TutorBooking.scheduled_end

        bucket = case(
            (status == _CANCELLED, "cancelled"),
            (or_(status == _COMPLETED, end < now_utc), "completed"),
            (start <= now_utc, "in_progress"),
            else_="upcoming",
        )

        def _count(label: str):
            return func.coalesce(func.sum(case((bucket == label, 1), else_=0)), 0)

        accrued = (
            cast(TutorBooking.hourly_rate_amount, BigInteger) * TutorBooking.duration_minutes + 30
        ) // 60
        revenue = func.coalesce(
            func.sum(
                case(
                    (
                        and_(
                            status != _CANCELLED,
                            TutorBooking.hourly_rate_amount > 0,
                            TutorBooking.duration_minutes > 0,
                        ),
                        accrued,
                    ),
                    else_=0,
                )
            ),
            0,
        )

        query = self.db.query(
            func.count(TutorBooking.id).label("total"),
            _count("upcoming").label("upcoming"),
            _count("in_progress").label("in_progress"),
            _count("completed").label("completed"),
            _count("cancelled").label("cancelled"),
            revenue.label("revenue_minor"),
        ).select_from(TutorBooking).filter(TutorBooking.tutor_id == tutor_id)
        query = self._apply_search(query, search)

        try:
            row = query.one()
        except SQLAlchemyError as e:
            self.logger.error(f"Error computing booking stats for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to compute booking stats: {str(e)}") from e

        return {
            "total": int(row.total or 0),
            "upcoming": int(row.upcoming or 0),
            "in_progress": int(row.in_progress or 0),
            "completed": int(row.completed or 0),
            "cancelled": int(row.cancelled or 0),
            "revenue_minor": int(row.revenue_minor or 0),
        }
