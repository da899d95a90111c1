# backend/tutorbooking/services/booking_stats.py
"""
Booking statistics for the instructor dashboard.

``compute_stats`` classifies an in-memory collection in a single pass.
The listing endpoint uses the repository's grouped query instead, which
applies the same rules inside the database across all of a tutor's
bookings.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.constants import MINUTES_PER_HOUR
from ..core.timezone_utils import ensure_utc
from ..models.booking import BookingStatus, TutorBooking
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import TutorBookingRepository
from .base import BaseService


@dataclass(frozen=True)
class BookingStats:
    total: int = 0
    upcoming: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    revenue_minor: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def accrued_revenue(hourly_rate_minor: int, duration_minutes: int) -> int:
    """round-half-up(rate * minutes / 60) in minor units."""
    amount = Decimal(hourly_rate_minor) * Decimal(duration_minutes) / Decimal(MINUTES_PER_HOUR)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def classify_booking(booking: Any, now: datetime) -> str:
    """Bucket name for one booking relative to ``now``."""
    if booking.status == BookingStatus.CANCELLED.value:
        return "cancelled"
    end = booking.effective_end
    if booking.status == BookingStatus.COMPLETED.value or (end is not None and end < now):
        return "completed"
    start = ensure_utc(booking.scheduled_start)
    if start is not None and start <= now:
        return "in_progress"
    return "upcoming"


class BookingStatsAggregator(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[TutorBookingRepository] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)

    def compute_stats(
        self, bookings: Iterable[TutorBooking], now: Optional[datetime] = None
    ) -> BookingStats:
        """
        Count bookings per bucket and total the accrued revenue.

        Cancelled bookings are counted but never earn revenue.
        """
        reference = ensure_utc(now) if now is not None else self.clock.now()
        counts = {"upcoming": 0, "in_progress": 0, "completed": 0, "cancelled": 0}
        revenue = 0
        total = 0

        for booking in bookings:
            total += 1
            counts[classify_booking(booking, reference)] += 1
            if booking.status == BookingStatus.CANCELLED.value:
                continue
            rate = booking.hourly_rate_amount or 0
            minutes = booking.duration_minutes or 0
            if rate > 0 and minutes > 0:
                revenue += accrued_revenue(rate, minutes)

        return BookingStats(total=total, revenue_minor=revenue, **counts)

    @BaseService.measure_operation("summarize_tutor_bookings")
    def summarize_for_tutor(
        self, tutor_id: str, search: Optional[str] = None, now: Optional[datetime] = None
    ) -> BookingStats:
        """Stats over every booking of the tutor, computed by the database."""
        reference = ensure_utc(now) if now is not None else self.clock.now()
        return BookingStats(**self.repository.get_stats_summary(tutor_id, reference, search))
