"""Dashboard statistics classification and revenue arithmetic."""

from datetime import timedelta
from unittest.mock import MagicMock

from helpers import NOW, at
import pytest

from tutorbooking.core.clock import FixedClock
from tutorbooking.models.booking import TutorBooking
from tutorbooking.services.booking_stats import (
    BookingStats,
    BookingStatsAggregator,
    accrued_revenue,
    classify_booking,
)


def _booking(status, start, end, rate=10000, minutes=60):
    return TutorBooking(
        status=status,
        scheduled_start=start,
        scheduled_end=end,
        duration_minutes=minutes,
        hourly_rate_amount=rate,
        hourly_rate_currency="USD",
    )


@pytest.fixture
def aggregator():
    return BookingStatsAggregator(MagicMock(), repository=MagicMock(), clock=FixedClock(NOW))


class TestAccruedRevenue:
    def test_ninety_minutes_at_one_hundred_dollars(self):
        assert accrued_revenue(10000, 90) == 15000

    def test_rounds_half_up(self):
        # 1 * 30 / 60 = 0.5
        assert accrued_revenue(1, 30) == 1
        # 1 * 29 / 60 < 0.5
        assert accrued_revenue(1, 29) == 0

    def test_zero_rate(self):
        assert accrued_revenue(0, 120) == 0


class TestClassifyBooking:
    def test_future_booking_is_upcoming(self):
        assert classify_booking(_booking("confirmed", at(10), at(11)), NOW) == "upcoming"

    def test_started_booking_is_in_progress(self):
        booking = _booking("confirmed", NOW - timedelta(minutes=30), NOW + timedelta(minutes=30))
        assert classify_booking(booking, NOW) == "in_progress"

    def test_start_equal_to_now_is_in_progress(self):
        assert classify_booking(_booking("requested", NOW, NOW + timedelta(hours=1)), NOW) == "in_progress"

    def test_end_equal_to_now_is_not_yet_completed(self):
        booking = _booking("confirmed", NOW - timedelta(hours=1), NOW)
        assert classify_booking(booking, NOW) == "in_progress"

    def test_ended_booking_counts_as_completed(self):
        booking = _booking("confirmed", NOW - timedelta(hours=2), NOW - timedelta(hours=1))
        assert classify_booking(booking, NOW) == "completed"

    def test_completed_status_wins_over_schedule(self):
        assert classify_booking(_booking("completed", at(10), at(11)), NOW) == "completed"

    def test_cancelled_status_wins_over_everything(self):
        booking = _booking("cancelled", NOW - timedelta(hours=2), NOW - timedelta(hours=1))
        assert classify_booking(booking, NOW) == "cancelled"

    def test_missing_end_falls_back_to_duration(self):
        booking = _booking("confirmed", NOW - timedelta(hours=2), None, minutes=30)
        assert classify_booking(booking, NOW) == "completed"


class TestComputeStats:
    def test_empty_collection(self, aggregator):
        assert aggregator.compute_stats([]) == BookingStats()

    def test_buckets_and_revenue(self, aggregator):
        bookings = [
            _booking("confirmed", at(10), at(11, 30), minutes=90),
            _booking("confirmed", NOW - timedelta(minutes=15), NOW + timedelta(minutes=45)),
            _booking("requested", NOW - timedelta(days=1), NOW - timedelta(days=1, minutes=-60)),
            _booking("completed", at(14), at(15)),
            _booking("cancelled", at(16), at(17)),
        ]

        stats = aggregator.compute_stats(bookings)

        assert stats.total == 5
        assert stats.upcoming == 1
        assert stats.in_progress == 1
        assert stats.completed == 2
        assert stats.cancelled == 1
        # 15000 + 3 * 10000; cancelled bookings earn nothing
        assert stats.revenue_minor == 45000

    def test_explicit_now_overrides_clock(self, aggregator):
        booking = _booking("confirmed", at(10), at(11))
        stats = aggregator.compute_stats([booking], now=at(12))
        assert stats.completed == 1
        assert stats.upcoming == 0

    def test_to_dict_exposes_every_counter(self):
        assert BookingStats(total=2, revenue_minor=5).to_dict() == {
            "total": 2,
            "upcoming": 0,
            "in_progress": 0,
            "completed": 0,
            "cancelled": 0,
            "revenue_minor": 5,
        }
