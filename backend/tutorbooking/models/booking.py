# backend/tutorbooking/models/booking.py
"""
Tutor booking model.

A booking is a committed session between a tutor and a learner. It
carries its own schedule, rate snapshot and lifecycle timestamps so it
stays meaningful regardless of later roster or profile changes.

For a given tutor, no two non-cancelled bookings may overlap on the
half-open interval [scheduled_start, scheduled_end). The service layer
checks this before every write; on PostgreSQL an exclusion constraint
(see the Alembic migration) enforces it under concurrency as well.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import MAX_MEETING_URL_LENGTH
from ..core.timezone_utils import ensure_utc
from ..core.ulid_helper import generate_public_id
from ..database import Base


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    REQUESTED = "requested"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


# Column that records the instant a booking entered each status.
STATUS_TIMESTAMP_FIELDS = {
    BookingStatus.REQUESTED.value: "requested_at",
    BookingStatus.CONFIRMED.value: "confirmed_at",
    BookingStatus.COMPLETED.value: "completed_at",
    BookingStatus.CANCELLED.value: "cancelled_at",
}


class TutorBooking(Base):
    __tablename__ = "tutor_bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    public_id = Column(String(36), unique=True, nullable=False, index=True, default=generate_public_id)

    tutor_id = Column(String(26), ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False)
    learner_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)

    scheduled_start = Column(DateTime(timezone=True), nullable=False)
    scheduled_end = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    hourly_rate_amount = Column(Integer, nullable=False, default=0)
    hourly_rate_currency = Column(String(3), nullable=False, default="USD")

    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value, index=True)
    requested_at = Column(DateTime(timezone=True), nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    meeting_url = Column(String(MAX_MEETING_URL_LENGTH), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tutor = relationship("TutorProfile", back_populates="bookings")
    learner = relationship("User", foreign_keys=[learner_id])

    __table_args__ = (
        CheckConstraint("scheduled_start < scheduled_end", name="ck_tutor_bookings_window"),
        CheckConstraint("duration_minutes > 0", name="ck_tutor_bookings_duration_positive"),
        CheckConstraint("hourly_rate_amount >= 0", name="ck_tutor_bookings_rate_non_negative"),
        CheckConstraint(
            "status IN ('requested', 'confirmed', 'completed', 'cancelled')",
            name="ck_tutor_bookings_status",
        ),
        Index("ix_tutor_bookings_tutor_window", "tutor_id", "scheduled_start", "scheduled_end"),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED.value

    @property
    def effective_end(self) -> Optional[datetime]:
        """Scheduled end, or start plus duration when no end is recorded."""
        if self.scheduled_end is not None:
            return ensure_utc(self.scheduled_end)
        if self.scheduled_start is not None and self.duration_minutes:
            return ensure_utc(self.scheduled_start) + timedelta(minutes=self.duration_minutes)
        return None

    @property
    def booking_metadata(self) -> Dict[str, Any]:
        return dict(self.metadata_json or {})

    def __repr__(self) -> str:
        return (
            f"<TutorBooking {self.public_id} tutor={self.tutor_id} "
            f"{self.scheduled_start}-{self.scheduled_end} {self.status}>"
        )
