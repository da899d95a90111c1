# backend/tutorbooking/schemas/booking.py
"""
Booking request/response schemas.

Request models only check shapes and lengths; business rules (window
ordering, non-negative rates, lifecycle transitions) are enforced by the
booking service so they surface with domain error codes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from ..core.constants import MAX_MEETING_URL_LENGTH
from .base import StandardizedModel, StrictRequestModel, as_utc
from .base_responses import PaginationMeta


class TutorBookingCreate(StrictRequestModel):
    learner_email: Optional[str] = Field(default=None, max_length=255)
    learner_first_name: Optional[str] = Field(default=None, max_length=100)
    learner_last_name: Optional[str] = Field(default=None, max_length=100)
    scheduled_start: datetime
    scheduled_end: datetime
    duration_minutes: Optional[int] = None
    hourly_rate_amount: Optional[int] = Field(default=None, description="Minor currency units")
    hourly_rate_currency: Optional[str] = Field(default=None, max_length=3)
    status: Optional[str] = None
    meeting_url: Optional[str] = Field(default=None, max_length=MAX_MEETING_URL_LENGTH)
    topic: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "learner_email": "ada@example.com",
                "learner_first_name": "Ada",
                "scheduled_start": "2025-03-01T10:00:00Z",
                "scheduled_end": "2025-03-01T11:00:00Z",
                "hourly_rate_amount": 10000,
                "hourly_rate_currency": "USD",
            }
        },
    )


class TutorBookingUpdate(StrictRequestModel):
    """Partial update; only fields present in the request are applied."""

    learner_email: Optional[str] = Field(default=None, max_length=255)
    learner_first_name: Optional[str] = Field(default=None, max_length=100)
    learner_last_name: Optional[str] = Field(default=None, max_length=100)
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    hourly_rate_amount: Optional[int] = None
    hourly_rate_currency: Optional[str] = Field(default=None, max_length=3)
    status: Optional[str] = None
    meeting_url: Optional[str] = Field(default=None, max_length=MAX_MEETING_URL_LENGTH)
    topic: Optional[str] = Field(default=None, max_length=200)
    notes: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class LearnerSummary(StandardizedModel):
    id: str
    email: str
    first_name: str
    last_name: Optional[str] = None


class TutorBookingResponse(StandardizedModel):
    id: str
    public_id: str
    tutor_id: str
    learner: Optional[LearnerSummary] = None
    scheduled_start: datetime
    scheduled_end: datetime
    duration_minutes: int
    hourly_rate_amount: int
    hourly_rate_currency: str
    status: str
    requested_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    meeting_url: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking: Any) -> "TutorBookingResponse":
        """Create TutorBookingResponse from a TutorBooking ORM model."""
        learner = getattr(booking, "learner", None)
        return cls(
            id=booking.id,
            public_id=booking.public_id,
            tutor_id=booking.tutor_id,
            learner=(
                LearnerSummary(
                    id=learner.id,
                    email=learner.email,
                    first_name=learner.first_name,
                    last_name=learner.last_name,
                )
                if learner is not None
                else None
            ),
            scheduled_start=as_utc(booking.scheduled_start),
            scheduled_end=as_utc(booking.scheduled_end),
            duration_minutes=booking.duration_minutes,
            hourly_rate_amount=booking.hourly_rate_amount,
            hourly_rate_currency=booking.hourly_rate_currency,
            status=booking.status,
            requested_at=as_utc(booking.requested_at),
            confirmed_at=as_utc(booking.confirmed_at),
            cancelled_at=as_utc(booking.cancelled_at),
            completed_at=as_utc(booking.completed_at),
            meeting_url=booking.meeting_url,
            metadata=dict(booking.metadata_json or {}),
            created_at=as_utc(booking.created_at),
            updated_at=as_utc(booking.updated_at),
        )


class BookingStatsResponse(StandardizedModel):
    total: int = 0
    upcoming: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    revenue_minor: int = 0


class TutorBookingListResponse(StandardizedModel):
    items: List[TutorBookingResponse]
    pagination: PaginationMeta
    stats: BookingStatsResponse
