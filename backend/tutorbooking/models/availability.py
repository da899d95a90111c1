# backend/tutorbooking/models/availability.py
"""
Availability slot model.

A slot is a window of time a tutor advertises as open, held or blocked.
Slots are independent of bookings: creating or cancelling a booking never
touches the roster, and the roster never blocks a booking.
"""

from enum import Enum
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import MAX_RECURRENCE_RULE_LENGTH
from ..database import Base


class SlotStatus(str, Enum):
    OPEN = "open"
    HELD = "held"
    BLOCKED = "blocked"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class AvailabilitySlot(Base):
    """
    Offered time on a tutor's roster.

    ``metadata_json`` maps to the ``metadata`` column; the attribute name
    avoids clashing with the declarative ``Base.metadata``.
    """

    __tablename__ = "tutor_availability_slots"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    tutor_id = Column(
        String(26), ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False
    )
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=SlotStatus.OPEN.value)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_rule = Column(String(MAX_RECURRENCE_RULE_LENGTH), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tutor = relationship("TutorProfile", back_populates="availability_slots")

    __table_args__ = (
        CheckConstraint("start_at < end_at", name="ck_tutor_availability_slots_window"),
        CheckConstraint(
            "status IN ('open', 'held', 'blocked')", name="ck_tutor_availability_slots_status"
        ),
        Index("ix_tutor_availability_slots_tutor_start", "tutor_id", "start_at"),
    )

    @property
    def slot_metadata(self) -> Dict[str, Any]:
        return dict(self.metadata_json or {})

    def __repr__(self) -> str:
        return f"<AvailabilitySlot {self.id} {self.start_at}-{self.end_at} {self.status}>"
