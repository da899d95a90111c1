# backend/tutorbooking/models/tutor_profile.py
"""
Tutor profile model.

One profile per instructor user. The profile is the scheduling identity
that slots and bookings hang off; it also carries the default hourly rate
applied to bookings that do not name one.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class TutorProfile(Base):
    __tablename__ = "tutor_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    display_name = Column(String(200), nullable=False)
    hourly_rate_amount = Column(Integer, nullable=False, default=0)
    hourly_rate_currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="tutor_profile")
    availability_slots = relationship(
        "AvailabilitySlot",
        back_populates="tutor",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    bookings = relationship("TutorBooking", back_populates="tutor", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("hourly_rate_amount >= 0", name="ck_tutor_profiles_rate_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<TutorProfile {self.id} user={self.user_id}>"
