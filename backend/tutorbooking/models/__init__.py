# backend/tutorbooking/models/__init__.py
"""
Database models for the tutor scheduling service.

Importing this package registers every mapper on ``Base.metadata``.
"""

from .availability import AvailabilitySlot, SlotStatus
from .booking import BookingStatus, TutorBooking
from .tutor_profile import TutorProfile
from .user import User

__all__ = [
    "AvailabilitySlot",
    "BookingStatus",
    "SlotStatus",
    "TutorBooking",
    "TutorProfile",
    "User",
]
