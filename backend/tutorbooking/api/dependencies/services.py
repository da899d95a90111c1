# backend/tutorbooking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each request gets fresh service instances bound to its own session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityRosterService
from ...services.booking_service import TutorBookingService
from .database import get_db


def get_booking_service(db: Session = Depends(get_db)) -> TutorBookingService:
    """Get an instance of the booking service."""
    return TutorBookingService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityRosterService:
    """Get an instance of the availability roster service."""
    return AvailabilityRosterService(db)
