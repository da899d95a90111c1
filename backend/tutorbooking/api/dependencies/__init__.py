# backend/tutorbooking/api/dependencies/__init__.py
"""FastAPI dependencies shared by the v1 routers."""

from ...auth import get_current_instructor_id
from .database import get_db
from .services import get_availability_service, get_booking_service

__all__ = [
    "get_availability_service",
    "get_booking_service",
    "get_current_instructor_id",
    "get_db",
]
