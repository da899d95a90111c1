# backend/tutorbooking/repositories/__init__.py
"""Repository layer: data access only, no business rules, never commits."""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import TutorBookingRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .factory import RepositoryFactory
from .tutor_profile_repository import TutorProfileRepository
from .user_repository import UserRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "ConflictCheckerRepository",
    "IRepository",
    "RepositoryFactory",
    "TutorBookingRepository",
    "TutorProfileRepository",
    "UserRepository",
]
