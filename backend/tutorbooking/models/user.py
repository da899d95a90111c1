# backend/tutorbooking/models/user.py
"""
User model for the tutor scheduling service.

Users form the shared directory behind both tutors and learners. The
booking flow creates learner users on demand (keyed by normalized email)
and may later refresh their name fields; it never deletes them.
"""

import logging

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import RoleName
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Directory entry for an instructor, learner or admin.

    Attributes:
        id: ULID primary key
        email: Unique, lower-cased and trimmed email address
        hashed_password: bcrypt hash (placeholder secret for provisioned learners)
        first_name: Given name
        last_name: Family name (optional)
        role: One of RoleName
        is_active: Whether the account may be used
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.LEARNER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tutor_profile = relationship("TutorProfile", back_populates="user", uselist=False)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
