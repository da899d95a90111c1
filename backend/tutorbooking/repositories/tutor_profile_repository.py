# backend/tutorbooking/repositories/tutor_profile_repository.py
"""Tutor profile lookups by owning user."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.tutor_profile import TutorProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TutorProfileRepository(BaseRepository[TutorProfile]):
    def __init__(self, db: Session):
        super().__init__(db, TutorProfile)

    def get_by_user_id(self, user_id: str) -> Optional[TutorProfile]:
        return self.find_one_by(user_id=user_id)
