"""Services whose every operation acts on behalf of one tutor."""

from typing import Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.exceptions import NotFoundException
from ..models.tutor_profile import TutorProfile
from ..repositories import RepositoryFactory
from ..repositories.tutor_profile_repository import TutorProfileRepository
from .base import BaseService


class TutorScopedService(BaseService):
    def __init__(
        self,
        db: Session,
        tutor_profile_repository: Optional[TutorProfileRepository] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock)
        self.tutor_profile_repository = (
            tutor_profile_repository or RepositoryFactory.create_tutor_profile_repository(db)
        )

    def _require_tutor_profile(self, tutor_user_id: str) -> TutorProfile:
        """
        Tutor profile owned by the authenticated user.

        Raises:
            NotFoundException: the user has no tutor profile
        """
        profile = self.tutor_profile_repository.get_by_user_id(tutor_user_id)
        if not profile:
            raise NotFoundException(
                "Tutor profile not found",
                code="TUTOR_PROFILE_NOT_FOUND",
                details={"user_id": tutor_user_id},
            )
        return profile
