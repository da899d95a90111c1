# backend/tutorbooking/services/identity_resolver.py
"""
Learner identity resolution.

Maps a learner email onto a user id, provisioning a placeholder learner
account the first time an address is seen. Runs inside the caller's
transaction and only flushes, so a booking that fails after the learner
was created leaves no account behind.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..auth import generate_placeholder_secret, get_password_hash
from ..core.enums import RoleName
from ..core.exceptions import ValidationException
from ..repositories import RepositoryFactory
from ..repositories.user_repository import UserRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


class LearnerIdentityResolver(BaseService):
    def __init__(self, db: Session, user_repository: Optional[UserRepository] = None):
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("resolve_learner")
    def resolve_learner(
        self,
        email: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> str:
        """
        Return the id of the learner owning ``email``, creating it if needed.

        Existing learners only have the name fields that were supplied
        overwritten. New learners get a random bcrypt-hashed secret, the
        learner role, and the email local part as first name when none is
        given.

        Raises:
            ValidationException: email missing or blank
        """
        normalized = normalize_email(email)
        if not normalized:
            raise ValidationException(
                "Learner email is required",
                code="LEARNER_EMAIL_REQUIRED",
                details={"field": "learner_email"},
            )

        first = _clean_name(first_name)
        last = _clean_name(last_name)

        existing = self.user_repository.get_by_email(normalized, for_update=True)
        if existing:
            updates = {}
            if first is not None and first != existing.first_name:
                updates["first_name"] = first
            if last is not None and last != existing.last_name:
                updates["last_name"] = last
            if updates:
                self.user_repository.apply_updates(existing, **updates)
                self.logger.info(
                    "Updated learner names",
                    extra={"user_id": existing.id, "fields": sorted(updates)},
                )
            return str(existing.id)

        learner = self.user_repository.create(
            email=normalized,
            hashed_password=get_password_hash(generate_placeholder_secret()),
            first_name=first or normalized.split("@")[0] or normalized,
            last_name=last,
            role=RoleName.LEARNER.value,
            is_active=True,
        )
        self.log_operation("provision_learner", user_id=learner.id)
        return str(learner.id)
