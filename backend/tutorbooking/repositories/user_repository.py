# backend/tutorbooking/repositories/user_repository.py
"""
User Repository.

Lookups keyed by normalized email, with row locking where the dialect
supports it so concurrent first bookings for the same learner serialize
on the user row instead of racing to insert it.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str, *, for_update: bool = False) -> Optional[User]:
        """Exact match on the stored (already normalized) email."""
        try:
            query = self.db.query(User).filter(User.email == email)
            if for_update and supports_row_locks(self.db):
                query = query.with_for_update()
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}") from e
