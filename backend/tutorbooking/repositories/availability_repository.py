# backend/tutorbooking/repositories/availability_repository.py
"""
Availability Repository.

Data access for a tutor's roster of advertised slots. Every lookup is
scoped by tutor so one tutor can never read or mutate another's slots.
"""

from datetime import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.timezone_utils import to_storage
from ..models.availability import AvailabilitySlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[AvailabilitySlot]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilitySlot)

    def get_for_tutor(self, slot_id: str, tutor_id: str) -> Optional[AvailabilitySlot]:
        return self.find_one_by(id=slot_id, tutor_id=tutor_id)

    def list_for_tutor(
        self,
        tutor_id: str,
        *,
        status: Optional[str] = None,
        from_: Optional[datetime] = None,
        to: Optional[datetime] = None,
        page: int = 1,
        per_page: int = 25,
    ) -> Tuple[List[AvailabilitySlot], int]:
        """
        One page of the tutor's slots ordered by start time.

        ``from_`` keeps slots that end after it and ``to`` keeps slots that
        start before it, so any slot overlapping the window is returned.
        """
        query = self._build_query().filter(AvailabilitySlot.tutor_id == tutor_id)
        if status:
            query = query.filter(AvailabilitySlot.status == status)
        if from_ is not None:
            query = query.filter(AvailabilitySlot.end_at > to_storage(from_))
        if to is not None:
            query = query.filter(AvailabilitySlot.start_at < to_storage(to))
        query = query.order_by(AvailabilitySlot.start_at.asc(), AvailabilitySlot.id.asc())
        return self._paginate(query, page, per_page)
