# backend/tutorbooking/services/availability_service.py
"""
Availability roster service.

Instructors manage the windows they advertise (open, held or blocked).
Slots are advisory: they are never reconciled against bookings, and a
booking may be created outside any open slot.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock
from ..core.constants import MAX_RECURRENCE_RULE_LENGTH, SLOT_REFERENCE_KEY
from ..core.exceptions import NotFoundException, ValidationException
from ..core.pagination import build_pagination, clamp_page, clamp_per_page
from ..core.timezone_utils import ensure_utc, to_storage
from ..core.ulid_helper import generate_ulid
from ..models.availability import AvailabilitySlot, SlotStatus
from ..repositories import RepositoryFactory
from ..repositories.availability_repository import AvailabilityRepository
from .base import BaseService
from .tutor_scoped import TutorScopedService

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {"start_at", "end_at", "status", "is_recurring", "recurrence_rule", "metadata"}


def _normalize_slot_status(value: Optional[str]) -> str:
    normalized = (value or "").strip().lower()
    if normalized not in SlotStatus.values():
        raise ValidationException(
            f"Invalid slot status: {value}",
            code="INVALID_SLOT_STATUS",
            details={"status": value, "allowed": SlotStatus.values()},
        )
    return normalized


def _validate_window(start_at: Optional[datetime], end_at: Optional[datetime]) -> None:
    if start_at is None or end_at is None:
        raise ValidationException(
            "Slot start and end times are required",
            code="INVALID_SLOT_WINDOW",
        )
    if ensure_utc(end_at) <= ensure_utc(start_at):
        raise ValidationException(
            "Slot end time must be after its start time",
            code="INVALID_SLOT_WINDOW",
            details={
                "start_at": ensure_utc(start_at).isoformat(),
                "end_at": ensure_utc(end_at).isoformat(),
            },
        )


def _validate_recurrence_rule(rule: Optional[str]) -> Optional[str]:
    if rule is None:
        return None
    rule = rule.strip()
    if len(rule) > MAX_RECURRENCE_RULE_LENGTH:
        raise ValidationException(
            f"Recurrence rule must be at most {MAX_RECURRENCE_RULE_LENGTH} characters",
            code="INVALID_RECURRENCE_RULE",
        )
    return rule or None


class AvailabilityRosterService(TutorScopedService):
    def __init__(
        self,
        db: Session,
        repository: Optional[AvailabilityRepository] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(db, clock=clock)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)

    def _require_slot(self, slot_id: str, tutor_id: str) -> AvailabilitySlot:
        slot = self.repository.get_for_tutor(slot_id, tutor_id)
        if not slot:
            raise NotFoundException(
                "Availability slot not found",
                code="SLOT_NOT_FOUND",
                details={"slot_id": slot_id},
            )
        return slot

    @BaseService.measure_operation("list_slots")
    def list_slots(
        self,
        tutor_user_id: str,
        status: Optional[str] = None,
        from_: Optional[datetime] = None,
        to: Optional[datetime] = None,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        One page of the tutor's slots ordered by start time.

        ``status`` of None or ``"all"`` includes every status.
        """
        profile = self._require_tutor_profile(tutor_user_id)
        status_filter = None
        if status and status.strip().lower() != "all":
            status_filter = _normalize_slot_status(status)

        page = clamp_page(page)
        per_page = clamp_per_page(per_page)
        items, total = self.repository.list_for_tutor(
            profile.id,
            status=status_filter,
            from_=from_,
            to=to,
            page=page,
            per_page=per_page,
        )
        return {"items": items, "pagination": build_pagination(page, per_page, total)}

    @BaseService.measure_operation("create_slot")
    def create_slot(
        self,
        tutor_user_id: str,
        start_at: datetime,
        end_at: datetime,
        status: Optional[str] = None,
        is_recurring: bool = False,
        recurrence_rule: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AvailabilitySlot:
        with self.transaction():
            profile = self._require_tutor_profile(tutor_user_id)
            _validate_window(start_at, end_at)
            slot_status = _normalize_slot_status(status or SlotStatus.OPEN.value)
            rule = _validate_recurrence_rule(recurrence_rule)
            slot = self.repository.create(
                tutor_id=profile.id,
                start_at=to_storage(start_at),
                end_at=to_storage(end_at),
                status=slot_status,
                is_recurring=bool(is_recurring),
                recurrence_rule=rule,
                metadata_json={SLOT_REFERENCE_KEY: generate_ulid(), **(metadata or {})},
            )

        self.log_operation("create_slot", slot_id=slot.id, tutor_id=profile.id)
        return slot

    @BaseService.measure_operation("update_slot")
    def update_slot(
        self, tutor_user_id: str, slot_id: str, updates: Dict[str, Any]
    ) -> AvailabilitySlot:
        """
        Apply a partial update.

        The resulting window is re-validated against whichever of start/end
        was not supplied; metadata is merged over what is stored.
        """
        unknown = set(updates) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                "Unknown slot fields",
                code="INVALID_SLOT_FIELDS",
                details={"fields": sorted(unknown)},
            )

        with self.transaction():
            profile = self._require_tutor_profile(tutor_user_id)
            slot = self._require_slot(slot_id, profile.id)

            changes: Dict[str, Any] = {}
            if "start_at" in updates or "end_at" in updates:
                start_at = updates.get("start_at") or slot.start_at
                end_at = updates.get("end_at") or slot.end_at
                _validate_window(start_at, end_at)
                changes["start_at"] = to_storage(start_at)
                changes["end_at"] = to_storage(end_at)
            if updates.get("status") is not None:
                changes["status"] = _normalize_slot_status(updates["status"])
            if updates.get("is_recurring") is not None:
                changes["is_recurring"] = bool(updates["is_recurring"])
            if "recurrence_rule" in updates:
                changes["recurrence_rule"] = _validate_recurrence_rule(updates["recurrence_rule"])
            if updates.get("metadata") is not None:
                changes["metadata_json"] = {**slot.slot_metadata, **updates["metadata"]}

            if changes:
                slot = self.repository.apply_updates(slot, **changes)

        self.log_operation("update_slot", slot_id=slot.id, fields=sorted(changes))
        return slot

    @BaseService.measure_operation("delete_slot")
    def delete_slot(self, tutor_user_id: str, slot_id: str) -> None:
        with self.transaction():
            profile = self._require_tutor_profile(tutor_user_id)
            slot = self._require_slot(slot_id, profile.id)
            self.repository.delete_entity(slot)

        self.log_operation("delete_slot", slot_id=slot_id)
