# backend/tutorbooking/schemas/availability.py
"""Availability roster request/response schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ..core.constants import MAX_RECURRENCE_RULE_LENGTH
from .base import StandardizedModel, StrictRequestModel, as_utc
from .base_responses import PaginationMeta


class AvailabilitySlotCreate(StrictRequestModel):
    start_at: datetime
    end_at: datetime
    status: Optional[str] = Field(default=None, description="open, held or blocked")
    is_recurring: bool = False
    recurrence_rule: Optional[str] = Field(default=None, max_length=MAX_RECURRENCE_RULE_LENGTH)
    metadata: Optional[Dict[str, Any]] = None


class AvailabilitySlotUpdate(StrictRequestModel):
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    status: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurrence_rule: Optional[str] = Field(default=None, max_length=MAX_RECURRENCE_RULE_LENGTH)
    metadata: Optional[Dict[str, Any]] = None


class AvailabilitySlotResponse(StandardizedModel):
    id: str
    tutor_id: str
    start_at: datetime
    end_at: datetime
    status: str
    is_recurring: bool
    recurrence_rule: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_slot(cls, slot: Any) -> "AvailabilitySlotResponse":
        return cls(
            id=slot.id,
            tutor_id=slot.tutor_id,
            start_at=as_utc(slot.start_at),
            end_at=as_utc(slot.end_at),
            status=slot.status,
            is_recurring=bool(slot.is_recurring),
            recurrence_rule=slot.recurrence_rule,
            metadata=dict(slot.metadata_json or {}),
            created_at=as_utc(slot.created_at),
            updated_at=as_utc(slot.updated_at),
        )


class AvailabilitySlotListResponse(StandardizedModel):
    items: List[AvailabilitySlotResponse]
    pagination: PaginationMeta
