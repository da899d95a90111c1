# backend/tutorbooking/routes/v1/tutor_availability.py
"""
Tutor availability roster endpoints - API v1

Mounted under /api/v1/instructor/tutor-availability.

Endpoints:
    GET / - List slots (status, from, to, pagination)
    POST / - Create a slot
    PATCH /{slot_id} - Update a slot
    DELETE /{slot_id} - Delete a slot
"""

import asyncio
from datetime import datetime
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ...api.dependencies import get_availability_service, get_current_instructor_id
from ...core.exceptions import DomainException
from ...schemas.availability import (
    AvailabilitySlotCreate,
    AvailabilitySlotListResponse,
    AvailabilitySlotResponse,
    AvailabilitySlotUpdate,
)
from ...schemas.base_responses import PaginationMeta
from ...services.availability_service import AvailabilityRosterService
from .errors import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["instructor-tutor-availability-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


@router.get("", response_model=AvailabilitySlotListResponse)
async def list_availability_slots(
    status_filter: Optional[str] = Query(None, alias="status", description="Slot status or 'all'"),
    from_: Optional[datetime] = Query(None, alias="from", description="Keep slots ending after"),
    to: Optional[datetime] = Query(None, description="Keep slots starting before"),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    instructor_id: str = Depends(get_current_instructor_id),
    roster_service: AvailabilityRosterService = Depends(get_availability_service),
) -> AvailabilitySlotListResponse:
    try:
        result = await asyncio.to_thread(
            roster_service.list_slots,
            instructor_id,
            status=status_filter,
            from_=from_,
            to=to,
            page=page,
            per_page=per_page,
        )
        return AvailabilitySlotListResponse(
            items=[AvailabilitySlotResponse.from_slot(s) for s in result["items"]],
            pagination=PaginationMeta(**result["pagination"]),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=AvailabilitySlotResponse, status_code=status.HTTP_201_CREATED)
async def create_availability_slot(
    slot_data: AvailabilitySlotCreate,
    instructor_id: str = Depends(get_current_instructor_id),
    roster_service: AvailabilityRosterService = Depends(get_availability_service),
) -> AvailabilitySlotResponse:
    try:
        slot = await asyncio.to_thread(
            roster_service.create_slot,
            instructor_id,
            start_at=slot_data.start_at,
            end_at=slot_data.end_at,
            status=slot_data.status,
            is_recurring=slot_data.is_recurring,
            recurrence_rule=slot_data.recurrence_rule,
            metadata=slot_data.metadata,
        )
        return AvailabilitySlotResponse.from_slot(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{slot_id}", response_model=AvailabilitySlotResponse)
async def update_availability_slot(
    update_data: AvailabilitySlotUpdate,
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    instructor_id: str = Depends(get_current_instructor_id),
    roster_service: AvailabilityRosterService = Depends(get_availability_service),
) -> AvailabilitySlotResponse:
    try:
        slot = await asyncio.to_thread(
            roster_service.update_slot,
            instructor_id,
            slot_id,
            update_data.model_dump(exclude_unset=True),
        )
        return AvailabilitySlotResponse.from_slot(slot)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability_slot(
    slot_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    instructor_id: str = Depends(get_current_instructor_id),
    roster_service: AvailabilityRosterService = Depends(get_availability_service),
) -> Response:
    try:
        await asyncio.to_thread(roster_service.delete_slot, instructor_id, slot_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
