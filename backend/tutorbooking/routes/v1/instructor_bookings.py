# backend/tutorbooking/routes/v1/instructor_bookings.py
"""
Instructor tutor-booking endpoints - API v1

Mounted under /api/v1/instructor/tutor-bookings.
All business logic delegated to TutorBookingService.

Endpoints:
    GET / - List bookings with pagination, status filter, search and stats
    POST / - Create a booking
    PATCH /{public_id} - Update a booking
    DELETE /{public_id} - Cancel (or hard-delete) a booking
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ...api.dependencies import get_booking_service, get_current_instructor_id
from ...core.constants import MAX_REASON_LENGTH, MAX_SEARCH_LENGTH
from ...core.exceptions import DomainException
from ...schemas.booking import (
    BookingStatsResponse,
    TutorBookingCreate,
    TutorBookingListResponse,
    TutorBookingResponse,
    TutorBookingUpdate,
)
from ...schemas.base_responses import ErrorResponse, PaginationMeta
from ...services.booking_service import TutorBookingService
from .errors import handle_domain_exception

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["instructor-tutor-bookings-v1"])

WRITE_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    404: {"model": ErrorResponse, "description": "Tutor profile or booking not found"},
    409: {"model": ErrorResponse, "description": "Overlaps an existing booking"},
    422: {"model": ErrorResponse, "description": "Validation failed"},
}


@router.get("", response_model=TutorBookingListResponse)
async def list_tutor_bookings(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    status_filter: Optional[str] = Query(None, alias="status", description="Status or 'all'"),
    search: Optional[str] = Query(None, max_length=MAX_SEARCH_LENGTH),
    instructor_id: str = Depends(get_current_instructor_id),
    booking_service: TutorBookingService = Depends(get_booking_service),
) -> TutorBookingListResponse:
    """List the instructor's bookings, most recent first, with dashboard stats."""
    try:
        result = await asyncio.to_thread(
            booking_service.list_bookings,
            instructor_id,
            page=page,
            per_page=per_page,
            status=status_filter,
            search=search,
        )
        return TutorBookingListResponse(
            items=[TutorBookingResponse.from_booking(b) for b in result["items"]],
            pagination=PaginationMeta(**result["pagination"]),
            stats=BookingStatsResponse(**result["stats"]),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=TutorBookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERROR_RESPONSES,
)
async def create_tutor_booking(
    booking_data: TutorBookingCreate,
    instructor_id: str = Depends(get_current_instructor_id),
    booking_service: TutorBookingService = Depends(get_booking_service),
) -> TutorBookingResponse:
    """Create a booking, provisioning the learner account when needed."""
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking, instructor_id, booking_data
        )
        return TutorBookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{public_id}", response_model=TutorBookingResponse, responses=WRITE_ERROR_RESPONSES)
async def update_tutor_booking(
    update_data: TutorBookingUpdate,
    public_id: str = Path(..., min_length=1, max_length=36),
    instructor_id: str = Depends(get_current_instructor_id),
    booking_service: TutorBookingService = Depends(get_booking_service),
) -> TutorBookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking, instructor_id, public_id, update_data
        )
        return TutorBookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{public_id}", response_model=Optional[TutorBookingResponse])
async def cancel_tutor_booking(
    public_id: str = Path(..., min_length=1, max_length=36),
    hard_delete: bool = Query(False, description="Physically delete instead of cancelling"),
    reason: Optional[str] = Query(None, max_length=MAX_REASON_LENGTH),
    instructor_id: str = Depends(get_current_instructor_id),
    booking_service: TutorBookingService = Depends(get_booking_service),
) -> Optional[TutorBookingResponse]:
    """Cancel a booking; with ``hard_delete=true`` the record is removed and the body is null."""
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_booking,
            instructor_id,
            public_id,
            hard_delete=hard_delete,
            reason=reason,
        )
        return TutorBookingResponse.from_booking(booking) if booking else None
    except DomainException as e:
        handle_domain_exception(e)
