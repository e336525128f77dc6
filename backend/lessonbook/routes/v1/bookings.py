# backend/lessonbook/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST / - Student requests a teacher's time slot
    GET /student/me - Student's own bookings (paginated)
    GET /teacher/me - Teacher's incoming bookings (paginated)
    PUT /{booking_id}/status - Teacher approves or rejects a booking
    DELETE /{booking_id} - Student or teacher removes a booking
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies import (
    get_booking_service,
    get_current_user,
    require_student,
    require_teacher,
)
from ...core.config import settings
from ...core.exceptions import DomainException
from ...models.booking import BookingStatus
from ...principal import CurrentUser
from ...schemas.base_responses import PaginatedResponse, SuccessResponse
from ...schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


def _resolve_page_size(limit: Optional[int]) -> int:
    return limit or settings.default_page_size


def _paginate(
    bookings: list, total: int, page: int, per_page: int
) -> PaginatedResponse[BookingResponse]:
    return PaginatedResponse[BookingResponse](
        items=[BookingResponse.from_booking(booking) for booking in bookings],
        total=total,
        page=page,
        per_page=per_page,
        has_next=page * per_page < total,
        has_prev=page > 1,
    )


# ============================================================================
# SECTION 1: Static routes
# ============================================================================


@router.get("/student/me", response_model=PaginatedResponse[BookingResponse])
async def get_my_student_bookings(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    current_user: CurrentUser = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    """List the current student's bookings, newest first, with teacher details."""
    per_page = _resolve_page_size(limit)
    try:
        bookings, total = await asyncio.to_thread(
            booking_service.list_student_bookings, current_user.id, page, per_page
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _paginate(bookings, total, page, per_page)


@router.get("/teacher/me", response_model=PaginatedResponse[BookingResponse])
async def get_my_teacher_bookings(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.max_page_size),
    current_user: CurrentUser = Depends(require_teacher),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    """List the current teacher's bookings, newest first, with student details."""
    per_page = _resolve_page_size(limit)
    try:
        bookings, total = await asyncio.to_thread(
            booking_service.list_teacher_bookings, current_user.id, page, per_page
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _paginate(bookings, total, page, per_page)


# ============================================================================
# SECTION 2: Root routes
# ============================================================================


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    current_user: CurrentUser = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Request a lesson slot.

    The booking starts as pending. When another student's request for the
    same slot is already pending, the response carries ``conflictWarning``.
    """
    try:
        result = await asyncio.to_thread(
            booking_service.request_booking, current_user.id, booking_data
        )
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(result.booking, conflict_warning=result.conflict_warning)


# ============================================================================
# SECTION 3: Dynamic routes
# ============================================================================


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    update: BookingStatusUpdate = Body(...),
    current_user: CurrentUser = Depends(require_teacher),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Approve or reject a pending booking (owning teacher only)."""
    try:
        booking = await asyncio.to_thread(
            booking_service.set_booking_status,
            current_user.id,
            booking_id,
            BookingStatus(update.status),
        )
    except DomainException as e:
        handle_domain_exception(e)
    return BookingResponse.from_booking(booking)


@router.delete("/{booking_id}", response_model=SuccessResponse)
async def delete_booking(
    booking_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> SuccessResponse:
    """Hard-delete a booking (its student or teacher only)."""
    try:
        await asyncio.to_thread(booking_service.delete_booking, current_user.id, booking_id)
    except DomainException as e:
        handle_domain_exception(e)
    return SuccessResponse(message="Booking deleted successfully.")
