# backend/lessonbook/core/exceptions.py
"""
Domain-specific exceptions for the lesson booking platform.

These exceptions carry a user-facing message and a stable machine code.
The API layer converts them with ``to_http_exception()``; nothing in the
service layer retries on them.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details,
            },
        )


# Specific booking exceptions


class ContactRequiredException(ForbiddenException):
    """Raised when a student books a teacher they have never messaged."""

    def __init__(self, student_id: str, teacher_id: str):
        super().__init__(
            message="Please message this teacher before requesting a lesson.",
            code="CONTACT_REQUIRED",
            details={"student_id": student_id, "teacher_id": teacher_id},
        )


class NotBookingTeacherException(ForbiddenException):
    """Raised when someone other than the booking's teacher changes its status."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Unauthorized teacher.",
            code="UNAUTHORIZED_TEACHER",
            details={"booking_id": booking_id},
        )


class NotBookingParticipantException(ForbiddenException):
    """Raised when a non-participant tries to delete a booking."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Not authorized to delete this booking.",
            code="NOT_BOOKING_PARTICIPANT",
            details={"booking_id": booking_id},
        )


class BookingNotFoundException(NotFoundException):
    """Raised when a booking id does not resolve."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="Booking not found.",
            code="BOOKING_NOT_FOUND",
            details={"booking_id": booking_id},
        )


class SlotTakenException(ConflictException):
    """Raised when the slot already has an approved booking."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="This time slot is already booked by another student.",
            code="SLOT_TAKEN",
            details=details or {},
        )


class DuplicateBookingRequestException(ConflictException):
    """Raised when a student already holds a live request for the slot."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="You already have a booking request for this time slot.",
            code="DUPLICATE_REQUEST",
            details=details or {},
        )


class BookingRaceLostException(ConflictException):
    """Raised when a competing approval landed first."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=(
                "This time slot was just booked by another student. "
                "Please refresh and try again."
            ),
            code="RACE_LOST",
            details=details or {},
        )


class BookingFinalizedException(ConflictException):
    """Raised when a status change targets an approved or rejected booking."""

    def __init__(self, booking_id: str, current_status: str):
        super().__init__(
            message=f"This booking has already been {current_status}.",
            code="BOOKING_FINALIZED",
            details={"booking_id": booking_id, "status": current_status},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """
