# backend/lessonbook/schemas/booking.py
"""
Booking schemas.

Wire format follows the mobile client: ``timeSlot``, ``profileImage``,
``createdAt`` and the optional ``conflictWarning`` advisory. Day and time
values are accepted as opaque strings and stored exactly as sent;
whitespace-only values are rejected as missing.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Literal, Optional

from pydantic import (
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)
from pydantic_core import PydanticCustomError

from ._strict_base import StrictModel, StrictRequestModel

if TYPE_CHECKING:
    from ..models.booking import Booking
    from ..models.user import User


def _require_non_blank(value: object) -> object:
    # Blank counts as absent, same as a missing key; the value itself is kept as sent
    if isinstance(value, str) and not value.strip():
        raise PydanticCustomError("missing", "Field required")
    return value


class TimeSlot(StrictRequestModel):
    start: str = Field(..., max_length=16, description="Slot start, wall-clock string")
    end: str = Field(..., max_length=16, description="Slot end, wall-clock string")

    @field_validator("start", "end", mode="before")
    @classmethod
    def _not_blank(cls, v: object) -> object:
        return _require_non_blank(v)


class BookingCreate(StrictRequestModel):
    """Student request for one of a teacher's slots."""

    teacher: str = Field(..., min_length=1, max_length=26, description="Teacher user id")
    day: str = Field(..., max_length=32, description="Weekday name or ISO date")
    time_slot: TimeSlot

    @field_validator("teacher", "day", mode="before")
    @classmethod
    def _not_blank(cls, v: object) -> object:
        return _require_non_blank(v)


class BookingStatusUpdate(StrictRequestModel):
    status: Literal["approved", "rejected"]


class UserSummary(StrictModel):
    """Display fields of a booking participant."""

    id: str
    name: str
    email: str
    profile_image: Optional[str] = None

    @classmethod
    def from_user(cls, user: "User") -> "UserSummary":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            profile_image=user.profile_image,
        )


class BookingResponse(StrictModel):
    id: str
    student: UserSummary
    teacher: UserSummary
    day: str
    time_slot: TimeSlot
    status: Literal["pending", "approved", "rejected"]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    conflict_warning: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_empty_warning(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ):
        data = handler(self)
        if self.conflict_warning is None:
            data.pop("conflictWarning", None)
            data.pop("conflict_warning", None)
        return data

    @classmethod
    def from_booking(
        cls, booking: "Booking", conflict_warning: Optional[str] = None
    ) -> "BookingResponse":
        """Build a response from a booking with student and teacher loaded."""
        return cls(
            id=booking.id,
            student=UserSummary.from_user(booking.student),
            teacher=UserSummary.from_user(booking.teacher),
            day=booking.day,
            time_slot=TimeSlot(start=booking.start_time, end=booking.end_time),
            status=booking.status,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            conflict_warning=conflict_warning,
        )
