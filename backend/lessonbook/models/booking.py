# backend/lessonbook/models/booking.py
"""
Booking model for the lesson booking platform.

A booking is a student's request for one of a teacher's time slots.
``day`` and the time slot bounds are stored exactly as the client sent
them (weekday name or ISO date, wall-clock strings) and are only ever
compared for equality: the slot key is
``(teacher_id, day, start_time, end_time)``.

Lifecycle: created ``pending`` by a student; the teacher moves it to
``approved`` or ``rejected``. Approving one booking rejects every other
pending booking on the same slot key. Both outcomes are terminal.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import NamedTuple

from sqlalchemy import Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not BookingStatus.PENDING


ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.APPROVED.value)


class SlotKey(NamedTuple):
    """Identity of a bookable unit of a teacher's time."""

    teacher_id: str
    day: str
    start_time: str
    end_time: str

    def as_lock_key(self) -> str:
        return f"slot:{self.teacher_id}:{self.day}:{self.start_time}-{self.end_time}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(Base):
    """Lesson request between a student and a teacher for one time slot."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    student_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Opaque equality keys, never parsed
    day = Column(String(32), nullable=False)
    start_time = Column(String(16), nullable=False)
    end_time = Column(String(16), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    student = relationship("User", foreign_keys=[student_id])
    teacher = relationship("User", foreign_keys=[teacher_id])

    __table_args__ = (
        Index(
            "ix_bookings_slot_key_status",
            "teacher_id",
            "day",
            "start_time",
            "end_time",
            "status",
        ),
        Index("ix_bookings_student_id", "student_id"),
    )

    @property
    def slot_key(self) -> SlotKey:
        return SlotKey(
            teacher_id=self.teacher_id,
            day=self.day,
            start_time=self.start_time,
            end_time=self.end_time,
        )

    @property
    def booking_status(self) -> BookingStatus:
        return BookingStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id} teacher={self.teacher_id} {self.day} "
            f"{self.start_time}-{self.end_time} {self.status}>"
        )
