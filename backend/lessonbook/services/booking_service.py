# backend/lessonbook/services/booking_service.py
"""
Booking Service

Owns the slot conflict rules for lesson requests:
- A slot key holds at most one approved booking
- A student holds at most one pending/approved booking per slot key
- Approving a booking rejects every other pending booking on its slot key
- Approved and rejected are terminal

The approval path re-checks the slot immediately before writing and runs
the sibling rejection as one UPDATE, but the re-check and the writes are
separate statements. A near-simultaneous double approval remains possible
unless SLOT_LOCK_ENABLED serializes approvals per slot key.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import (
    BookingFinalizedException,
    BookingNotFoundException,
    BookingRaceLostException,
    ContactRequiredException,
    DuplicateBookingRequestException,
    NotBookingParticipantException,
    NotBookingTeacherException,
    NotFoundException,
    SlotTakenException,
    ValidationException,
)
from ..core.slot_lock import slot_lock
from ..events.publisher import EventSink
from ..models.booking import Booking, BookingStatus, SlotKey
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from ..repositories.user_repository import UserRepository
from ..schemas.booking import BookingCreate
from .base import BaseService
from .booking_notifications import BookingNotificationService

logger = logging.getLogger(__name__)

CONFLICT_WARNING_MESSAGE = (
    "Another student has also requested this time slot. The teacher will review all requests."
)


@dataclass
class BookingRequestResult:
    """Created booking plus the advisory shown when other students compete for the slot."""

    booking: Booking
    conflict_warning: Optional[str] = None


class BookingService(BaseService):
    """
    Service layer for booking requests and teacher decisions.

    All reads and writes go through repositories; the service owns the
    transaction and publishes notifications only after commit.
    """

    repository: BookingRepository
    message_repository: MessageRepository
    user_repository: UserRepository

    def __init__(
        self,
        db: Session,
        event_sink: EventSink,
        repository: Optional[BookingRepository] = None,
        message_repository: Optional[MessageRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            event_sink: Realtime publish target for booking events
            repository: Optional BookingRepository instance
            message_repository: Optional MessageRepository instance
            user_repository: Optional UserRepository instance
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.message_repository = (
            message_repository or RepositoryFactory.create_message_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.notifications = BookingNotificationService(event_sink)

    # Requests

    @BaseService.measure_operation("request_booking")
    def request_booking(self, student_id: str, booking_data: BookingCreate) -> BookingRequestResult:
        """
        Create a pending booking for a student.

        Args:
            student_id: Requesting student
            booking_data: Teacher, day and time slot

        Returns:
            The created booking, with a conflict warning when another
            student's request is already pending for the slot

        Raises:
            NotFoundException: Teacher does not exist
            ContactRequiredException: Student never exchanged a message with the teacher
            SlotTakenException: The slot already has an approved booking
            DuplicateBookingRequestException: Student already requested this slot
        """
        slot = SlotKey(
            teacher_id=booking_data.teacher,
            day=booking_data.day,
            start_time=booking_data.time_slot.start,
            end_time=booking_data.time_slot.end,
        )

        with self.transaction():
            self._validate_request_prerequisites(student_id, slot)
            self._check_slot_conflicts(student_id, slot)

            competing = self.repository.find_pending_for_slot(slot, exclude_student_id=student_id)
            booking = self.repository.create(
                student_id=student_id,
                teacher_id=slot.teacher_id,
                day=slot.day,
                start_time=slot.start_time,
                end_time=slot.end_time,
                status=BookingStatus.PENDING.value,
            )
            booking_id = booking.id

        conflict_warning = CONFLICT_WARNING_MESSAGE if competing else None
        created = self._load_with_details(booking_id)

        logger.info(
            f"Booking {booking_id} requested by student {student_id} for {slot.as_lock_key()}"
            + (" (competing request pending)" if competing else "")
        )
        prometheus_metrics.record_booking_transition("requested")
        self.notifications.booking_requested(created)

        return BookingRequestResult(booking=created, conflict_warning=conflict_warning)

    def _validate_request_prerequisites(self, student_id: str, slot: SlotKey) -> None:
        teacher = self.user_repository.get_by_id(slot.teacher_id, load_relationships=False)
        if teacher is None or not teacher.is_teacher:
            raise NotFoundException(
                "Teacher not found.",
                code="TEACHER_NOT_FOUND",
                details={"teacher_id": slot.teacher_id},
            )

        if not self.message_repository.has_exchanged_messages(student_id, slot.teacher_id):
            prometheus_metrics.record_booking_conflict("contact_required")
            logger.warning(
                f"Booking refused: student {student_id} has no contact with teacher {slot.teacher_id}"
            )
            raise ContactRequiredException(student_id, slot.teacher_id)

    def _check_slot_conflicts(self, student_id: str, slot: SlotKey) -> None:
        approved = self.repository.find_approved_for_slot(slot)
        if approved is not None:
            prometheus_metrics.record_booking_conflict("slot_taken")
            logger.warning(f"Booking refused: {slot.as_lock_key()} already approved ({approved.id})")
            raise SlotTakenException(details=self._slot_details(slot))

        existing = self.repository.find_active_for_student(student_id, slot)
        if existing is not None:
            prometheus_metrics.record_booking_conflict("duplicate_request")
            logger.warning(
                f"Booking refused: student {student_id} already holds {existing.id} "
                f"for {slot.as_lock_key()}"
            )
            raise DuplicateBookingRequestException(
                details={**self._slot_details(slot), "booking_id": existing.id}
            )

    # Teacher decisions

    @BaseService.measure_operation("set_booking_status")
    def set_booking_status(
        self, actor_id: str, booking_id: str, new_status: BookingStatus
    ) -> Booking:
        """
        Approve or reject a pending booking.

        Approval re-checks that no other booking on the slot was approved,
        approves the target, then rejects every other pending booking on the
        slot in one statement. Both decisions write only while the stored
        row is still pending.

        Raises:
            BookingNotFoundException: Unknown booking id
            NotBookingTeacherException: Actor is not the booking's teacher
            BookingFinalizedException: Booking is already approved or rejected
            BookingRaceLostException: Another booking on the slot was approved first
        """
        if new_status not in (BookingStatus.APPROVED, BookingStatus.REJECTED):
            raise ValidationException(
                "Status must be approved or rejected.",
                code="INVALID_STATUS",
                details={"status": new_status.value},
            )

        booking = self.repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        if booking.teacher_id != actor_id:
            logger.warning(f"Teacher {actor_id} tried to update booking {booking_id} they don't own")
            raise NotBookingTeacherException(booking_id)
        if booking.booking_status.is_terminal:
            raise BookingFinalizedException(booking_id, booking.status)

        if new_status is BookingStatus.APPROVED:
            self._approve(booking)
        else:
            with self.transaction():
                if not self.repository.transition_from_pending(booking, BookingStatus.REJECTED):
                    logger.warning(
                        f"Rejection of {booking_id} refused: already {booking.status} in the store"
                    )
                    raise BookingFinalizedException(booking_id, booking.status)
            logger.info(f"Booking {booking_id} rejected by teacher {actor_id}")
            prometheus_metrics.record_booking_transition("rejected")

        updated = self._load_with_details(booking_id)
        self.notifications.booking_status_changed(updated)
        return updated

    def _approve(self, booking: Booking) -> None:
        slot = booking.slot_key
        with slot_lock(slot) as acquired:
            if not acquired:
                prometheus_metrics.record_booking_conflict("race_lost")
                logger.warning(f"Approval of {booking.id} blocked: {slot.as_lock_key()} is locked")
                raise BookingRaceLostException(details=self._slot_details(slot))

            with self.transaction():
                conflicting = self.repository.find_approved_for_slot(
                    slot, exclude_booking_id=booking.id
                )
                if conflicting is not None:
                    prometheus_metrics.record_booking_conflict("race_lost")
                    logger.warning(
                        f"Approval of {booking.id} lost race: {conflicting.id} already approved "
                        f"for {slot.as_lock_key()}"
                    )
                    raise BookingRaceLostException(
                        details={**self._slot_details(slot), "approved_booking_id": conflicting.id}
                    )

                # A sibling approval may have cascaded onto this booking since it was loaded
                if not self.repository.transition_from_pending(booking, BookingStatus.APPROVED):
                    prometheus_metrics.record_booking_conflict("race_lost")
                    logger.warning(
                        f"Approval of {booking.id} lost race: booking is already {booking.status}"
                    )
                    raise BookingRaceLostException(
                        details={**self._slot_details(slot), "status": booking.status}
                    )

                rejected_count = self.repository.reject_pending_siblings(booking)

        logger.info(
            f"Booking {booking.id} approved for {slot.as_lock_key()}; "
            f"{rejected_count} competing request(s) rejected"
        )
        prometheus_metrics.record_booking_transition("approved")
        prometheus_metrics.record_booking_transition("cascade_rejected", rejected_count)

    # Deletion

    @BaseService.measure_operation("delete_booking")
    def delete_booking(self, actor_id: str, booking_id: str) -> None:
        """
        Hard-delete a booking on behalf of its student or teacher.

        Raises:
            BookingNotFoundException: Unknown booking id
            NotBookingParticipantException: Actor is neither student nor teacher
        """
        booking = self.repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        if actor_id not in (booking.student_id, booking.teacher_id):
            logger.warning(f"User {actor_id} tried to delete booking {booking_id}")
            raise NotBookingParticipantException(booking_id)

        snapshot = Booking(
            id=booking.id,
            student_id=booking.student_id,
            teacher_id=booking.teacher_id,
            day=booking.day,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status,
        )
        with self.transaction():
            self.repository.delete_entity(booking)

        logger.info(f"Booking {booking_id} deleted by {actor_id}")
        prometheus_metrics.record_booking_transition("deleted")
        self.notifications.booking_deleted(snapshot)

    # Listings

    @BaseService.measure_operation("list_student_bookings")
    def list_student_bookings(
        self, student_id: str, page: int, per_page: int
    ) -> Tuple[List[Booking], int]:
        return self.repository.get_student_bookings(
            student_id, offset=(page - 1) * per_page, limit=per_page
        )

    @BaseService.measure_operation("list_teacher_bookings")
    def list_teacher_bookings(
        self, teacher_id: str, page: int, per_page: int
    ) -> Tuple[List[Booking], int]:
        return self.repository.get_teacher_bookings(
            teacher_id, offset=(page - 1) * per_page, limit=per_page
        )

    # Helpers

    def _load_with_details(self, booking_id: str) -> Booking:
        booking = self.repository.get_booking_with_details(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        return booking

    @staticmethod
    def _slot_details(slot: SlotKey) -> dict[str, str]:
        return {
            "teacher_id": slot.teacher_id,
            "day": slot.day,
            "start": slot.start_time,
            "end": slot.end_time,
        }
