# backend/lessonbook/repositories/booking_repository.py
"""
Booking Repository

Implements all data access for bookings. Every conflict query filters on
the full slot key ``(teacher_id, day, start_time, end_time)`` by plain
equality; day and times are opaque strings and are never parsed here.

This repository handles:
- Slot-key conflict lookups (approved / pending / per-student)
- The cascade rejection of pending siblings as one UPDATE statement
- Participant listings with identity eager loading
"""

from datetime import datetime, timezone
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import ACTIVE_STATUSES, Booking, BookingStatus, SlotKey
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _slot_filters(slot: SlotKey) -> List[Any]:
        return [
            Booking.teacher_id == slot.teacher_id,
            Booking.day == slot.day,
            Booking.start_time == slot.start_time,
            Booking.end_time == slot.end_time,
        ]

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.student), joinedload(Booking.teacher))

    # Slot-key conflict queries

    def find_approved_for_slot(
        self, slot: SlotKey, exclude_booking_id: Optional[str] = None
    ) -> Optional[Booking]:
        """Return the approved booking holding this slot, if any."""
        try:
            query = self.db.query(Booking).filter(
                *self._slot_filters(slot),
                Booking.status == BookingStatus.APPROVED.value,
            )
            if exclude_booking_id:
                query = query.filter(Booking.id != exclude_booking_id)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding approved booking for slot {slot}: {str(e)}")
            raise RepositoryException(f"Failed to check slot approval: {str(e)}")

    def find_active_for_student(self, student_id: str, slot: SlotKey) -> Optional[Booking]:
        """Return the student's pending or approved booking for this slot, if any."""
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.student_id == student_id,
                    *self._slot_filters(slot),
                    Booking.status.in_(ACTIVE_STATUSES),
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding student booking for slot {slot}: {str(e)}")
            raise RepositoryException(f"Failed to check student booking: {str(e)}")

    def find_pending_for_slot(
        self, slot: SlotKey, exclude_student_id: Optional[str] = None
    ) -> Optional[Booking]:
        """Return any pending booking competing for this slot."""
        try:
            query = self.db.query(Booking).filter(
                *self._slot_filters(slot),
                Booking.status == BookingStatus.PENDING.value,
            )
            if exclude_student_id:
                query = query.filter(Booking.student_id != exclude_student_id)
            return query.order_by(Booking.created_at.asc()).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding pending booking for slot {slot}: {str(e)}")
            raise RepositoryException(f"Failed to check pending requests: {str(e)}")

    def reject_pending_siblings(self, booking: Booking) -> int:
        """
        Reject every other pending booking on the same slot key.

        Executed as a single filtered UPDATE so the cascade never races a
        read-modify-write loop.

        Returns:
            Number of bookings rejected
        """
        try:
            stmt = (
                update(Booking)
                .where(
                    Booking.id != booking.id,
                    *self._slot_filters(booking.slot_key),
                    Booking.status == BookingStatus.PENDING.value,
                )
                .values(
                    status=BookingStatus.REJECTED.value,
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session="evaluate")
            )
            result = self.db.execute(stmt)
            return int(result.rowcount or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error rejecting siblings of booking {booking.id}: {str(e)}")
            raise RepositoryException(f"Failed to reject competing requests: {str(e)}")

    def transition_from_pending(self, booking: Booking, status: BookingStatus) -> bool:
        """
        Move a booking out of ``pending`` with a conditional UPDATE.

        The write only lands while the stored row is still pending, so a
        decision committed elsewhere since ``booking`` was loaded is never
        overwritten. ``booking`` is refreshed to the stored state either way.

        Returns:
            True if this call made the transition
        """
        try:
            stmt = (
                update(Booking)
                .where(
                    Booking.id == booking.id,
                    Booking.status == BookingStatus.PENDING.value,
                )
                .values(status=status.value, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            transitioned = bool(self.db.execute(stmt).rowcount)
            self.db.refresh(booking)
            return transitioned
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating status of booking {booking.id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking status: {str(e)}")

    # Participant listings

    def get_booking_with_details(self, booking_id: str) -> Optional[Booking]:
        """Load a booking with student and teacher populated."""
        return self.get_by_id(booking_id, load_relationships=True)

    def get_student_bookings(
        self, student_id: str, offset: int = 0, limit: int = 20
    ) -> Tuple[List[Booking], int]:
        return self._participant_page(Booking.student_id == student_id, offset, limit)

    def get_teacher_bookings(
        self, teacher_id: str, offset: int = 0, limit: int = 20
    ) -> Tuple[List[Booking], int]:
        return self._participant_page(Booking.teacher_id == teacher_id, offset, limit)

    def _participant_page(
        self, criterion: Any, offset: int, limit: int
    ) -> Tuple[List[Booking], int]:
        try:
            base = self.db.query(Booking).filter(criterion)
            total = base.count()
            items = (
                self._apply_eager_loading(base)
                .order_by(Booking.created_at.desc(), Booking.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return items, total
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")
