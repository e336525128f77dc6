# backend/lessonbook/services/booking_notifications.py
"""
Realtime notifications for booking changes.

Payloads carry the booking with student and teacher display fields
already populated, so subscribers can render without another fetch.
Delivery is best-effort: a failing sink is logged and never propagates
into the booking operation that triggered it.
"""

import logging
from typing import Any, Dict

from ..events.booking_events import (
    BookingEventType,
    student_bookings_channel,
    teacher_availability_channel,
    teacher_bookings_channel,
    user_channel,
)
from ..events.publisher import EventSink
from ..models.booking import Booking, BookingStatus
from ..schemas.booking import BookingResponse

logger = logging.getLogger(__name__)


def serialize_booking(booking: Booking) -> Dict[str, Any]:
    """JSON-safe booking payload in the client wire format."""
    return BookingResponse.from_booking(booking).model_dump(mode="json", by_alias=True)


class BookingNotificationService:
    """Emits booking events to participant channels."""

    def __init__(self, event_sink: EventSink):
        self.event_sink = event_sink

    def _emit(self, channel: str, event_type: BookingEventType, payload: Dict[str, Any]) -> None:
        try:
            self.event_sink.publish(channel, event_type, payload)
        except Exception as e:
            logger.warning(f"Notification {event_type.value} to {channel} failed: {e}")

    def booking_requested(self, booking: Booking) -> None:
        """Tell the teacher about a new request and refresh their bookings list."""
        payload = serialize_booking(booking)
        self._emit(user_channel(booking.teacher_id), BookingEventType.NEW_BOOKING_REQUEST, payload)
        self._emit(
            teacher_bookings_channel(booking.teacher_id), BookingEventType.BOOKING_UPDATED, payload
        )

    def booking_status_changed(self, booking: Booking) -> None:
        """Tell the student about the decision and refresh both bookings lists."""
        payload = serialize_booking(booking)
        self._emit(
            user_channel(booking.student_id),
            BookingEventType.BOOKING_STATUS_CHANGED,
            {"booking": payload, "status": booking.status},
        )
        self._emit(
            student_bookings_channel(booking.student_id), BookingEventType.BOOKING_UPDATED, payload
        )
        self._emit(
            teacher_bookings_channel(booking.teacher_id), BookingEventType.BOOKING_UPDATED, payload
        )
        if booking.status == BookingStatus.APPROVED.value:
            self._availability_changed(booking, slot_open=False)

    def booking_deleted(self, booking: Booking) -> None:
        """Refresh both bookings lists; an approved slot becomes free again."""
        payload = {"id": booking.id, "deleted": True}
        self._emit(
            student_bookings_channel(booking.student_id), BookingEventType.BOOKING_UPDATED, payload
        )
        self._emit(
            teacher_bookings_channel(booking.teacher_id), BookingEventType.BOOKING_UPDATED, payload
        )
        if booking.status == BookingStatus.APPROVED.value:
            self._availability_changed(booking, slot_open=True)

    def _availability_changed(self, booking: Booking, slot_open: bool) -> None:
        self._emit(
            teacher_availability_channel(booking.teacher_id),
            BookingEventType.AVAILABILITY_UPDATED,
            {
                "teacherId": booking.teacher_id,
                "day": booking.day,
                "timeSlot": {"start": booking.start_time, "end": booking.end_time},
                "available": slot_open,
                "bookingId": booking.id,
            },
        )
