"""Booking notification events and publishers."""

from .booking_events import (
    SCHEMA_VERSION,
    BookingEventType,
    build_event,
    student_bookings_channel,
    teacher_availability_channel,
    teacher_bookings_channel,
    user_channel,
)
from .publisher import BroadcastEventSink, EventSink

__all__ = [
    "SCHEMA_VERSION",
    "BookingEventType",
    "BroadcastEventSink",
    "EventSink",
    "build_event",
    "student_bookings_channel",
    "teacher_availability_channel",
    "teacher_bookings_channel",
    "user_channel",
]
