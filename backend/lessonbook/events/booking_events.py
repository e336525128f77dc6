# backend/lessonbook/events/booking_events.py
"""
Booking event types, channel names and the event envelope.

All events follow this structure:
{
    "type": str,           # Event type identifier
    "schema_version": int, # Schema version (currently 1)
    "timestamp": str,      # ISO 8601 timestamp
    "payload": dict        # Event-specific data
}
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class BookingEventType(str, Enum):
    NEW_BOOKING_REQUEST = "new-booking-request"
    BOOKING_UPDATED = "booking-updated"
    BOOKING_STATUS_CHANGED = "booking-status-changed"
    AVAILABILITY_UPDATED = "availability-updated"


# Current schema version - increment when payload structure changes
SCHEMA_VERSION = 1


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


def teacher_bookings_channel(teacher_id: str) -> str:
    return f"teacher-bookings:{teacher_id}"


def student_bookings_channel(student_id: str) -> str:
    return f"student-bookings:{student_id}"


def teacher_availability_channel(teacher_id: str) -> str:
    return f"teacher-availability:{teacher_id}"


def build_event(event_type: BookingEventType | str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a payload in the versioned event envelope."""
    return {
        "type": event_type.value if isinstance(event_type, BookingEventType) else event_type,
        "schema_version": SCHEMA_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "payload": payload,
    }
