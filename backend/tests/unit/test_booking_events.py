from datetime import datetime

from lessonbook.events.booking_events import (
    SCHEMA_VERSION,
    BookingEventType,
    build_event,
    student_bookings_channel,
    teacher_availability_channel,
    teacher_bookings_channel,
    user_channel,
)


def test_channel_names():
    assert user_channel("u1") == "user:u1"
    assert teacher_bookings_channel("t1") == "teacher-bookings:t1"
    assert student_bookings_channel("s1") == "student-bookings:s1"
    assert teacher_availability_channel("t1") == "teacher-availability:t1"


def test_event_type_wire_names():
    assert {e.value for e in BookingEventType} == {
        "new-booking-request",
        "booking-updated",
        "booking-status-changed",
        "availability-updated",
    }


def test_build_event_envelope():
    event = build_event(BookingEventType.BOOKING_UPDATED, {"id": "b1"})

    assert event["type"] == "booking-updated"
    assert event["schema_version"] == SCHEMA_VERSION == 1
    assert event["payload"] == {"id": "b1"}
    assert datetime.fromisoformat(event["timestamp"]).tzinfo is not None


def test_build_event_accepts_plain_string_type():
    assert build_event("custom", {})["type"] == "custom"
