from pydantic import ValidationError
import pytest

from lessonbook.schemas.booking import BookingCreate, BookingStatusUpdate


def test_accepts_camel_case_wire_format():
    data = BookingCreate.model_validate(
        {"teacher": "t1", "day": "2024-06-03", "timeSlot": {"start": "14:00", "end": "15:00"}}
    )

    assert data.teacher == "t1"
    assert data.day == "2024-06-03"
    assert data.time_slot.start == "14:00"


def test_values_are_kept_as_sent():
    data = BookingCreate.model_validate(
        {"teacher": "t1", "day": " Monday", "timeSlot": {"start": " 14:00", "end": "15:00 "}}
    )

    assert data.day == " Monday"
    assert (data.time_slot.start, data.time_slot.end) == (" 14:00", "15:00 ")


def test_values_are_not_parsed():
    data = BookingCreate.model_validate(
        {"teacher": "t1", "day": "Monday", "timeSlot": {"start": "2:00 PM", "end": "3:00 PM"}}
    )
    assert (data.time_slot.start, data.time_slot.end) == ("2:00 PM", "3:00 PM")


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_values_count_as_missing(blank):
    with pytest.raises(ValidationError) as exc_info:
        BookingCreate.model_validate(
            {"teacher": "t1", "day": blank, "timeSlot": {"start": "14:00", "end": "15:00"}}
        )
    assert exc_info.value.errors()[0]["type"] == "missing"


def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        BookingCreate.model_validate(
            {
                "teacher": "t1",
                "day": "Monday",
                "timeSlot": {"start": "14:00", "end": "15:00"},
                "status": "approved",
            }
        )


def test_status_update_only_allows_decisions():
    assert BookingStatusUpdate(status="approved").status == "approved"
    with pytest.raises(ValidationError):
        BookingStatusUpdate(status="pending")


def test_response_omits_absent_conflict_warning(db, student, teacher):
    from lessonbook.schemas.booking import BookingResponse

    from ..utils.factories import create_booking

    booking = create_booking(db, student, teacher)

    plain = BookingResponse.from_booking(booking).model_dump(by_alias=True)
    warned = BookingResponse.from_booking(booking, conflict_warning="heads up").model_dump(
        by_alias=True
    )

    assert "conflictWarning" not in plain
    assert "profileImage" in plain["teacher"]
    assert warned["conflictWarning"] == "heads up"
