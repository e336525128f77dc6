from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

from sqlalchemy.orm import Session

from lessonbook.auth import create_access_token
from lessonbook.core.enums import RoleName
from lessonbook.models import Booking, BookingStatus, Message, User

_seq = count(1)


def create_user(
    db: Session,
    role: RoleName = RoleName.STUDENT,
    name: Optional[str] = None,
    profile_image: Optional[str] = None,
) -> User:
    n = next(_seq)
    user = User(
        name=name or f"{role.value.title()} {n}",
        email=f"{role.value}{n}@example.com",
        role=role.value,
        profile_image=profile_image,
    )
    db.add(user)
    db.commit()
    return user


def create_message(db: Session, sender: User, recipient: User, text: str = "Hi!") -> Message:
    message = Message(sender_id=sender.id, recipient_id=recipient.id, text=text)
    db.add(message)
    db.commit()
    return message


def create_booking(
    db: Session,
    student: User,
    teacher: User,
    day: str = "Monday",
    start: str = "10:00",
    end: str = "11:00",
    status: BookingStatus = BookingStatus.PENDING,
    created_at: Optional[datetime] = None,
) -> Booking:
    """Insert a booking directly, bypassing the service checks."""
    booking = Booking(
        student_id=student.id,
        teacher_id=teacher.id,
        day=day,
        start_time=start,
        end_time=end,
        status=status.value,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(booking)
    db.commit()
    return booking


def staggered(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


def auth_headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": user.id, "role": user.role})
    return {"Authorization": f"Bearer {token}"}
