"""FastAPI dependencies."""

from .auth import get_current_user, require_role, require_student, require_teacher
from .database import get_db
from .services import get_booking_service, get_event_sink

__all__ = [
    "get_booking_service",
    "get_current_user",
    "get_db",
    "get_event_sink",
    "require_role",
    "require_student",
    "require_teacher",
]
