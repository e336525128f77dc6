# backend/lessonbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events.publisher import BroadcastEventSink, EventSink
from ...services.booking_service import BookingService
from .database import get_db


@lru_cache(maxsize=1)
def get_event_sink_singleton() -> BroadcastEventSink:
    return BroadcastEventSink()


def get_event_sink() -> EventSink:
    """Get the realtime event sink for dependency injection."""
    return get_event_sink_singleton()


def get_booking_service(
    db: Session = Depends(get_db),
    event_sink: EventSink = Depends(get_event_sink),
) -> BookingService:
    """Get BookingService instance with proper dependencies."""
    return BookingService(db, event_sink)
