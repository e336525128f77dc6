"""ORM models; importing this package registers every table on Base.metadata."""

from .booking import Booking, BookingStatus
from .message import Message
from .user import User

__all__ = ["Booking", "BookingStatus", "Message", "User"]
