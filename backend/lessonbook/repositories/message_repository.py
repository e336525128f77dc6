# backend/lessonbook/repositories/message_repository.py
"""
Message Repository

The booking engine only needs one question answered here: have these two
users ever exchanged a message, in either direction?
"""

import logging

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.message import Message
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[Message]):
    def __init__(self, db: Session):
        super().__init__(db, Message)

    def has_exchanged_messages(self, user_a_id: str, user_b_id: str) -> bool:
        """Return True if any message exists between the two users."""
        try:
            query = self.db.query(Message.id).filter(
                or_(
                    and_(Message.sender_id == user_a_id, Message.recipient_id == user_b_id),
                    and_(Message.sender_id == user_b_id, Message.recipient_id == user_a_id),
                )
            )
            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking contact between {user_a_id} and {user_b_id}: {e}")
            raise RepositoryException(f"Failed to check message history: {str(e)}")
