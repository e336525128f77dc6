# backend/lessonbook/models/user.py
"""
User model for the lesson booking platform.

Users are the identity records behind both students and teachers; the
booking engine reads them only to populate display fields.
"""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..core.enums import RoleName
from ..database import Base


class User(Base):
    """Student, teacher or admin account."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value)
    profile_image = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER.value

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email} ({self.role})>"
