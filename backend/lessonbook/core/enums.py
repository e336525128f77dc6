# backend/lessonbook/core/enums.py
"""
Core enums for the lesson booking platform.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles carried in access tokens."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
