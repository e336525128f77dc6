# backend/tests/conftest.py
"""
Pytest configuration.

Every test gets a fresh in-memory sqlite schema and a recording event sink.
Settings are pinned through the environment BEFORE any lessonbook import.
"""

import os

# CRITICAL: Pin settings BEFORE any app imports!
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SLOT_LOCK_ENABLED"] = "false"
os.environ["BROADCAST_URL"] = "memory://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from typing import Generator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lessonbook.api.dependencies import get_db, get_event_sink
from lessonbook.core.enums import RoleName
from lessonbook.database import Base
from lessonbook.main import fastapi_app as app  # Use FastAPI instance for tests
import lessonbook.models  # noqa: F401
from lessonbook.models.user import User
from lessonbook.services.booking_service import BookingService

from .utils.event_sink import RecordingEventSink
from .utils.factories import auth_headers_for, create_message, create_user


@pytest.fixture(scope="session")
def test_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(test_engine) -> Generator[Session, None, None]:
    """Fresh schema per test; the session is shared with TestClient requests."""
    Base.metadata.create_all(bind=test_engine)
    TestingSessionLocal = sessionmaker(
        bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def event_sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def booking_service(db: Session, event_sink: RecordingEventSink) -> BookingService:
    return BookingService(db, event_sink)


@pytest.fixture
def client(db: Session, event_sink: RecordingEventSink) -> Generator[TestClient, None, None]:
    """Create a test client with the test database and recording sink."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_sink] = lambda: event_sink

    # Don't use context manager - lifespan would connect the real broadcaster
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Users
# ============================================================================


@pytest.fixture
def teacher(db: Session) -> User:
    return create_user(db, RoleName.TEACHER, name="Grace Hopper", profile_image="grace.png")


@pytest.fixture
def other_teacher(db: Session) -> User:
    return create_user(db, RoleName.TEACHER, name="Alan Turing")


@pytest.fixture
def student(db: Session, teacher: User) -> User:
    """Student who has already messaged ``teacher``."""
    user = create_user(db, RoleName.STUDENT, name="Ada Lovelace")
    create_message(db, user, teacher, "Hello, are you free on Monday?")
    return user


@pytest.fixture
def other_student(db: Session, teacher: User) -> User:
    """Second student; the teacher wrote first."""
    user = create_user(db, RoleName.STUDENT, name="Charles Babbage")
    create_message(db, teacher, user, "Happy to help with your engine.")
    return user


@pytest.fixture
def third_student(db: Session, teacher: User) -> User:
    user = create_user(db, RoleName.STUDENT, name="Mary Somerville")
    create_message(db, user, teacher, "Hi!")
    return user


@pytest.fixture
def stranger(db: Session) -> User:
    """Student with no message history."""
    return create_user(db, RoleName.STUDENT, name="Unknown Student")


# ============================================================================
# Auth headers
# ============================================================================


@pytest.fixture
def auth_headers_student(student: User) -> dict:
    return auth_headers_for(student)


@pytest.fixture
def auth_headers_other_student(other_student: User) -> dict:
    return auth_headers_for(other_student)


@pytest.fixture
def auth_headers_teacher(teacher: User) -> dict:
    return auth_headers_for(teacher)


@pytest.fixture
def auth_headers_other_teacher(other_teacher: User) -> dict:
    return auth_headers_for(other_teacher)
