# backend/lessonbook/core/config.py
import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


DEFAULT_SECRET_KEY = SecretStr("local-dev-secret-key-change-me")


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")

    # Database
    database_url: str = Field(
        default="sqlite:///./lessonbook.db",
        description="SQLAlchemy URL for the booking store",
    )
    database_echo: bool = False

    # Auth
    secret_key: SecretStr = Field(
        default=DEFAULT_SECRET_KEY,
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    # Realtime notifications
    broadcast_url: str = Field(
        default="memory://",
        description="Broadcaster backend URL (memory:// or redis://host:port)",
    )

    # Optional per-slot approval lock
    redis_url: str = "redis://localhost:6379"
    slot_lock_enabled: bool = Field(
        default=False,
        description="Serialize approvals per slot key with a Redis lock",
    )
    slot_lock_ttl_seconds: int = 30
    slot_lock_namespace: str = "lessonbook"

    # Listing
    default_page_size: int = 20
    max_page_size: int = 100

    log_level: str = "INFO"
    cors_allowed_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v!r}")
        return level

    @field_validator("access_token_expire_minutes", "slot_lock_ttl_seconds")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("max_page_size")
    @classmethod
    def _page_size_ceiling(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_PAGE_SIZE must be >= 1")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = Settings()
