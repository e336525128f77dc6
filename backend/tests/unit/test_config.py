from pydantic import ValidationError
import pytest

from lessonbook.core.config import Settings


def test_defaults(monkeypatch):
    for var in ("DATABASE_URL", "SLOT_LOCK_ENABLED", "BROADCAST_URL", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    settings = Settings(_env_file=None)

    assert settings.database_url.startswith("sqlite")
    assert settings.is_sqlite
    assert settings.slot_lock_enabled is False
    assert settings.broadcast_url == "memory://"
    assert settings.default_page_size == 20
    assert settings.algorithm == "HS256"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SLOT_LOCK_ENABLED", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ENVIRONMENT", "Production")

    settings = Settings(_env_file=None)

    assert settings.slot_lock_enabled is True
    assert settings.log_level == "DEBUG"
    assert settings.is_production


def test_invalid_log_level_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_non_positive_ttl_rejected(monkeypatch):
    monkeypatch.setenv("SLOT_LOCK_TTL_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_production_refuses_development_secret(monkeypatch):
    from lessonbook import main
    from lessonbook.core.config import DEFAULT_SECRET_KEY, settings

    monkeypatch.setattr(settings, "environment", "production")
    monkeypatch.setattr(settings, "secret_key", DEFAULT_SECRET_KEY)

    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        main._validate_startup_config()


def test_production_accepts_configured_secret(monkeypatch):
    from pydantic import SecretStr

    from lessonbook import main
    from lessonbook.core.config import settings

    monkeypatch.setattr(settings, "environment", "production")
    monkeypatch.setattr(settings, "secret_key", SecretStr("a-real-deployment-secret"))

    main._validate_startup_config()
