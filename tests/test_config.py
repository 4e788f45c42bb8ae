"""Tests for configuration and application assembly."""

import asyncio

import pytest
from pydantic import ValidationError

from spendwise.audit import AuditLogger
from spendwise.config import (
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    Settings,
    get_settings,
    validate_all_settings,
)
from spendwise.models.audit import AuditEventBuilder
from spendwise.orchestrator import create_app_components
from spendwise.services.storage import (
    AuditStorageInterface,
    InMemoryUserStorage,
    SQLUserStorage,
)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults_from_environment(self):
        """Test that settings load from the environment."""
        settings = get_settings()
        assert settings.database.is_memory
        assert settings.auth.algorithm == "HS256"
        assert settings.auth.expire_hours == 24
        assert settings.auth.bcrypt_rounds == 10
        assert settings.auth.password_min_length == 6

    def test_missing_secret_is_reported(self, monkeypatch):
        """Test that a missing JWT secret fails validation."""
        monkeypatch.setenv("JWT_SECRET", "")

        results = validate_all_settings(Settings())

        assert results["database"] is True
        assert results["auth"] is False
        assert "auth_error" in results

    def test_log_level_is_validated(self):
        """Test that log levels are normalized and checked."""
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            AppSettings(log_level="chatty")

    def test_cors_origins_list(self):
        """Test splitting the CORS origin list."""
        settings = AppSettings(cors_origins="http://a.test, http://b.test,")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_bcrypt_rounds_bounds(self):
        """Test that absurd bcrypt costs are refused."""
        with pytest.raises(ValidationError):
            AuthSettings(secret="long-enough-secret", bcrypt_rounds=2)


class TestAppComponents:
    """Tests for the component factory."""

    def test_memory_backend(self, settings):
        """Test that memory:// selects in-memory storage."""
        components = create_app_components(settings)
        assert isinstance(components.storage, InMemoryUserStorage)
        assert components.database is None
        components.close()

    def test_sql_backend(self, tmp_path, auth_settings):
        """Test that a database URL selects SQL storage."""
        settings = Settings(
            database_override=DatabaseSettings(url=f"sqlite:///{tmp_path / 'app.db'}"),
            auth_override=auth_settings,
        )
        components = create_app_components(settings)
        try:
            assert isinstance(components.storage, SQLUserStorage)
            assert components.database is not None
        finally:
            components.close()


class _BrokenAuditStorage(AuditStorageInterface):
    async def append_event(self, event):
        raise RuntimeError("disk full")

    async def get_events_by_correlation_id(self, correlation_id):
        return []

    async def get_recent_events(self, user_id=None, limit=100):
        return []


class TestAuditLogger:
    """Tests for audit logging resilience."""

    def test_storage_failure_does_not_raise(self):
        """Test that a failing audit store never breaks the caller."""
        logger = AuditLogger(_BrokenAuditStorage())
        event = AuditEventBuilder.login_failed("x@example.com")
        assert asyncio.run(logger.log(event)) is False

    def test_local_only_logging(self):
        """Test logging without any storage configured."""
        logger = AuditLogger()
        event = AuditEventBuilder.login_failed("x@example.com")
        assert asyncio.run(logger.log(event)) is True
