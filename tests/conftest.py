"""Shared fixtures."""

import asyncio

import pytest

from spendwise.config import (
    MEMORY_DATABASE_URL,
    AuthSettings,
    DatabaseSettings,
    Settings,
    get_settings,
)
from spendwise.models.user import User
from spendwise.services.storage import InMemoryUserStorage


TEST_SECRET = "test-secret-for-tokens"


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Never touch a real database or a real secret."""
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("DATABASE_URL", MEMORY_DATABASE_URL)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def auth_settings():
    # Lowest bcrypt cost keeps the suite fast
    return AuthSettings(secret=TEST_SECRET, bcrypt_rounds=4)


@pytest.fixture
def settings(auth_settings):
    return Settings(
        database_override=DatabaseSettings(url=MEMORY_DATABASE_URL),
        auth_override=auth_settings,
    )


@pytest.fixture
def storage():
    return InMemoryUserStorage()


@pytest.fixture
def make_user(storage):
    """Create and store a user with the given budget."""

    def _make(budget="0", email="alice@example.com"):
        user = User(
            name="Alice",
            email=email,
            password_hash="not-a-real-hash",
            current_budget=budget,
        )
        return asyncio.run(storage.create_user(user))

    return _make
