"""Configuration package."""

from spendwise.config.settings import (
    MEMORY_DATABASE_URL,
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "MEMORY_DATABASE_URL",
    "AppSettings",
    "AuthSettings",
    "DatabaseSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
