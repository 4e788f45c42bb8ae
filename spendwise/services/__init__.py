"""Services package."""

from spendwise.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryUserStorage,
    NotFoundError,
    SQLAuditStorage,
    SQLDatabase,
    SQLUserStorage,
    StorageError,
    StorageUnavailableError,
    UserStorageInterface,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryUserStorage",
    "NotFoundError",
    "SQLAuditStorage",
    "SQLDatabase",
    "SQLUserStorage",
    "StorageError",
    "StorageUnavailableError",
    "UserStorageInterface",
]
