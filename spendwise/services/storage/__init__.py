"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
SQL (via SQLModel) is the production backend; the in-memory backend
serves tests and throwaway runs.
"""

from spendwise.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    UserStorageInterface,
)
from spendwise.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryUserStorage,
)
from spendwise.services.storage.sql import (
    SQLAuditStorage,
    SQLDatabase,
    SQLUserStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    "StorageUnavailableError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryUserStorage",
    # SQL implementation
    "SQLAuditStorage",
    "SQLDatabase",
    "SQLUserStorage",
]
