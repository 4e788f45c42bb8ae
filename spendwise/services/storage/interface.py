"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run on a SQL database in production
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations we need for users and their spending.

CRITICAL: Each write method is ONE atomic update of one user document.
`save_ledger` in particular writes the budget and the spending records
together, so no reader can ever see one without the other.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from uuid import UUID

from spendwise.models.audit import AuditEvent
from spendwise.models.user import SpendingRecord, User


class UserStorageInterface(ABC):
    """
    Abstract interface for the identity store.

    Any storage implementation (SQL, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def create_user(self, user: User) -> User:
        """
        Persist a new user.

        Raises:
            DuplicateError: If the email is already registered
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Retrieve a user by ID, or None."""
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by (normalized) email, or None."""
        pass

    @abstractmethod
    async def save_ledger(
        self,
        user_id: UUID,
        current_budget: Decimal,
        spending: list[SpendingRecord],
    ) -> User:
        """
        Atomically replace a user's budget and spending collection.

        Args:
            user_id: Owner of the ledger
            current_budget: New budget (already checked to be >= 0)
            spending: The full, updated spending collection

        Returns:
            The user as stored after the write

        Raises:
            NotFoundError: If the user doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def set_budget(self, user_id: UUID, current_budget: Decimal) -> User:
        """
        Overwrite a user's budget without touching the spending records.

        Raises:
            NotFoundError: If the user doesn't exist
        """
        pass

    @abstractmethod
    async def set_active_token(self, user_id: UUID, token: str) -> None:
        """
        Record the most recently issued session token.

        Raises:
            NotFoundError: If the user doesn't exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one request).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        user_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events, optionally for one user.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StorageUnavailableError(StorageError):
    """Could not connect to storage backend."""
    pass
