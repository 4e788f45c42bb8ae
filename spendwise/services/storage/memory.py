"""
In-Memory Storage Implementation

Keeps user documents in a process-local dict. Used by the test suite
and selected with DATABASE_URL=memory:// for local experiments.

Documents are deep-copied on the way in and on the way out, so callers
can never mutate stored state except through the interface methods.
Each write swaps the whole document under a single key, which makes it
atomic with respect to every other coroutine on the event loop.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from spendwise.models.audit import AuditEvent
from spendwise.models.user import SpendingRecord, User
from spendwise.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    UserStorageInterface,
)


class InMemoryUserStorage(UserStorageInterface):
    """Dict-backed identity store."""

    def __init__(self):
        self._users: dict[UUID, User] = {}

    def _require(self, user_id: UUID) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    async def create_user(self, user: User) -> User:
        if any(existing.email == user.email for existing in self._users.values()):
            raise DuplicateError(f"Email already registered: {user.email}")
        self._users[user.id] = user.model_copy(deep=True)
        return user.model_copy(deep=True)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self._users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def save_ledger(
        self,
        user_id: UUID,
        current_budget: Decimal,
        spending: list[SpendingRecord],
    ) -> User:
        stored = self._require(user_id)
        updated = stored.model_copy(
            deep=True,
            update={
                "current_budget": current_budget,
                "spending": [record.model_copy(deep=True) for record in spending],
            },
        )
        self._users[user_id] = updated
        return updated.model_copy(deep=True)

    async def set_budget(self, user_id: UUID, current_budget: Decimal) -> User:
        stored = self._require(user_id)
        updated = stored.model_copy(deep=True, update={"current_budget": current_budget})
        self._users[user_id] = updated
        return updated.model_copy(deep=True)

    async def set_active_token(self, user_id: UUID, token: str) -> None:
        stored = self._require(user_id)
        self._users[user_id] = stored.model_copy(deep=True, update={"active_token": token})


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event.model_copy(deep=True))
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        user_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if user_id is None or e.user_id == user_id
        ]
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
