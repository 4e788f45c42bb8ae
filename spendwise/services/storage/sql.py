"""
SQL Storage Implementation

DESIGN DECISION: Each user is ONE row. The spending records are kept in
a JSON column on that row, mirroring the embedded-document model:
1. Budget and records change in a single UPDATE statement
2. No join is needed to load a user with their spending
3. Any SQLAlchemy-supported database works (SQLite by default)

TRADEOFFS:
- Range and tag filtering happen in Python, not in SQL
  (fine for one person's spending history)
- Concurrent writes for the same user are last-write-wins
- The async methods call the synchronous SQLAlchemy API, so each
  query blocks the event loop while it runs

The implementation follows the abstract interface, so business logic
never sees SQL.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import JSON, Column, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Field as SQLField, Session, SQLModel, create_engine, select
from tenacity import retry, stop_after_attempt, wait_exponential

from spendwise.config import DatabaseSettings, get_settings
from spendwise.models.audit import AuditEvent, AuditEventType, AuditSeverity
from spendwise.models.user import SpendingRecord, User
from spendwise.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    UserStorageInterface,
)


logger = structlog.get_logger(__name__)


# =========================
# Tables (SQLModel)
# =========================
class UserRow(SQLModel, table=True):
    """One user document, spending embedded as JSON."""
    __tablename__ = "users"

    id: str = SQLField(primary_key=True, max_length=36)
    name: str
    email: str = SQLField(index=True, unique=True)
    password_hash: str
    active_token: Optional[str] = None
    current_budget: Decimal = SQLField(default=Decimal("0"), max_digits=14, decimal_places=2)
    spending: List[dict] = SQLField(default_factory=list, sa_column=Column(JSON, nullable=False))
    join_date: datetime


class AuditRow(SQLModel, table=True):
    """Append-only audit trail."""
    __tablename__ = "audit_events"

    event_id: str = SQLField(primary_key=True, max_length=36)
    timestamp: datetime = SQLField(index=True)
    event_type: str
    severity: str
    user_id: Optional[str] = SQLField(default=None, index=True)
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    correlation_id: Optional[str] = SQLField(default=None, index=True)
    description: str
    details_json: str = "{}"
    error_message: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _spending_to_json(spending: list[SpendingRecord]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in spending]


class SQLDatabase:
    """
    Low-level database wrapper.

    Owns the SQLAlchemy engine. Created once at startup and shared by
    every storage object.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None):
        self._settings = settings or get_settings().database
        self._engine: Optional[Engine] = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> Engine:
        """
        Create the engine and make sure the tables exist.

        Retried with exponential backoff, since the database may still
        be starting when the application boots.
        """
        if self._engine is None:
            url = self._settings.url
            connect_args = {}
            if url.startswith("sqlite"):
                connect_args = {"check_same_thread": False}
            try:
                engine = create_engine(url, echo=self._settings.echo, connect_args=connect_args)
                SQLModel.metadata.create_all(engine)
            except SQLAlchemyError as e:
                raise StorageUnavailableError(f"Failed to connect to database: {e}") from e
            self._engine = engine
            logger.info("database_connected", dialect=engine.dialect.name)

        return self._engine

    @property
    def engine(self) -> Engine:
        return self.connect()

    def session(self) -> Session:
        return Session(self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


class SQLUserStorage(UserStorageInterface):
    """
    SQL implementation of the identity store.

    Every write is a single statement against the user's row.
    """

    def __init__(self, database: Optional[SQLDatabase] = None):
        self._db = database or SQLDatabase()

    def _user_to_row(self, user: User) -> UserRow:
        """Convert a User to a table row."""
        return UserRow(
            id=str(user.id),
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            active_token=user.active_token,
            current_budget=user.current_budget,
            spending=_spending_to_json(user.spending),
            join_date=user.join_date,
        )

    def _row_to_user(self, row: UserRow) -> User:
        """Convert a table row to a User."""
        return User(
            id=UUID(row.id),
            name=row.name,
            email=row.email,
            password_hash=row.password_hash,
            active_token=row.active_token,
            current_budget=Decimal(row.current_budget),
            spending=[SpendingRecord.model_validate(item) for item in row.spending or []],
            join_date=_as_utc(row.join_date),
        )

    def _update_row(self, user_id: UUID, **values) -> User:
        try:
            with self._db.session() as session:
                result = session.exec(
                    update(UserRow).where(UserRow.id == str(user_id)).values(**values)
                )
                if result.rowcount == 0:
                    session.rollback()
                    raise NotFoundError(f"User not found: {user_id}")
                session.commit()
                row = session.get(UserRow, str(user_id))
                return self._row_to_user(row)
        except StorageError:
            raise
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update user: {e}") from e

    async def create_user(self, user: User) -> User:
        """Insert a new user row."""
        try:
            with self._db.session() as session:
                existing = session.exec(
                    select(UserRow).where(UserRow.email == user.email)
                ).first()
                if existing:
                    raise DuplicateError(f"Email already registered: {user.email}")
                session.add(self._user_to_row(user))
                session.commit()
                return user
        except IntegrityError as e:
            raise DuplicateError(f"Email already registered: {user.email}") from e
        except StorageError:
            raise
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create user: {e}") from e

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        try:
            with self._db.session() as session:
                row = session.get(UserRow, str(user_id))
                return self._row_to_user(row) if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get user: {e}") from e

    async def get_user_by_email(self, email: str) -> Optional[User]:
        try:
            with self._db.session() as session:
                row = session.exec(
                    select(UserRow).where(UserRow.email == email.strip().lower())
                ).first()
                return self._row_to_user(row) if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get user: {e}") from e

    async def save_ledger(
        self,
        user_id: UUID,
        current_budget: Decimal,
        spending: list[SpendingRecord],
    ) -> User:
        """Write budget and spending in one UPDATE."""
        return self._update_row(
            user_id,
            current_budget=current_budget,
            spending=_spending_to_json(spending),
        )

    async def set_budget(self, user_id: UUID, current_budget: Decimal) -> User:
        return self._update_row(user_id, current_budget=current_budget)

    async def set_active_token(self, user_id: UUID, token: str) -> None:
        self._update_row(user_id, active_token=token)


class SQLAuditStorage(AuditStorageInterface):
    """
    SQL implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, database: Optional[SQLDatabase] = None):
        self._db = database or SQLDatabase()

    def _event_to_row(self, event: AuditEvent) -> AuditRow:
        """Convert an AuditEvent to a table row."""
        return AuditRow(
            event_id=str(event.event_id),
            timestamp=event.timestamp,
            event_type=event.event_type.value,
            severity=event.severity.value,
            user_id=str(event.user_id) if event.user_id else None,
            entity_type=event.entity_type,
            entity_id=str(event.entity_id) if event.entity_id else None,
            correlation_id=str(event.correlation_id) if event.correlation_id else None,
            description=event.description,
            details_json=event.details_json(),
            error_message=event.error_message,
        )

    def _row_to_event(self, row: AuditRow) -> AuditEvent:
        """Convert a table row to an AuditEvent."""
        return AuditEvent(
            event_id=UUID(row.event_id),
            timestamp=_as_utc(row.timestamp),
            event_type=AuditEventType(row.event_type),
            severity=AuditSeverity(row.severity),
            user_id=UUID(row.user_id) if row.user_id else None,
            entity_type=row.entity_type,
            entity_id=UUID(row.entity_id) if row.entity_id else None,
            correlation_id=UUID(row.correlation_id) if row.correlation_id else None,
            description=row.description,
            details=json.loads(row.details_json) if row.details_json else {},
            error_message=row.error_message,
        )

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            with self._db.session() as session:
                session.add(self._event_to_row(event))
                session.commit()
            return True
        except SQLAlchemyError as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning("audit_event_write_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            with self._db.session() as session:
                rows = session.exec(
                    select(AuditRow)
                    .where(AuditRow.correlation_id == str(correlation_id))
                    .order_by(AuditRow.timestamp)
                ).all()
                return [self._row_to_event(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get audit events: {e}") from e

    async def get_recent_events(
        self,
        user_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            with self._db.session() as session:
                stmt = select(AuditRow)
                if user_id is not None:
                    stmt = stmt.where(AuditRow.user_id == str(user_id))
                rows = session.exec(
                    stmt.order_by(AuditRow.timestamp.desc()).limit(limit)
                ).all()
                return [self._row_to_event(row) for row in rows]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get audit events: {e}") from e
