"""
Audit Models for SpendWise

Every change to a user's money is logged for audit purposes.
This provides:
1. Traceability of every budget movement
2. Debugging information when things go wrong
3. Ability to reconstruct how a budget got where it is

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_REGISTERED = "user_registered"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # Budget
    BUDGET_UPDATED = "budget_updated"
    BUDGET_CHECK_REJECTED = "budget_check_rejected"

    # Spending records
    SPENDING_CREATED = "spending_created"
    SPENDING_UPDATED = "spending_updated"
    SPENDING_DELETED = "spending_deleted"

    # Queries
    QUERY_EXECUTED = "query_executed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who did it, and to what
    user_id: Optional[UUID] = Field(
        default=None,
        description="User the event belongs to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'spending')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - ties together the events of one request
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": str(self.user_id) if self.user_id else None,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def details_json(self) -> str:
        return json.dumps(self.details, default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_registered(user_id, email, correlation_id)
        event = AuditEventBuilder.spending_created(user_id, record_id, price, budget, correlation_id)
    """

    @staticmethod
    def user_registered(
        user_id: UUID,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"User registered: {email}",
            details={"email": email},
        )

    @staticmethod
    def login_succeeded(
        user_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Login succeeded",
        )

    @staticmethod
    def login_failed(
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            correlation_id=correlation_id,
            description="Login failed: invalid email or password",
            details={"email": email},
        )

    @staticmethod
    def budget_updated(
        user_id: UUID,
        previous: Decimal,
        current: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Budget set from {previous} to {current}",
            details={"previous": str(previous), "current": str(current)},
        )

    @staticmethod
    def budget_check_rejected(
        user_id: UUID,
        operation: str,
        current_budget: Decimal,
        requested_change: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_CHECK_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="spending",
            correlation_id=correlation_id,
            description=f"Insufficient budget to {operation} spending record",
            details={
                "operation": operation,
                "current_budget": str(current_budget),
                "requested_change": str(requested_change),
            },
        )

    @staticmethod
    def spending_created(
        user_id: UUID,
        record_id: UUID,
        price: Decimal,
        new_budget: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPENDING_CREATED,
            user_id=user_id,
            entity_type="spending",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Spending record created for {price}",
            details={"price": str(price), "new_budget": str(new_budget)},
        )

    @staticmethod
    def spending_updated(
        user_id: UUID,
        record_id: UUID,
        old_price: Decimal,
        new_price: Decimal,
        new_budget: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPENDING_UPDATED,
            user_id=user_id,
            entity_type="spending",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Spending record price changed from {old_price} to {new_price}",
            details={
                "old_price": str(old_price),
                "new_price": str(new_price),
                "new_budget": str(new_budget),
            },
        )

    @staticmethod
    def spending_deleted(
        user_id: UUID,
        record_id: UUID,
        refunded: Decimal,
        new_budget: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPENDING_DELETED,
            user_id=user_id,
            entity_type="spending",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Spending record deleted, {refunded} returned to budget",
            details={"refunded": str(refunded), "new_budget": str(new_budget)},
        )

    @staticmethod
    def query_executed(
        user_id: UUID,
        query_type: str,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            severity=AuditSeverity.DEBUG,
            user_id=user_id,
            entity_type="query",
            correlation_id=correlation_id,
            description=f"Query '{query_type}' returned {result_count} results",
            details={"query_type": query_type, "result_count": result_count},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
