"""
Audit Logger

DESIGN DECISION: Every change to a user's money is logged.
This provides:
1. Complete traceability of budget movements
2. Debugging capability
3. A history the user could be shown later

The audit logger:
- Is async to match the storage layer
- Gracefully handles failures (doesn't crash the request if logging fails)
- Supports correlation IDs to trace the events of one request
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from spendwise.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from spendwise.services.storage import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for JSON output.

    Called once when the application is created.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("spendwise.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_user_registered(
        self,
        user_id: UUID,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.user_registered(user_id, email, correlation_id))

    async def log_login_succeeded(
        self,
        user_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.login_succeeded(user_id, correlation_id))

    async def log_login_failed(
        self,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.login_failed(email, correlation_id))

    async def log_budget_updated(
        self,
        user_id: UUID,
        previous: Decimal,
        current: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.budget_updated(user_id, previous, current, correlation_id)
        )

    async def log_budget_check_rejected(
        self,
        user_id: UUID,
        operation: str,
        current_budget: Decimal,
        requested_change: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a spending mutation refused for lack of budget."""
        event = AuditEventBuilder.budget_check_rejected(
            user_id=user_id,
            operation=operation,
            current_budget=current_budget,
            requested_change=requested_change,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_spending_created(
        self,
        user_id: UUID,
        record_id: UUID,
        price: Decimal,
        new_budget: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.spending_created(
            user_id=user_id,
            record_id=record_id,
            price=price,
            new_budget=new_budget,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_spending_updated(
        self,
        user_id: UUID,
        record_id: UUID,
        old_price: Decimal,
        new_price: Decimal,
        new_budget: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.spending_updated(
            user_id=user_id,
            record_id=record_id,
            old_price=old_price,
            new_price=new_price,
            new_budget=new_budget,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_spending_deleted(
        self,
        user_id: UUID,
        record_id: UUID,
        refunded: Decimal,
        new_budget: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.spending_deleted(
            user_id=user_id,
            record_id=record_id,
            refunded=refunded,
            new_budget=new_budget,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_query_executed(
        self,
        user_id: UUID,
        query_type: str,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.query_executed(user_id, query_type, result_count, correlation_id)
        )

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a request.
    Pass it through all subsequent operations.
    """
    return uuid4()
