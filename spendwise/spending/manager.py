"""
Spending Record Manager

This module owns every change to a user's spending collection.

Flow for each mutation:
1. Find the record (edit/delete)
2. Ask the budget ledger for the new budget (may refuse)
3. Write the new budget AND the new collection in one storage call
4. Audit

DESIGN DECISION: Steps 2 and 3 are never separated by a partial write.
If the ledger refuses, nothing is written at all. If it accepts, the
budget and the records are persisted together via save_ledger, so no
reader can observe a record without its budget effect or vice versa.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from spendwise.audit import AuditLogger
from spendwise.ledger import BudgetLedger, InsufficientBudgetError
from spendwise.models.schemas import SpendingRecordInput, SpendingSummary
from spendwise.models.user import SpendingRecord, TagKind, User
from spendwise.queries import SpendingQueryExecutor
from spendwise.services.storage import UserStorageInterface


class SpendingError(Exception):
    """Base exception for spending record operations."""
    pass


class RecordNotFoundError(SpendingError):
    """No record with this ID in the user's collection."""

    def __init__(self, record_id: UUID):
        self.record_id = record_id
        super().__init__("Spending record not found.")


class SpendingRecordManager:
    """
    CRUD and queries over one user's spending records.

    Budget arithmetic is delegated to the BudgetLedger; filtering is
    delegated to the SpendingQueryExecutor.
    """

    def __init__(
        self,
        storage: UserStorageInterface,
        ledger: Optional[BudgetLedger] = None,
        query_executor: Optional[SpendingQueryExecutor] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._ledger = ledger or BudgetLedger()
        self._queries = query_executor or SpendingQueryExecutor()
        self._audit_logger = audit_logger

    def _find(self, user: User, record_id: UUID) -> SpendingRecord:
        record = user.find_record(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def _reject(
        self,
        user: User,
        operation: str,
        error: InsufficientBudgetError,
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_budget_check_rejected(
                user_id=user.id,
                operation=operation,
                current_budget=error.current_budget,
                requested_change=error.change,
                correlation_id=correlation_id,
            )

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def create(
        self,
        user: User,
        data: SpendingRecordInput,
        correlation_id: Optional[UUID] = None,
    ) -> SpendingRecord:
        """
        Add a record and debit its price from the budget.

        Returns:
            The created record, with its newly assigned ID

        Raises:
            InsufficientBudgetError: If price > current budget (nothing is written)
        """
        record = SpendingRecord(
            date=data.date,
            product=data.product,
            price=data.price,
            primary_tag=data.primary_tag,
            secondary_tag=data.secondary_tag,
        )

        try:
            new_budget = self._ledger.reserve(user, record.price)
        except InsufficientBudgetError as e:
            await self._reject(user, "create", e, correlation_id)
            raise InsufficientBudgetError(
                e.current_budget,
                e.change,
                "Not enough budget to create this spending record.",
            ) from e

        await self._storage.save_ledger(user.id, new_budget, [*user.spending, record])

        if self._audit_logger:
            await self._audit_logger.log_spending_created(
                user_id=user.id,
                record_id=record.id,
                price=record.price,
                new_budget=new_budget,
                correlation_id=correlation_id,
            )

        return record

    async def edit(
        self,
        user: User,
        record_id: UUID,
        data: SpendingRecordInput,
        correlation_id: Optional[UUID] = None,
    ) -> SpendingRecord:
        """
        Replace a record's fields and move the budget by the price change.

        A higher price consumes more budget, a lower one gives some back:
        the budget changes by exactly -(new_price - old_price).

        Raises:
            RecordNotFoundError: If the record isn't in the user's collection
            InsufficientBudgetError: If the increase exceeds the budget
            InvalidBudgetError: If the refund would be too large to store
        """
        existing = self._find(user, record_id)
        price_delta = data.price - existing.price

        try:
            new_budget = self._ledger.adjust(user, -price_delta)
        except InsufficientBudgetError as e:
            await self._reject(user, "update", e, correlation_id)
            raise InsufficientBudgetError(
                e.current_budget,
                e.change,
                "Not enough budget to update this spending record.",
            ) from e

        updated = SpendingRecord(
            id=existing.id,
            date=data.date,
            product=data.product,
            price=data.price,
            primary_tag=data.primary_tag,
            secondary_tag=data.secondary_tag,
        )
        spending = [updated if r.id == record_id else r for r in user.spending]

        await self._storage.save_ledger(user.id, new_budget, spending)

        if self._audit_logger:
            await self._audit_logger.log_spending_updated(
                user_id=user.id,
                record_id=record_id,
                old_price=existing.price,
                new_price=updated.price,
                new_budget=new_budget,
                correlation_id=correlation_id,
            )

        return updated

    async def delete(
        self,
        user: User,
        record_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> SpendingRecord:
        """
        Remove a record and give its price back to the budget.

        Returns:
            The removed record

        Raises:
            RecordNotFoundError: If the record isn't in the user's collection
            InvalidBudgetError: If the refund would be too large to store
        """
        existing = self._find(user, record_id)
        new_budget = self._ledger.adjust(user, existing.price)
        spending = [r for r in user.spending if r.id != record_id]

        await self._storage.save_ledger(user.id, new_budget, spending)

        if self._audit_logger:
            await self._audit_logger.log_spending_deleted(
                user_id=user.id,
                record_id=record_id,
                refunded=existing.price,
                new_budget=new_budget,
                correlation_id=correlation_id,
            )

        return existing

    async def update_budget(
        self,
        user: User,
        value: Union[Decimal, int, float, str],
        correlation_id: Optional[UUID] = None,
    ) -> User:
        """
        Overwrite the budget with an absolute value.

        Existing records are left alone; the budget is NOT recomputed
        from them.

        Raises:
            InvalidBudgetError: If the value is not a finite number >= 0
        """
        new_budget = self._ledger.set_absolute(user, value)
        stored = await self._storage.set_budget(user.id, new_budget)

        if self._audit_logger:
            await self._audit_logger.log_budget_updated(
                user_id=user.id,
                previous=user.current_budget,
                current=new_budget,
                correlation_id=correlation_id,
            )

        return stored

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def _log_query(
        self,
        user: User,
        query_type: str,
        result_count: int,
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_query_executed(
                user_id=user.id,
                query_type=query_type,
                result_count=result_count,
                correlation_id=correlation_id,
            )

    def list_all(self, user: User) -> list[SpendingRecord]:
        """The full collection, in insertion order."""
        return list(user.spending)

    async def list_by_range(
        self,
        user: User,
        start: date,
        end: date,
        correlation_id: Optional[UUID] = None,
    ) -> list[SpendingRecord]:
        """Records dated from the start of `start` to the end of `end`."""
        records = self._queries.filter_by_range(user.spending, start, end)
        await self._log_query(user, "range", len(records), correlation_id)
        return records

    async def list_by_tag(
        self,
        user: User,
        tag_kind: TagKind,
        tag_value: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[SpendingRecord]:
        """
        Records carrying the given tag (case-insensitive).

        Raises:
            NoMatchingRecordsError: If nothing matches
        """
        records = self._queries.filter_by_tag(user.spending, tag_kind, tag_value)
        await self._log_query(user, f"{tag_kind.value}_tag", len(records), correlation_id)
        return records

    async def summarize(
        self,
        user: User,
        group_by: TagKind,
        correlation_id: Optional[UUID] = None,
    ) -> SpendingSummary:
        """Spending totals grouped by tag."""
        summary = self._queries.summarize(user.spending, group_by, user.current_budget)
        await self._log_query(user, "summary", summary.record_count, correlation_id)
        return summary
