"""
Query Execution Engine

DESIGN DECISION: Queries are DETERMINISTIC filters over a user's
own spending collection. They never touch storage and never touch
the budget; the spending manager loads the user and hands the
records in.

Range queries are inclusive of the WHOLE end day: the window is
[start 00:00:00.000, end 23:59:59.999].
"""

from datetime import date, datetime, time
from decimal import Decimal

from spendwise.models.schemas import SpendingSummary
from spendwise.models.user import UNTAGGED, SpendingRecord, TagKind, normalize_tag


END_OF_DAY = time(23, 59, 59, 999000)


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


class NoMatchingRecordsError(QueryExecutionError):
    """A tag query found nothing."""

    def __init__(self, tag_kind: TagKind, tag_value: str):
        self.tag_kind = tag_kind
        self.tag_value = tag_value
        super().__init__(
            f"No spending records found for {tag_kind.value} tag: {tag_value}"
        )


def day_window(start: date, end: date) -> tuple[datetime, datetime]:
    """Expand two calendar dates to an inclusive datetime window."""
    return datetime.combine(start, time.min), datetime.combine(end, END_OF_DAY)


class SpendingQueryExecutor:
    """
    Executes read-only queries against a list of spending records.

    GUARANTEES:
    - Only returns records that were passed in
    - Preserves the collection's order
    """

    def filter_by_range(
        self,
        records: list[SpendingRecord],
        start: date,
        end: date,
    ) -> list[SpendingRecord]:
        """Records dated within [start, end], both days included."""
        if end < start:
            raise QueryExecutionError("End date cannot be before start date")

        window_start, window_end = day_window(start, end)
        return [
            record for record in records
            if window_start <= datetime.combine(record.date, time.min) <= window_end
        ]

    def filter_by_tag(
        self,
        records: list[SpendingRecord],
        tag_kind: TagKind,
        tag_value: str,
    ) -> list[SpendingRecord]:
        """
        Records whose tag of the given kind matches, case-insensitively.

        Raises:
            NoMatchingRecordsError: If nothing matches
        """
        try:
            wanted = normalize_tag(tag_value)
        except ValueError as e:
            raise QueryExecutionError(str(e)) from e

        matches = [record for record in records if record.tag(tag_kind) == wanted]
        if not matches:
            raise NoMatchingRecordsError(tag_kind, wanted)
        return matches

    def summarize(
        self,
        records: list[SpendingRecord],
        group_by: TagKind,
        current_budget: Decimal,
    ) -> SpendingSummary:
        """Total spent, grouped by primary or secondary tag."""
        groups: dict[str, Decimal] = {}

        for record in records:
            key = record.tag(group_by) or UNTAGGED
            groups[key] = groups.get(key, Decimal("0")) + record.price

        total = sum(groups.values(), Decimal("0"))

        return SpendingSummary(
            group_by=group_by,
            record_count=len(records),
            total_spent=float(total),
            current_budget=float(current_budget),
            breakdown={key: float(amount) for key, amount in sorted(groups.items())},
        )
