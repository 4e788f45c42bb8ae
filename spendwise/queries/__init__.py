"""Query execution package."""

from spendwise.queries.executor import (
    NoMatchingRecordsError,
    QueryExecutionError,
    SpendingQueryExecutor,
    day_window,
)

__all__ = [
    "NoMatchingRecordsError",
    "QueryExecutionError",
    "SpendingQueryExecutor",
    "day_window",
]
