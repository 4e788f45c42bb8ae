"""Spending record management package."""

from spendwise.spending.manager import (
    RecordNotFoundError,
    SpendingError,
    SpendingRecordManager,
)

__all__ = ["RecordNotFoundError", "SpendingError", "SpendingRecordManager"]
