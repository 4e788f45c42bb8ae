"""Budget ledger package."""

from spendwise.ledger.budget import (
    BudgetError,
    BudgetLedger,
    InsufficientBudgetError,
    InvalidBudgetError,
)

__all__ = [
    "BudgetError",
    "BudgetLedger",
    "InsufficientBudgetError",
    "InvalidBudgetError",
]
