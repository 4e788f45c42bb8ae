"""
Budget Ledger

DESIGN DECISION: The ledger only COMPUTES. It never writes.
It answers "what would the budget be after this change, and is that
allowed?" and leaves persisting to the caller, who writes the new
budget together with the record change in one atomic update.

THE INVARIANT: current_budget >= 0 at rest.
Any computation that would go below zero raises instead of
returning a value, so a negative budget can never reach storage.
Partial debits are never applied.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from spendwise.models.user import User


CENT = Decimal("0.01")
MAX_BUDGET = Decimal("1e12")


class BudgetError(Exception):
    """Base exception for budget computations."""
    pass


class InsufficientBudgetError(BudgetError):
    """The change would drive the budget below zero."""

    def __init__(self, current_budget: Decimal, change: Decimal, message: str = ""):
        self.current_budget = current_budget
        self.change = change
        super().__init__(
            message
            or f"Not enough budget: {current_budget} available, change of {change} requested"
        )


class InvalidBudgetError(BudgetError):
    """An absolute budget value is not a well-formed non-negative number."""
    pass


class BudgetLedger:
    """
    Invariant-enforcing arithmetic over a user's current_budget.

    GUARANTEES:
    - Never returns a negative budget
    - Never returns a budget too large to store
    - Never mutates the user passed in
    """

    def _checked(self, user: User, change: Decimal) -> Decimal:
        new_budget = user.current_budget + change
        if new_budget < 0:
            raise InsufficientBudgetError(user.current_budget, change)
        # Storage keeps 14 digits, two of them decimals
        if new_budget >= MAX_BUDGET:
            raise InvalidBudgetError("Budget value is too large.")
        return new_budget

    def reserve(self, user: User, amount: Decimal) -> Decimal:
        """
        Compute the budget after debiting `amount`.

        Raises:
            InsufficientBudgetError: If the debit exceeds the budget
        """
        return self._checked(user, -amount)

    def adjust(self, user: User, delta: Decimal) -> Decimal:
        """
        Compute the budget after applying a signed `delta`.

        Positive deltas refund (record deleted, price lowered),
        negative deltas debit further (price raised).

        Raises:
            InsufficientBudgetError: If the result would be negative
            InvalidBudgetError: If the result would be too large to store
        """
        return self._checked(user, delta)

    def set_absolute(self, user: User, value: Union[Decimal, int, float, str]) -> Decimal:
        """
        Validate a budget given as an absolute value.

        This deliberately ignores the spending history; the budget is
        whatever the user says it is.

        Raises:
            InvalidBudgetError: If the value is not a finite number >= 0
        """
        if isinstance(value, bool):
            raise InvalidBudgetError("Invalid budget value.")
        try:
            budget = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidBudgetError("Invalid budget value.")

        if not budget.is_finite() or budget < 0:
            raise InvalidBudgetError("Invalid budget value.")
        # Storage keeps 14 digits, two of them decimals
        if budget >= MAX_BUDGET:
            raise InvalidBudgetError("Budget value is too large.")

        return budget.quantize(CENT)

    def spent_total(self, user: User) -> Decimal:
        """Sum of the prices of all the user's records."""
        return sum((record.price for record in user.spending), Decimal("0"))
