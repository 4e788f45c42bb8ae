"""Tests for budget arithmetic and spending queries."""

import pytest
from datetime import date
from decimal import Decimal

from spendwise.ledger import BudgetLedger, InsufficientBudgetError, InvalidBudgetError
from spendwise.models.user import SpendingRecord, TagKind, User
from spendwise.queries import (
    NoMatchingRecordsError,
    QueryExecutionError,
    SpendingQueryExecutor,
    day_window,
)


def _user(budget: str = "100", spending=None) -> User:
    return User(
        name="Alice",
        email="alice@example.com",
        password_hash="h",
        current_budget=Decimal(budget),
        spending=spending or [],
    )


def _record(day: date, price: str, primary=None, secondary=None) -> SpendingRecord:
    return SpendingRecord(
        date=day,
        product="Item",
        price=Decimal(price),
        primary_tag=primary,
        secondary_tag=secondary,
    )


class TestBudgetLedger:
    """Tests for the non-negative budget invariant."""

    def test_reserve_debits(self):
        """Test that reserving subtracts the amount."""
        ledger = BudgetLedger()
        assert ledger.reserve(_user("100"), Decimal("40")) == Decimal("60")

    def test_reserve_exact_budget_reaches_zero(self):
        """Test that spending the whole budget is allowed."""
        ledger = BudgetLedger()
        assert ledger.reserve(_user("40"), Decimal("40")) == Decimal("0")

    def test_reserve_rejects_overdraft(self):
        """Test that a debit larger than the budget is refused outright."""
        ledger = BudgetLedger()
        user = _user("30")

        with pytest.raises(InsufficientBudgetError) as exc_info:
            ledger.reserve(user, Decimal("50"))

        assert exc_info.value.current_budget == Decimal("30")
        assert exc_info.value.change == Decimal("-50")
        # Ledger never mutates
        assert user.current_budget == Decimal("30")

    def test_adjust_both_directions(self):
        """Test refunds and further debits."""
        ledger = BudgetLedger()
        user = _user("30")
        assert ledger.adjust(user, Decimal("70")) == Decimal("100")
        assert ledger.adjust(user, Decimal("-30")) == Decimal("0")

        with pytest.raises(InsufficientBudgetError):
            ledger.adjust(user, Decimal("-30.01"))

    def test_adjust_refuses_unstorable_budget(self):
        """Test that a refund may not push the budget to 10^12 or beyond."""
        ledger = BudgetLedger()
        user = _user("999999999999.99")

        with pytest.raises(InvalidBudgetError):
            ledger.adjust(user, Decimal("50"))
        with pytest.raises(InvalidBudgetError):
            ledger.adjust(user, Decimal("0.01"))

        assert user.current_budget == Decimal("999999999999.99")

    def test_adjust_up_to_largest_budget(self):
        """Test that the largest storable budget is still reachable."""
        ledger = BudgetLedger()
        assert ledger.adjust(_user("999999999999.98"), Decimal("0.01")) == Decimal("999999999999.99")
        assert ledger.reserve(_user("999999999999.99"), Decimal("0.99")) == Decimal("999999999999.00")

    def test_set_absolute_accepts_numbers_and_strings(self):
        """Test accepted absolute budget forms."""
        ledger = BudgetLedger()
        user = _user("0")
        assert ledger.set_absolute(user, 100) == Decimal("100.00")
        assert ledger.set_absolute(user, "250.5") == Decimal("250.50")
        assert ledger.set_absolute(user, Decimal("0")) == Decimal("0.00")

    def test_set_absolute_ignores_spending_history(self):
        """Test that the new budget isn't reconciled with existing records."""
        ledger = BudgetLedger()
        user = _user("10", [_record(date(2024, 3, 1), "500")])
        assert ledger.set_absolute(user, "5") == Decimal("5.00")

    @pytest.mark.parametrize("value", ["-1", "abc", "", "NaN", "Infinity", True, "1e20"])
    def test_set_absolute_rejects_invalid(self, value):
        """Test that malformed, negative, and absurd budgets are refused."""
        with pytest.raises(InvalidBudgetError):
            BudgetLedger().set_absolute(_user(), value)

    def test_spent_total(self):
        """Test summing record prices."""
        user = _user("0", [
            _record(date(2024, 3, 1), "10.25"),
            _record(date(2024, 3, 2), "4.75"),
        ])
        assert BudgetLedger().spent_total(user) == Decimal("15.00")


class TestSpendingQueryExecutor:
    """Tests for read-only record queries."""

    def test_day_window_spans_whole_days(self):
        """Test that the window covers the entire end day."""
        start, end = day_window(date(2024, 3, 1), date(2024, 3, 1))
        assert start.hour == 0 and start.minute == 0
        assert (end.hour, end.minute, end.second) == (23, 59, 59)
        assert end.microsecond == 999000

    def test_range_is_inclusive(self):
        """Test that records on the first and last day are included."""
        records = [
            _record(date(2024, 2, 29), "1"),
            _record(date(2024, 3, 1), "2"),
            _record(date(2024, 3, 15), "3"),
            _record(date(2024, 3, 31), "4"),
            _record(date(2024, 4, 1), "5"),
        ]
        result = SpendingQueryExecutor().filter_by_range(
            records, date(2024, 3, 1), date(2024, 3, 31)
        )
        assert [r.price for r in result] == [Decimal("2"), Decimal("3"), Decimal("4")]

    def test_range_rejects_reversed_dates(self):
        """Test that end before start is an error."""
        with pytest.raises(QueryExecutionError):
            SpendingQueryExecutor().filter_by_range([], date(2024, 3, 2), date(2024, 3, 1))

    def test_tag_filter_is_case_insensitive(self):
        """Test that the query value is upper-cased before comparison."""
        records = [
            _record(date(2024, 3, 1), "1", primary="food"),
            _record(date(2024, 3, 2), "2", primary="rent"),
            _record(date(2024, 3, 3), "3", primary="Food"),
        ]
        result = SpendingQueryExecutor().filter_by_tag(records, TagKind.PRIMARY, "fOoD")
        assert [r.price for r in result] == [Decimal("1"), Decimal("3")]

    def test_tag_filter_no_matches(self):
        """Test that an empty result is an error naming the tag."""
        records = [_record(date(2024, 3, 1), "1", secondary="weekly")]

        with pytest.raises(NoMatchingRecordsError) as exc_info:
            SpendingQueryExecutor().filter_by_tag(records, TagKind.SECONDARY, "monthly")

        assert "MONTHLY" in str(exc_info.value)
        assert "secondary" in str(exc_info.value)

    def test_tag_filter_rejects_blank_value(self):
        """Test that a blank tag query is a validation problem, not a miss."""
        with pytest.raises(QueryExecutionError) as exc_info:
            SpendingQueryExecutor().filter_by_tag([], TagKind.PRIMARY, "  ")
        assert not isinstance(exc_info.value, NoMatchingRecordsError)

    def test_summarize_groups_by_tag(self):
        """Test per-tag totals, with untagged records grouped together."""
        records = [
            _record(date(2024, 3, 1), "10", primary="food"),
            _record(date(2024, 3, 2), "5.50", primary="FOOD"),
            _record(date(2024, 3, 3), "20", primary="rent"),
            _record(date(2024, 3, 4), "1.25"),
        ]
        summary = SpendingQueryExecutor().summarize(records, TagKind.PRIMARY, Decimal("63.25"))

        assert summary.record_count == 4
        assert summary.total_spent == 36.75
        assert summary.current_budget == 63.25
        assert summary.breakdown == {"FOOD": 15.5, "RENT": 20.0, "UNTAGGED": 1.25}
