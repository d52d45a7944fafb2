"""Tests for display formatting helpers."""

from datetime import date
from decimal import Decimal

import pytest

from household_ledger.formatting import (
    format_currency,
    format_date,
    format_number,
    over_budget_message,
    today_iso,
)
from household_ledger.models.expense import LedgerSnapshot


class TestFormatNumber:
    @pytest.mark.parametrize("value,expected", [
        (0, "0"),
        (1000, "1,000"),
        (Decimal("1234567"), "1,234,567"),
        (Decimal("500000.00"), "500,000"),
        (Decimal("1234.5"), "1,234.50"),
        (-2500, "-2,500"),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_format_currency(self):
        assert format_currency(Decimal("400000")) == "₩400,000"
        assert format_currency(12, symbol="$") == "$12"


class TestFormatDate:
    def test_from_iso_string(self):
        assert format_date("2024-01-05") == "1/5"

    def test_from_date(self):
        assert format_date(date(2024, 12, 31)) == "12/31"

    def test_today_iso(self):
        assert today_iso() == date.today().isoformat()


class TestOverBudgetMessage:
    def test_none_within_budget(self):
        snapshot = LedgerSnapshot(budget=Decimal("10"), total_spent=Decimal("10"), remaining=Decimal("0"))
        assert over_budget_message(snapshot) is None

    def test_message_when_over(self):
        snapshot = LedgerSnapshot(
            budget=Decimal("500000"),
            total_spent=Decimal("600000"),
            remaining=Decimal("-100000"),
        )
        assert over_budget_message(snapshot) == "⚠️ 예산을 ₩100,000 초과했습니다!"
