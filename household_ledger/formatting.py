"""
Display formatting helpers.

Amounts: thousands separators with a currency glyph prefix.
Dates: month/day without year or zero padding.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from household_ledger.models.expense import LedgerSnapshot


def format_number(amount: Union[Decimal, int, float]) -> str:
    """1234567 -> '1,234,567'; fractional amounts keep two decimals."""
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_currency(amount: Union[Decimal, int, float], symbol: str = "₩") -> str:
    return f"{symbol}{format_number(amount)}"


def format_date(value: Union[date, str]) -> str:
    """'2024-01-05' (or a date) -> '1/5'."""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return f"{value.month}/{value.day}"


def today_iso() -> str:
    return date.today().isoformat()


def over_budget_message(snapshot: LedgerSnapshot, symbol: str = "₩") -> Optional[str]:
    """Standing warning text when spending exceeds the budget, else None."""
    if not snapshot.is_over_budget:
        return None
    return f"⚠️ 예산을 {format_currency(snapshot.overspent_by, symbol)} 초과했습니다!"
