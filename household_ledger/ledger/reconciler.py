"""
Budget Reconciler

Pure functions over a record list. No side effects, no storage access.

DESIGN DECISION: The budget is always an explicit argument.
The session budget lives in the LedgerStore (from settings); these
functions never read configuration, so they can be tested in isolation.
"""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from household_ledger.models.expense import (
    AMOUNT_QUANTUM,
    MAX_AMOUNT,
    AdmissionDecision,
    ExpenseRecord,
    LedgerSnapshot,
    RejectionReason,
)


def parse_amount(value: object) -> Optional[Decimal]:
    """
    Parse form input into a positive finite Decimal.

    Returns None for anything that is not a positive finite number:
    zero, negatives, NaN, infinity, blank or non-numeric text, booleans.
    Amounts finer than AMOUNT_QUANTUM or above MAX_AMOUNT are also
    refused, so "1e-400" never reaches storage as 0.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        return None
    if amount != amount.quantize(AMOUNT_QUANTUM):
        return None
    return amount


def compute_totals(
    records: Iterable[ExpenseRecord],
    budget: Decimal,
) -> tuple[Decimal, Decimal]:
    """Return (total_spent, remaining) where remaining = budget - total_spent."""
    total_spent = sum((record.amount for record in records), Decimal("0"))
    return total_spent, budget - total_spent


def is_over_budget(records: Iterable[ExpenseRecord], budget: Decimal) -> bool:
    _, remaining = compute_totals(records, budget)
    return remaining < 0


def admit(
    records: Iterable[ExpenseRecord],
    proposed_amount: object,
    budget: Decimal,
) -> AdmissionDecision:
    """
    Decide whether a proposed expense may be recorded.

    The check runs against the remaining budget *before* the new record
    is added. An amount exactly equal to the remaining budget is accepted.
    """
    _, remaining = compute_totals(records, budget)

    amount = parse_amount(proposed_amount)
    if amount is None:
        return AdmissionDecision.reject(RejectionReason.INVALID_AMOUNT, remaining)

    if amount > remaining:
        return AdmissionDecision.reject(
            RejectionReason.BUDGET_EXCEEDED, remaining, amount=amount
        )

    return AdmissionDecision.accept(amount, remaining)


def build_snapshot(
    records: Iterable[ExpenseRecord],
    budget: Decimal,
) -> LedgerSnapshot:
    """Build the immutable snapshot for a record list, keeping the given order."""
    ordered = tuple(records)
    total_spent, remaining = compute_totals(ordered, budget)
    return LedgerSnapshot(
        records=ordered,
        budget=budget,
        total_spent=total_spent,
        remaining=remaining,
    )


class BudgetReconciler:
    """
    The reconciler functions bound to one budget.

    Convenience for callers that hold a session budget; every method
    delegates to the module-level pure functions.
    """

    def __init__(self, budget: Decimal):
        self._budget = Decimal(budget)

    @property
    def budget(self) -> Decimal:
        return self._budget

    def compute_totals(self, records: Iterable[ExpenseRecord]) -> tuple[Decimal, Decimal]:
        return compute_totals(records, self._budget)

    def admit(self, records: Iterable[ExpenseRecord], proposed_amount: object) -> AdmissionDecision:
        return admit(records, proposed_amount, self._budget)

    def is_over_budget(self, records: Iterable[ExpenseRecord]) -> bool:
        return is_over_budget(records, self._budget)

    def build_snapshot(self, records: Iterable[ExpenseRecord]) -> LedgerSnapshot:
        return build_snapshot(records, self._budget)
