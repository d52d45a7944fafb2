"""
Ledger core package.

The store and the pure reconciler functions. The reset coordinator
lives in household_ledger.ledger.reset because it depends on the
storage interface, which itself depends on the store.
"""

from household_ledger.ledger.reconciler import (
    BudgetReconciler,
    admit,
    build_snapshot,
    compute_totals,
    is_over_budget,
    parse_amount,
)
from household_ledger.ledger.store import LedgerStore, SnapshotObserver, Subscription

__all__ = [
    "BudgetReconciler",
    "LedgerStore",
    "SnapshotObserver",
    "Subscription",
    "admit",
    "build_snapshot",
    "compute_totals",
    "is_over_budget",
    "parse_amount",
]
