"""
Ledger Store

Owns the canonical, ordered list of expense records and the session budget,
and pushes an immutable LedgerSnapshot to observers on every observed change.

DESIGN DECISION: Repositories never hand records to callers directly.
They publish into the store; the store is the only source of truth
after a write. The store starts in a distinguished *loading* state
(snapshot is None) so callers can tell "not loaded yet" from "no expenses".
"""

from decimal import Decimal
from typing import Callable, Iterable, Optional

import structlog

from household_ledger.ledger.reconciler import build_snapshot
from household_ledger.models.expense import ExpenseRecord, LedgerSnapshot


SnapshotObserver = Callable[[LedgerSnapshot], None]

logger = structlog.get_logger(__name__)


class Subscription:
    """Handle returned by LedgerStore.subscribe. unsubscribe() is idempotent."""

    def __init__(self, store: 'LedgerStore', observer: SnapshotObserver):
        self._store = store
        self._observer = observer
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._detach(self)

    def _deliver(self, snapshot: LedgerSnapshot) -> None:
        if self._active:
            self._observer(snapshot)


class LedgerStore:
    """
    Holds the current snapshot and fans it out to subscribers.

    Usage:
        store = LedgerStore(budget=Decimal("500000"))
        handle = store.subscribe(render)
        ...
        handle.unsubscribe()
    """

    def __init__(self, budget: Decimal):
        self._budget = Decimal(budget)
        self._snapshot: Optional[LedgerSnapshot] = None
        self._subscriptions: list[Subscription] = []

    @property
    def budget(self) -> Decimal:
        return self._budget

    @property
    def snapshot(self) -> Optional[LedgerSnapshot]:
        """The latest snapshot, or None while still loading."""
        return self._snapshot

    @property
    def is_loading(self) -> bool:
        return self._snapshot is None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, observer: SnapshotObserver) -> Subscription:
        """
        Register an observer.

        The observer is called immediately with the current snapshot if one
        has been loaded, and again after every publish.
        """
        subscription = Subscription(self, observer)
        self._subscriptions.append(subscription)
        if self._snapshot is not None:
            self._notify(subscription, self._snapshot)
        return subscription

    def publish(self, records: Iterable[ExpenseRecord]) -> LedgerSnapshot:
        """
        Replace the record list and notify every observer.

        Called only by repositories: the local variant after each mutation,
        the remote variant for each push from the live subscription.
        """
        snapshot = build_snapshot(records, self._budget)
        self._snapshot = snapshot
        logger.debug(
            "ledger_snapshot_published",
            record_count=len(snapshot.records),
            total_spent=str(snapshot.total_spent),
            remaining=str(snapshot.remaining),
        )
        for subscription in list(self._subscriptions):
            self._notify(subscription, snapshot)
        return snapshot

    def _notify(self, subscription: Subscription, snapshot: LedgerSnapshot) -> None:
        # One failing observer must not starve the others.
        try:
            subscription._deliver(snapshot)
        except Exception:
            logger.exception("ledger_observer_failed")

    def _detach(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass
