"""
In-Memory Storage Implementation

The local variant: an ordered list mutated directly and synchronously.
Every mutation republishes the whole list to the LedgerStore before the
call returns, so the local variant never has a pending state.
"""

import time
from typing import Optional

import structlog

from household_ledger.ledger.store import LedgerStore
from household_ledger.models.expense import ExpenseRecord, NewExpense
from household_ledger.services.storage.interface import (
    ExpenseRepositoryInterface,
    NotFoundError,
)


logger = structlog.get_logger(__name__)


class InMemoryExpenseRepository(ExpenseRepositoryInterface):
    """
    Local expense storage.

    Records are kept in insertion order. Ids are derived from the
    creation time in nanoseconds, bumped when two adds land in the same tick.
    """

    backend_name = "local"

    def __init__(
        self,
        store: LedgerStore,
        records: Optional[list[ExpenseRecord]] = None,
    ):
        super().__init__(store)
        self._records: list[ExpenseRecord] = list(records or [])
        self._last_id = 0

    def _next_id(self) -> str:
        self._last_id = max(time.time_ns(), self._last_id + 1)
        return str(self._last_id)

    def _publish(self) -> None:
        self._store.publish(self._records)

    def open(self) -> None:
        self._publish()

    def close(self) -> None:
        # Nothing is watched locally.
        pass

    def list(self) -> tuple[ExpenseRecord, ...]:
        """Current records in insertion order (local variant only)."""
        return tuple(self._records)

    async def add(self, expense: NewExpense) -> str:
        record = ExpenseRecord.from_new(self._next_id(), expense)
        self._records = [*self._records, record]
        logger.debug("local_expense_added", record_id=record.id, amount=str(record.amount))
        self._publish()
        return record.id

    async def remove_one(self, record_id: str) -> None:
        remaining = [record for record in self._records if record.id != record_id]
        if len(remaining) == len(self._records):
            raise NotFoundError(f"Expense not found: {record_id}")
        self._records = remaining
        self._publish()

    async def remove_all(self) -> int:
        # Single replacement; cannot partially fail.
        deleted = len(self._records)
        self._records = []
        self._publish()
        return deleted
