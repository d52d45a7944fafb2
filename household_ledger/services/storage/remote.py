"""
Remote (Live-Synced) Storage Implementation

The synced variant: a flat document collection observed through a live
subscription ordered by createdAt, newest first.

DESIGN DECISION: Writes never touch local state.
The remote store assigns the id, and the ordering field decides the
position, so an optimistic splice would guess both. After any write the
only source of truth is the next push from the watch.

TRADEOFFS:
- Two adds issued back-to-back have no guaranteed completion order
- remove_all fans out one delete per document and is not atomic;
  failures are reported by id, nothing is retried
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from household_ledger.ledger.store import LedgerStore
from household_ledger.models.expense import (
    ExpenseRecord,
    NewExpense,
    expense_to_document,
)
from household_ledger.services.storage.interface import (
    DocumentBatch,
    DocumentCollection,
    ExpenseRepositoryInterface,
    NotFoundError,
    ResetIncompleteError,
    StoreError,
)


ORDER_FIELD = "createdAt"

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RemoteExpenseRepository(ExpenseRepositoryInterface):
    """
    Expense storage backed by a remote DocumentCollection.

    Each document is one expense:
    {amount, description, date "YYYY-MM-DD", createdAt}
    """

    backend_name = "remote"

    def __init__(
        self,
        store: LedgerStore,
        collection: DocumentCollection,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(store)
        self._collection = collection
        self._clock = clock or _utcnow
        self._unwatch: Optional[Callable[[], None]] = None

    @property
    def is_watching(self) -> bool:
        return self._unwatch is not None

    def open(self) -> None:
        if self._unwatch is not None:
            return
        try:
            self._unwatch = self._collection.watch(
                self._on_documents,
                order_by=ORDER_FIELD,
                descending=True,
            )
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to subscribe to expenses: {e}") from e

    def close(self) -> None:
        unwatch, self._unwatch = self._unwatch, None
        if unwatch is None:
            return
        try:
            unwatch()
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to unsubscribe from expenses: {e}") from e

    def _on_documents(self, documents: DocumentBatch) -> None:
        """Convert one pushed document list into records and publish it."""
        records = []
        for doc_id, data in documents:
            try:
                records.append(ExpenseRecord.from_document(doc_id, data))
            except (KeyError, ValueError, TypeError, ArithmeticError, ValidationError) as e:
                # Skip malformed documents rather than dropping the whole push
                logger.warning("malformed_expense_document", doc_id=doc_id, error=str(e))
        self._store.publish(records)

    async def add(self, expense: NewExpense) -> str:
        try:
            document = expense_to_document(expense, self._clock())
            return await self._collection.add(document)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to save expense: {e}") from e

    async def remove_one(self, record_id: str) -> None:
        try:
            await self._collection.delete(record_id)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to delete expense {record_id}: {e}") from e

    async def remove_all(self) -> int:
        try:
            ids = await self._collection.list_ids()
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to list expenses: {e}") from e

        if not ids:
            return 0

        results = await asyncio.gather(
            *(self._collection.delete(doc_id) for doc_id in ids),
            return_exceptions=True,
        )

        failed_ids = []
        causes = []
        for doc_id, result in zip(ids, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, NotFoundError):
                # Already gone, which is what a reset wants
                continue
            if isinstance(result, BaseException):
                failed_ids.append(doc_id)
                causes.append(result)

        deleted = len(ids) - len(failed_ids)
        if failed_ids:
            raise ResetIncompleteError(failed_ids, deleted, causes)
        return deleted
