"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for expense persistence.
This allows us to:
1. Run the same ledger on an in-memory list or a live-synced remote collection
2. Use in-memory storage for testing
3. Keep admission and reset logic decoupled from the backend

The interface is intentionally small - add, remove one, remove all.
Reads never go through the repository: every repository publishes into
the LedgerStore, and callers observe the store.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from household_ledger.ledger.store import LedgerStore
from household_ledger.models.expense import NewExpense


# (document id, field map) pairs, already in query order
DocumentBatch = list[tuple[str, dict[str, Any]]]


class ExpenseRepositoryInterface(ABC):
    """
    Abstract interface for expense persistence.

    Any implementation must assign record ids itself and must make
    every change visible only by publishing into its LedgerStore.
    """

    backend_name: str = "abstract"

    def __init__(self, store: LedgerStore):
        self._store = store

    @property
    def store(self) -> LedgerStore:
        return self._store

    @abstractmethod
    def open(self) -> None:
        """Start feeding the LedgerStore (first snapshot ends the loading state)."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop feeding the LedgerStore. Safe to call more than once."""
        pass

    @abstractmethod
    async def add(self, expense: NewExpense) -> str:
        """
        Persist a new expense.

        Args:
            expense: An admitted expense without identity

        Returns:
            The identifier assigned by this backend

        Raises:
            StoreError: If the backend fails
        """
        pass

    @abstractmethod
    async def remove_one(self, record_id: str) -> None:
        """
        Delete one expense by id.

        Raises:
            NotFoundError: If no expense has this id
            StoreError: If the backend fails
        """
        pass

    @abstractmethod
    async def remove_all(self) -> int:
        """
        Delete every expense.

        Returns:
            Number of expenses deleted

        Raises:
            ResetIncompleteError: If some deletions failed
            StoreError: If the backend fails outright
        """
        pass


class DocumentCollection(ABC):
    """
    Abstract interface for a remote document collection.

    The concrete client (Firestore) is an external collaborator; the
    remote repository only needs these four operations.
    """

    @abstractmethod
    async def add(self, data: dict[str, Any]) -> str:
        """Create a document and return its store-assigned id."""
        pass

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        """
        Delete a document.

        Raises:
            NotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def list_ids(self) -> list[str]:
        """Ids of every document currently in the collection."""
        pass

    @abstractmethod
    def watch(
        self,
        callback: Callable[[DocumentBatch], None],
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Callable[[], None]:
        """
        Observe the collection.

        The callback receives the full, ordered document list on attach and
        after every change. Returns a callable that detaches the watch.
        """
        pass


class StoreError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StoreError):
    """Entity not found in storage."""
    pass


class ConnectionError(StoreError):
    """Could not connect to storage backend."""
    pass


class ResetIncompleteError(StoreError):
    """
    A bulk delete finished with some deletions failed.

    The store is left partially cleared; failed_ids lists exactly the
    records that are still there because their delete failed.
    """

    def __init__(self, failed_ids: list[str], deleted_count: int, causes: Optional[list[BaseException]] = None):
        self.failed_ids = list(failed_ids)
        self.deleted_count = deleted_count
        self.causes = list(causes or [])
        super().__init__(
            f"Reset incomplete: {len(self.failed_ids)} of "
            f"{len(self.failed_ids) + deleted_count} deletions failed "
            f"({', '.join(self.failed_ids)})"
        )
