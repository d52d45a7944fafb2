"""Services package."""

from household_ledger.services.storage import (
    ConnectionError,
    DocumentCollection,
    ExpenseRepositoryInterface,
    InMemoryExpenseRepository,
    NotFoundError,
    RemoteExpenseRepository,
    ResetIncompleteError,
    StoreError,
)

__all__ = [
    "ConnectionError",
    "DocumentCollection",
    "ExpenseRepositoryInterface",
    "InMemoryExpenseRepository",
    "NotFoundError",
    "RemoteExpenseRepository",
    "ResetIncompleteError",
    "StoreError",
]
