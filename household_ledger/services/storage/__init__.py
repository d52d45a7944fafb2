"""
Storage Services Package

Provides the abstract repository interface and its two interchangeable
implementations: in-memory (local) and a live-synced remote collection.
Firestore is the concrete remote backend; it is imported lazily so the
local variant runs without the Firebase SDK configured.
"""

from household_ledger.services.storage.interface import (
    ConnectionError,
    DocumentBatch,
    DocumentCollection,
    ExpenseRepositoryInterface,
    NotFoundError,
    ResetIncompleteError,
    StoreError,
)
from household_ledger.services.storage.memory import InMemoryExpenseRepository
from household_ledger.services.storage.remote import RemoteExpenseRepository

__all__ = [
    # Interfaces
    "DocumentBatch",
    "DocumentCollection",
    "ExpenseRepositoryInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "ResetIncompleteError",
    "StoreError",
    # Implementations
    "InMemoryExpenseRepository",
    "RemoteExpenseRepository",
]
