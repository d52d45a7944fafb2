"""
Shared fixtures.

No real Firestore in tests: FakeDocumentCollection stands in for the
remote collection and pushes ordered snapshots to its watchers the way
on_snapshot does.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from household_ledger.audit import AuditLogger
from household_ledger.ledger import LedgerStore
from household_ledger.services.storage import (
    DocumentCollection,
    InMemoryExpenseRepository,
    NotFoundError,
    RemoteExpenseRepository,
)


BUDGET = Decimal("500000")


class FakeDocumentCollection(DocumentCollection):
    """In-memory document collection with on_snapshot-like pushes."""

    def __init__(self):
        self.documents: dict[str, dict] = {}
        self.failing_deletes: set[str] = set()
        self.fail_add = False
        self.fail_list = False
        self.fail_unwatch = False
        self.auto_push = True
        self._watchers: list[tuple] = []
        self._counter = 0

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    async def add(self, data):
        if self.fail_add:
            raise RuntimeError("network unreachable")
        self._counter += 1
        doc_id = f"doc-{self._counter}"
        self.documents[doc_id] = dict(data)
        self._changed()
        return doc_id

    async def delete(self, doc_id):
        if doc_id in self.failing_deletes:
            raise RuntimeError("permission denied")
        if doc_id not in self.documents:
            raise NotFoundError(f"Expense not found: {doc_id}")
        del self.documents[doc_id]
        self._changed()

    async def list_ids(self):
        if self.fail_list:
            raise RuntimeError("network unreachable")
        return list(self.documents)

    def watch(self, callback, order_by=None, descending=False):
        entry = (callback, order_by, descending)
        self._watchers.append(entry)
        self._push_to(entry)

        def unwatch():
            if self.fail_unwatch:
                raise RuntimeError("listener already torn down")
            if entry in self._watchers:
                self._watchers.remove(entry)

        return unwatch

    def insert_raw(self, doc_id, data):
        """Write a document as another client would (bypasses admission)."""
        self.documents[doc_id] = dict(data)
        self._changed()

    def push(self):
        """Deliver the current state to every watcher."""
        for entry in list(self._watchers):
            self._push_to(entry)

    def _changed(self):
        if self.auto_push:
            self.push()

    def _push_to(self, entry):
        callback, order_by, descending = entry
        items = list(self.documents.items())
        if order_by:
            items = [item for item in items if order_by in item[1]]
            items.sort(key=lambda item: item[1][order_by], reverse=descending)
        callback([(doc_id, dict(data)) for doc_id, data in items])


class TickingClock:
    """Returns a strictly increasing UTC timestamp on every call."""

    def __init__(self):
        self._now = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def store():
    return LedgerStore(budget=BUDGET)


@pytest.fixture
def local_repository(store):
    repository = InMemoryExpenseRepository(store)
    repository.open()
    return repository


@pytest.fixture
def collection():
    return FakeDocumentCollection()


@pytest.fixture
def remote_repository(store, collection):
    repository = RemoteExpenseRepository(store, collection, clock=TickingClock())
    repository.open()
    yield repository
    repository.close()


@pytest.fixture
def audit_events():
    return []


@pytest.fixture
def audit_logger(audit_events):
    return AuditLogger(sink=audit_events.append)
