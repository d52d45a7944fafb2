"""Tests for the LedgerStore subscription contract."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from household_ledger.ledger import LedgerStore
from household_ledger.models.expense import ExpenseRecord


def make_record(record_id: str, amount: str) -> ExpenseRecord:
    return ExpenseRecord(id=record_id, amount=Decimal(amount), expense_date=date(2024, 3, 1))


class TestLoadingState:
    """Loading must be distinguishable from an empty ledger."""

    def test_starts_loading(self, store):
        assert store.is_loading is True
        assert store.snapshot is None

    def test_subscribe_while_loading_delivers_nothing(self, store):
        received = []
        store.subscribe(received.append)
        assert received == []

    def test_empty_publish_ends_loading(self, store):
        received = []
        store.subscribe(received.append)
        store.publish([])
        assert store.is_loading is False
        assert len(received) == 1
        assert received[0].is_empty
        assert received[0].remaining == Decimal("500000")


class TestSubscription:
    """Delivery and unsubscription."""

    def test_immediate_delivery_when_loaded(self, store):
        store.publish([make_record("a", "1000")])
        received = []
        store.subscribe(received.append)
        assert len(received) == 1
        assert received[0].ids() == ["a"]

    def test_delivery_after_every_publish(self, store):
        received = []
        store.subscribe(received.append)
        store.publish([make_record("a", "1000")])
        store.publish([make_record("a", "1000"), make_record("b", "500")])
        assert [s.total_spent for s in received] == [Decimal("1000"), Decimal("1500")]

    def test_multiple_observers(self, store):
        first, second = [], []
        store.subscribe(first.append)
        store.subscribe(second.append)
        store.publish([])
        assert len(first) == len(second) == 1

    def test_unsubscribe_stops_delivery(self, store):
        received = []
        handle = store.subscribe(received.append)
        handle.unsubscribe()
        store.publish([])
        assert received == []
        assert handle.active is False
        assert store.subscriber_count == 0

    def test_unsubscribe_is_idempotent(self, store):
        handle = store.subscribe(lambda snapshot: None)
        other = store.subscribe(lambda snapshot: None)
        handle.unsubscribe()
        handle.unsubscribe()
        assert store.subscriber_count == 1
        assert other.active is True

    def test_failing_observer_does_not_block_others(self, store):
        def broken(snapshot):
            raise RuntimeError("render failed")

        received = []
        store.subscribe(broken)
        store.subscribe(received.append)
        store.publish([make_record("a", "10")])
        assert len(received) == 1

    def test_observer_may_unsubscribe_during_delivery(self, store):
        received = []
        handles = []

        def once(snapshot):
            received.append(snapshot)
            handles[0].unsubscribe()

        handles.append(store.subscribe(once))
        store.publish([])
        store.publish([])
        assert len(received) == 1


class TestSnapshotImmutability:
    """Observers receive read-only views."""

    def test_snapshot_fields_are_frozen(self, store):
        snapshot = store.publish([make_record("a", "1000")])
        with pytest.raises(ValidationError):
            snapshot.total_spent = Decimal("0")
        with pytest.raises(ValidationError):
            snapshot.records[0].amount = Decimal("1")
        assert isinstance(snapshot.records, tuple)

    def test_publishing_a_list_does_not_alias_it(self, store):
        records = [make_record("a", "1000")]
        snapshot = store.publish(records)
        records.append(make_record("b", "2000"))
        assert snapshot.ids() == ["a"]

    def test_budget_is_fixed(self):
        store = LedgerStore(budget=Decimal("1000"))
        snapshot = store.publish([make_record("a", "1500")])
        assert store.budget == Decimal("1000")
        assert snapshot.is_over_budget is True
        assert snapshot.overspent_by == Decimal("500")
