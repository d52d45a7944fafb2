"""
Tests for Household Ledger models

Test strategy:
1. Unit tests for individual components (models, reconciler, store)
2. Integration tests for flows (with a fake document collection)
3. No real Firestore calls in tests
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from household_ledger.models.expense import (
    DEFAULT_DESCRIPTION,
    AdmissionDecision,
    ExpenseRecord,
    LedgerNotice,
    LedgerSnapshot,
    NewExpense,
    NoticeLevel,
    RejectionReason,
    expense_to_document,
)
from household_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModels:
    """Tests for expense-related Pydantic models."""

    def test_new_expense_creation(self):
        """Test NewExpense model creation."""
        expense = NewExpense(
            amount=Decimal("12000"),
            description="groceries",
            expense_date=date(2024, 1, 5),
        )
        assert expense.amount == Decimal("12000")
        assert expense.description == "groceries"

    def test_new_expense_strips_whitespace(self):
        expense = NewExpense(amount=Decimal("1"), description="  taxi  ")
        assert expense.description == "taxi"

    @pytest.mark.parametrize("description", [None, "", "   "])
    def test_blank_description_gets_default(self, description):
        expense = NewExpense(amount=Decimal("1"), description=description)
        assert expense.description == DEFAULT_DESCRIPTION == "지출"

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("NaN")])
    def test_new_expense_rejects_non_positive_amount(self, amount):
        with pytest.raises(ValidationError):
            NewExpense(amount=amount)

    def test_new_expense_date_defaults_to_today(self):
        assert NewExpense(amount=Decimal("1")).expense_date == date.today()

    def test_record_from_new(self):
        expense = NewExpense(amount=Decimal("3000"), description="lunch", expense_date=date(2024, 2, 1))
        record = ExpenseRecord.from_new("abc", expense)
        assert record.id == "abc"
        assert record.amount == Decimal("3000")
        assert record.description == "lunch"
        assert record.created_at is None

    def test_record_from_document(self):
        created = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)
        record = ExpenseRecord.from_document(
            "doc-1",
            {"amount": 1500.5, "description": "cafe", "date": "2024-02-01", "createdAt": created},
        )
        assert record.amount == Decimal("1500.5")
        assert record.expense_date == date(2024, 2, 1)
        assert record.created_at == created

    def test_record_from_document_without_description(self):
        record = ExpenseRecord.from_document("doc-1", {"amount": 10, "date": "2024-02-01"})
        assert record.description == DEFAULT_DESCRIPTION
        assert record.created_at is None

    def test_record_from_document_rejects_missing_amount(self):
        with pytest.raises(KeyError):
            ExpenseRecord.from_document("doc-1", {"date": "2024-02-01"})

    def test_expense_to_document(self):
        created = datetime(2024, 2, 1, tzinfo=timezone.utc)
        whole = NewExpense(amount=Decimal("100000"), description="rent", expense_date=date(2024, 2, 1))
        document = expense_to_document(whole, created)
        assert document == {
            "amount": 100000,
            "description": "rent",
            "date": "2024-02-01",
            "createdAt": created,
        }
        assert isinstance(document["amount"], int)

        fractional = NewExpense(amount=Decimal("12.5"), expense_date=date(2024, 2, 1))
        assert expense_to_document(fractional, created)["amount"] == 12.5

    @pytest.mark.parametrize("amount", ["1e-400", "0.1234567890123456789"])
    def test_expense_to_document_refuses_lossy_amounts(self, amount):
        expense = NewExpense(amount=Decimal(amount), expense_date=date(2024, 2, 1))
        with pytest.raises(ValueError, match="without loss"):
            expense_to_document(expense, datetime(2024, 2, 1, tzinfo=timezone.utc))

    def test_record_is_frozen(self):
        record = ExpenseRecord(id="a", amount=Decimal("1"), expense_date=date(2024, 1, 1))
        with pytest.raises(ValidationError):
            record.description = "changed"


class TestSnapshotModel:
    """Tests for LedgerSnapshot derived properties."""

    def _snapshot(self, remaining: str) -> LedgerSnapshot:
        record = ExpenseRecord(id="a", amount=Decimal("100"), expense_date=date(2024, 1, 1))
        return LedgerSnapshot(
            records=(record,),
            budget=Decimal("1000"),
            total_spent=Decimal("1000") - Decimal(remaining),
            remaining=Decimal(remaining),
        )

    def test_empty_snapshot(self):
        snapshot = LedgerSnapshot(budget=Decimal("10"), total_spent=Decimal("0"), remaining=Decimal("10"))
        assert snapshot.is_empty
        assert snapshot.ids() == []

    def test_within_budget(self):
        snapshot = self._snapshot("900")
        assert snapshot.is_over_budget is False
        assert snapshot.overspent_by == Decimal("0")

    def test_exactly_spent_is_not_over(self):
        assert self._snapshot("0").is_over_budget is False

    def test_over_budget(self):
        snapshot = self._snapshot("-250")
        assert snapshot.is_over_budget is True
        assert snapshot.overspent_by == Decimal("250")


class TestDecisionsAndNotices:
    """Tests for admission decisions and UI notices."""

    def test_accept(self):
        decision = AdmissionDecision.accept(Decimal("5"), Decimal("10"))
        assert decision.accepted is True
        assert decision.reason is None

    def test_reject(self):
        decision = AdmissionDecision.reject(RejectionReason.BUDGET_EXCEEDED, Decimal("10"), Decimal("20"))
        assert decision.accepted is False
        assert decision.reason == RejectionReason.BUDGET_EXCEEDED
        assert decision.amount == Decimal("20")

    def test_notice_ok(self):
        assert LedgerNotice(level=NoticeLevel.SUCCESS, message="x").ok
        assert LedgerNotice(level=NoticeLevel.INFO, message="x").ok
        assert not LedgerNotice(level=NoticeLevel.BLOCKING, message="x").ok
        assert not LedgerNotice(level=NoticeLevel.ERROR, message="x").ok

    def test_notice_failed_ids_default_empty(self):
        assert LedgerNotice(level=NoticeLevel.ERROR, message="x").failed_ids == []


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_id="doc-1",
            correlation_id=correlation_id,
            description="Expense deleted",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_deleted"
        assert log_dict["entity_id"] == "doc-1"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert "timestamp" in log_dict

    def test_audit_event_builder_expense_added(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.expense_added(
            amount="12000",
            description="groceries",
            expense_date="2024-01-05",
            correlation_id=correlation_id,
            record_id="doc-7",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == "doc-7"
        assert event.details["amount"] == "12000"
        assert event.is_user_action is True

    def test_audit_event_builder_reset_incomplete(self):
        event = AuditEventBuilder.reset_incomplete(
            failed_ids=["doc-2"],
            error_message="permission denied",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.details["failed_ids"] == ["doc-2"]
        assert event.error_message == "permission denied"

    def test_audit_event_builder_store_error(self):
        event = AuditEventBuilder.store_error("add", "network unreachable")
        assert event.event_type == AuditEventType.STORE_ERROR
        assert event.details["operation"] == "add"
        assert event.is_user_action is False


class TestRejectionReasons:
    """Tests for the admission rejection enum."""

    def test_all_reasons_exist(self):
        assert {reason.value for reason in RejectionReason} == {"invalid_amount", "budget_exceeded"}
