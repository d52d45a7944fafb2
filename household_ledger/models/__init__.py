"""
Data Models Package

This package contains all Pydantic models used in the Household Ledger.
All data flowing through the system must conform to these schemas.
"""

from household_ledger.models.expense import (
    AMOUNT_QUANTUM,
    DEFAULT_DESCRIPTION,
    DESCRIPTION_MAX_LENGTH,
    MAX_AMOUNT,
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

__all__ = [
    # Expense models
    "AMOUNT_QUANTUM",
    "DEFAULT_DESCRIPTION",
    "DESCRIPTION_MAX_LENGTH",
    "MAX_AMOUNT",
    "AdmissionDecision",
    "ExpenseRecord",
    "LedgerNotice",
    "LedgerSnapshot",
    "NewExpense",
    "NoticeLevel",
    "RejectionReason",
    "expense_to_document",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
