"""
Audit Models for Household Ledger

Every ledger mutation and every rejected or failed action is logged.
This provides:
1. Traceability of what the user did and what the store answered
2. Debugging information when a remote write fails
3. A record of partially-failed resets, which leave the store in a
   state that otherwise looks like legitimate user action

DESIGN DECISION: Audit events are append-only log lines. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Admission
    ADMISSION_REJECTED = "admission_rejected"

    # Persistence
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    LEDGER_RESET = "ledger_reset"
    RESET_INCOMPLETE = "reset_incomplete"
    STORE_ERROR = "store_error"

    # Live sync
    SUBSCRIPTION_STARTED = "subscription_started"
    SUBSCRIPTION_STOPPED = "subscription_stopped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'ledger')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Id of the entity this event relates to (store-assigned ids are strings)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(record_id, amount, correlation_id)
        event = AuditEventBuilder.store_error("add", message, correlation_id)
    """

    @staticmethod
    def admission_rejected(
        reason: str,
        proposed_amount: str,
        remaining: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADMISSION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Expense rejected: {reason}",
            details={
                "reason": reason,
                "proposed_amount": proposed_amount,
                "remaining": remaining,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_added(
        amount: str,
        description: str,
        expense_date: str,
        correlation_id: Optional[UUID] = None,
        record_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Expense added: {description} - ₩{amount}",
            details={
                "amount": amount,
                "description": description,
                "date": expense_date,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        record_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Expense deleted: {record_id}",
            is_user_action=True,
        )

    @staticmethod
    def ledger_reset(
        deleted_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger reset: {deleted_count} expenses removed",
            details={
                "deleted_count": deleted_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def reset_incomplete(
        failed_ids: list[str],
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESET_INCOMPLETE,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger reset left {len(failed_ids)} expenses behind",
            details={
                "failed_ids": failed_ids,
            },
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        record_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Store error during {operation}",
            details={
                "operation": operation,
            },
            error_message=error_message,
        )

    @staticmethod
    def subscription_started(backend: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_STARTED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            description=f"Live subscription started ({backend})",
            details={"backend": backend},
        )

    @staticmethod
    def subscription_stopped(backend: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_STOPPED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            description=f"Live subscription stopped ({backend})",
            details={"backend": backend},
        )
