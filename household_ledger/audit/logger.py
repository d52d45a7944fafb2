"""
Audit Logger

DESIGN DECISION: Every ledger mutation, rejection and store failure is logged.
This provides:
1. Traceability of user actions
2. Debugging capability for remote write failures
3. A visible trail for partially-failed resets

The audit logger:
- Writes structured JSON lines through structlog
- Gracefully handles sink failures (never crashes the app if logging fails)
- Supports correlation IDs to trace the events of one user action
"""

import logging
import sys
from typing import Callable, Optional
from uuid import UUID, uuid4

import structlog

from household_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog for JSON output at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(ensure_ascii=False)
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (always)
    2. An optional sink callable (e.g. a UI activity feed or a test collector)
    """

    def __init__(
        self,
        sink: Optional[Callable[[AuditEvent], None]] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Extra receiver for every event.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger("household_ledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the sink accepted the event (or no sink is configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                self._sink(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_admission_rejected(
        self,
        reason: str,
        proposed_amount: str,
        remaining: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a proposed expense that failed admission."""
        self.log(AuditEventBuilder.admission_rejected(
            reason=reason,
            proposed_amount=proposed_amount,
            remaining=remaining,
            correlation_id=correlation_id,
        ))

    def log_expense_added(
        self,
        amount: str,
        description: str,
        expense_date: str,
        correlation_id: Optional[UUID] = None,
        record_id: Optional[str] = None,
    ) -> None:
        """Log an acknowledged add."""
        self.log(AuditEventBuilder.expense_added(
            amount=amount,
            description=description,
            expense_date=expense_date,
            correlation_id=correlation_id,
            record_id=record_id,
        ))

    def log_expense_deleted(
        self,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            record_id=record_id,
            correlation_id=correlation_id,
        ))

    def log_ledger_reset(
        self,
        deleted_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_reset(
            deleted_count=deleted_count,
            correlation_id=correlation_id,
        ))

    def log_reset_incomplete(
        self,
        failed_ids: list[str],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.reset_incomplete(
            failed_ids=failed_ids,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_store_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
        record_id: Optional[str] = None,
    ) -> None:
        """Log a failure reported by the persistence boundary."""
        self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
            record_id=record_id,
        ))

    def log_subscription_started(self, backend: str) -> None:
        self.log(AuditEventBuilder.subscription_started(backend))

    def log_subscription_stopped(self, backend: str) -> None:
        self.log(AuditEventBuilder.subscription_stopped(backend))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., submitting the form).
    Pass it through all subsequent operations.
    """
    return uuid4()
