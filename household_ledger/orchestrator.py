"""
Main Orchestrator for Household Ledger

This module ties together all the components and defines the user actions:
1. Add expense (input → admission → repository write)
2. Delete one expense
3. Reset everything (after confirmation)

DESIGN DECISION: The orchestrator is the call site for every user action,
so it is where repository failures are caught. Each action returns a
LedgerNotice instead of raising:
- Invalid amount / budget exceeded → blocking notice, nothing written
- StoreError → non-blocking error notice, application stays usable

The orchestrator never updates the ledger itself. The result of a write
is visible only when the repository publishes into the LedgerStore.
"""

import asyncio
from datetime import date
from typing import Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from household_ledger.audit import AuditLogger, configure_logging, create_correlation_id
from household_ledger.config import get_settings
from household_ledger.ledger import LedgerStore, Subscription, admit
from household_ledger.ledger.reset import ResetCoordinator
from household_ledger.models.expense import (
    DEFAULT_DESCRIPTION,
    DESCRIPTION_MAX_LENGTH,
    LedgerNotice,
    LedgerSnapshot,
    NewExpense,
    NoticeLevel,
    RejectionReason,
)
from household_ledger.services.storage import (
    ExpenseRepositoryInterface,
    InMemoryExpenseRepository,
    RemoteExpenseRepository,
    ResetIncompleteError,
    StoreError,
)


MSG_INVALID_AMOUNT = "올바른 금액을 입력해주세요!"
MSG_BUDGET_EXCEEDED = "예산을 초과합니다!"
MSG_INVALID_DATE = "올바른 날짜를 입력해주세요!"
MSG_DESCRIPTION_TOO_LONG = f"지출 내용은 {DESCRIPTION_MAX_LENGTH}자 이내로 입력해주세요!"
MSG_LOADING = "데이터를 불러오는 중입니다. 잠시 후 다시 시도해주세요."
MSG_ADDED = "지출이 추가되었습니다."
MSG_DELETED = "지출이 삭제되었습니다."
MSG_RESET_DONE = "모든 지출 내역이 삭제되었습니다."
MSG_RESET_CANCELLED = "리셋이 취소되었습니다."
MSG_SAVE_FAILED = "저장 중 오류가 발생했습니다."
MSG_DELETE_FAILED = "삭제 중 오류가 발생했습니다."
MSG_RESET_FAILED = "리셋 중 오류가 발생했습니다."
RESET_CONFIRMATION_PROMPT = "모든 지출 내역을 삭제하고 처음부터 시작하시겠습니까?"

REJECTION_MESSAGES = {
    RejectionReason.INVALID_AMOUNT: MSG_INVALID_AMOUNT,
    RejectionReason.BUDGET_EXCEEDED: MSG_BUDGET_EXCEEDED,
}

logger = structlog.get_logger(__name__)


class LedgerFlow:
    """
    Orchestrates the ledger's user actions.

    Flow for an add:
    1. Parse → the amount must be a positive finite number
    2. Admit → against the remaining budget of the current snapshot
    3. Write → repository.add (remote: acknowledged, not yet visible)
    4. Observe → the next snapshot from the LedgerStore shows the record
    """

    def __init__(
        self,
        repository: ExpenseRepositoryInterface,
        reset_coordinator: Optional[ResetCoordinator] = None,
        audit_logger: Optional[AuditLogger] = None,
        default_description: str = DEFAULT_DESCRIPTION,
    ):
        self._repository = repository
        self._audit_logger = audit_logger
        self._reset_coordinator = reset_coordinator or ResetCoordinator(
            repository, audit_logger
        )
        self._default_description = default_description
        self._started = False
        self._subscription: Optional[Subscription] = None
        self._snapshot_version = 0

    @property
    def store(self) -> LedgerStore:
        return self._repository.store

    @property
    def snapshot(self) -> Optional[LedgerSnapshot]:
        """Current snapshot, or None while loading."""
        return self.store.snapshot

    @property
    def snapshot_version(self) -> int:
        """
        Count of snapshots observed since start().

        Pushes from the remote listener arrive outside any UI request;
        the page polls this counter to know when to redraw.
        """
        return self._snapshot_version

    @property
    def backend_name(self) -> str:
        return self._repository.backend_name

    def _on_snapshot(self, snapshot: LedgerSnapshot) -> None:
        self._snapshot_version += 1

    def start(self) -> None:
        """Subscribe to the store and attach the repository (idempotent)."""
        if self._started:
            return
        self._subscription = self.store.subscribe(self._on_snapshot)
        try:
            self._repository.open()
        except StoreError:
            self._subscription.unsubscribe()
            self._subscription = None
            raise
        self._started = True
        if self._audit_logger:
            self._audit_logger.log_subscription_started(self.backend_name)

    def stop(self) -> None:
        """
        Unsubscribe and detach the repository; safe to call more than once.

        The flow counts as stopped even when the backend fails to detach;
        that failure is raised as a StoreError.
        """
        if not self._started:
            return
        self._started = False
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()
        try:
            self._repository.close()
        finally:
            if self._audit_logger:
                self._audit_logger.log_subscription_stopped(self.backend_name)

    async def submit_expense(
        self,
        amount_input: object,
        description: Optional[str] = None,
        expense_date: Optional[Union[date, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerNotice:
        """
        Admit and persist a new expense from raw form input.

        Returns:
            SUCCESS when the write was acknowledged,
            BLOCKING for invalid input or budget exceeded,
            INFO while the ledger is still loading,
            ERROR when the store failed
        """
        correlation_id = correlation_id or create_correlation_id()

        snapshot = self.store.snapshot
        if snapshot is None:
            return LedgerNotice(level=NoticeLevel.INFO, message=MSG_LOADING)

        decision = admit(snapshot.records, amount_input, self.store.budget)
        if not decision.accepted:
            if self._audit_logger:
                self._audit_logger.log_admission_rejected(
                    reason=decision.reason.value,
                    proposed_amount=str(amount_input),
                    remaining=str(decision.remaining),
                    correlation_id=correlation_id,
                )
            return LedgerNotice(
                level=NoticeLevel.BLOCKING,
                message=REJECTION_MESSAGES[decision.reason],
                reason=decision.reason,
            )

        if description is None or not description.strip():
            description = self._default_description

        try:
            expense = NewExpense(
                amount=decision.amount,
                description=description,
                expense_date=expense_date or date.today(),
            )
        except ValidationError as e:
            logger.info("expense_input_invalid", error=str(e))
            fields = {error["loc"][0] for error in e.errors() if error["loc"]}
            if "description" in fields:
                return LedgerNotice(level=NoticeLevel.BLOCKING, message=MSG_DESCRIPTION_TOO_LONG)
            return LedgerNotice(level=NoticeLevel.BLOCKING, message=MSG_INVALID_DATE)

        try:
            record_id = await self._repository.add(expense)
        except StoreError as e:
            logger.error("expense_add_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_store_error(
                    operation="add",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return LedgerNotice(level=NoticeLevel.ERROR, message=MSG_SAVE_FAILED)

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                amount=str(expense.amount),
                description=expense.description,
                expense_date=expense.expense_date.isoformat(),
                correlation_id=correlation_id,
                record_id=record_id,
            )
        return LedgerNotice(level=NoticeLevel.SUCCESS, message=MSG_ADDED)

    async def delete_expense(
        self,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerNotice:
        """Delete one expense by id."""
        correlation_id = correlation_id or create_correlation_id()

        try:
            await self._repository.remove_one(record_id)
        except StoreError as e:
            logger.error("expense_delete_failed", record_id=record_id, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_store_error(
                    operation="delete",
                    error_message=str(e),
                    correlation_id=correlation_id,
                    record_id=record_id,
                )
            return LedgerNotice(level=NoticeLevel.ERROR, message=MSG_DELETE_FAILED)

        if self._audit_logger:
            self._audit_logger.log_expense_deleted(
                record_id=record_id,
                correlation_id=correlation_id,
            )
        return LedgerNotice(level=NoticeLevel.SUCCESS, message=MSG_DELETED)

    async def reset(
        self,
        confirmed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerNotice:
        """
        Delete every expense.

        CRITICAL: Only runs when the user has explicitly confirmed.
        The budget is untouched; form state is the UI's to clear.
        """
        if not confirmed:
            return LedgerNotice(level=NoticeLevel.INFO, message=MSG_RESET_CANCELLED)

        correlation_id = correlation_id or create_correlation_id()

        try:
            await self._reset_coordinator.reset_all(correlation_id=correlation_id)
        except ResetIncompleteError as e:
            logger.error("ledger_reset_incomplete", failed_ids=e.failed_ids)
            return LedgerNotice(
                level=NoticeLevel.ERROR,
                message=f"{MSG_RESET_FAILED} ({len(e.failed_ids)}건 삭제 실패)",
                failed_ids=e.failed_ids,
            )
        except StoreError as e:
            logger.error("ledger_reset_failed", error=str(e))
            return LedgerNotice(level=NoticeLevel.ERROR, message=MSG_RESET_FAILED)

        return LedgerNotice(level=NoticeLevel.SUCCESS, message=MSG_RESET_DONE)


def create_app_components(
    backend: Optional[str] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> LedgerFlow:
    """
    Factory function to create and start the application components.

    Args:
        backend: "local" or "firestore". Defaults to the LEDGER_BACKEND setting.
        loop: Event loop that live-sync pushes are handed to (Firestore only).

    Returns:
        A started LedgerFlow. If Firestore cannot be reached, falls back to
        the local in-memory backend so the app remains usable.
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    ledger_settings = settings.ledger
    backend = backend or ledger_settings.backend

    store = LedgerStore(budget=ledger_settings.budget)
    audit_logger = AuditLogger()
    repository: ExpenseRepositoryInterface

    if backend == "firestore":
        try:
            from household_ledger.services.storage.firestore import FirestoreClient

            collection = FirestoreClient(settings.firestore).collection(loop=loop)
            repository = RemoteExpenseRepository(store, collection)
        except Exception as e:
            # Storage not configured - continue with the local ledger
            logger.warning("firestore_unavailable_falling_back_to_local", error=str(e))
            repository = InMemoryExpenseRepository(store)
    else:
        repository = InMemoryExpenseRepository(store)

    flow = LedgerFlow(
        repository=repository,
        audit_logger=audit_logger,
        default_description=ledger_settings.default_description,
    )
    flow.start()
    return flow
