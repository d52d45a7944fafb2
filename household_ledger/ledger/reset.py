"""
Reset Coordinator

Clears every expense as one user-initiated action.

The caller is responsible for obtaining the user's confirmation first;
reset_all() assumes consent has been given.

Semantics by backend:
- local: one atomic replacement with the empty list
- remote: one delete per document, issued concurrently. Not atomic.
  If some deletions fail, the caller gets exactly one ResetIncompleteError
  naming the ids that are still in the store. Nothing is retried.
"""

from typing import Optional
from uuid import UUID

from household_ledger.audit import AuditLogger
from household_ledger.services.storage.interface import (
    ExpenseRepositoryInterface,
    ResetIncompleteError,
    StoreError,
)


class ResetCoordinator:
    """Runs a bulk reset through a repository and audits the outcome."""

    def __init__(
        self,
        repository: ExpenseRepositoryInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._audit_logger = audit_logger

    async def reset_all(self, correlation_id: Optional[UUID] = None) -> int:
        """
        Delete every expense.

        Returns:
            Number of expenses deleted (0 for an already-empty ledger)

        Raises:
            ResetIncompleteError: Some deletions failed; the store is partially cleared
            StoreError: The backend failed before any deletion was attempted
        """
        try:
            deleted = await self._repository.remove_all()
        except ResetIncompleteError as e:
            if self._audit_logger:
                self._audit_logger.log_reset_incomplete(
                    failed_ids=e.failed_ids,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise
        except StoreError as e:
            if self._audit_logger:
                self._audit_logger.log_store_error(
                    operation="reset",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_ledger_reset(
                deleted_count=deleted,
                correlation_id=correlation_id,
            )
        return deleted
