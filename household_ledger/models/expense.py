"""
Core Data Models for Household Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the positive-amount invariant at the edge
2. Be immutable once delivered to observers
3. Be serializable for the remote document store and for logging

DESIGN DECISION: Amounts are Decimal, never float.
Totals and remaining balance must come out exact, with no rounding drift.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


DEFAULT_DESCRIPTION = "지출"
DESCRIPTION_MAX_LENGTH = 200

# Admitted amounts have at most two decimal places and fifteen
# significant digits, so they round-trip through a double exactly.
AMOUNT_QUANTUM = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999999.99")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RejectionReason(str, Enum):
    """Why a proposed expense was not admitted."""
    INVALID_AMOUNT = "invalid_amount"    # Not a positive finite number
    BUDGET_EXCEEDED = "budget_exceeded"  # Larger than the remaining budget


class NoticeLevel(str, Enum):
    """
    How the UI should surface a notice.

    BLOCKING notices interrupt the user (alert style); ERROR notices
    are non-blocking and leave the application usable.
    """
    SUCCESS = "success"
    INFO = "info"
    BLOCKING = "blocking"
    ERROR = "error"


# =============================================================================
# EXPENSE RECORDS
# =============================================================================

class NewExpense(BaseModel):
    """
    An expense that has passed admission but has no identity yet.

    The repository that performs the add assigns the id (and, for the
    remote variant, the ordering timestamp).
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount in whole currency units"
    )
    description: str = Field(
        default=DEFAULT_DESCRIPTION,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Free-text label"
    )
    expense_date: date = Field(
        default_factory=date.today,
        description="Calendar date the money was spent"
    )

    @field_validator('description', mode='before')
    @classmethod
    def default_blank_description(cls, v: Optional[str]) -> str:
        """Substitute the placeholder label for a missing or blank description."""
        if v is None or not str(v).strip():
            return DEFAULT_DESCRIPTION
        return v


class ExpenseRecord(BaseModel):
    """
    One logged expense entry as held in a snapshot.

    Records are frozen: observers receive them as read-only values.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque identifier assigned by the owning repository"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount in whole currency units"
    )
    description: str = Field(
        default=DEFAULT_DESCRIPTION,
        description="Free-text label"
    )
    expense_date: date = Field(
        ...,
        description="Calendar date the money was spent"
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="Ordering timestamp (remote variant only, never displayed)"
    )

    @classmethod
    def from_new(
        cls,
        record_id: str,
        expense: NewExpense,
        created_at: Optional[datetime] = None,
    ) -> 'ExpenseRecord':
        return cls(
            id=record_id,
            amount=expense.amount,
            description=expense.description,
            expense_date=expense.expense_date,
            created_at=created_at,
        )

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> 'ExpenseRecord':
        """Build a record from a remote document's id and field map."""
        created_at = data.get("createdAt")
        return cls(
            id=doc_id,
            amount=Decimal(str(data["amount"])),
            description=data.get("description") or DEFAULT_DESCRIPTION,
            expense_date=date.fromisoformat(str(data["date"])),
            created_at=created_at if isinstance(created_at, datetime) else None,
        )


def expense_to_document(expense: NewExpense, created_at: datetime) -> dict[str, Any]:
    """
    Convert a NewExpense to the persisted remote layout.

    Layout: {amount: number, description: string, date: "YYYY-MM-DD", createdAt: timestamp}

    Raises:
        ValueError: The amount cannot be stored as a number without loss
    """
    amount = expense.amount
    if amount == amount.to_integral_value():
        stored = int(amount)
    else:
        stored = float(amount)
        if Decimal(str(stored)) != amount:
            raise ValueError(f"Amount {amount} cannot be stored without loss")
    return {
        "amount": stored,
        "description": expense.description,
        "date": expense.expense_date.isoformat(),
        "createdAt": created_at,
    }


# =============================================================================
# DERIVED STATE
# =============================================================================

class LedgerSnapshot(BaseModel):
    """
    The full, ordered record list plus derived totals at one point in observed time.

    Never stored. Always built from a record list and the budget
    (see household_ledger.ledger.reconciler.build_snapshot).
    """
    model_config = ConfigDict(frozen=True)

    records: tuple[ExpenseRecord, ...] = Field(default_factory=tuple)
    budget: Decimal
    total_spent: Decimal
    remaining: Decimal

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def is_over_budget(self) -> bool:
        """Only reachable when a write bypassed admission (e.g. another writer)."""
        return self.remaining < 0

    @property
    def overspent_by(self) -> Decimal:
        return -self.remaining if self.remaining < 0 else Decimal("0")

    def ids(self) -> list[str]:
        return [record.id for record in self.records]


# =============================================================================
# ADMISSION & NOTICES
# =============================================================================

class AdmissionDecision(BaseModel):
    """Accept or Reject(reason) for one proposed expense."""
    model_config = ConfigDict(frozen=True)

    accepted: bool
    reason: Optional[RejectionReason] = None
    amount: Optional[Decimal] = Field(
        default=None,
        description="The parsed amount, when it could be parsed"
    )
    remaining: Decimal = Field(
        ...,
        description="Remaining budget before the proposed expense"
    )

    @classmethod
    def accept(cls, amount: Decimal, remaining: Decimal) -> 'AdmissionDecision':
        return cls(accepted=True, amount=amount, remaining=remaining)

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        remaining: Decimal,
        amount: Optional[Decimal] = None,
    ) -> 'AdmissionDecision':
        return cls(accepted=False, reason=reason, amount=amount, remaining=remaining)


class LedgerNotice(BaseModel):
    """
    Result of a user-initiated action, ready to show in the UI.

    The orchestrator converts every outcome (including store failures)
    into one of these. Nothing propagates as an unhandled fault.
    """

    level: NoticeLevel
    message: str
    reason: Optional[RejectionReason] = None
    failed_ids: list[str] = Field(
        default_factory=list,
        description="Ids that could not be deleted during a reset"
    )

    @property
    def ok(self) -> bool:
        return self.level in (NoticeLevel.SUCCESS, NoticeLevel.INFO)
