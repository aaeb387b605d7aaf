"""
Core Data Models for the Finance Tracker

These models define the four record types owned by the store
(Transaction, Category, Budget, Goal) plus the payloads used to
create and patch them.

DESIGN DECISION: Stored records are frozen Pydantic models.
The store can hand the same instance to many callers without anyone
being able to change it behind the store's back. Updates always go
through apply_patch(), which builds a new record.

DESIGN DECISION: Amounts are carried as decimal strings.
That is the wire and storage format. All arithmetic on them happens in
the reports package with decimal.Decimal, never with float.

Validation lives on the Insert*/ *Patch payload models only. The
records themselves are built without validation so that whatever was
persisted is returned verbatim.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money flow. Categories use the same two values."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# FIELD VALIDATION HELPERS
# =============================================================================

def _check_amount(value: str) -> str:
    """An amount must parse to a finite, non-negative decimal."""
    try:
        parsed = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Amount is not a decimal number: {value!r}")
    if not parsed.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    if parsed < 0:
        raise ValueError(f"Amount cannot be negative: {value!r}")
    return value


def _check_iso_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Not a valid ISO calendar date: {value!r}")
    return value


def _check_month(value: str) -> str:
    if not MONTH_PATTERN.match(value):
        raise ValueError(f"Month must be formatted YYYY-MM: {value!r}")
    return value


def _reject_null(value: Any) -> Any:
    """Patches may omit a required field but never clear it."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# =============================================================================
# BASE CLASSES
# =============================================================================

class FinanceModel(BaseModel):
    """
    Shared configuration for every finance model.

    Python code uses snake_case field names; the JSON shape exchanged with
    the outside world is camelCase (createdAt, targetAmount, ...).
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class StoredRecord(FinanceModel):
    """
    Base for records owned by the store.

    IMMUTABLE_FIELDS lists fields that apply_patch() never overwrites.
    """
    model_config = ConfigDict(frozen=True)

    IMMUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset({"id"})

    id: str

    def to_json(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape used at the boundary."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# TRANSACTIONS
# =============================================================================

class InsertTransaction(FinanceModel):
    """Payload for creating a transaction."""

    type: TransactionType
    amount: str = Field(..., min_length=1, description="Decimal string, e.g. '1250.50'")
    category: str = Field(..., min_length=1, description="Category name (soft reference)")
    date: str = Field(..., description="ISO calendar date, e.g. '2024-03-15'")
    description: Optional[str] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return _check_amount(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        return _check_iso_date(v)


class TransactionPatch(FinanceModel):
    """Partial update for a transaction. Only keys the caller sent are applied."""

    type: Optional[TransactionType] = None
    amount: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None

    @field_validator("type", "amount", "category", "date")
    @classmethod
    def required_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_amount(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_iso_date(v)


class Transaction(StoredRecord):
    """A recorded income or expense."""

    IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

    type: str = Field(..., description="'income' or 'expense'")
    amount: str
    category: str
    date: str
    description: Optional[str] = None
    created_at: datetime


# =============================================================================
# CATEGORIES
# =============================================================================

class InsertCategory(FinanceModel):
    """Payload for creating a category."""

    name: str = Field(..., min_length=1, max_length=100)
    type: TransactionType
    icon: str = Field(..., min_length=1, description="Icon identifier, e.g. 'fas fa-car'")
    color: str = Field(..., min_length=1, description="Style token, e.g. 'hsl(var(--chart-1))'")


class Category(StoredRecord):
    """A named bucket for transactions. Type is fixed at creation."""

    name: str
    type: str
    icon: str
    color: str


# =============================================================================
# BUDGETS
# =============================================================================

class InsertBudget(FinanceModel):
    """
    Payload for creating a budget.

    spent is accepted so that callers can round-trip a full record, but the
    store always resets it to "0" on creation.
    """

    month: str
    category: str = Field(..., min_length=1)
    limit: str
    spent: Optional[str] = None

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        return _check_month(v)

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: str) -> str:
        return _check_amount(v)


class BudgetPatch(FinanceModel):
    """Partial update for a budget. spent is adjustable here."""

    month: Optional[str] = None
    category: Optional[str] = None
    limit: Optional[str] = None
    spent: Optional[str] = None

    @field_validator("month", "category", "limit", "spent")
    @classmethod
    def required_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    @field_validator("month")
    @classmethod
    def validate_month(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_month(v)

    @field_validator("limit", "spent")
    @classmethod
    def validate_amounts(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_amount(v)


class Budget(StoredRecord):
    """A spending limit for one category in one month."""

    month: str
    category: str
    limit: str
    spent: str = "0"


# =============================================================================
# GOALS
# =============================================================================

class InsertGoal(FinanceModel):
    """Payload for creating a savings goal."""

    name: str = Field(..., min_length=1, max_length=200)
    target_amount: str
    current_amount: Optional[str] = None
    deadline: Optional[str] = None

    @field_validator("target_amount")
    @classmethod
    def validate_target(cls, v: str) -> str:
        return _check_amount(v)

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, v: Optional[str]) -> Optional[str]:
        # A blank deadline from a form means "no deadline".
        return None if not v else _check_iso_date(v)


class GoalPatch(FinanceModel):
    """Partial update for a goal, typically to record progress."""

    name: Optional[str] = None
    target_amount: Optional[str] = None
    current_amount: Optional[str] = None
    deadline: Optional[str] = None

    @field_validator("name", "target_amount", "current_amount")
    @classmethod
    def required_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    @field_validator("target_amount", "current_amount")
    @classmethod
    def validate_amounts(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _check_amount(v)

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, v: Optional[str]) -> Optional[str]:
        return None if not v else _check_iso_date(v)


class Goal(StoredRecord):
    """A savings target with optional deadline."""

    IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

    name: str
    target_amount: str
    current_amount: str = "0"
    deadline: Optional[str] = None
    created_at: datetime


# =============================================================================
# PARTIAL UPDATE
# =============================================================================

RecordT = TypeVar("RecordT", bound=StoredRecord)


def normalize_patch(
    record_type: type[StoredRecord],
    patch: Union[Mapping[str, Any], BaseModel],
) -> dict[str, Any]:
    """
    Turn a caller-supplied patch into {field_name: value}.

    Keys may be field names or their camelCase aliases. Unknown keys and
    immutable fields are dropped. A patch model contributes only the keys
    that were explicitly set, so an explicit None still overwrites.
    """
    if isinstance(patch, BaseModel):
        patch = patch.model_dump(mode="json", exclude_unset=True)

    fields = record_type.model_fields
    by_alias = {info.alias: name for name, info in fields.items() if info.alias}

    changes: dict[str, Any] = {}
    for key, value in patch.items():
        name = key if key in fields else by_alias.get(key)
        if name is None or name in record_type.IMMUTABLE_FIELDS:
            continue
        changes[name] = value
    return changes


def apply_patch(record: RecordT, patch: Union[Mapping[str, Any], BaseModel]) -> RecordT:
    """
    Shallow-merge a patch over a record, last write wins per field.

    Fields absent from the patch are preserved; fields present overwrite,
    even with None. The merged record is not re-validated.
    """
    changes = normalize_patch(type(record), patch)
    if not changes:
        return record
    return record.model_copy(update=changes)
