"""
Data Models Package

Pydantic models for the finance records owned by the store, the payloads
used to create and patch them, report results and audit events.
"""

from src.models.finance import (
    Budget,
    BudgetPatch,
    Category,
    Goal,
    GoalPatch,
    InsertBudget,
    InsertCategory,
    InsertGoal,
    InsertTransaction,
    StoredRecord,
    Transaction,
    TransactionPatch,
    TransactionType,
    apply_patch,
    normalize_patch,
)
from src.models.reports import (
    BracketContribution,
    CategorySlice,
    MonthlyAverage,
    MonthlySummary,
    TaxBracket,
    TaxDeductions,
    TaxEstimate,
    TaxReport,
    TaxSchedule,
    TrendPoint,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance records and payloads
    "Budget",
    "BudgetPatch",
    "Category",
    "Goal",
    "GoalPatch",
    "InsertBudget",
    "InsertCategory",
    "InsertGoal",
    "InsertTransaction",
    "StoredRecord",
    "Transaction",
    "TransactionPatch",
    "TransactionType",
    "apply_patch",
    "normalize_patch",
    # Reports
    "BracketContribution",
    "CategorySlice",
    "MonthlyAverage",
    "MonthlySummary",
    "TaxBracket",
    "TaxDeductions",
    "TaxEstimate",
    "TaxReport",
    "TaxSchedule",
    "TrendPoint",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
