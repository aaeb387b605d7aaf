"""
Reports Package

Read-only aggregation over transaction snapshots: monthly summaries,
trailing trends, category breakdowns and the income-tax estimate.
"""

from src.reports.aggregation import (
    CATEGORY_PALETTE,
    category_breakdown,
    monthly_summary,
    trend_series,
)
from src.reports.tax import THAI_TAX_SCHEDULE, annual_income, estimate_tax, tax_report
from src.reports.executor import ReportService

__all__ = [
    "CATEGORY_PALETTE",
    "THAI_TAX_SCHEDULE",
    "ReportService",
    "annual_income",
    "category_breakdown",
    "estimate_tax",
    "monthly_summary",
    "tax_report",
    "trend_series",
]
