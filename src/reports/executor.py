"""
Report Execution

DESIGN DECISION: Reports are computed from a snapshot.
The service reads list_transactions() once per report and hands the
result to the pure functions in aggregation and tax. The store is never
queried mid-computation, so a report is consistent with itself even if
writes happen concurrently.
"""

from datetime import date
from typing import Callable, Optional

from src.models.reports import CategorySlice, MonthlySummary, TaxReport, TaxSchedule, TrendPoint
from src.reports.aggregation import category_breakdown, month_key, monthly_summary, trend_series
from src.reports.tax import THAI_TAX_SCHEDULE, tax_report
from src.services.storage import FinanceStorageInterface


class ReportService:
    """
    Runs the read-only reports against a store.

    `today` is injectable so "current month" is deterministic in tests.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        tax_schedule: TaxSchedule = THAI_TAX_SCHEDULE,
        trend_months: int = 6,
        today: Callable[[], date] = date.today,
    ):
        self._storage = storage
        self._tax_schedule = tax_schedule
        self._trend_months = trend_months
        self._today = today

    def current_month(self) -> str:
        return month_key(self._today())

    async def summary(self, month: Optional[str] = None) -> MonthlySummary:
        transactions = await self._storage.list_transactions()
        return monthly_summary(transactions, month or self.current_month())

    async def trends(self) -> list[TrendPoint]:
        transactions = await self._storage.list_transactions()
        return trend_series(transactions, self._today(), self._trend_months)

    async def breakdown(self, month: Optional[str] = None) -> list[CategorySlice]:
        transactions = await self._storage.list_transactions()
        return category_breakdown(transactions, month or self.current_month())

    async def tax(self, month: Optional[str] = None) -> TaxReport:
        transactions = await self._storage.list_transactions()
        return tax_report(transactions, month or self.current_month(), self._tax_schedule)

    async def overview(self) -> dict:
        """Everything the reports screen shows, from one snapshot."""
        transactions = await self._storage.list_transactions()
        month = self.current_month()
        return {
            "month": month,
            "stats": monthly_summary(transactions, month),
            "trends": trend_series(transactions, self._today(), self._trend_months),
            "categoryBreakdown": category_breakdown(transactions, month),
        }
