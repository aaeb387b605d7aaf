"""
Request Handlers

The boundary between a web framework and the finance store. Each handler
takes already-decoded request data (path id, query value, JSON body),
validates it, calls the store and returns an ApiResponse carrying the
status code and the JSON-ready body. Mounting these on an actual HTTP
server is left to the caller.

Status mapping:
- 200 list / read / update, 201 create, 204 delete
- 400 payload fails validation (the store is never called)
- 404 the store reports the id as absent
- 500 the store raised

The category list has a degraded path: if the store raises and a
durable backend was configured, a fixed fallback list is served instead
of an error, so the UI always has categories to show.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Optional

import structlog
from pydantic import BaseModel, ValidationError

from src.audit import AuditLogger
from src.models.finance import (
    MONTH_PATTERN,
    BudgetPatch,
    GoalPatch,
    InsertBudget,
    InsertCategory,
    InsertGoal,
    InsertTransaction,
    StoredRecord,
    TransactionPatch,
)
from src.reports import ReportService
from src.services.storage import FALLBACK_CATEGORIES, FinanceStorageInterface


logger = structlog.get_logger(__name__)


class ApiResponse(BaseModel):
    """Status code plus JSON-ready body."""

    status_code: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _issues(error: ValidationError) -> list[dict[str, str]]:
    """Flatten a ValidationError into field/message pairs."""
    return [
        {
            "field": ".".join(str(part) for part in issue["loc"]) or "body",
            "message": issue["msg"],
        }
        for issue in error.errors()
    ]


class FinanceApi:
    """
    Handlers for the transaction, category, budget, goal, tax and
    analytics endpoints.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        reports: ReportService,
        durable_configured: bool = False,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._reports = reports
        self._durable_configured = durable_configured
        self._audit = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Shared plumbing
    # -------------------------------------------------------------------------

    def _invalid(self, entity: str, error: ValidationError) -> ApiResponse:
        issues = _issues(error)
        self._audit.log_validation_failed(entity, issues)
        return ApiResponse(
            status_code=400,
            body={"message": f"Invalid {entity} data", "errors": issues},
        )

    def _failed(self, operation: str, error: Exception, message: str) -> ApiResponse:
        logger.exception("request_failed", operation=operation)
        self._audit.log_error(operation, str(error))
        return ApiResponse(status_code=500, body={"message": message})

    @staticmethod
    def _not_found(entity: str) -> ApiResponse:
        return ApiResponse(status_code=404, body={"message": f"{entity.capitalize()} not found"})

    async def _list(
        self,
        entity: str,
        fetch: Callable[[], Awaitable[list[StoredRecord]]],
    ) -> ApiResponse:
        try:
            records = await fetch()
        except Exception as e:
            return self._failed(f"list_{entity}", e, f"Failed to fetch {entity}s")
        return ApiResponse(status_code=200, body=[record.to_json() for record in records])

    async def _get(
        self,
        entity: str,
        fetch: Callable[[str], Awaitable[Optional[StoredRecord]]],
        record_id: str,
    ) -> ApiResponse:
        try:
            record = await fetch(record_id)
        except Exception as e:
            return self._failed(f"get_{entity}", e, f"Failed to fetch {entity}")
        if record is None:
            return self._not_found(entity)
        return ApiResponse(status_code=200, body=record.to_json())

    async def _create(
        self,
        entity: str,
        schema: type[BaseModel],
        create: Callable[[Any], Awaitable[StoredRecord]],
        body: Any,
    ) -> ApiResponse:
        try:
            payload = schema.model_validate(body)
        except ValidationError as e:
            return self._invalid(entity, e)
        try:
            record = await create(payload)
        except Exception as e:
            return self._failed(f"create_{entity}", e, f"Failed to create {entity}")
        self._audit.log_entity_changed(entity, "created", record.id)
        return ApiResponse(status_code=201, body=record.to_json())

    async def _update(
        self,
        entity: str,
        schema: type[BaseModel],
        update: Callable[[str, Any], Awaitable[Optional[StoredRecord]]],
        record_id: str,
        body: Any,
    ) -> ApiResponse:
        try:
            patch = schema.model_validate(body)
        except ValidationError as e:
            return self._invalid(entity, e)
        try:
            record = await update(record_id, patch)
        except Exception as e:
            return self._failed(f"update_{entity}", e, f"Failed to update {entity}")
        if record is None:
            return self._not_found(entity)
        self._audit.log_entity_changed(
            entity, "updated", record.id,
            details={"fields": sorted(patch.model_fields_set)},
        )
        return ApiResponse(status_code=200, body=record.to_json())

    async def _delete(
        self,
        entity: str,
        delete: Callable[[str], Awaitable[bool]],
        record_id: str,
    ) -> ApiResponse:
        try:
            deleted = await delete(record_id)
        except Exception as e:
            return self._failed(f"delete_{entity}", e, f"Failed to delete {entity}")
        if not deleted:
            return self._not_found(entity)
        self._audit.log_entity_changed(entity, "deleted", record_id)
        return ApiResponse(status_code=204)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> ApiResponse:
        return await self._list("transaction", self._storage.list_transactions)

    async def get_transaction(self, transaction_id: str) -> ApiResponse:
        return await self._get("transaction", self._storage.get_transaction, transaction_id)

    async def create_transaction(self, body: Any) -> ApiResponse:
        return await self._create(
            "transaction", InsertTransaction, self._storage.create_transaction, body
        )

    async def update_transaction(self, transaction_id: str, body: Any) -> ApiResponse:
        return await self._update(
            "transaction", TransactionPatch, self._storage.update_transaction,
            transaction_id, body,
        )

    async def delete_transaction(self, transaction_id: str) -> ApiResponse:
        return await self._delete("transaction", self._storage.delete_transaction, transaction_id)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> ApiResponse:
        try:
            categories = await self._storage.list_categories()
        except Exception as e:
            if not self._durable_configured:
                return self._failed("list_category", e, "Failed to fetch categories")
            logger.warning("category_fallback_served", error=str(e))
            self._audit.log_category_fallback(str(e))
            categories = list(FALLBACK_CATEGORIES)
        return ApiResponse(status_code=200, body=[c.to_json() for c in categories])

    async def create_category(self, body: Any) -> ApiResponse:
        return await self._create("category", InsertCategory, self._storage.create_category, body)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(self, month: Optional[str] = None) -> ApiResponse:
        # An empty query value means no filter.
        return await self._list("budget", lambda: self._storage.list_budgets(month or None))

    async def create_budget(self, body: Any) -> ApiResponse:
        return await self._create("budget", InsertBudget, self._storage.create_budget, body)

    async def update_budget(self, budget_id: str, body: Any) -> ApiResponse:
        return await self._update(
            "budget", BudgetPatch, self._storage.update_budget, budget_id, body
        )

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self) -> ApiResponse:
        return await self._list("goal", self._storage.list_goals)

    async def get_goal(self, goal_id: str) -> ApiResponse:
        return await self._get("goal", self._storage.get_goal, goal_id)

    async def create_goal(self, body: Any) -> ApiResponse:
        return await self._create("goal", InsertGoal, self._storage.create_goal, body)

    async def update_goal(self, goal_id: str, body: Any) -> ApiResponse:
        return await self._update("goal", GoalPatch, self._storage.update_goal, goal_id, body)

    async def delete_goal(self, goal_id: str) -> ApiResponse:
        return await self._delete("goal", self._storage.delete_goal, goal_id)

    # -------------------------------------------------------------------------
    # Tax and analytics
    # -------------------------------------------------------------------------

    async def tax_calculation(self, month: Optional[str] = None) -> ApiResponse:
        """Tax estimate for the year containing `month` (default: this month)."""
        if month and not MONTH_PATTERN.match(month):
            return ApiResponse(
                status_code=400,
                body={"message": "Month must be formatted YYYY-MM"},
            )
        try:
            report = await self._reports.tax(month or None)
        except Exception as e:
            return self._failed("tax_calculation", e, "Failed to calculate tax")
        return ApiResponse(status_code=200, body=report.to_json())

    async def analytics_summary(self) -> ApiResponse:
        """Current-month income, expenses, balance and category totals."""
        try:
            summary = await self._reports.summary()
        except Exception as e:
            return self._failed("analytics_summary", e, "Failed to fetch analytics")
        return ApiResponse(status_code=200, body=summary.to_json())

    async def reports_overview(self) -> ApiResponse:
        """Monthly stats, six-month trend and category breakdown in one payload."""
        try:
            overview = await self._reports.overview()
        except Exception as e:
            return self._failed("reports_overview", e, "Failed to build reports")
        return ApiResponse(
            status_code=200,
            body={
                "month": overview["month"],
                "stats": overview["stats"].to_json(),
                "trends": [point.to_json() for point in overview["trends"]],
                "categoryBreakdown": [s.to_json() for s in overview["categoryBreakdown"]],
            },
        )
