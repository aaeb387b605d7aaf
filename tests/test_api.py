"""
Tests for the request handlers

Handlers run against a real MemoryStorage; failure paths use a
storage subclass whose methods raise.
"""

from datetime import date
from decimal import Decimal

import pytest

from src.models.audit import AuditEventType
from src.orchestrator import FinanceTracker
from src.services.storage import MemoryStorage


MISSING_ID = "00000000-0000-0000-0000-000000000000"

TRANSACTION_BODY = {
    "type": "expense",
    "amount": "250.00",
    "category": "อาหาร",
    "date": "2024-03-15",
    "description": "Lunch",
}


class BrokenStorage(MemoryStorage):
    """A store whose reads and creates fail as if the database went away."""

    async def list_categories(self):
        raise RuntimeError("connection reset by peer")

    async def create_transaction(self, payload):
        raise RuntimeError("connection reset by peer")


def build(storage=None, durable_configured=False) -> FinanceTracker:
    return FinanceTracker.build(
        storage or MemoryStorage(),
        durable_configured=durable_configured,
        today=lambda: date(2024, 3, 20),
    )


@pytest.fixture
def tracker():
    return build()


@pytest.fixture
def api(tracker):
    return tracker.api


class TestTransactionEndpoints:
    """Status mapping for the transaction handlers."""

    @pytest.mark.asyncio
    async def test_create_returns_201(self, tracker):
        """Test that a valid body creates a record."""
        response = await tracker.api.create_transaction(TRANSACTION_BODY)

        assert response.status_code == 201
        assert response.ok
        assert response.body["amount"] == "250.00"
        assert "createdAt" in response.body
        assert tracker.audit_logger.events[-1].event_type == AuditEventType.TRANSACTION_CREATED

    @pytest.mark.asyncio
    async def test_invalid_body_returns_400(self, tracker):
        """Test that a malformed body is rejected before the store."""
        response = await tracker.api.create_transaction({**TRANSACTION_BODY, "amount": "-5"})

        assert response.status_code == 400
        assert response.body["message"] == "Invalid transaction data"
        assert response.body["errors"][0]["field"] == "amount"
        assert await tracker.storage.list_transactions() == []
        assert tracker.audit_logger.events[-1].event_type == AuditEventType.VALIDATION_FAILED

    @pytest.mark.asyncio
    async def test_non_object_body_returns_400(self, api):
        """Test that a missing body is a validation failure."""
        response = await api.create_transaction(None)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_and_list(self, api):
        """Test reading back created transactions."""
        created = (await api.create_transaction(TRANSACTION_BODY)).body

        fetched = await api.get_transaction(created["id"])
        assert fetched.status_code == 200
        assert fetched.body == created

        listed = await api.list_transactions()
        assert listed.body == [created]

    @pytest.mark.asyncio
    async def test_unknown_id_returns_404(self, api):
        """Test get, update and delete on an id that does not exist."""
        for response in [
            await api.get_transaction(MISSING_ID),
            await api.update_transaction(MISSING_ID, {"amount": "1"}),
            await api.delete_transaction(MISSING_ID),
        ]:
            assert response.status_code == 404
            assert response.body == {"message": "Transaction not found"}

    @pytest.mark.asyncio
    async def test_update_merges(self, api):
        """Test that an update returns the merged record."""
        created = (await api.create_transaction(TRANSACTION_BODY)).body
        response = await api.update_transaction(created["id"], {"amount": "300"})

        assert response.status_code == 200
        assert response.body["amount"] == "300"
        assert response.body["description"] == "Lunch"
        assert response.body["createdAt"] == created["createdAt"]

    @pytest.mark.asyncio
    async def test_update_rejects_bad_value(self, api):
        """Test that patches are validated too."""
        created = (await api.create_transaction(TRANSACTION_BODY)).body
        response = await api.update_transaction(created["id"], {"date": "not-a-date"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["type", "amount", "category", "date"])
    async def test_null_required_field_rejected(self, api, field):
        """Test that a patch cannot clear a required field."""
        created = (await api.create_transaction(TRANSACTION_BODY)).body
        response = await api.update_transaction(created["id"], {field: None})

        assert response.status_code == 400
        assert (await api.get_transaction(created["id"])).body == created

    @pytest.mark.asyncio
    async def test_delete_returns_204(self, api):
        """Test no-content delete, then 404 on repeat."""
        created = (await api.create_transaction(TRANSACTION_BODY)).body

        response = await api.delete_transaction(created["id"])
        assert response.status_code == 204
        assert response.body is None
        assert (await api.delete_transaction(created["id"])).status_code == 404

    @pytest.mark.asyncio
    async def test_store_failure_returns_500(self):
        """Test that an exception from the store maps to 500."""
        tracker = build(BrokenStorage())
        response = await tracker.api.create_transaction(TRANSACTION_BODY)

        assert response.status_code == 500
        assert response.body == {"message": "Failed to create transaction"}
        assert tracker.audit_logger.events[-1].event_type == AuditEventType.SYSTEM_ERROR


class TestCategoryEndpoints:
    """The category list and its degraded path."""

    @pytest.mark.asyncio
    async def test_list_defaults(self, api):
        """Test that the seeded categories are listed."""
        response = await api.list_categories()
        assert response.status_code == 200
        assert len(response.body) == 10
        assert set(response.body[0]) == {"id", "name", "type", "icon", "color"}

    @pytest.mark.asyncio
    async def test_fallback_when_durable_configured(self):
        """Test that a failing durable store still yields categories."""
        tracker = build(BrokenStorage(), durable_configured=True)
        response = await tracker.api.list_categories()

        assert response.status_code == 200
        assert [c["id"] for c in response.body] == ["1", "2", "3"]
        assert tracker.audit_logger.events[-1].event_type == (
            AuditEventType.CATEGORY_FALLBACK_SERVED
        )

    @pytest.mark.asyncio
    async def test_failure_without_durable_backend(self):
        """Test that a failing volatile store is a genuine error."""
        tracker = build(BrokenStorage(), durable_configured=False)
        response = await tracker.api.list_categories()

        assert response.status_code == 500
        assert response.body == {"message": "Failed to fetch categories"}

    @pytest.mark.asyncio
    async def test_create_category(self, api):
        """Test creating a custom category."""
        response = await api.create_category({
            "name": "สัตว์เลี้ยง",
            "type": "expense",
            "icon": "fas fa-paw",
            "color": "hsl(var(--chart-2))",
        })
        assert response.status_code == 201
        assert response.body["type"] == "expense"


class TestBudgetAndGoalEndpoints:
    """Budget and goal handlers."""

    @pytest.mark.asyncio
    async def test_budget_lifecycle(self, api):
        """Test create, filter and update for budgets."""
        created = await api.create_budget({
            "month": "2024-03", "category": "อาหาร", "limit": "5000", "spent": "4000",
        })
        assert created.status_code == 201
        assert created.body["spent"] == "0"

        assert len((await api.list_budgets("2024-03")).body) == 1
        assert (await api.list_budgets("2024-04")).body == []
        assert len((await api.list_budgets("")).body) == 1

        updated = await api.update_budget(created.body["id"], {"spent": "1200"})
        assert updated.status_code == 200
        assert updated.body["spent"] == "1200"
        assert (await api.update_budget(MISSING_ID, {"spent": "1"})).status_code == 404

    @pytest.mark.asyncio
    async def test_bad_budget_month(self, api):
        """Test that budgets need a YYYY-MM month."""
        response = await api.create_budget({"month": "03/2024", "category": "อาหาร", "limit": "1"})
        assert response.status_code == 400
        assert response.body["message"] == "Invalid budget data"

    @pytest.mark.asyncio
    async def test_goal_lifecycle(self, api):
        """Test create, progress, delete for goals."""
        created = await api.create_goal({"name": "Trip to Japan", "targetAmount": "60000"})
        assert created.status_code == 201
        assert created.body["currentAmount"] == "0"
        assert created.body["deadline"] is None

        goal_id = created.body["id"]
        progressed = await api.update_goal(goal_id, {"currentAmount": "15000"})
        assert progressed.body["currentAmount"] == "15000"
        assert (await api.get_goal(goal_id)).body == progressed.body
        assert len((await api.list_goals()).body) == 1

        assert (await api.delete_goal(goal_id)).status_code == 204
        assert (await api.get_goal(goal_id)).status_code == 404


class TestReportEndpoints:
    """Tax and analytics handlers."""

    async def _seed(self, api):
        for body in [
            {"type": "income", "amount": "45000", "category": "เงินเดือน", "date": "2024-03-01"},
            {"type": "expense", "amount": "1500", "category": "อาหาร", "date": "2024-03-05"},
            {"type": "expense", "amount": "500", "category": "เดินทาง", "date": "2024-02-10"},
        ]:
            assert (await api.create_transaction(body)).status_code == 201

    @pytest.mark.asyncio
    async def test_tax_for_month(self, api):
        """Test that a valid month returns the year's estimate."""
        response = await api.tax_calculation("2023-07")
        assert response.status_code == 200
        assert response.body["year"] == 2023
        assert Decimal(response.body["taxAmount"]) == 0

    @pytest.mark.asyncio
    async def test_tax_defaults_to_current_month(self, api):
        """Test that no month means the current year."""
        response = await api.tax_calculation()
        assert response.body["year"] == 2024

    @pytest.mark.asyncio
    @pytest.mark.parametrize("month", ["2024-13", "2024-3", "March"])
    async def test_tax_rejects_bad_month(self, api, month):
        """Test that the month parameter must be YYYY-MM."""
        response = await api.tax_calculation(month)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_analytics_summary(self, api):
        """Test the current-month summary payload."""
        await self._seed(api)
        response = await api.analytics_summary()
        body = response.body

        assert response.status_code == 200
        assert body["month"] == "2024-03"
        assert Decimal(body["totalIncome"]) == Decimal("45000")
        assert Decimal(body["totalExpenses"]) == Decimal("1500")
        assert Decimal(body["balance"]) == Decimal("43500")
        assert body["categoryBreakdown"] == {"อาหาร": "1500"}
        assert body["transactionCount"] == 2

    @pytest.mark.asyncio
    async def test_summary_after_null_category_attempt(self, tracker):
        """Test that reports keep working around a rejected or raw null category."""
        api = tracker.api
        await self._seed(api)
        food = next(
            t for t in (await api.list_transactions()).body if t["category"] == "อาหาร"
        )

        assert (await api.update_transaction(food["id"], {"category": None})).status_code == 400
        assert (await api.analytics_summary()).status_code == 200

        # The store itself does not validate, so a raw write can still store null.
        await tracker.storage.update_transaction(food["id"], {"category": None})
        summary = await api.analytics_summary()
        assert summary.status_code == 200
        assert summary.body["categoryBreakdown"] == {"Uncategorized": "1500"}
        overview = await api.reports_overview()
        assert overview.status_code == 200
        assert [s["name"] for s in overview.body["categoryBreakdown"]] == ["Uncategorized"]

    @pytest.mark.asyncio
    async def test_reports_overview(self, api):
        """Test the combined reports payload."""
        await self._seed(api)
        body = (await api.reports_overview()).body

        assert body["month"] == "2024-03"
        assert len(body["trends"]) == 6
        assert body["trends"][-1]["month"] == "2024-03"
        assert Decimal(body["trends"][-2]["expenses"]) == Decimal("500")
        assert [s["name"] for s in body["categoryBreakdown"]] == ["อาหาร"]
        assert Decimal(body["stats"]["savingsRate"]) > 0
