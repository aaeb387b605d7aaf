"""
Storage contract tests

Every test in this module runs against both the memory backend and the
SQL backend (file-backed SQLite), so the two stay interchangeable.
"""

from datetime import timedelta

import pytest

from src.models.finance import BudgetPatch, GoalPatch, InsertCategory, TransactionPatch
from src.services.storage import DEFAULT_CATEGORIES
from tests.factories import budget_payload, goal_payload, transaction_payload


MISSING_ID = "00000000-0000-0000-0000-000000000000"


class TestTransactions:
    """Transaction CRUD through the storage contract."""

    @pytest.mark.asyncio
    async def test_create_then_get(self, storage):
        """Test that a created record reads back equal."""
        created = await storage.create_transaction(transaction_payload())
        assert created.id
        assert created.created_at is not None
        assert created.amount == "250.00"
        assert created.type == "expense"
        assert await storage.get_transaction(created.id) == created

    @pytest.mark.asyncio
    async def test_created_at_is_utc(self, storage):
        """Test that createdAt comes back as UTC on every backend."""
        created = await storage.create_transaction(transaction_payload())
        fetched = await storage.get_transaction(created.id)
        listed = (await storage.list_transactions())[0]

        for record in (created, fetched, listed):
            assert record.created_at.utcoffset() == timedelta(0)
            assert record.to_json()["createdAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_goal_created_at_is_utc(self, storage):
        """Test the same timestamp shape for goals."""
        created = await storage.create_goal(goal_payload())
        fetched = await storage.get_goal(created.id)
        assert fetched.to_json()["createdAt"].endswith("Z")
        assert fetched.to_json()["createdAt"] == created.to_json()["createdAt"]

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, storage):
        """Test that every create assigns a fresh id."""
        created = [await storage.create_transaction(transaction_payload()) for _ in range(5)]
        assert len({t.id for t in created}) == 5

    @pytest.mark.asyncio
    async def test_caller_payload_not_mutated(self, storage):
        """Test that create leaves the input object alone."""
        payload = transaction_payload()
        before = payload.model_dump()
        await storage.create_transaction(payload)
        assert payload.model_dump() == before

    @pytest.mark.asyncio
    async def test_list_sorted_by_date_descending(self, storage):
        """Test that the most recent transaction comes first."""
        for day in ["2024-01-10", "2024-03-05", "2023-12-31", "2024-02-29"]:
            await storage.create_transaction(transaction_payload(date=day))

        listed = await storage.list_transactions()
        assert [t.date for t in listed] == [
            "2024-03-05", "2024-02-29", "2024-01-10", "2023-12-31",
        ]

    @pytest.mark.asyncio
    async def test_update_merges(self, storage):
        """Test that fields absent from the patch are preserved."""
        created = await storage.create_transaction(transaction_payload())
        updated = await storage.update_transaction(created.id, {"amount": "300"})

        assert updated.amount == "300"
        assert updated.category == created.category
        assert updated.description == created.description
        assert updated.created_at == created.created_at
        assert await storage.get_transaction(created.id) == updated

    @pytest.mark.asyncio
    async def test_update_with_patch_model(self, storage):
        """Test that a validated patch applies only the keys that were sent."""
        created = await storage.create_transaction(transaction_payload())
        updated = await storage.update_transaction(
            created.id, TransactionPatch(description=None),
        )
        assert updated.description is None
        assert updated.amount == created.amount

    @pytest.mark.asyncio
    async def test_empty_patch_is_noop(self, storage):
        """Test that an empty patch returns the record unchanged."""
        created = await storage.create_transaction(transaction_payload())
        assert await storage.update_transaction(created.id, {}) == created

    @pytest.mark.asyncio
    async def test_update_ignores_identity_fields(self, storage):
        """Test that id and createdAt survive a patch that names them."""
        created = await storage.create_transaction(transaction_payload())
        updated = await storage.update_transaction(
            created.id, {"id": MISSING_ID, "createdAt": "2000-01-01", "category": "เดินทาง"},
        )
        assert updated.id == created.id
        assert updated.created_at == created.created_at
        assert updated.category == "เดินทาง"

    @pytest.mark.asyncio
    async def test_raw_update_not_revalidated(self, storage):
        """Test that the store persists a raw patch as given."""
        created = await storage.create_transaction(transaction_payload())
        updated = await storage.update_transaction(created.id, {"amount": "abc"})
        assert updated.amount == "abc"

    @pytest.mark.asyncio
    async def test_absent_ids(self, storage):
        """Test that get, update and delete report a missing id."""
        assert await storage.get_transaction(MISSING_ID) is None
        assert await storage.update_transaction(MISSING_ID, {"amount": "1"}) is None
        assert await storage.delete_transaction(MISSING_ID) is False

    @pytest.mark.asyncio
    async def test_delete_once(self, storage):
        """Test that a second delete of the same id reports absent."""
        created = await storage.create_transaction(transaction_payload())
        assert await storage.delete_transaction(created.id) is True
        assert await storage.delete_transaction(created.id) is False
        assert await storage.get_transaction(created.id) is None
        assert await storage.list_transactions() == []


class TestCategories:
    """Default category seeding and creation."""

    @pytest.mark.asyncio
    async def test_fresh_store_has_default_categories(self, storage):
        """Test that a new store holds exactly the ten defaults."""
        categories = await storage.list_categories()

        assert len(categories) == 10
        assert {c.name for c in categories} == {c.name for c in DEFAULT_CATEGORIES}
        assert sum(1 for c in categories if c.type == "expense") == 7
        assert sum(1 for c in categories if c.type == "income") == 3
        assert len({c.id for c in categories}) == 10

    @pytest.mark.asyncio
    async def test_create_and_get_category(self, storage):
        """Test that a custom category joins the list."""
        created = await storage.create_category(InsertCategory(
            name="สัตว์เลี้ยง", type="expense", icon="fas fa-paw", color="hsl(var(--chart-2))",
        ))
        assert await storage.get_category(created.id) == created
        assert len(await storage.list_categories()) == 11

    @pytest.mark.asyncio
    async def test_unknown_category(self, storage):
        """Test that a missing category id reads as None."""
        assert await storage.get_category(MISSING_ID) is None


class TestBudgets:
    """Budget creation, filtering and updates."""

    @pytest.mark.asyncio
    async def test_spent_forced_to_zero(self, storage):
        """Test that a caller-supplied spent is ignored on create."""
        payload = budget_payload(spent="999")
        created = await storage.create_budget(payload)

        assert created.spent == "0"
        assert payload.spent == "999"
        assert await storage.get_budget(created.id) == created

    @pytest.mark.asyncio
    async def test_month_filter_is_exact(self, storage):
        """Test that filtering by month returns only that month."""
        march = await storage.create_budget(budget_payload(month="2024-03"))
        await storage.create_budget(budget_payload(month="2024-04"))
        await storage.create_budget(budget_payload(month="2024-03", category="เดินทาง"))

        filtered = await storage.list_budgets("2024-03")
        assert len(filtered) == 2
        assert all(b.month == "2024-03" for b in filtered)
        assert march in filtered
        assert len(await storage.list_budgets()) == 3
        assert await storage.list_budgets("2025-01") == []

    @pytest.mark.asyncio
    async def test_update_spent(self, storage):
        """Test that spent can be changed after creation."""
        created = await storage.create_budget(budget_payload())
        updated = await storage.update_budget(created.id, BudgetPatch(spent="1250.75"))

        assert updated.spent == "1250.75"
        assert updated.limit == created.limit
        assert await storage.update_budget(MISSING_ID, {"spent": "1"}) is None


class TestGoals:
    """Goal defaults, updates and deletion."""

    @pytest.mark.asyncio
    async def test_defaults_on_create(self, storage):
        """Test currentAmount, deadline and createdAt defaults."""
        created = await storage.create_goal(goal_payload(current_amount="5000"))

        assert created.current_amount == "0"
        assert created.deadline is None
        assert created.created_at is not None
        assert await storage.get_goal(created.id) == created

    @pytest.mark.asyncio
    async def test_deadline_kept(self, storage):
        """Test that a supplied deadline is stored."""
        created = await storage.create_goal(goal_payload(deadline="2025-06-30"))
        assert created.deadline == "2025-06-30"

    @pytest.mark.asyncio
    async def test_record_progress(self, storage):
        """Test updating currentAmount through an alias key."""
        created = await storage.create_goal(goal_payload())
        updated = await storage.update_goal(created.id, {"currentAmount": "2500"})

        assert updated.current_amount == "2500"
        assert updated.target_amount == created.target_amount
        assert updated.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_patch_model_clears_deadline(self, storage):
        """Test that an explicit null deadline overwrites."""
        created = await storage.create_goal(goal_payload(deadline="2025-06-30"))
        updated = await storage.update_goal(created.id, GoalPatch(deadline=None))
        assert updated.deadline is None

    @pytest.mark.asyncio
    async def test_delete(self, storage):
        """Test goal deletion and the absent-id signal."""
        created = await storage.create_goal(goal_payload())
        assert await storage.delete_goal(created.id) is True
        assert await storage.delete_goal(created.id) is False
        assert await storage.list_goals() == []
