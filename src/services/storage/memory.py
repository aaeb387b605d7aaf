"""
In-Memory Storage Implementation

The volatile backend: each collection is a dict keyed by record id.
Data is lost when the process exits.

No locking is needed. Every operation runs to completion without
awaiting anything, so concurrent callers on the event loop observe
whole operations, never a half-written record.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from src.models.finance import (
    Budget,
    Category,
    Goal,
    InsertBudget,
    InsertCategory,
    InsertGoal,
    InsertTransaction,
    Transaction,
    apply_patch,
)
from src.services.storage.interface import (
    BudgetUpdate,
    FinanceStorageInterface,
    GoalUpdate,
    TransactionUpdate,
)
from src.services.storage.seed import default_category_rows, new_id


logger = structlog.get_logger(__name__)


class MemoryStorage(FinanceStorageInterface):
    """
    Dict-backed implementation of the finance store.

    Seeded with the ten default categories on construction.
    """

    backend_name = "memory"

    def __init__(self, seed_categories: bool = True):
        self._transactions: dict[str, Transaction] = {}
        self._categories: dict[str, Category] = {}
        self._budgets: dict[str, Budget] = {}
        self._goals: dict[str, Goal] = {}

        if seed_categories:
            self._seed_default_categories()

    def _seed_default_categories(self) -> None:
        for row in default_category_rows():
            self._categories[row["id"]] = Category.model_construct(**row)
        logger.debug("categories_seeded", backend=self.backend_name, count=len(self._categories))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[Transaction]:
        return sorted(self._transactions.values(), key=lambda t: t.date or "", reverse=True)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    async def create_transaction(self, payload: InsertTransaction) -> Transaction:
        transaction = Transaction.model_construct(
            **payload.model_dump(mode="json"),
            id=new_id(),
            created_at=datetime.now(timezone.utc),
        )
        self._transactions[transaction.id] = transaction
        return transaction

    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionUpdate,
    ) -> Optional[Transaction]:
        existing = self._transactions.get(transaction_id)
        if existing is None:
            return None
        updated = apply_patch(existing, patch)
        self._transactions[transaction_id] = updated
        return updated

    async def delete_transaction(self, transaction_id: str) -> bool:
        return self._transactions.pop(transaction_id, None) is not None

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        return list(self._categories.values())

    async def get_category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    async def create_category(self, payload: InsertCategory) -> Category:
        category = Category.model_construct(**payload.model_dump(mode="json"), id=new_id())
        self._categories[category.id] = category
        return category

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(self, month: Optional[str] = None) -> list[Budget]:
        budgets = list(self._budgets.values())
        if month is not None:
            budgets = [budget for budget in budgets if budget.month == month]
        return budgets

    async def get_budget(self, budget_id: str) -> Optional[Budget]:
        return self._budgets.get(budget_id)

    async def create_budget(self, payload: InsertBudget) -> Budget:
        fields = payload.model_dump(mode="json", exclude={"spent"})
        budget = Budget.model_construct(**fields, id=new_id(), spent="0")
        self._budgets[budget.id] = budget
        return budget

    async def update_budget(
        self,
        budget_id: str,
        patch: BudgetUpdate,
    ) -> Optional[Budget]:
        existing = self._budgets.get(budget_id)
        if existing is None:
            return None
        updated = apply_patch(existing, patch)
        self._budgets[budget_id] = updated
        return updated

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self) -> list[Goal]:
        return list(self._goals.values())

    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        return self._goals.get(goal_id)

    async def create_goal(self, payload: InsertGoal) -> Goal:
        fields = payload.model_dump(mode="json", exclude={"current_amount", "deadline"})
        goal = Goal.model_construct(
            **fields,
            id=new_id(),
            current_amount="0",
            deadline=payload.deadline or None,
            created_at=datetime.now(timezone.utc),
        )
        self._goals[goal.id] = goal
        return goal

    async def update_goal(
        self,
        goal_id: str,
        patch: GoalUpdate,
    ) -> Optional[Goal]:
        existing = self._goals.get(goal_id)
        if existing is None:
            return None
        updated = apply_patch(existing, patch)
        self._goals[goal_id] = updated
        return updated

    async def delete_goal(self, goal_id: str) -> bool:
        return self._goals.pop(goal_id, None) is not None
