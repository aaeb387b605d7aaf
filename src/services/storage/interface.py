"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run on a relational database when one is configured
2. Use in-memory storage for development, tests and as a fallback
3. Keep the reports and the boundary decoupled from storage implementation

The contract every backend honours:
- list_* returns a new list, empty when there are no records
- list_transactions is sorted by date, most recent first
- get_* returns None for an unknown id, never raises
- create_* assigns a fresh id, applies entity defaults, never mutates its input
- update_* returns None for an unknown id, else the merged, persisted record
- delete_* returns True if a record was removed, False otherwise

Backends do not validate. Payloads are validated by the boundary before
they get here; a direct caller can persist anything.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Union

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
    Transaction,
    TransactionPatch,
)


TransactionUpdate = Union[TransactionPatch, Mapping[str, Any]]
BudgetUpdate = Union[BudgetPatch, Mapping[str, Any]]
GoalUpdate = Union[GoalPatch, Mapping[str, Any]]


class FinanceStorageInterface(ABC):
    """
    Abstract interface for the finance store.

    Owns the four collections: transactions, categories, budgets and goals.
    Categories and budgets have no delete operation.
    """

    backend_name: str = "abstract"

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_transactions(self) -> list[Transaction]:
        """
        List all transactions.

        Returns:
            Transactions sorted by date descending (most recent first)
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a transaction by its ID.

        Returns:
            The transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_transaction(self, payload: InsertTransaction) -> Transaction:
        """
        Store a new transaction.

        Assigns a fresh id and stamps created_at with the current time.
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionUpdate,
    ) -> Optional[Transaction]:
        """
        Shallow-merge a patch over an existing transaction.

        Returns:
            The merged record, or None if the id is unknown
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if a record existed and was removed
        """
        pass

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """List all categories. No order is guaranteed."""
        pass

    @abstractmethod
    async def get_category(self, category_id: str) -> Optional[Category]:
        """Retrieve a category by its ID, None if unknown."""
        pass

    @abstractmethod
    async def create_category(self, payload: InsertCategory) -> Category:
        """Store a new category under a fresh id."""
        pass

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_budgets(self, month: Optional[str] = None) -> list[Budget]:
        """
        List budgets.

        Args:
            month: If given, only budgets whose month equals it exactly (YYYY-MM)
        """
        pass

    @abstractmethod
    async def get_budget(self, budget_id: str) -> Optional[Budget]:
        """Retrieve a budget by its ID, None if unknown."""
        pass

    @abstractmethod
    async def create_budget(self, payload: InsertBudget) -> Budget:
        """
        Store a new budget.

        spent always starts at "0", whatever the payload says.
        """
        pass

    @abstractmethod
    async def update_budget(
        self,
        budget_id: str,
        patch: BudgetUpdate,
    ) -> Optional[Budget]:
        """Shallow-merge a patch over a budget; None if the id is unknown."""
        pass

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_goals(self) -> list[Goal]:
        """List all goals. No order is guaranteed."""
        pass

    @abstractmethod
    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        """Retrieve a goal by its ID, None if unknown."""
        pass

    @abstractmethod
    async def create_goal(self, payload: InsertGoal) -> Goal:
        """
        Store a new goal.

        current_amount always starts at "0", created_at is stamped and an
        absent deadline is stored as None.
        """
        pass

    @abstractmethod
    async def update_goal(
        self,
        goal_id: str,
        patch: GoalUpdate,
    ) -> Optional[Goal]:
        """Shallow-merge a patch over a goal; None if the id is unknown."""
        pass

    @abstractmethod
    async def delete_goal(self, goal_id: str) -> bool:
        """Delete a goal by ID; True if a record existed and was removed."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class BackendUnavailableError(StorageError):
    """The durable backend could not be constructed or reached."""
    pass
