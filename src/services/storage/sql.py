"""
SQL Storage Implementation

DESIGN DECISION: The durable backend speaks SQLAlchemy Core.
Any database with INSERT/UPDATE ... RETURNING works (PostgreSQL, SQLite
3.35+). Each create and update is a single statement that returns the
row as written, so the record handed back is exactly what was persisted.

TRADEOFFS:
- No multi-statement transactions. The first-run seeding check
  (count, then insert) can race between two cold starts; the worst case
  is duplicate default categories, which is tolerated.
- Blocking I/O inside async methods. Fine for a single-user tracker.

Seeding failures never escape: they are logged and the emptiness check
runs again on the next category access.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy import Table, create_engine, delete, func, insert, select, text, update
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.models.finance import (
    Budget,
    Category,
    Goal,
    InsertBudget,
    InsertCategory,
    InsertGoal,
    InsertTransaction,
    StoredRecord,
    Transaction,
    normalize_patch,
)
from src.services.storage.interface import (
    BackendUnavailableError,
    BudgetUpdate,
    FinanceStorageInterface,
    GoalUpdate,
    TransactionUpdate,
)
from src.services.storage.schema import Base, BudgetRow, CategoryRow, GoalRow, TransactionRow
from src.services.storage.seed import default_category_rows, new_id


logger = structlog.get_logger(__name__)

TRANSACTIONS: Table = TransactionRow.__table__
CATEGORIES: Table = CategoryRow.__table__
BUDGETS: Table = BudgetRow.__table__
GOALS: Table = GoalRow.__table__


def _ping(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


class SqlStorage(FinanceStorageInterface):
    """
    Relational implementation of the finance store.

    Build it with SqlStorage.connect(url); the constructor expects an
    engine that is already known to be reachable.
    """

    backend_name = "sql"

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_maker = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        self._categories_seeded = False

        Base.metadata.create_all(bind=engine)
        self._ensure_default_categories()

    @classmethod
    def connect(
        cls,
        database_url: str,
        *,
        attempts: int = 3,
        backoff_seconds: float = 1.0,
        echo: bool = False,
    ) -> "SqlStorage":
        """
        Create the engine, check the database answers, and build the store.

        Raises:
            BackendUnavailableError: If the URL is unusable or the database
                cannot be reached within the configured attempts
        """
        try:
            engine = create_engine(database_url, pool_pre_ping=True, echo=echo)
        except (SQLAlchemyError, ImportError) as e:
            raise BackendUnavailableError(f"Cannot create database engine: {e}") from e

        ping = retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=backoff_seconds, max=10),
            retry=retry_if_exception_type(SQLAlchemyError),
            reraise=True,
        )(_ping)

        try:
            ping(engine)
            return cls(engine)
        except SQLAlchemyError as e:
            engine.dispose()
            raise BackendUnavailableError(f"Database unreachable: {e}") from e

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around one statement."""
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _ensure_default_categories(self) -> None:
        """Seed the default categories if the table is empty. Never raises."""
        if self._categories_seeded:
            return
        try:
            with self._session_scope() as session:
                count = session.execute(
                    select(func.count()).select_from(CATEGORIES)
                ).scalar_one()
                if count == 0:
                    rows = default_category_rows()
                    session.execute(insert(CATEGORIES), rows)
                    logger.info("categories_seeded", backend=self.backend_name, count=len(rows))
            self._categories_seeded = True
        except SQLAlchemyError as e:
            logger.warning("category_seed_failed", backend=self.backend_name, error=str(e))

    # -------------------------------------------------------------------------
    # Generic statements
    # -------------------------------------------------------------------------

    def _select_all(self, table: Table, *clauses: Any, order_by: Any = None) -> list[RowMapping]:
        stmt = select(table)
        if clauses:
            stmt = stmt.where(*clauses)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        with self._session_scope() as session:
            return list(session.execute(stmt).mappings().all())

    def _select_one(self, table: Table, record_id: str) -> Optional[RowMapping]:
        with self._session_scope() as session:
            return session.execute(
                select(table).where(table.c.id == record_id)
            ).mappings().one_or_none()

    def _insert(self, table: Table, values: dict[str, Any]) -> RowMapping:
        with self._session_scope() as session:
            return session.execute(
                insert(table).values(**values).returning(*table.c)
            ).mappings().one()

    def _update(
        self,
        table: Table,
        record_type: type[StoredRecord],
        record_id: str,
        patch: Any,
    ) -> Optional[RowMapping]:
        changes = normalize_patch(record_type, patch)
        if not changes:
            return self._select_one(table, record_id)
        with self._session_scope() as session:
            return session.execute(
                update(table)
                .where(table.c.id == record_id)
                .values(**changes)
                .returning(*table.c)
            ).mappings().one_or_none()

    def _delete(self, table: Table, record_id: str) -> bool:
        with self._session_scope() as session:
            result = session.execute(delete(table).where(table.c.id == record_id))
            return result.rowcount > 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[Transaction]:
        rows = self._select_all(TRANSACTIONS, order_by=TRANSACTIONS.c.date.desc())
        return [Transaction.model_construct(**row) for row in rows]

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        row = self._select_one(TRANSACTIONS, transaction_id)
        return Transaction.model_construct(**row) if row is not None else None

    async def create_transaction(self, payload: InsertTransaction) -> Transaction:
        row = self._insert(TRANSACTIONS, {
            **payload.model_dump(mode="json"),
            "id": new_id(),
            "created_at": datetime.now(timezone.utc),
        })
        return Transaction.model_construct(**row)

    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionUpdate,
    ) -> Optional[Transaction]:
        row = self._update(TRANSACTIONS, Transaction, transaction_id, patch)
        return Transaction.model_construct(**row) if row is not None else None

    async def delete_transaction(self, transaction_id: str) -> bool:
        return self._delete(TRANSACTIONS, transaction_id)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        self._ensure_default_categories()
        return [Category.model_construct(**row) for row in self._select_all(CATEGORIES)]

    async def get_category(self, category_id: str) -> Optional[Category]:
        self._ensure_default_categories()
        row = self._select_one(CATEGORIES, category_id)
        return Category.model_construct(**row) if row is not None else None

    async def create_category(self, payload: InsertCategory) -> Category:
        row = self._insert(CATEGORIES, {**payload.model_dump(mode="json"), "id": new_id()})
        return Category.model_construct(**row)

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def list_budgets(self, month: Optional[str] = None) -> list[Budget]:
        clauses = [BUDGETS.c.month == month] if month is not None else []
        return [Budget.model_construct(**row) for row in self._select_all(BUDGETS, *clauses)]

    async def get_budget(self, budget_id: str) -> Optional[Budget]:
        row = self._select_one(BUDGETS, budget_id)
        return Budget.model_construct(**row) if row is not None else None

    async def create_budget(self, payload: InsertBudget) -> Budget:
        row = self._insert(BUDGETS, {
            **payload.model_dump(mode="json", exclude={"spent"}),
            "id": new_id(),
            "spent": "0",
        })
        return Budget.model_construct(**row)

    async def update_budget(
        self,
        budget_id: str,
        patch: BudgetUpdate,
    ) -> Optional[Budget]:
        row = self._update(BUDGETS, Budget, budget_id, patch)
        return Budget.model_construct(**row) if row is not None else None

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    async def list_goals(self) -> list[Goal]:
        return [Goal.model_construct(**row) for row in self._select_all(GOALS)]

    async def get_goal(self, goal_id: str) -> Optional[Goal]:
        row = self._select_one(GOALS, goal_id)
        return Goal.model_construct(**row) if row is not None else None

    async def create_goal(self, payload: InsertGoal) -> Goal:
        row = self._insert(GOALS, {
            **payload.model_dump(mode="json", exclude={"current_amount", "deadline"}),
            "id": new_id(),
            "current_amount": "0",
            "deadline": payload.deadline or None,
            "created_at": datetime.now(timezone.utc),
        })
        return Goal.model_construct(**row)

    async def update_goal(
        self,
        goal_id: str,
        patch: GoalUpdate,
    ) -> Optional[Goal]:
        row = self._update(GOALS, Goal, goal_id, patch)
        return Goal.model_construct(**row) if row is not None else None

    async def delete_goal(self, goal_id: str) -> bool:
        return self._delete(GOALS, goal_id)
