"""
Relational schema for the durable backend.

Column names match the record field names, so a result row maps
straight onto its Pydantic record. Amounts, dates and months are kept
as strings, exactly as the records carry them. Every column except the
primary key is nullable: an update may overwrite any field with null.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UtcDateTime(TypeDecorator):
    """
    Timezone-aware timestamp that always reads back in UTC.

    SQLite drops the offset on storage; naive values coming back are UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    pass


class TransactionRow(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    type: Mapped[Optional[str]] = mapped_column(String(16))
    amount: Mapped[Optional[str]] = mapped_column(String(32))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    # ISO dates sort correctly as strings.
    date: Mapped[Optional[str]] = mapped_column(String(10), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime())


class CategoryRow(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(100))
    type: Mapped[Optional[str]] = mapped_column(String(16))
    icon: Mapped[Optional[str]] = mapped_column(String(64))
    color: Mapped[Optional[str]] = mapped_column(String(64))


class BudgetRow(Base):
    __tablename__ = "budgets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    month: Mapped[Optional[str]] = mapped_column(String(7), index=True)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    limit: Mapped[Optional[str]] = mapped_column(String(32))
    spent: Mapped[Optional[str]] = mapped_column(String(32))


class GoalRow(Base):
    __tablename__ = "goals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    target_amount: Mapped[Optional[str]] = mapped_column(String(32))
    current_amount: Mapped[Optional[str]] = mapped_column(String(32))
    deadline: Mapped[Optional[str]] = mapped_column(String(10))
    created_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime())
