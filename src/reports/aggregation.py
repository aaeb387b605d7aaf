"""
Transaction Aggregation

Pure functions over a snapshot of transactions. Nothing here touches
storage or the clock: the month or reference date is always passed in.

Months are matched by prefix on the ISO date string ("2024-03" matches
"2024-03-15"), not by calendar-aware range checks.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import structlog

from src.models.finance import Transaction, TransactionType
from src.models.reports import CategorySlice, MonthlySummary, TrendPoint


logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")

# Breakdown key for expenses whose stored category is missing.
UNCATEGORIZED = "Uncategorized"

# Chart colors for the category breakdown, assigned by first-seen order.
CATEGORY_PALETTE: tuple[str, ...] = (
    "hsl(var(--chart-1))",
    "hsl(var(--chart-2))",
    "hsl(var(--chart-3))",
    "hsl(var(--chart-4))",
    "hsl(var(--chart-5))",
    "hsl(var(--primary))",
    "hsl(var(--destructive))",
    "hsl(var(--warning))",
)


def parse_amount(transaction: Transaction) -> Decimal:
    """
    The transaction amount as a Decimal.

    The store does not validate updates, so an amount can be anything.
    Unparseable or non-finite amounts count as zero.
    """
    try:
        amount = Decimal(transaction.amount)
    except (InvalidOperation, TypeError):
        logger.warning("unparseable_amount", transaction_id=transaction.id, amount=transaction.amount)
        return ZERO
    if not amount.is_finite():
        logger.warning("unparseable_amount", transaction_id=transaction.id, amount=transaction.amount)
        return ZERO
    return amount


def to_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def shift_month(day: date, months: int) -> date:
    """First day of the month `months` away from day's month (negative goes back)."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def in_month(transactions: Iterable[Transaction], month: str) -> list[Transaction]:
    return [t for t in transactions if (t.date or "").startswith(month)]


def _total(transactions: Iterable[Transaction], kind: TransactionType) -> Decimal:
    return sum((parse_amount(t) for t in transactions if t.type == kind), ZERO)


def _expenses_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            name = t.category if isinstance(t.category, str) else UNCATEGORIZED
            totals[name] = totals.get(name, ZERO) + parse_amount(t)
    return totals


def monthly_summary(transactions: Sequence[Transaction], month: str) -> MonthlySummary:
    """
    Totals for one month.

    savings_rate is the balance as a percentage of income and
    average_transaction the mean amount over all the month's transactions;
    both are rounded to cents, and zero rather than undefined when there is
    nothing to divide by.
    """
    monthly = in_month(transactions, month)
    total_income = _total(monthly, TransactionType.INCOME)
    total_expenses = _total(monthly, TransactionType.EXPENSE)
    balance = total_income - total_expenses

    average = ZERO
    if monthly:
        average = to_cents(sum((parse_amount(t) for t in monthly), ZERO) / len(monthly))

    savings_rate = ZERO
    if total_income:
        savings_rate = to_cents(balance / total_income * 100)

    return MonthlySummary(
        month=month,
        total_income=total_income,
        total_expenses=total_expenses,
        balance=balance,
        category_breakdown=_expenses_by_category(monthly),
        transaction_count=len(monthly),
        average_transaction=average,
        savings_rate=savings_rate,
    )


def trend_series(
    transactions: Sequence[Transaction],
    reference: date,
    months: int = 6,
) -> list[TrendPoint]:
    """Income, expenses and net for the trailing months, oldest first."""
    points = []
    for offset in range(months - 1, -1, -1):
        first_day = shift_month(reference, -offset)
        key = month_key(first_day)
        monthly = in_month(transactions, key)
        income = _total(monthly, TransactionType.INCOME)
        expenses = _total(monthly, TransactionType.EXPENSE)
        points.append(TrendPoint(
            month=key,
            label=first_day.strftime("%b %Y"),
            income=income,
            expenses=expenses,
            net=income - expenses,
        ))
    return points


def category_breakdown(transactions: Sequence[Transaction], month: str) -> list[CategorySlice]:
    """The month's expenses per category, each paired with a palette color."""
    totals = _expenses_by_category(in_month(transactions, month))
    return [
        CategorySlice(
            name=name,
            value=value,
            color=CATEGORY_PALETTE[index % len(CATEGORY_PALETTE)],
        )
        for index, (name, value) in enumerate(totals.items())
    ]
