"""
Progressive Income-Tax Estimate

Applies a TaxSchedule (Thai personal income tax by default) to an annual
income figure:

1. social security = min(income x rate, cap)
2. provident fund  = min(income x rate, cap)
3. taxable income  = max(0, income - personal deduction - social security - provident fund)
4. each bracket taxes the slice of taxable income between its bounds
5. net income      = income - tax - social security

All arithmetic is Decimal, so bracket contributions sum exactly to the
total tax.
"""

from collections.abc import Sequence
from decimal import Decimal

from src.config import THAI_TAX_BRACKETS
from src.models.finance import Transaction, TransactionType
from src.models.reports import (
    BracketContribution,
    MonthlyAverage,
    TaxDeductions,
    TaxEstimate,
    TaxReport,
    TaxSchedule,
)
from src.reports.aggregation import ZERO, parse_amount, to_cents


MONTHS_PER_YEAR = 12

THAI_TAX_SCHEDULE = TaxSchedule(
    personal_deduction=Decimal("60000"),
    social_security_rate=Decimal("0.05"),
    social_security_cap=Decimal("15000"),
    provident_fund_rate=Decimal("0.03"),
    provident_fund_cap=Decimal("500000"),
    brackets=THAI_TAX_BRACKETS,
)


def _per_month(amount: Decimal) -> Decimal:
    return to_cents(amount / MONTHS_PER_YEAR)


def estimate_tax(annual_income: Decimal, schedule: TaxSchedule = THAI_TAX_SCHEDULE) -> TaxEstimate:
    """Estimate the year's income tax for one annual income figure."""
    social_security = min(annual_income * schedule.social_security_rate, schedule.social_security_cap)
    provident_fund = min(annual_income * schedule.provident_fund_rate, schedule.provident_fund_cap)

    deductions = TaxDeductions(
        personal=schedule.personal_deduction,
        social_security=social_security,
        provident_fund=provident_fund,
    )
    taxable_income = max(ZERO, annual_income - deductions.total)

    tax_amount = ZERO
    contributions = []
    for bracket in schedule.brackets:
        if taxable_income <= bracket.lower:
            break
        top = taxable_income if bracket.upper is None else min(taxable_income, bracket.upper)
        owed = (top - bracket.lower) * bracket.rate
        tax_amount += owed
        if owed > 0:
            contributions.append(BracketContribution(
                range=bracket.range_label,
                rate=bracket.rate,
                amount=owed,
            ))

    net_income = annual_income - tax_amount - social_security

    return TaxEstimate(
        annual_income=annual_income,
        taxable_income=taxable_income,
        tax_amount=tax_amount,
        net_income=net_income,
        social_security=social_security,
        deductions=deductions,
        tax_brackets=contributions,
        monthly_average=MonthlyAverage(
            gross_income=_per_month(annual_income),
            net_income=_per_month(net_income),
            tax=_per_month(tax_amount),
            social_security=_per_month(social_security),
        ),
    )


def annual_income(transactions: Sequence[Transaction], year: int) -> Decimal:
    """Sum of the year's income transactions."""
    prefix = f"{year:04d}"
    return sum(
        (
            parse_amount(t) for t in transactions
            if t.type == TransactionType.INCOME and (t.date or "").startswith(prefix)
        ),
        ZERO,
    )


def tax_report(
    transactions: Sequence[Transaction],
    month: str,
    schedule: TaxSchedule = THAI_TAX_SCHEDULE,
) -> TaxReport:
    """Tax estimate for the calendar year that contains `month` (YYYY-MM)."""
    year = int(month.split("-")[0])
    return TaxReport(
        year=year,
        estimate=estimate_tax(annual_income(transactions, year), schedule),
    )
