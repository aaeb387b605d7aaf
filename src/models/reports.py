"""
Report Models

Result types produced by the reports package. These are derived data:
nothing here is ever persisted.

All money values are Decimal. JSON serialization turns them into strings
so the boundary never exposes float rounding.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Base for report results: camelCase JSON, immutable."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# MONTHLY ANALYTICS
# =============================================================================

class MonthlySummary(ReportModel):
    """Income, expenses and category totals for one calendar month."""

    month: str = Field(..., description="YYYY-MM")
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    category_breakdown: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Expense totals keyed by category name, first-seen order"
    )
    transaction_count: int = Field(default=0, ge=0)
    average_transaction: Decimal = Decimal("0")
    savings_rate: Decimal = Field(
        default=Decimal("0"),
        description="Balance as a percentage of income; 0 when there is no income"
    )


class TrendPoint(ReportModel):
    """One month of the trailing trend series."""

    month: str
    label: str = Field(..., description="Display label, e.g. 'Mar 2024'")
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    net: Decimal = Decimal("0")


class CategorySlice(ReportModel):
    """A category's share of the month's expenses, with its chart color."""

    name: str
    value: Decimal
    color: str


# =============================================================================
# TAX
# =============================================================================

class TaxBracket(ReportModel):
    """
    A contiguous income range taxed at a marginal rate.

    upper is None for the top, unbounded bracket.
    """

    lower: Decimal = Field(..., ge=0)
    upper: Optional[Decimal] = None
    rate: Decimal = Field(..., ge=0, le=1, description="Marginal rate as a fraction")

    @model_validator(mode="after")
    def validate_range(self) -> "TaxBracket":
        if self.upper is not None and self.upper <= self.lower:
            raise ValueError("Bracket upper bound must be above its lower bound")
        return self

    @property
    def range_label(self) -> str:
        if self.upper is None:
            return f"{self.lower:,.0f} and above"
        return f"{self.lower:,.0f} - {self.upper:,.0f}"


class TaxSchedule(ReportModel):
    """
    Parameters of a progressive income-tax schedule.

    Brackets must be ordered, contiguous and non-overlapping, start at zero,
    have non-decreasing rates and end with an unbounded bracket.
    """

    personal_deduction: Decimal = Field(..., ge=0)
    social_security_rate: Decimal = Field(..., ge=0, le=1)
    social_security_cap: Decimal = Field(..., ge=0)
    provident_fund_rate: Decimal = Field(..., ge=0, le=1)
    provident_fund_cap: Decimal = Field(..., ge=0)
    brackets: tuple[TaxBracket, ...]

    @model_validator(mode="after")
    def validate_brackets(self) -> "TaxSchedule":
        if not self.brackets:
            raise ValueError("A tax schedule needs at least one bracket")
        if self.brackets[0].lower != 0:
            raise ValueError("The first bracket must start at zero")
        if self.brackets[-1].upper is not None:
            raise ValueError("The top bracket must be unbounded")
        for previous, current in zip(self.brackets, self.brackets[1:]):
            if previous.upper != current.lower:
                raise ValueError("Brackets must be contiguous and non-overlapping")
            if current.rate < previous.rate:
                raise ValueError("Bracket rates must not decrease")
        return self


class TaxDeductions(ReportModel):
    """Allowances subtracted from income before the brackets apply."""

    personal: Decimal
    spouse: Decimal = Decimal("0")
    children: Decimal = Decimal("0")
    parents: Decimal = Decimal("0")
    social_security: Decimal
    provident_fund: Decimal

    @property
    def total(self) -> Decimal:
        return (
            self.personal + self.spouse + self.children + self.parents
            + self.social_security + self.provident_fund
        )


class BracketContribution(ReportModel):
    """Tax owed on the slice of income falling inside one bracket."""

    range: str
    rate: Decimal
    amount: Decimal


class MonthlyAverage(ReportModel):
    """Annual figures spread evenly over twelve months, rounded to cents."""

    gross_income: Decimal
    net_income: Decimal
    tax: Decimal
    social_security: Decimal


class TaxEstimate(ReportModel):
    """Result of applying a TaxSchedule to one annual income figure."""

    annual_income: Decimal
    taxable_income: Decimal
    tax_amount: Decimal
    net_income: Decimal
    social_security: Decimal
    deductions: TaxDeductions
    tax_brackets: list[BracketContribution] = Field(default_factory=list)
    monthly_average: MonthlyAverage


class TaxReport(ReportModel):
    """Tax estimate for the calendar year containing a requested month."""

    year: int
    estimate: TaxEstimate

    def to_json(self) -> dict:
        # Flattened so the estimate fields sit next to the year.
        return {"year": self.year, **self.estimate.to_json()}
