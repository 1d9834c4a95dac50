"""Data models for the mortgage calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan parameters, individual schedule entries, the schedule
result with its totals, and the property projections derived from it. Using
dataclasses makes it easy to construct, inspect and serialize these
structures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass(frozen=True)
class LoanParameters:
    """Inputs to a single schedule computation.

    Attributes
    ----------
    principal: Decimal
        The financed amount (property price minus deposit).
    annual_rate: Decimal
        Annual nominal interest rate as a decimal fraction, e.g.
        ``Decimal("0.06")`` for 6 %.
    term_years: int
        Loan term in whole years.
    extra_monthly_payment: Decimal
        Flat amount paid on top of the regular installment every month.
    """

    principal: Decimal
    annual_rate: Decimal
    term_years: int
    extra_monthly_payment: Decimal = Decimal("0")

    @property
    def term_months(self) -> int:
        return self.term_years * 12

    @classmethod
    def from_property(
        cls,
        property_price: Decimal,
        deposit: Decimal,
        annual_rate: Decimal,
        term_years: int,
        extra_monthly_payment: Decimal = Decimal("0"),
    ) -> "LoanParameters":
        """Build parameters for a purchase financed after paying ``deposit``."""
        return cls(
            principal=Decimal(property_price) - Decimal(deposit),
            annual_rate=Decimal(annual_rate),
            term_years=term_years,
            extra_monthly_payment=Decimal(extra_monthly_payment),
        )


@dataclass
class ScheduleEntry:
    """An entry in the amortization schedule.

    Each entry corresponds to one month. ``payment`` is the amount actually
    applied that month (principal plus interest), so the final entry of an
    overpaid loan shows the reduced last payment. ``total_interest`` and
    ``total_principal`` are running sums through this month.
    """

    month: int
    payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_principal: Decimal
    total_interest: Decimal
    total_principal: Decimal


@dataclass
class ScheduleResult:
    """The full schedule plus aggregate totals for one loan."""

    schedule: List[ScheduleEntry]
    monthly_payment: Decimal  # base installment from the annuity formula
    principal: Decimal
    total_interest: Decimal
    total_principal: Decimal
    total_payment: Decimal
    payoff_month: int
    term_months: int

    @property
    def paid_off_early(self) -> bool:
        return self.payoff_month < self.term_months


@dataclass(frozen=True)
class ProjectionInputs:
    """User adjustable inputs for the property projections."""

    property_price: Decimal
    deposit: Decimal
    appreciation_rate: Decimal  # decimal fraction per year
    sell_after_years: int


@dataclass
class AppreciationProjection:
    """Property value and equity at the end of the loan term."""

    initial_value: Decimal
    required_value: Decimal
    projected_value: Decimal
    appreciation_rate: Decimal
    potential_equity_at_end_of_loan: Decimal
    deposit: Decimal
    equity_growth: Decimal
    average_equity_growth_per_year: Decimal
    term_years: int

    @property
    def exceeds_loan_cost(self) -> bool:
        return self.projected_value >= self.required_value


@dataclass
class EarlySaleProjection:
    """Outcome of selling the property part way through the loan.

    ``net_profit_loss`` treats the deposit and the interest paid so far as
    sunk costs against the net sale proceeds. Transaction costs such as stamp
    duty or agent fees are not modeled.
    """

    sell_after_years: int
    sale_month: int
    property_value_at_sale: Decimal
    remaining_loan_balance: Decimal
    principal_paid_up_to_sale: Decimal
    interest_paid_up_to_sale: Decimal
    net_sale_proceeds: Decimal
    net_profit_loss: Decimal
    paid_off_before_sale: bool = False


@dataclass
class OverpaymentComparison:
    """A baseline schedule side by side with the same loan overpaid."""

    baseline: ScheduleResult
    overpaid: ScheduleResult
    extra_monthly_payment: Decimal
    interest_saved: Decimal = field(init=False)
    months_saved: int = field(init=False)
    total_cost_saved: Decimal = field(init=False)

    def __post_init__(self) -> None:
        self.interest_saved = self.baseline.total_interest - self.overpaid.total_interest
        self.months_saved = self.baseline.payoff_month - self.overpaid.payoff_month
        self.total_cost_saved = self.baseline.total_payment - self.overpaid.total_payment


@dataclass
class CalculatorInputs:
    """Configuration of a calculation as entered by the user.

    This collects the raw form or command line inputs into a single object
    owned by the caller (web session, command line). Rates are in percent,
    as typed. The defaults are the values the calculator form starts with.
    """

    property_price: Decimal = Decimal("500000")
    deposit: Decimal = Decimal("100000")
    interest_rate: Decimal = Decimal("3")  # annual nominal interest rate in percent
    loan_term: int = 30  # term in years
    extra_payment: Decimal = Decimal("0")
    appreciation_rate: Decimal = Decimal("2")  # percent per year
    sell_after_years: int = 10

    @property
    def principal(self) -> Decimal:
        return self.property_price - self.deposit

    def to_loan_parameters(self) -> LoanParameters:
        return LoanParameters.from_property(
            self.property_price,
            self.deposit,
            self.interest_rate / Decimal(100),
            self.loan_term,
            self.extra_payment,
        )

    def to_projection_inputs(self) -> ProjectionInputs:
        # A sale horizon past the end of the loan is treated as selling at the end
        return ProjectionInputs(
            property_price=self.property_price,
            deposit=self.deposit,
            appreciation_rate=self.appreciation_rate / Decimal(100),
            sell_after_years=min(self.sell_after_years, self.loan_term),
        )
