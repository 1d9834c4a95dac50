"""Output helpers for the mortgage calculator.

This module provides the single display format used for money, percentages
and durations, and simple functions to render schedules, summaries and
projections in a tabular text format. We rely only on built-in printing and
string formatting.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Union

from .data_models import AppreciationProjection, EarlySaleProjection, ScheduleEntry

Amount = Union[Decimal, float, int]


def format_currency(amount: Amount) -> str:
    """Format an amount as Australian dollars, e.g. ``$1,234.56``."""
    value = float(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_percentage(value: Amount) -> str:
    """Format a value already expressed in percent, e.g. ``6.00%``."""
    return f"{float(value):.2f}%"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_duration(months: int) -> str:
    """Render a number of months as years and months.

    >>> format_duration(27)
    '2 years and 3 months'
    """
    years, remaining_months = divmod(months, 12)
    if years == 0:
        return _plural(remaining_months, "month")
    if remaining_months == 0:
        return _plural(years, "year")
    return f"{_plural(years, 'year')} and {_plural(remaining_months, 'month')}"


def print_summary(summary: Dict[str, object]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Loan amount        : {format_currency(summary['principal'])}")
    print(f"Monthly repayment  : {format_currency(summary['monthly_payment'])}")
    print(f"Total payments     : {format_currency(summary['total_payment'])}")
    print(f"Principal          : {format_currency(summary['total_principal'])}")
    print(f"Interest           : {format_currency(summary['total_interest'])}")
    print(f"Payments made      : {summary['payments_made']}")
    if summary.get("months_saved"):
        print(f"Paid off after     : {format_duration(int(summary['payoff_month']))}")
    milestone = summary.get("principal_exceeds_interest_month")
    if milestone:
        print(
            "You start paying more towards principal than interest in "
            f"{format_duration(int(milestone))}."
        )
    comparison = summary.get("comparison")
    if comparison:
        print(f"Extra per month    : {format_currency(comparison['extra_monthly_payment'])}")
        print(f"Baseline interest  : {format_currency(comparison['baseline_total_interest'])}")
        print(f"Interest saved     : {format_currency(comparison['interest_saved'])}")
        print(f"Total cost saved   : {format_currency(comparison['total_cost_saved'])}")
        if comparison.get("months_saved"):
            print(f"Term reduction     : {format_duration(int(comparison['months_saved']))}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = [
        "Month",
        "Payment",
        "Principal",
        "Interest",
        "Balance",
        "TotInterest",
        "TotPrincipal",
    ]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.month),
            f"{entry.payment:.2f}",
            f"{entry.principal_payment:.2f}",
            f"{entry.interest_payment:.2f}",
            f"{entry.remaining_principal:.2f}",
            f"{entry.total_interest:.2f}",
            f"{entry.total_principal:.2f}",
        ]
        print("\t".join(row))


def print_comparison(comparison: Dict[str, object]) -> None:
    """Print a baseline schedule against the same loan with overpayments.

    A negative difference means the overpaid loan is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Baseline':>15s} {'Overpaid':>15s} {'Difference':>15s}")
    rows = [
        ("total_interest", comparison["baseline_total_interest"], comparison["overpaid_total_interest"]),
        ("payoff_month", comparison["baseline_payoff_month"], comparison["overpaid_payoff_month"]),
    ]
    for key, v1, v2 in rows:
        diff = v2 - v1
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)


def print_projection(appreciation: AppreciationProjection, early_sale: EarlySaleProjection) -> None:
    """Print the property overview, full-term projection and early sale."""
    print("Current Property Overview")
    print("-" * 72)
    print(f"Current property value    : {format_currency(appreciation.initial_value)}")
    print(f"Break-even property value : {format_currency(appreciation.required_value)}")
    print()
    print(f"Future Property Projections ({format_percentage(appreciation.appreciation_rate * 100)} per year)")
    print("-" * 72)
    print(f"Projected value at end of loan : {format_currency(appreciation.projected_value)}")
    if appreciation.exceeds_loan_cost:
        print("Your property value is projected to exceed the loan cost.")
    else:
        print("Your property value is projected to fall short of the loan cost.")
    print(f"Potential equity at loan end   : {format_currency(appreciation.potential_equity_at_end_of_loan)}")
    print(f"Total equity growth            : {format_currency(appreciation.equity_growth)}")
    print(f"Average annual equity growth   : {format_currency(appreciation.average_equity_growth_per_year)}")
    print()
    print(f"Selling After {_plural(early_sale.sell_after_years, 'Year')}")
    print("-" * 72)
    print(f"Property value at sale    : {format_currency(early_sale.property_value_at_sale)}")
    print(f"Remaining loan balance    : {format_currency(early_sale.remaining_loan_balance)}")
    print(f"Principal paid            : {format_currency(early_sale.principal_paid_up_to_sale)}")
    print(f"Interest paid             : {format_currency(early_sale.interest_paid_up_to_sale)}")
    print(f"Net sale proceeds         : {format_currency(early_sale.net_sale_proceeds)}")
    label = "Net profit" if early_sale.net_profit_loss >= 0 else "Net loss"
    print(f"{label:26s}: {format_currency(early_sale.net_profit_loss)}")
    if early_sale.paid_off_before_sale:
        print("The loan is fully repaid before the sale.")
    print("Excludes stamp duty, agent fees and other transaction costs.")
    print("-" * 72)
