"""Property value projections built on top of an amortization schedule.

The functions here never regenerate the schedule: they read the totals and
entries of an existing ``ScheduleResult`` so that the appreciation rate or the
sale horizon can be changed cheaply.
"""

from __future__ import annotations

from decimal import Decimal, DecimalException
from typing import Tuple, Union

from .data_models import AppreciationProjection, EarlySaleProjection, ProjectionInputs, ScheduleResult
from .utils import Numeric, non_negative, positive_term, to_decimal


def _grown_value(property_price: Decimal, appreciation_rate: Decimal, years: int) -> Decimal:
    # annual compounding
    try:
        return property_price * (1 + appreciation_rate) ** years
    except DecimalException as exc:
        raise ValueError(f"appreciation_rate is too large to project; got {appreciation_rate}") from exc


def project_appreciation(
    property_price: Numeric,
    deposit: Numeric,
    total_interest: Union[ScheduleResult, Numeric],
    appreciation_rate: Numeric,
    term_years: int,
) -> AppreciationProjection:
    """Project the property value and equity at the end of the loan.

    ``required_value`` is the break-even value: the purchase price plus all
    interest paid over the life of the loan. ``appreciation_rate`` is a
    decimal fraction per year and may be negative.
    """
    price = non_negative(property_price, "property_price")
    deposit_value = non_negative(deposit, "deposit")
    rate = to_decimal(appreciation_rate, "appreciation_rate")
    term = positive_term(term_years)
    if isinstance(total_interest, ScheduleResult):
        interest = total_interest.total_interest
    else:
        interest = non_negative(total_interest, "total_interest")

    projected_value = _grown_value(price, rate, term)
    potential_equity = projected_value - (price - deposit_value)
    equity_growth = potential_equity - deposit_value
    return AppreciationProjection(
        initial_value=price,
        required_value=price + interest,
        projected_value=projected_value,
        appreciation_rate=rate,
        potential_equity_at_end_of_loan=potential_equity,
        deposit=deposit_value,
        equity_growth=equity_growth,
        average_equity_growth_per_year=equity_growth / term,
        term_years=term,
    )


def project_early_sale(
    result: ScheduleResult,
    property_price: Numeric,
    deposit: Numeric,
    appreciation_rate: Numeric,
    sell_after_years: int,
) -> EarlySaleProjection:
    """Project the outcome of selling after ``sell_after_years`` years.

    The loan position is read from the schedule entry of the sale month. When
    the loan was already paid off before that month (overpaying), the
    remaining balance is zero and the cumulative totals come from the final
    entry.

    Raises
    ------
    ValueError
        If ``sell_after_years`` is not within the loan term.
    """
    price = non_negative(property_price, "property_price")
    deposit_value = non_negative(deposit, "deposit")
    rate = to_decimal(appreciation_rate, "appreciation_rate")
    years = positive_term(sell_after_years, "sell_after_years")
    sale_month = years * 12
    if sale_month > result.term_months:
        raise ValueError(
            f"sell_after_years must not exceed the loan term of {result.term_months // 12} years; got {years}"
        )

    paid_off_before_sale = sale_month > len(result.schedule)
    if paid_off_before_sale:
        last = result.schedule[-1]
        remaining_balance = Decimal("0")
        principal_paid = last.total_principal
        interest_paid = last.total_interest
    else:
        entry = result.schedule[sale_month - 1]
        remaining_balance = entry.remaining_principal
        principal_paid = entry.total_principal
        interest_paid = entry.total_interest

    value_at_sale = _grown_value(price, rate, years)
    net_sale_proceeds = value_at_sale - remaining_balance
    return EarlySaleProjection(
        sell_after_years=years,
        sale_month=sale_month,
        property_value_at_sale=value_at_sale,
        remaining_loan_balance=remaining_balance,
        principal_paid_up_to_sale=principal_paid,
        interest_paid_up_to_sale=interest_paid,
        net_sale_proceeds=net_sale_proceeds,
        net_profit_loss=net_sale_proceeds - interest_paid - deposit_value,
        paid_off_before_sale=paid_off_before_sale,
    )


def project(
    result: ScheduleResult,
    inputs: ProjectionInputs,
    term_years: int,
) -> Tuple[AppreciationProjection, EarlySaleProjection]:
    """Return both the full-term and the early-sale projection."""
    appreciation = project_appreciation(
        inputs.property_price,
        inputs.deposit,
        result,
        inputs.appreciation_rate,
        term_years,
    )
    early_sale = project_early_sale(
        result,
        inputs.property_price,
        inputs.deposit,
        inputs.appreciation_rate,
        inputs.sell_after_years,
    )
    return appreciation, early_sale
