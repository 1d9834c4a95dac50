"""Core calculation engine for the mortgage calculator.

This module implements the financial logic required to build the
amortization schedule of a fixed-rate, fully amortizing loan with monthly
compounding. A constant extra payment can be added on top of the regular
installment every month, which shortens the payoff term. Results are returned
as a ``ScheduleResult`` holding the list of ``ScheduleEntry`` objects and the
running totals; ``summarize`` turns a result into a JSON friendly dictionary.

All functions are pure: identical inputs always produce identical outputs and
nothing is persisted.
"""

from __future__ import annotations

import logging
from decimal import Decimal, DecimalException, getcontext
from typing import Dict, List, Optional

from .data_models import LoanParameters, OverpaymentComparison, ScheduleEntry, ScheduleResult
from .utils import Numeric, non_negative, positive_term

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MAX_TERM_YEARS = 50  # 600 monthly payments


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``; so does a rate too small to move
    ``(1 + i)^n`` away from 1 at the working precision.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    if factor == 1:
        # rate below the working precision, indistinguishable from zero
        return principal / Decimal(term)
    return principal * (rate_per_month * factor) / (factor - 1)


def compute_monthly_payment(principal: Numeric, annual_rate: Numeric, term_years: int) -> Decimal:
    """Return the fixed monthly installment for a loan.

    ``annual_rate`` is a decimal fraction (``0.06`` for 6 %) and
    ``term_years`` the term in whole years. The result is not rounded;
    formatting for display is left to the caller.
    """
    principal_value = non_negative(principal, "principal")
    rate = non_negative(annual_rate, "annual_rate")
    term = positive_term(term_years, maximum=MAX_TERM_YEARS)
    try:
        return _calculate_annuity_payment(principal_value, rate / 12, term * 12)
    except DecimalException as exc:
        raise ValueError(f"Loan inputs are too large to calculate ({exc.__class__.__name__})") from exc


def compute_schedule(
    principal: Numeric,
    annual_rate: Numeric,
    term_years: int,
    extra_monthly_payment: Numeric = 0,
) -> ScheduleResult:
    """Compute the amortization schedule and totals for a loan.

    Parameters
    ----------
    principal:
        The financed amount (property price minus deposit).
    annual_rate:
        Annual nominal interest rate as a decimal fraction.
    term_years:
        Loan term in whole years.
    extra_monthly_payment:
        Amount added to the regular installment every month. The regular
        installment itself is never recalculated, so overpaying shortens the
        term instead of lowering the payment.

    Returns
    -------
    ScheduleResult
        One entry per payment actually made. The schedule stops early in the
        month the balance reaches zero, and that month's payment is reduced to
        whatever was left to pay.

    Raises
    ------
    ValueError
        If any input is non-finite, negative, the term is not a whole number
        of years between 1 and ``MAX_TERM_YEARS``, or the numbers are too
        large to calculate with.
    """
    principal_value = non_negative(principal, "principal")
    rate = non_negative(annual_rate, "annual_rate")
    term = positive_term(term_years, maximum=MAX_TERM_YEARS)
    extra = non_negative(extra_monthly_payment, "extra_monthly_payment")

    try:
        result = _build_schedule(principal_value, rate, term, extra)
    except DecimalException as exc:
        raise ValueError(f"Loan inputs are too large to calculate ({exc.__class__.__name__})") from exc
    logger.debug(
        "Computed schedule: principal=%s rate=%s term=%s extra=%s payoff_month=%s",
        principal_value,
        rate,
        term,
        extra,
        result.payoff_month,
    )
    return result


def _build_schedule(principal_value: Decimal, rate: Decimal, term: int, extra: Decimal) -> ScheduleResult:
    rate_per_month = rate / 12
    number_of_payments = term * 12
    monthly_payment = _calculate_annuity_payment(principal_value, rate_per_month, number_of_payments)

    schedule: List[ScheduleEntry] = []
    remaining_principal = principal_value
    total_interest = ZERO
    total_principal = ZERO
    payoff_month = 0

    for month in range(1, number_of_payments + 1):
        interest_payment = remaining_principal * rate_per_month
        principal_payment = monthly_payment + extra - interest_payment

        # The last payment clears whatever is left, which also absorbs any
        # rounding residue in the final scheduled month.
        if principal_payment > remaining_principal or month == number_of_payments:
            principal_payment = remaining_principal

        remaining_principal -= principal_payment
        total_interest += interest_payment
        total_principal += principal_payment

        schedule.append(
            ScheduleEntry(
                month=month,
                payment=principal_payment + interest_payment,
                principal_payment=principal_payment,
                interest_payment=interest_payment,
                remaining_principal=max(remaining_principal, ZERO),
                total_interest=total_interest,
                total_principal=total_principal,
            )
        )

        if remaining_principal <= 0:
            payoff_month = month
            break

    return ScheduleResult(
        schedule=schedule,
        monthly_payment=monthly_payment,
        principal=principal_value,
        total_interest=total_interest,
        total_principal=total_principal,
        total_payment=total_interest + principal_value,
        payoff_month=payoff_month or number_of_payments,
        term_months=number_of_payments,
    )


def compute_schedule_for(params: LoanParameters) -> ScheduleResult:
    """Compute the schedule for a ``LoanParameters`` instance."""
    return compute_schedule(
        params.principal,
        params.annual_rate,
        params.term_years,
        params.extra_monthly_payment,
    )


def principal_exceeds_interest_month(result: ScheduleResult) -> Optional[int]:
    """Return the first month in which more principal than interest is repaid.

    Returns ``None`` when that never happens within the schedule.
    """
    for entry in result.schedule:
        if entry.principal_payment > entry.interest_payment:
            return entry.month
    return None


def compare_overpayment(
    principal: Numeric,
    annual_rate: Numeric,
    term_years: int,
    extra_monthly_payment: Numeric,
) -> OverpaymentComparison:
    """Compare a loan paid as scheduled with the same loan overpaid monthly."""
    baseline = compute_schedule(principal, annual_rate, term_years)
    overpaid = compute_schedule(principal, annual_rate, term_years, extra_monthly_payment)
    return OverpaymentComparison(
        baseline=baseline,
        overpaid=overpaid,
        extra_monthly_payment=non_negative(extra_monthly_payment, "extra_monthly_payment"),
    )


def summarize(result: ScheduleResult) -> Dict[str, object]:
    """Return aggregate metrics of a schedule as plain floats and ints."""
    milestone = principal_exceeds_interest_month(result)
    return {
        "principal": float(result.principal),
        "monthly_payment": float(result.monthly_payment),
        "total_interest": float(result.total_interest),
        "total_principal": float(result.total_principal),
        "total_payment": float(result.total_payment),
        "payoff_month": result.payoff_month,
        "term_months": result.term_months,
        "payments_made": len(result.schedule),
        "months_saved": result.term_months - result.payoff_month,
        "principal_exceeds_interest_month": milestone,
    }


def summarize_comparison(comparison: OverpaymentComparison) -> Dict[str, object]:
    """Return the what-if comparison as plain floats and ints."""
    return {
        "extra_monthly_payment": float(comparison.extra_monthly_payment),
        "baseline_total_interest": float(comparison.baseline.total_interest),
        "overpaid_total_interest": float(comparison.overpaid.total_interest),
        "baseline_payoff_month": comparison.baseline.payoff_month,
        "overpaid_payoff_month": comparison.overpaid.payoff_month,
        "interest_saved": float(comparison.interest_saved),
        "total_cost_saved": float(comparison.total_cost_saved),
        "months_saved": comparison.months_saved,
    }
