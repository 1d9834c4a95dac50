"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries,
project the property value or compare paying the loan as scheduled against
overpaying it. Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import click

from .data_models import CalculatorInputs, ScheduleEntry
from .engine import compare_overpayment, compute_schedule_for, summarize, summarize_comparison
from .formatter import print_comparison, print_projection, print_schedule, print_summary
from .projection import project
from .utils import decimal_from_str

logger = logging.getLogger(__name__)


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), commas ("500,000") and shorthand with
    ``k``/``m`` suffixes (e.g., "500k" meaning 500_000).
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        amount = decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")
    if not amount.is_finite():
        raise click.BadParameter(f"Invalid amount: {value}")
    return amount


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string (e.g. "6" or "6%") into a percent value."""
    value = value.strip()
    if value.endswith("%"):
        value = value[:-1]
    try:
        p = decimal_from_str(value)
    except ValueError:
        raise click.BadParameter(f"Invalid percentage: {value}")
    if not p.is_finite():
        raise click.BadParameter(f"Invalid percentage: {value}")
    return p


def build_inputs_from_options(
    price: str,
    deposit: Optional[str],
    rate: str,
    term: int,
    extra: Optional[str] = None,
    appreciation: Optional[str] = None,
    sell_after: Optional[int] = None,
) -> CalculatorInputs:
    """Turn raw option strings into a ``CalculatorInputs`` instance."""
    defaults = CalculatorInputs()
    return CalculatorInputs(
        property_price=parse_amount(price),
        deposit=parse_amount(deposit) if deposit else Decimal("0"),
        interest_rate=parse_percent(rate),
        loan_term=term,
        extra_payment=parse_amount(extra) if extra else Decimal("0"),
        appreciation_rate=parse_percent(appreciation) if appreciation else defaults.appreciation_rate,
        sell_after_years=sell_after if sell_after is not None else defaults.sell_after_years,
    )


def _guard(func: Callable[..., Any], *args: Any) -> Any:
    """Call an engine function, reporting invalid input as a usage error."""
    try:
        return func(*args)
    except ValueError as exc:
        logger.debug("Rejected input: %s", exc)
        raise click.UsageError(str(exc))


def export_to_json(path: Path, schedule: List[ScheduleEntry], summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    sched_list = []
    for e in schedule:
        sched_list.append(
            {
                "month": e.month,
                "payment": float(e.payment),
                "principal": float(e.principal_payment),
                "interest": float(e.interest_payment),
                "remaining_principal": float(e.remaining_principal),
                "total_interest": float(e.total_interest),
                "total_principal": float(e.total_principal),
            }
        )
    data = {"summary": summary, "schedule": sched_list}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[ScheduleEntry]) -> None:
    """Export schedule to a CSV file."""
    header = [
        "Month",
        "Payment",
        "Principal",
        "Interest",
        "Remaining_Principal",
        "Total_Interest",
        "Total_Principal",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.month,
                    float(e.payment),
                    float(e.principal_payment),
                    float(e.interest_payment),
                    float(e.remaining_principal),
                    float(e.total_interest),
                    float(e.total_principal),
                ]
            )


def loan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the loan input options shared by every command."""
    options = [
        click.option("--price", "-p", "price", required=True, help="Property price (e.g. 500k)"),
        click.option("--deposit", "-d", "deposit", help="Deposit amount"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in years"),
        click.option("--extra", "-e", "extra", help="Extra amount paid every month"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line mortgage calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.option("--max-rows", "max_rows", type=int, default=120, show_default=True, help="Rows to print")
def schedule(
    price: str,
    deposit: Optional[str],
    rate: str,
    term: int,
    extra: Optional[str],
    output: Optional[str],
    max_rows: int,
) -> None:
    """Compute and print the full amortization schedule."""
    inputs = build_inputs_from_options(price, deposit, rate, term, extra)
    result = _guard(compute_schedule_for, _guard(inputs.to_loan_parameters))
    summary_data = summarize(result)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result.schedule, summary_data)
            click.echo(f"Schedule exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result.schedule)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_summary(summary_data)
        # Limit schedule length printed to avoid flooding the terminal
        if len(result.schedule) > max_rows:
            click.echo(f"Schedule has {len(result.schedule)} rows; showing first {max_rows} rows.")
            print_schedule(result.schedule[:max_rows])
        else:
            print_schedule(result.schedule)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    price: str,
    deposit: Optional[str],
    rate: str,
    term: int,
    extra: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    inputs = build_inputs_from_options(price, deposit, rate, term, extra)
    params = _guard(inputs.to_loan_parameters)
    result = _guard(compute_schedule_for, params)
    summary_data = summarize(result)
    if params.extra_monthly_payment > 0:
        comparison = _guard(
            compare_overpayment,
            params.principal,
            params.annual_rate,
            params.term_years,
            params.extra_monthly_payment,
        )
        summary_data["comparison"] = summarize_comparison(comparison)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command(name="project")
@loan_options
@click.option("--appreciation", "-a", "appreciation", default="2", show_default=True, help="Annual appreciation (percent)")
@click.option("--sell-after", "sell_after", type=int, default=10, show_default=True, help="Years until an early sale")
def project_command(
    price: str,
    deposit: Optional[str],
    rate: str,
    term: int,
    extra: Optional[str],
    appreciation: str,
    sell_after: int,
) -> None:
    """Project the property value at the end of the loan and on an early sale."""
    inputs = build_inputs_from_options(price, deposit, rate, term, extra, appreciation, sell_after)
    result = _guard(compute_schedule_for, _guard(inputs.to_loan_parameters))
    appreciation_projection, early_sale = _guard(project, result, inputs.to_projection_inputs(), inputs.loan_term)
    print_projection(appreciation_projection, early_sale)


@cli.command()
@loan_options
def compare(
    price: str,
    deposit: Optional[str],
    rate: str,
    term: int,
    extra: Optional[str],
) -> None:
    """Compare paying the loan as scheduled with overpaying every month.

    Example:

        mortgage-calc compare -p 500k -d 100k -r 6 -t 30 --extra 500
    """
    if not extra:
        raise click.UsageError("compare needs --extra to describe the overpayment")
    inputs = build_inputs_from_options(price, deposit, rate, term, extra)
    params = _guard(inputs.to_loan_parameters)
    comparison = _guard(
        compare_overpayment,
        params.principal,
        params.annual_rate,
        params.term_years,
        params.extra_monthly_payment,
    )
    print_comparison(summarize_comparison(comparison))


if __name__ == "__main__":
    cli()
