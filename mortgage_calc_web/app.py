"""Flask front end for the mortgage calculator.

The calculator page collects the loan inputs and lists recent searches; the
results page recomputes the schedule from the query string and renders the
repayment, cost breakdown, milestones, property projections and chart data.
Changing only the appreciation rate or sale horizon on the results page
leaves the loan inputs in the query string untouched.

Run locally with ``flask --app mortgage_calc_web.app run`` or
``python -m mortgage_calc_web.app``.
"""

from __future__ import annotations

import json
import logging
import os
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode
from uuid import uuid4

from flask import (
    Blueprint,
    Flask,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from mortgage_calc.data_models import CalculatorInputs, ScheduleEntry
from mortgage_calc.engine import compare_overpayment, compute_schedule_for, summarize, summarize_comparison
from mortgage_calc.formatter import format_currency, format_duration, format_percentage
from mortgage_calc.projection import project
from mortgage_calc.utils import decimal_from_str, positive_term
from mortgage_calc_web.history_store import SearchHistoryStore, create_store_from_env

logger = logging.getLogger(__name__)

bp = Blueprint("calculator", __name__)

INVALID_INPUT_MESSAGE = "Invalid input parameters. Please try again."

LOAN_FIELDS = ("property_price", "deposit", "interest_rate", "loan_term")


def _history_store() -> SearchHistoryStore:
    return current_app.extensions["history_store"]


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _get_field(source: Mapping[str, str], name: str) -> str:
    value = (source.get(name) or "").strip()
    if not value:
        raise ValueError(f"Missing value for {name.replace('_', ' ')}")
    return value


def parse_inputs(source: Mapping[str, str]) -> CalculatorInputs:
    """Parse form or query string values into ``CalculatorInputs``.

    Raises ``ValueError`` when a required field is missing or not a number.
    """
    defaults = CalculatorInputs()
    extra = (source.get("extra_payment") or "").strip()
    appreciation = (source.get("appreciation") or "").strip()
    sell_after = (source.get("sell_after") or "").strip()
    return CalculatorInputs(
        property_price=decimal_from_str(_get_field(source, "property_price")),
        deposit=decimal_from_str(_get_field(source, "deposit")),
        interest_rate=decimal_from_str(_get_field(source, "interest_rate")),
        loan_term=positive_term(_get_field(source, "loan_term"), "loan_term"),
        extra_payment=decimal_from_str(extra) if extra else Decimal("0"),
        appreciation_rate=decimal_from_str(appreciation) if appreciation else defaults.appreciation_rate,
        sell_after_years=positive_term(sell_after, "sell_after") if sell_after else defaults.sell_after_years,
    )


def _inputs_to_query(inputs: CalculatorInputs) -> Dict[str, str]:
    return {
        "property_price": str(inputs.property_price),
        "deposit": str(inputs.deposit),
        "interest_rate": str(inputs.interest_rate),
        "loan_term": str(inputs.loan_term),
        "extra_payment": str(inputs.extra_payment),
    }


def _serialize_schedule(schedule: List[ScheduleEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries for charts."""
    serialized = []
    for entry in schedule:
        serialized.append(
            {
                "month": entry.month,
                "payment": float(entry.payment),
                "principal": float(entry.principal_payment),
                "interest": float(entry.interest_payment),
                "balance": float(entry.remaining_principal),
                "total_interest": float(entry.total_interest),
                "total_principal": float(entry.total_principal),
            }
        )
    return serialized


def _run_analysis(inputs: CalculatorInputs) -> Dict[str, Any]:
    params = inputs.to_loan_parameters()
    result = compute_schedule_for(params)
    summary = summarize(result)
    comparison = None
    if params.extra_monthly_payment > 0:
        comparison = summarize_comparison(
            compare_overpayment(
                params.principal,
                params.annual_rate,
                params.term_years,
                params.extra_monthly_payment,
            )
        )
    appreciation, early_sale = project(result, inputs.to_projection_inputs(), inputs.loan_term)
    return {
        "result": result,
        "summary": summary,
        "comparison": comparison,
        "appreciation": appreciation,
        "early_sale": early_sale,
    }


def _projection_payload(analysis: Dict[str, Any]) -> Dict[str, Any]:
    appreciation = analysis["appreciation"]
    early_sale = analysis["early_sale"]
    return {
        "projection": {
            "initial_value": float(appreciation.initial_value),
            "required_value": float(appreciation.required_value),
            "projected_value": float(appreciation.projected_value),
            "appreciation_rate": float(appreciation.appreciation_rate),
            "potential_equity_at_end_of_loan": float(appreciation.potential_equity_at_end_of_loan),
            "equity_growth": float(appreciation.equity_growth),
            "average_equity_growth_per_year": float(appreciation.average_equity_growth_per_year),
            "exceeds_loan_cost": appreciation.exceeds_loan_cost,
        },
        "early_sale": {
            "sell_after_years": early_sale.sell_after_years,
            "sale_month": early_sale.sale_month,
            "property_value_at_sale": float(early_sale.property_value_at_sale),
            "remaining_loan_balance": float(early_sale.remaining_loan_balance),
            "principal_paid_up_to_sale": float(early_sale.principal_paid_up_to_sale),
            "interest_paid_up_to_sale": float(early_sale.interest_paid_up_to_sale),
            "net_sale_proceeds": float(early_sale.net_sale_proceeds),
            "net_profit_loss": float(early_sale.net_profit_loss),
            "paid_off_before_sale": early_sale.paid_off_before_sale,
        },
    }


def _form_values(inputs: Optional[CalculatorInputs] = None) -> Dict[str, str]:
    if inputs is None:
        stored = session.get("last_inputs")
        if stored:
            return dict(stored)
        inputs = CalculatorInputs()
    return _inputs_to_query(inputs)


@bp.route("/", methods=["GET", "POST"])
def index():
    error = None
    user_token = _ensure_user_token()
    form_values = _form_values()

    if request.method == "POST":
        form_values = {name: request.form.get(name, "").strip() for name in LOAN_FIELDS + ("extra_payment",)}
        try:
            inputs = parse_inputs(request.form)
            # validate against the engine before remembering the search
            compute_schedule_for(inputs.to_loan_parameters())
        except ValueError as exc:
            logger.warning("Rejected calculator input: %s", exc)
            error = str(exc)
        else:
            query = _inputs_to_query(inputs)
            session["last_inputs"] = query
            _history_store().add_search(user_token, inputs)
            return redirect(url_for("calculator.results", **query))

    history = _history_store().list_searches(user_token)
    for item in history:
        item["query"] = urlencode(
            {
                "property_price": item["property_price"],
                "deposit": item["deposit"],
                "interest_rate": item["interest_rate"],
                "loan_term": item["loan_term"],
                "extra_payment": item["extra_payment"],
            }
        )
    return render_template(
        "index.html",
        form_values=form_values,
        history=history,
        error=error,
        asset_version=current_app.config["ASSET_VERSION"],
    ), (400 if error else 200)


@bp.get("/results")
def results():
    try:
        inputs = parse_inputs(request.args)
        analysis = _run_analysis(inputs)
    except ValueError as exc:
        logger.warning("Invalid input parameters %s: %s", dict(request.args), exc)
        return render_template("results.html", error=INVALID_INPUT_MESSAGE), 400

    result = analysis["result"]
    return render_template(
        "results.html",
        error=None,
        inputs=inputs,
        query=_inputs_to_query(inputs),
        summary=analysis["summary"],
        comparison=analysis["comparison"],
        appreciation=analysis["appreciation"],
        early_sale=analysis["early_sale"],
        chart_payload=json.dumps(_serialize_schedule(result.schedule)),
        asset_version=current_app.config["ASSET_VERSION"],
    )


@bp.get("/api/schedule")
def api_schedule():
    try:
        inputs = parse_inputs(request.args)
        analysis = _run_analysis(inputs)
    except ValueError as exc:
        logger.warning("Invalid input parameters %s: %s", dict(request.args), exc)
        return jsonify({"error": str(exc)}), 400

    payload = {
        "summary": analysis["summary"],
        "comparison": analysis["comparison"],
        "schedule": _serialize_schedule(analysis["result"].schedule),
    }
    payload.update(_projection_payload(analysis))
    return jsonify(payload)


@bp.get("/amortization")
def amortization():
    return render_template(
        "amortization.html",
        back_query=request.query_string.decode("utf-8"),
        asset_version=current_app.config["ASSET_VERSION"],
    )


@bp.post("/history/clear")
def clear_history():
    user_token = session.get("user_token")
    _history_store().clear_searches(user_token)
    return redirect(url_for("calculator.index"))


def create_app(history_url: Optional[str] = None, *, max_history: Optional[int] = None) -> Flask:
    """Build the Flask application.

    Configuration comes from the environment unless overridden:
    ``FLASK_SECRET_KEY``, ``HISTORY_DATABASE_URL``, ``HISTORY_MAX_PER_USER``,
    ``ASSET_VERSION`` and ``LOG_LEVEL``.
    """
    app = Flask(__name__)
    app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")

    log_level = os.environ.get("LOG_LEVEL")
    if log_level:
        logging.getLogger("mortgage_calc").setLevel(log_level.upper())
        logging.getLogger("mortgage_calc_web").setLevel(log_level.upper())

    if max_history is None:
        max_history = int(os.environ.get("HISTORY_MAX_PER_USER", "5"))
    app.extensions["history_store"] = create_store_from_env(
        history_url or os.environ.get("HISTORY_DATABASE_URL"),
        max_per_user=max_history,
    )

    app.add_template_filter(format_currency, "currency")
    app.add_template_filter(format_percentage, "percentage")
    app.add_template_filter(format_duration, "duration")
    app.register_blueprint(bp)
    return app


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    print("Starting Mortgage Calculator web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
