import math
from decimal import Decimal

import pytest

from mortgage_calc.data_models import LoanParameters
from mortgage_calc.engine import (
    compare_overpayment,
    compute_monthly_payment,
    compute_schedule,
    compute_schedule_for,
    principal_exceeds_interest_month,
    summarize,
    summarize_comparison,
)


class TestMonthlyPayment:
    def test_standard_mortgage(self):
        """$400K loan at 6% for 30 years."""
        pmt = compute_monthly_payment(400_000, 0.06, 30)
        assert float(pmt) == pytest.approx(2398.20, abs=0.01)

    def test_accepts_decimal_and_strings(self):
        from_decimal = compute_monthly_payment(Decimal("400000"), Decimal("0.06"), 30)
        from_string = compute_monthly_payment("400,000", "0.06", 30)
        assert from_decimal == from_string

    def test_zero_rate_is_linear(self):
        pmt = compute_monthly_payment(360_000, 0, 30)
        assert pmt == Decimal("1000")

    def test_zero_principal(self):
        assert compute_monthly_payment(0, 0.05, 10) == 0

    def test_not_rounded(self):
        pmt = compute_monthly_payment(400_000, 0.06, 30)
        assert pmt != pmt.quantize(Decimal("0.01"))

    def test_rate_below_precision_is_linear(self):
        # 1 + 1e-27 rounds to 1 at 28 digits
        pmt = compute_monthly_payment(400_000, "1e-27", 30)
        assert pmt == Decimal(400_000) / 360
        result = compute_schedule(400_000, "1e-27", 30)
        assert len(result.schedule) == 360
        assert result.schedule[-1].remaining_principal == 0


class TestSchedule:
    def test_payment_count(self, standard_result):
        assert len(standard_result.schedule) == 360
        assert standard_result.payoff_month == 360
        assert standard_result.term_months == 360
        assert not standard_result.paid_off_early

    def test_months_are_contiguous(self, standard_result):
        assert [e.month for e in standard_result.schedule] == list(range(1, 361))

    def test_final_balance_is_zero(self, standard_result):
        assert standard_result.schedule[-1].remaining_principal == 0

    def test_total_principal_reconciles(self, standard_result):
        assert float(standard_result.total_principal) == pytest.approx(400_000, abs=1e-6)

    def test_total_payment_uses_original_principal(self, standard_result):
        assert standard_result.total_payment == standard_result.total_interest + Decimal("400000")

    def test_payment_is_principal_plus_interest(self, overpaid_result):
        for entry in overpaid_result.schedule:
            assert entry.payment == entry.principal_payment + entry.interest_payment

    def test_balance_non_increasing(self, standard_result, overpaid_result):
        for result in (standard_result, overpaid_result):
            entries = result.schedule
            for prev, cur in zip(entries, entries[1:]):
                assert cur.remaining_principal <= prev.remaining_principal
                assert cur.total_interest >= prev.total_interest
                assert cur.total_principal >= prev.total_principal

    def test_first_month_interest(self, standard_result):
        first = standard_result.schedule[0]
        # 400000 * 0.06 / 12
        assert float(first.interest_payment) == pytest.approx(2000.0)
        assert float(first.principal_payment) == pytest.approx(398.20, abs=0.01)

    def test_regular_payment_constant_until_last(self, standard_result):
        for entry in standard_result.schedule[:-1]:
            assert float(entry.payment) == pytest.approx(float(standard_result.monthly_payment), abs=1e-9)
        assert math.isclose(float(standard_result.schedule[-1].payment), 2398.20, abs_tol=0.01)

    def test_running_totals_match_final_totals(self, standard_result):
        last = standard_result.schedule[-1]
        assert last.total_interest == standard_result.total_interest
        assert last.total_principal == standard_result.total_principal

    def test_zero_rate_schedule(self):
        result = compute_schedule(24_000, 0, 2)
        assert len(result.schedule) == 24
        assert result.total_interest == 0
        assert {e.payment for e in result.schedule} == {Decimal("1000")}
        assert result.schedule[-1].remaining_principal == 0

    def test_zero_principal(self):
        result = compute_schedule(0, 0.05, 30)
        assert result.total_interest == 0
        assert result.schedule[-1].remaining_principal == 0

    def test_from_parameters(self):
        params = LoanParameters.from_property(Decimal("500000"), Decimal("100000"), Decimal("0.06"), 30)
        result = compute_schedule_for(params)
        assert result.principal == Decimal("400000")
        assert len(result.schedule) == params.term_months


class TestOverpayment:
    def test_pays_off_early(self, overpaid_result):
        assert overpaid_result.payoff_month < 300
        assert len(overpaid_result.schedule) == overpaid_result.payoff_month
        assert overpaid_result.paid_off_early

    def test_reduces_interest(self, overpaid_result):
        baseline = compute_schedule(300_000, 0.04, 25)
        assert overpaid_result.total_interest < baseline.total_interest

    def test_base_payment_not_reamortized(self, overpaid_result):
        baseline = compute_schedule(300_000, 0.04, 25)
        assert overpaid_result.monthly_payment == baseline.monthly_payment
        first = overpaid_result.schedule[0]
        assert first.payment == baseline.monthly_payment + 500

    def test_final_payment_is_reduced(self, overpaid_result):
        last = overpaid_result.schedule[-1]
        assert last.remaining_principal == 0
        assert last.payment < overpaid_result.schedule[0].payment
        assert float(overpaid_result.total_principal) == pytest.approx(300_000, abs=1e-6)

    def test_exact_zero_rate_payoff(self):
        # 1000 regular + 1000 extra clears 12000 in six months
        result = compute_schedule(12_000, 0, 1, 1_000)
        assert result.payoff_month == 6
        assert len(result.schedule) == 6
        assert result.schedule[-1].payment == Decimal("2000")

    def test_compare_overpayment(self):
        comparison = compare_overpayment(300_000, 0.04, 25, 500)
        assert comparison.months_saved > 0
        assert comparison.interest_saved > 0
        assert float(comparison.total_cost_saved) == pytest.approx(float(comparison.interest_saved))
        data = summarize_comparison(comparison)
        assert data["baseline_payoff_month"] == 300
        assert data["overpaid_payoff_month"] == comparison.overpaid.payoff_month
        assert data["extra_monthly_payment"] == 500.0


class TestMilestoneAndSummary:
    def test_principal_exceeds_interest_month(self, standard_result):
        month = principal_exceeds_interest_month(standard_result)
        entry = standard_result.schedule[month - 1]
        assert entry.principal_payment > entry.interest_payment
        before = standard_result.schedule[month - 2]
        assert before.principal_payment <= before.interest_payment
        # 6% over 30 years crosses over in year 19
        assert 18 * 12 < month <= 19 * 12

    def test_zero_rate_milestone_is_first_month(self):
        assert principal_exceeds_interest_month(compute_schedule(12_000, 0, 1)) == 1

    def test_summary_is_plain_numbers(self, overpaid_result):
        data = summarize(overpaid_result)
        assert data["payments_made"] == overpaid_result.payoff_month
        assert data["months_saved"] == 300 - overpaid_result.payoff_month
        assert isinstance(data["total_interest"], float)
        assert data["principal"] == 300_000.0


class TestValidation:
    @pytest.mark.parametrize(
        "principal, rate, term, extra",
        [
            (float("nan"), 0.05, 30, 0),
            (400_000, float("inf"), 30, 0),
            (-1, 0.05, 30, 0),
            (400_000, -0.01, 30, 0),
            (400_000, 0.05, 0, 0),
            (400_000, 0.05, 2.5, 0),
            (400_000, 0.05, 51, 0),
            (400_000, 0.05, 100_000_000, 0),
            (400_000, "1e5000", 30, 0),
            (400_000, 0.05, 30, -100),
            ("abc", 0.05, 30, 0),
        ],
    )
    def test_rejects_invalid_input(self, principal, rate, term, extra):
        with pytest.raises(ValueError):
            compute_schedule(principal, rate, term, extra)

    def test_monthly_payment_rejects_bad_term(self):
        with pytest.raises(ValueError, match="term_years"):
            compute_monthly_payment(100_000, 0.05, -5)

    def test_term_capped_at_fifty_years(self):
        assert len(compute_schedule(100_000, 0.05, 50).schedule) == 600
        with pytest.raises(ValueError, match="at most 50"):
            compute_monthly_payment(100_000, 0.05, 51)

    def test_overflowing_rate_is_value_error(self):
        with pytest.raises(ValueError, match="too large") as excinfo:
            compute_monthly_payment(100_000, "1e5000", 30)
        assert excinfo.value.__cause__ is not None
