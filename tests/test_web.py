import pytest

from mortgage_calc_web.app import parse_inputs

LOAN_QUERY = "property_price=500000&deposit=100000&interest_rate=6&loan_term=30"
LOAN_FORM = {
    "property_price": "500,000",
    "deposit": "100000",
    "interest_rate": "6",
    "loan_term": "30",
    "extra_payment": "",
}


class TestParseInputs:
    def test_defaults_for_optional_fields(self):
        inputs = parse_inputs(LOAN_FORM)
        assert inputs.property_price == 500_000
        assert inputs.extra_payment == 0
        assert inputs.appreciation_rate == 2
        assert inputs.sell_after_years == 10

    def test_missing_field(self):
        with pytest.raises(ValueError, match="loan term"):
            parse_inputs({**LOAN_FORM, "loan_term": " "})


class TestCalculatorPage:
    def test_get_shows_default_form(self, client):
        response = client.get("/")
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert "Calculate LoanLife" in html
        assert 'value="500000"' in html
        assert 'name="interest_rate" inputmode="decimal" value="3"' in html
        assert "Search History" not in html

    def test_post_redirects_and_records_history(self, client):
        response = client.post("/", data=LOAN_FORM)
        assert response.status_code == 302
        location = response.headers["Location"]
        assert "/results?" in location
        assert "property_price=500000" in location

        html = client.get("/").get_data(as_text=True)
        assert "Search History" in html
        assert "$500,000.00 Property" in html
        assert "30 years at 6.0% interest" in html

    def test_post_invalid_input(self, client):
        response = client.post("/", data={**LOAN_FORM, "deposit": "600000"})
        assert response.status_code == 400
        assert "principal must not be negative" in response.get_data(as_text=True)

    def test_clear_history(self, client):
        client.post("/", data=LOAN_FORM)
        response = client.post("/history/clear")
        assert response.status_code == 302
        assert "Search History" not in client.get("/").get_data(as_text=True)


class TestResultsPage:
    def test_results(self, client):
        response = client.get(f"/results?{LOAN_QUERY}")
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert "$2,398.20" in html
        assert "$400,000.00" in html
        assert "18 years and 7 months" in html
        assert "Break-Even Property Value" in html
        assert "Selling After 10 Years" in html
        assert "Extra Each Month" not in html

    def test_results_with_overpayment(self, client):
        html = client.get(f"/results?{LOAN_QUERY}&extra_payment=500").get_data(as_text=True)
        assert "Extra Each Month" in html
        assert "Interest saved" in html

    def test_projection_inputs(self, client):
        html = client.get(f"/results?{LOAN_QUERY}&appreciation=3&sell_after=5").get_data(as_text=True)
        assert "Selling After 5 Years" in html
        assert 'name="appreciation" inputmode="decimal" value="3"' in html

    @pytest.mark.parametrize(
        "query",
        [
            "property_price=abc&deposit=0&interest_rate=6&loan_term=30",
            "property_price=500000&deposit=100000&interest_rate=6",
            "property_price=500000&deposit=100000&interest_rate=nan&loan_term=30",
            f"{LOAN_QUERY}&sell_after=0",
            "property_price=500000&deposit=100000&interest_rate=1e5000&loan_term=30",
            "property_price=500000&deposit=100000&interest_rate=6&loan_term=100000000",
            f"{LOAN_QUERY}&appreciation=1e200000",
        ],
    )
    def test_invalid_parameters(self, client, query):
        response = client.get(f"/results?{query}")
        assert response.status_code == 400
        assert "Invalid input parameters. Please try again." in response.get_data(as_text=True)

    def test_rate_below_precision(self, client):
        response = client.get("/results?property_price=500000&deposit=100000&interest_rate=1e-25&loan_term=30")
        assert response.status_code == 200
        assert "$1,111.11" in response.get_data(as_text=True)

    def test_amortization_page(self, client):
        response = client.get(f"/amortization?{LOAN_QUERY}")
        assert response.status_code == 200
        assert "Understanding Amortization" in response.get_data(as_text=True)


class TestScheduleApi:
    def test_schedule_json(self, client):
        response = client.get(f"/api/schedule?{LOAN_QUERY}&appreciation=2&sell_after=30")
        assert response.status_code == 200
        data = response.get_json()
        assert len(data["schedule"]) == 360
        assert data["summary"]["payoff_month"] == 360
        assert data["comparison"] is None
        assert data["projection"]["required_value"] == pytest.approx(500_000 + data["summary"]["total_interest"])
        assert data["early_sale"]["sale_month"] == 360
        assert data["early_sale"]["property_value_at_sale"] == pytest.approx(data["projection"]["projected_value"])
        assert data["early_sale"]["remaining_loan_balance"] == 0

    def test_schedule_json_with_extra(self, client):
        data = client.get(f"/api/schedule?{LOAN_QUERY}&extra_payment=1000").get_json()
        assert data["summary"]["payoff_month"] < 360
        assert data["comparison"]["months_saved"] == 360 - data["summary"]["payoff_month"]

    def test_invalid_json(self, client):
        response = client.get("/api/schedule?property_price=1")
        assert response.status_code == 400
        assert "error" in response.get_json()

    @pytest.mark.parametrize(
        "query",
        [
            "property_price=500000&deposit=100000&interest_rate=1e5000&loan_term=30",
            "property_price=500000&deposit=100000&interest_rate=6&loan_term=100000000",
        ],
    )
    def test_out_of_range_json(self, client, query):
        response = client.get(f"/api/schedule?{query}")
        assert response.status_code == 400
        assert "error" in response.get_json()
