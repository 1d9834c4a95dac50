"""Shared fixtures.

Canonical loan: $500K property, $100K deposit, 6% rate, 30yr term.
"""

import pytest

from mortgage_calc.engine import compute_schedule
from mortgage_calc_web.app import create_app


@pytest.fixture
def standard_result():
    """$400K financed at 6% over 30 years, no overpayment."""
    return compute_schedule(400_000, 0.06, 30)


@pytest.fixture
def overpaid_result():
    """$300K at 4% over 25 years with $500 extra every month."""
    return compute_schedule(300_000, 0.04, 25, 500)


@pytest.fixture
def app(tmp_path):
    app = create_app(f"sqlite:///{tmp_path / 'history.sqlite3'}", max_history=5)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
