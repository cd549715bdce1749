"""Pytest fixtures for rental leverage model tests."""

import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.application.services.simulation import calculate_all  # noqa: E402
from src.domain.models.parameters import InvestmentParameters  # noqa: E402


@pytest.fixture
def default_params():
    """Default parameter set."""
    return InvestmentParameters()


@pytest.fixture
def scenario_params():
    """Reference scenario: no closing costs, no financing cap."""
    return InvestmentParameters(
        initial_cost=160_000,
        annual_budget=170_000,
        ltv_ratio=70,
        interest_rate=7,
        loan_term=5,
        rental_rate=1.0,
        vacancy_rate=5,
        management_rate=8,
        maintenance_rate=1,
        tax_rate=1.5,
        assessed_value_percent=20,
        insurance=1_300,
        capex_rate=5,
        passthrough_llc="yes",
        self_purchase_years=5,
        financed_purchase_years=5,
        closing_cost_percent=0,
        max_units_financed_limit_years=0,
    )


@pytest.fixture
def results(scenario_params):
    """Full run of the reference scenario, summary attached."""
    return calculate_all(scenario_params)
