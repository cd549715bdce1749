"""Invariant tests for the rental leverage model.

Verifies rules that must ALWAYS hold, regardless of specific inputs:
amortization consistency, monotonic affordability, single-counted
budgets and cash reconciliation across whole runs.
"""

import random

import pytest

from src.application.services.optimizer import AcquisitionOptimizer
from src.application.services.simulation import perform_calculations
from src.domain.calculator.economics import (
    calculate_asset_value,
    calculate_property_economics,
)
from src.domain.calculator.financial import (
    calculate_monthly_payment,
    calculate_remaining_balance,
)
from src.domain.models.parameters import InvestmentParameters
from src.domain.models.portfolio import AcquisitionCohort, Loan

# --- Fixtures ---

@pytest.fixture
def random_params():
    """Twenty random but valid parameter sets."""
    rng = random.Random(1234)
    res = []
    for _ in range(20):
        res.append(InvestmentParameters(
            initial_cost=rng.uniform(80_000, 400_000),
            annual_budget=rng.uniform(50_000, 300_000),
            self_purchase_years=rng.randint(0, 10),
            financed_purchase_years=rng.randint(0, 10),
            rental_rate=rng.uniform(0.5, 1.5),
            interest_rate=rng.uniform(0, 12),
            ltv_ratio=rng.uniform(0, 90),
            loan_term=rng.randint(1, 30),
            vacancy_rate=rng.uniform(0, 15),
            closing_cost_percent=rng.uniform(0, 5),
            passthrough_llc=rng.choice(["yes", "no"]),
        ))
    return res


# --- Amortization ---

@pytest.mark.parametrize("principal, rate, months", [
    (112_000, 7.0, 60),
    (250_000, 4.5, 360),
    (50_000, 12.0, 24),
    (80_000, 0.0, 120),
])
def test_payments_retire_the_loan(principal, rate, months):
    """Rolling the balance forward with the level payment lands on zero."""
    pmt = calculate_monthly_payment(principal, rate, months)
    r = rate / 100 / 12
    balance = principal
    for m in range(months):
        balance = balance * (1 + r) - pmt
        assert balance == pytest.approx(calculate_remaining_balance(principal, rate, months, m + 1), abs=1e-4)
    assert balance == pytest.approx(0.0, abs=1e-4)


# --- Optimizer ---

def test_affordability_is_monotonic_in_cash(scenario_params):
    opt = AcquisitionOptimizer(scenario_params)
    previous = 0
    for cash in range(0, 500_001, 5_000):
        units = opt.candidate_ceiling(1, cash, 160_000)
        assert units >= previous
        previous = units


def test_affordability_never_rises_with_cost(scenario_params, default_params):
    """Down payment strictly rises with price; affordable units never do."""
    for params in (scenario_params, default_params):
        opt = AcquisitionOptimizer(params)
        previous_upfront, previous_units = 0.0, None
        for cost in range(50_000, 400_001, 2_500):
            upfront = opt.upfront_cost_per_unit(cost)
            assert upfront > previous_upfront
            previous_upfront = upfront
            # Year past any financing cap
            units = opt.candidate_ceiling(99, 500_000, cost)
            if previous_units is not None:
                assert units <= previous_units
            previous_units = units


def test_chosen_count_is_sustainable_and_maximal(random_params):
    for params in random_params:
        opt = AcquisitionOptimizer(params)
        decision = opt.optimize(1, params.initial_cost, params.annual_budget)
        sustainable = [c.units for c in decision.candidates if c.balance >= 0]
        assert decision.units == (max(sustainable) if sustainable else 0)


# --- Economics ---

def test_noi_ignores_financing(scenario_params):
    cohorts = [AcquisitionCohort(1, 2, 160_000), AcquisitionCohort(2, 1, 161_600)]
    loans = [Loan(2, 112_000, 1, 7.0, 5), Loan(1, 113_120, 2, 7.0, 5)]
    for year in range(1, 16):
        a = calculate_property_economics(year, cohorts, scenario_params, 3)
        b = calculate_property_economics(year, cohorts, scenario_params, 3, loans)
        assert a.noi == b.noi


def test_asset_value_is_additive(scenario_params):
    cohorts = [AcquisitionCohort(1, 2, 160_000), AcquisitionCohort(4, 1, 164_848)]
    for year in (4, 9, 15):
        total = calculate_asset_value(year, cohorts, scenario_params)
        parts = sum(calculate_asset_value(year, [c], scenario_params) for c in cohorts)
        assert total == pytest.approx(parts)


# --- Whole runs ---

def test_budget_added_exactly_once(random_params):
    for params in random_params:
        res = perform_calculations(params)
        self_total = sum(d.self_budget_added for d in res.detailed_data)
        fin_total = sum(d.financed_budget_added for d in res.detailed_data)
        assert self_total == pytest.approx(min(params.self_purchase_years, 15) * params.annual_budget)
        assert fin_total == pytest.approx(min(params.financed_purchase_years, 15) * params.annual_budget)


def test_cash_reconciles_every_year(random_params):
    for params in random_params:
        res = perform_calculations(params)
        for d, s, f in zip(res.detailed_data, res.self_financed, res.financed):
            assert d.self_available_cash == pytest.approx(
                d.self_opening_cash + d.self_budget_added - d.self_acquisition_outlay + s.cash_flow
            )
            assert d.financed_available_cash == pytest.approx(
                d.financed_opening_cash + d.financed_budget_added - d.financed_acquisition_outlay + f.cash_flow
            )


def test_pass_through_never_taxed(random_params):
    for params in random_params:
        if not params.is_pass_through:
            continue
        res = perform_calculations(params)
        assert all(r.taxes == 0.0 for r in res.self_financed + res.financed)


def test_net_worth_identity(random_params):
    for params in random_params:
        res = perform_calculations(params)
        for r in res.self_financed + res.financed:
            assert r.net_worth == pytest.approx(r.asset_value - r.loan_balance + r.cumulative_cash_flow)


def test_units_match_cohorts(random_params):
    for params in random_params:
        res = perform_calculations(params)
        for records in (res.self_financed, res.financed):
            assert records[-1].units == sum(r.new_units for r in records)
