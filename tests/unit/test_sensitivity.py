"""Unit tests for src.application.services.sensitivity module."""

import pytest

from src.application.services.sensitivity import (
    DEFAULT_SENSITIVITY_PARAMETERS,
    MonteCarloVariable,
    SensitivityParameter,
    run_monte_carlo,
    run_sensitivity_analysis,
    run_variation_sweep,
)
from src.application.services.simulation import perform_calculations
from src.core.exceptions import InvalidParameterError, ParameterValidationError, SimulationError


class TestSensitivityAnalysis:
    """Tests for run_sensitivity_analysis."""

    def test_one_row_per_parameter(self, scenario_params):
        rows = run_sensitivity_analysis(scenario_params)
        assert [r["key"] for r in rows] == [p.key for p in DEFAULT_SENSITIVITY_PARAMETERS]

    def test_base_matches_engine(self, scenario_params):
        rows = run_sensitivity_analysis(scenario_params, strategy="self")
        base = perform_calculations(scenario_params).self_financed[-1].net_worth
        assert rows[0]["base_net_worth"] == pytest.approx(base)

    def test_bounds_are_respected(self, scenario_params):
        spec = SensitivityParameter("rental_rate", "Rental Rate", 0.5, 0.8, 1.2)
        row = run_sensitivity_analysis(scenario_params, [spec])[0]
        assert row["low_value"] == pytest.approx(0.8)
        assert row["high_value"] == pytest.approx(1.2)

    def test_higher_rent_raises_net_worth(self, scenario_params):
        spec = SensitivityParameter("rental_rate", "Rental Rate", 0.1, 0.1, 5.0)
        row = run_sensitivity_analysis(scenario_params, [spec], strategy="self")[0]
        assert row["high_impact_pct"] > 0 > row["low_impact_pct"]

    def test_invalid_side_has_no_impact(self, scenario_params):
        spec = SensitivityParameter("loan_term", "Loan Term", 10, -5, 40)
        row = run_sensitivity_analysis(scenario_params, [spec])[0]
        assert row["low_net_worth"] is None
        assert row["low_impact_pct"] is None
        assert row["high_net_worth"] is not None
        assert row["errors"] == ["Loan term must be at least 1 year"]

    def test_invalid_base_raises(self, scenario_params):
        with pytest.raises(ParameterValidationError):
            run_sensitivity_analysis(scenario_params.with_overrides(rental_rate=0))

    def test_unknown_parameter(self, scenario_params):
        with pytest.raises(InvalidParameterError):
            run_sensitivity_analysis(scenario_params, [SensitivityParameter("nope", "Nope", 1, 0, 2)])


class TestVariationSweep:
    """Tests for run_variation_sweep."""

    def test_rows(self, scenario_params):
        rows = run_variation_sweep(scenario_params, ["appreciation_rate"], variations=[-0.1, 0.1])
        assert [r["value"] for r in rows] == pytest.approx([2.7, 3.3])
        assert {"net_worth", "cumulative_cash_flow", "roi_pct"} <= set(rows[0])
        assert rows[1]["net_worth"] > rows[0]["net_worth"]

    def test_integer_fields_are_rounded(self, scenario_params):
        rows = run_variation_sweep(scenario_params, ["loan_term"], variations=[0.2])
        assert rows[0]["value"] == 6

    def test_invalid_scenario_is_reported_not_run(self, scenario_params):
        params = scenario_params.with_overrides(loan_term=1)
        rows = run_variation_sweep(params, ["loan_term"], variations=(-0.6, 0.0))
        zero_term, unchanged = rows
        assert zero_term["value"] == 0
        assert zero_term["errors"] == ["Loan term must be at least 1 year"]
        assert zero_term["net_worth"] is None
        assert zero_term["roi_pct"] is None
        assert unchanged["errors"] == []
        assert unchanged["net_worth"] == pytest.approx(perform_calculations(params).financed[-1].net_worth)

    def test_invalid_base_raises(self, scenario_params):
        with pytest.raises(ParameterValidationError):
            run_variation_sweep(scenario_params.with_overrides(loan_term=0), ["rental_rate"])


class TestMonteCarlo:
    """Tests for run_monte_carlo."""

    VARIABLES = [
        MonteCarloVariable("appreciation_rate", mean=3.0, std_dev=1.0, min_value=-5.0, max_value=10.0),
        MonteCarloVariable("interest_rate", mean=7.0, std_dev=1.0),
    ]

    def test_reproducible_with_seed(self, scenario_params):
        a = run_monte_carlo(scenario_params, self.VARIABLES, n=10, seed=42)
        b = run_monte_carlo(scenario_params, self.VARIABLES, n=10, seed=42)
        assert a["statistics"] == b["statistics"]
        assert a["samples"] == b["samples"]

    def test_statistics_shape(self, scenario_params):
        out = run_monte_carlo(scenario_params, self.VARIABLES, n=10, seed=1)
        stats = out["statistics"]["net_worth"]
        assert out["n"] == 10
        assert stats["min"] <= stats["p5"] <= stats["median"] <= stats["p95"] <= stats["max"]
        assert stats["std"] >= 0

    def test_draws_are_clamped(self, scenario_params):
        variables = [MonteCarloVariable("vacancy_rate", mean=5.0, std_dev=50.0, min_value=0.0, max_value=10.0)]
        out = run_monte_carlo(scenario_params, variables, n=20, seed=7)
        assert all(0.0 <= v <= 10.0 for v in out["samples"]["vacancy_rate"])

    def test_requires_a_simulation(self, scenario_params):
        with pytest.raises(SimulationError):
            run_monte_carlo(scenario_params, self.VARIABLES, n=0)

    def test_loan_term_draws_stay_at_least_one_year(self, scenario_params):
        variables = [MonteCarloVariable("loan_term", mean=1.0, std_dev=5.0, min_value=0.0, max_value=30.0)]
        out = run_monte_carlo(scenario_params, variables, n=30, seed=3)
        assert min(out["samples"]["loan_term"]) >= 1.0
        assert out["rejected"] == 0

    def test_invalid_draws_are_excluded(self, scenario_params):
        variables = [MonteCarloVariable("vacancy_rate", mean=100.0, std_dev=30.0, min_value=0.0, max_value=200.0)]
        out = run_monte_carlo(scenario_params, variables, n=40, seed=11, strategy="self")
        invalid = sum(v > 100.0 for v in out["samples"]["vacancy_rate"])
        assert 0 < invalid < 40
        assert out["rejected"] == invalid

    def test_all_draws_invalid(self, scenario_params):
        variables = [MonteCarloVariable("vacancy_rate", mean=500.0, std_dev=1.0, min_value=150.0)]
        with pytest.raises(SimulationError):
            run_monte_carlo(scenario_params, variables, n=5, seed=1)

    def test_invalid_base_raises(self, scenario_params):
        with pytest.raises(ParameterValidationError):
            run_monte_carlo(scenario_params.with_overrides(annual_budget=0), self.VARIABLES, n=5)
