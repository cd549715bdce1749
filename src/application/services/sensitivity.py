"""
Sensitivity analysis and Monte Carlo sweeps.

Every scenario is an independent run of the canonical engine on a
perturbed parameter set. Perturbed sets go through the same validation
as ``calculate_all``; a scenario that fails it is not simulated and its
row carries the validation errors instead of outcomes. Batches run
in-process by default; with ``max_workers > 1`` they are spread over a
``ProcessPoolExecutor`` using the module-level worker below, which is
pickle-safe.
"""
from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from src.core.exceptions import InvalidParameterError, ParameterValidationError, SimulationError
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.calculator.validation import validate_investment_parameters
from src.domain.models.parameters import InvestmentParameters
from src.domain.models.results import StrategyKind

log = get_logger(__name__)

DEFAULT_VARIATIONS: tuple[float, ...] = (-0.2, -0.1, -0.05, 0.05, 0.1, 0.2)

OUTCOME_METRICS: tuple[str, ...] = ("net_worth", "cumulative_cash_flow", "roi_pct")

# Smallest value a sampled integer field may take
INTEGER_FLOORS: dict[str, int] = {"loan_term": 1}


@dataclass(frozen=True)
class SensitivityParameter:
    """One parameter to perturb by an absolute step, within bounds."""

    key: str
    label: str
    step: float
    min_value: float
    max_value: float


@dataclass(frozen=True)
class MonteCarloVariable:
    """Normal distribution for one parameter, clamped to ``[min_value, max_value]``."""

    key: str
    mean: float
    std_dev: float
    min_value: float = 0.0
    max_value: float = float("inf")


DEFAULT_SENSITIVITY_PARAMETERS: tuple[SensitivityParameter, ...] = (
    SensitivityParameter("rental_rate", "Rental Rate", 0.1, 0.1, 5.0),
    SensitivityParameter("interest_rate", "Interest Rate", 1.0, 1.0, 15.0),
    SensitivityParameter("appreciation_rate", "Appreciation Rate", 1.0, -5.0, 10.0),
    SensitivityParameter("tax_rate", "Property Tax Rate", 0.5, 0.1, 5.0),
    SensitivityParameter("insurance", "Insurance", 200.0, 500.0, 3000.0),
    SensitivityParameter("maintenance_rate", "Maintenance Rate", 1.0, 1.0, 10.0),
)


def _simulate_worker(args: tuple) -> dict[str, float]:
    """
    Run one scenario and return its final-year outcomes.

    Args:
        args: Tuple of (params_dict, strategy_value)

    Returns:
        Dict with net_worth, cumulative_cash_flow and roi_pct
    """
    params_dict, strategy_value = args

    # Import here so worker processes build their own engine
    from src.application.services.simulation import perform_calculations
    from src.application.services.summary import calculate_roi

    params = InvestmentParameters.model_validate(params_dict)
    results = perform_calculations(params)
    final = results.final_year(strategy_value)
    return {
        "net_worth": final.net_worth,
        "cumulative_cash_flow": final.cumulative_cash_flow,
        "roi_pct": calculate_roi(results, strategy_value),
    }


def _require_valid(params: InvestmentParameters) -> None:
    errors = validate_investment_parameters(params)
    if errors:
        log.warning("parameter_validation_failed", errors=errors)
        raise ParameterValidationError(errors)


def _run_batch(
    param_sets: Sequence[InvestmentParameters],
    strategy: StrategyKind,
    max_workers: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Evaluate scenarios, preserving input order.

    Each result holds the outcome metrics and an ``errors`` list. Invalid
    scenarios are skipped: their metrics are None and ``errors`` says why.
    """
    if max_workers is None:
        max_workers = get_settings().max_workers

    results: list[dict[str, Any]] = []
    tasks = []
    for p in param_sets:
        errors = validate_investment_parameters(p)
        if errors:
            results.append({**dict.fromkeys(OUTCOME_METRICS), "errors": errors})
        else:
            results.append({"errors": []})
            tasks.append((p.model_dump(), strategy.value))

    rejected = len(param_sets) - len(tasks)
    if rejected:
        log.warning("scenarios_rejected", rejected=rejected, scenarios=len(param_sets))

    if max_workers <= 1 or len(tasks) <= 1:
        outcomes = [_simulate_worker(t) for t in tasks]
    else:
        log.info("parallel_processing_started", workers=max_workers, scenarios=len(tasks))
        with concurrent.futures.ProcessPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(_simulate_worker, tasks))

    valid = iter(outcomes)
    for result in results:
        if not result["errors"]:
            result.update(next(valid))
    return results


def _coerce(params: InvestmentParameters, key: str, value: float) -> Any:
    """Round values headed for integer fields (terms, years, caps)."""
    if key not in type(params).model_fields:
        raise InvalidParameterError(key, value, "unknown parameter")
    if isinstance(getattr(params, key), int):
        return int(round(value))
    return value


def _impact_pct(value: Optional[float], base: float) -> Optional[float]:
    if value is None:
        return None
    return (value - base) / base * 100.0 if base > 0 else 0.0


def run_sensitivity_analysis(
    params: InvestmentParameters,
    parameters: Sequence[SensitivityParameter] = DEFAULT_SENSITIVITY_PARAMETERS,
    strategy: StrategyKind | str = StrategyKind.FINANCED,
    max_workers: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Final-year net worth with each parameter nudged down and up.

    Low and high values are ``base -/+ step`` clamped to the parameter's
    bounds. Impacts are percentages of the base net worth (0 when the base
    is not positive).

    Returns:
        One row per parameter: key, label, base/low/high values, the three
        net worths, the low/high impact % and ``errors``. A side whose
        scenario fails validation has None for its net worth and impact.

    Raises:
        ParameterValidationError: If the base parameter set is invalid.
    """
    kind = StrategyKind(strategy)
    _require_valid(params)

    scenarios: list[InvestmentParameters] = [params]
    rows: list[dict[str, Any]] = []
    for spec in parameters:
        base_value = getattr(params, spec.key, None)
        if base_value is None:
            raise InvalidParameterError(spec.key, None, "unknown parameter")
        low = max(spec.min_value, base_value - spec.step)
        high = min(spec.max_value, base_value + spec.step)
        scenarios.append(params.with_overrides(**{spec.key: _coerce(params, spec.key, low)}))
        scenarios.append(params.with_overrides(**{spec.key: _coerce(params, spec.key, high)}))
        rows.append({
            "key": spec.key,
            "label": spec.label,
            "base_value": base_value,
            "low_value": low,
            "high_value": high,
        })

    outcomes = _run_batch(scenarios, kind, max_workers)
    base_net_worth = outcomes[0]["net_worth"]

    for i, row in enumerate(rows):
        low, high = outcomes[1 + 2 * i], outcomes[2 + 2 * i]
        row.update(
            base_net_worth=base_net_worth,
            low_net_worth=low["net_worth"],
            high_net_worth=high["net_worth"],
            low_impact_pct=_impact_pct(low["net_worth"], base_net_worth),
            high_impact_pct=_impact_pct(high["net_worth"], base_net_worth),
            errors=low["errors"] + high["errors"],
        )

    log.info("sensitivity_completed", strategy=kind.value, parameters=len(rows))
    return rows


def run_variation_sweep(
    params: InvestmentParameters,
    keys: Sequence[str],
    variations: Sequence[float] = DEFAULT_VARIATIONS,
    strategy: StrategyKind | str = StrategyKind.FINANCED,
    max_workers: Optional[int] = None,
) -> list[dict[str, Any]]:
    """Apply relative variations (e.g. -0.1 = -10%) to each key in turn.

    Returns:
        One row per (key, variation) with the scenario's value, outcomes and
        ``errors``. Scenarios that fail validation have None outcomes.

    Raises:
        ParameterValidationError: If the base parameter set is invalid.
    """
    kind = StrategyKind(strategy)
    _require_valid(params)

    scenarios: list[InvestmentParameters] = []
    rows: list[dict[str, Any]] = []
    for key in keys:
        base_value = getattr(params, key, None)
        if base_value is None:
            raise InvalidParameterError(key, None, "unknown parameter")
        for variation in variations:
            value = _coerce(params, key, base_value * (1 + variation))
            scenarios.append(params.with_overrides(**{key: value}))
            rows.append({"key": key, "variation": variation, "value": value})

    for row, outcome in zip(rows, _run_batch(scenarios, kind, max_workers)):
        row.update(outcome)

    log.info("sensitivity_completed", strategy=kind.value, scenarios=len(rows))
    return rows


def _statistics(values: np.ndarray) -> dict[str, float]:
    return {
        "min": float(np.min(values)),
        "max": float(np.max(values)),
        "mean": float(np.mean(values)),
        "median": float(np.median(values)),
        "p5": float(np.percentile(values, 5)),
        "p95": float(np.percentile(values, 95)),
        "std": float(np.std(values, ddof=1)) if values.size > 1 else 0.0,
    }


def run_monte_carlo(
    params: InvestmentParameters,
    variables: Sequence[MonteCarloVariable],
    n: Optional[int] = None,
    seed: Optional[int] = None,
    strategy: StrategyKind | str = StrategyKind.FINANCED,
    max_workers: Optional[int] = None,
) -> dict[str, Any]:
    """Sample the variables, rerun the model, summarize the outcomes.

    Args:
        params: Base parameter set; unsampled fields are kept
        variables: Distributions to draw from. Draws for fields listed in
            ``INTEGER_FLOORS`` are raised to that floor after clamping.
        n: Number of simulations (defaults to the configured count)
        seed: Seed for ``numpy.random.default_rng`` (defaults to the
            configured seed); same seed, same draws
        strategy: Strategy whose final year is measured
        max_workers: Processes to use (1 = in-process, None = configured)

    Returns:
        Dict with ``n``, ``samples`` (per-variable draws), ``rejected`` (draws
        that failed validation and were not simulated) and ``statistics``
        (per-metric min/max/mean/median/p5/p95/std over the valid draws).

    Raises:
        ParameterValidationError: If the base parameter set is invalid.
        SimulationError: If ``n < 1`` or no draw passes validation.
    """
    settings = get_settings()
    if n is None:
        n = settings.monte_carlo_simulations
    if seed is None:
        seed = settings.monte_carlo_seed
    if n < 1:
        raise SimulationError("Monte Carlo needs at least one simulation")

    kind = StrategyKind(strategy)
    _require_valid(params)
    rng = np.random.default_rng(seed)

    samples: dict[str, np.ndarray] = {}
    for var in variables:
        draws = np.clip(rng.normal(var.mean, var.std_dev, size=n), var.min_value, var.max_value)
        if var.key in INTEGER_FLOORS:
            draws = np.maximum(draws, INTEGER_FLOORS[var.key])
        samples[var.key] = draws

    scenarios = [
        params.with_overrides(**{
            key: _coerce(params, key, float(draws[i])) for key, draws in samples.items()
        })
        for i in range(n)
    ]
    outcomes = [o for o in _run_batch(scenarios, kind, max_workers) if not o["errors"]]
    if not outcomes:
        raise SimulationError("No Monte Carlo draw passed parameter validation")
    rejected = n - len(outcomes)

    statistics = {
        metric: _statistics(np.array([o[metric] for o in outcomes], dtype=float))
        for metric in OUTCOME_METRICS
    }

    log.info(
        "monte_carlo_completed",
        strategy=kind.value,
        simulations=n,
        rejected=rejected,
        mean_net_worth=round(statistics["net_worth"]["mean"], 2),
    )
    return {
        "n": n,
        "samples": {key: draws.tolist() for key, draws in samples.items()},
        "rejected": rejected,
        "statistics": statistics,
    }
