"""Application services."""

from .exporter import ResultExporter, comparison_to_dataframe, to_dataframe
from .optimizer import AcquisitionDecision, AcquisitionOptimizer, CandidateEvaluation
from .sensitivity import (
    DEFAULT_SENSITIVITY_PARAMETERS,
    MonteCarloVariable,
    SensitivityParameter,
    run_monte_carlo,
    run_sensitivity_analysis,
    run_variation_sweep,
)
from .simulation import SimulationEngine, calculate_all, perform_calculations
from .summary import attach_summary, calculate_summary_metrics

__all__ = [
    "AcquisitionDecision",
    "AcquisitionOptimizer",
    "CandidateEvaluation",
    "DEFAULT_SENSITIVITY_PARAMETERS",
    "MonteCarloVariable",
    "ResultExporter",
    "SensitivityParameter",
    "SimulationEngine",
    "attach_summary",
    "calculate_all",
    "calculate_summary_metrics",
    "comparison_to_dataframe",
    "perform_calculations",
    "run_monte_carlo",
    "run_sensitivity_analysis",
    "run_variation_sweep",
    "to_dataframe",
]
