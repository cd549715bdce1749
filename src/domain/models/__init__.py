"""Data models for the rental leverage model."""

from .parameters import (
    PARAMETER_PRESETS,
    EntityType,
    InvestmentParameters,
    apply_preset,
    get_default_parameters,
)
from .portfolio import AcquisitionCohort, Loan
from .results import (
    CalculationResults,
    ComparisonRecord,
    DetailRecord,
    NegativeCashYear,
    StrategyKind,
    StrategySummary,
    SummaryComparison,
    SummaryMetrics,
    YearlyMetrics,
)

__all__ = [
    "AcquisitionCohort",
    "CalculationResults",
    "ComparisonRecord",
    "DetailRecord",
    "EntityType",
    "InvestmentParameters",
    "Loan",
    "NegativeCashYear",
    "PARAMETER_PRESETS",
    "StrategyKind",
    "StrategySummary",
    "SummaryComparison",
    "SummaryMetrics",
    "YearlyMetrics",
    "apply_preset",
    "get_default_parameters",
]
