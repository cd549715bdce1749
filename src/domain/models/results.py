"""Simulation output models.

``CalculationResults`` is built once per run and handed to consumers as an
immutable value; field names are stable and serialize to plain JSON.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .parameters import InvestmentParameters


class StrategyKind(str, Enum):
    """The two acquisition strategies compared side by side."""

    SELF_FINANCED = "self"
    FINANCED = "financed"


class YearlyMetrics(BaseModel):
    """Snapshot of one strategy for one year."""

    year: int = Field(..., ge=1)
    units: int = Field(default=0, ge=0, description="Total units owned")
    new_units: int = Field(default=0, ge=0, description="Units acquired this year")
    cash_flow: float = 0.0
    cumulative_cash_flow: float = 0.0
    asset_value: float = 0.0
    net_worth: float = 0.0
    loan_balance: float = 0.0
    net_equity: float = 0.0
    gpr: float = Field(default=0.0, description="Gross potential rent")
    egi: float = Field(default=0.0, description="Effective gross income")
    noi: float = Field(default=0.0, description="Net operating income")
    depreciation: float = 0.0
    debt_service: float = 0.0
    interest_expense: float = 0.0
    taxable_income: float = 0.0
    taxes: float = 0.0
    net_income: float = 0.0
    capex: float = Field(default=0.0, description="CapEx reserve contribution")

    model_config = {"frozen": True}


class ComparisonRecord(BaseModel):
    """Year-by-year pairing of both strategies; differences are financed - self."""

    year: int
    property_cost: float
    self_new_units: int
    self_total_units: int
    self_cash_flow: float
    self_asset_value: float
    financed_new_units: int
    financed_total_units: int
    financed_cash_flow: float
    financed_asset_value: float
    loan_balance: float
    net_equity: float
    net_worth_diff: float
    cash_flow_diff: float
    cumulative_cash_flow_diff: float
    units_diff: int

    model_config = {"frozen": True}


class DetailRecord(BaseModel):
    """Running balances behind each year's figures."""

    year: int
    self_cumulative_capex: float = 0.0
    financed_cumulative_capex: float = 0.0
    self_available_cash: float = 0.0
    financed_available_cash: float = 0.0
    self_opening_cash: float = 0.0
    financed_opening_cash: float = 0.0
    self_budget_added: float = 0.0
    financed_budget_added: float = 0.0
    self_acquisition_outlay: float = 0.0
    financed_acquisition_outlay: float = 0.0

    model_config = {"frozen": True}


class NegativeCashYear(BaseModel):
    """A year whose closing cash position is below zero."""

    year: int
    amount: float

    model_config = {"frozen": True}


class StrategySummary(BaseModel):
    """Final-year figures and derived returns for one strategy."""

    final_net_worth: float
    total_cash_flow: float
    total_units: int
    final_asset_value: float
    final_loan_balance: float = 0.0
    cumulative_capex: float
    total_cash_invested: float
    roi_pct: float
    break_even_year: Optional[int] = Field(default=None, description="First year with positive cumulative cash flow")
    cash_flow_break_even_year: Optional[int] = Field(default=None, description="First year with non-negative cash flow")
    roi_break_even_year: Optional[int] = Field(default=None, description="First year cash flow reaches the target % of net worth")
    negative_cash_years: list[NegativeCashYear] = Field(default_factory=list)
    negative_cash_total: float = 0.0

    model_config = {"frozen": True}


class SummaryComparison(BaseModel):
    """Head-to-head metrics (financed - self)."""

    net_worth_difference: float
    cash_flow_difference: float
    units_difference: int
    leverage_multiplier: float
    units_per_dollar: float
    alternative_investment_value: float
    alternative_roi_pct: float

    model_config = {"frozen": True}


class SummaryMetrics(BaseModel):
    self_financed: StrategySummary
    financed: StrategySummary
    comparison: SummaryComparison

    model_config = {"frozen": True}


class CalculationResults(BaseModel):
    """Full output of one run: both strategies over the whole horizon."""

    input_params: InvestmentParameters
    self_financed: list[YearlyMetrics] = Field(default_factory=list)
    financed: list[YearlyMetrics] = Field(default_factory=list)
    comparison: list[ComparisonRecord] = Field(default_factory=list)
    detailed_data: list[DetailRecord] = Field(default_factory=list)
    summary_metrics: Optional[SummaryMetrics] = None

    model_config = {"frozen": True}

    @property
    def horizon_years(self) -> int:
        return len(self.self_financed)

    def records(self, strategy: StrategyKind | str) -> list[YearlyMetrics]:
        """Per-year records of one strategy."""
        kind = StrategyKind(strategy)
        return self.self_financed if kind is StrategyKind.SELF_FINANCED else self.financed

    def final_year(self, strategy: StrategyKind | str) -> YearlyMetrics:
        return self.records(strategy)[-1]
