"""
Summary metrics derived from a completed run.

Thin derivation layer over the per-year records: ROI, leverage multiplier,
break-even year and the head-to-head comparison shown on dashboards.
"""
from __future__ import annotations

from typing import Optional, Sequence

from src.core.constants import ANNUAL_ROI_TARGET_PCT, CAPEX_RESERVE_RETURN
from src.core.exceptions import SimulationError
from src.domain.models.results import (
    CalculationResults,
    NegativeCashYear,
    StrategyKind,
    StrategySummary,
    SummaryComparison,
    SummaryMetrics,
    YearlyMetrics,
)


def find_break_even_year(records: Sequence[YearlyMetrics]) -> Optional[int]:
    """First year whose cumulative cash flow is positive, or None."""
    for record in records:
        if record.cumulative_cash_flow > 0:
            return record.year
    return None


def find_cash_flow_break_even_year(records: Sequence[YearlyMetrics]) -> Optional[int]:
    """First year whose own cash flow is non-negative, or None."""
    for record in records:
        if record.cash_flow >= 0:
            return record.year
    return None


def find_roi_break_even_year(
    records: Sequence[YearlyMetrics],
    target_pct: float = ANNUAL_ROI_TARGET_PCT,
) -> Optional[int]:
    """First year whose cash flow is at least ``target_pct``% of net worth.

    Years with non-positive net worth never qualify.
    """
    for record in records:
        if record.net_worth <= 0:
            continue
        if record.cash_flow / record.net_worth * 100.0 >= target_pct:
            return record.year
    return None


def find_negative_cash_years(
    results: CalculationResults, strategy: StrategyKind | str
) -> list[NegativeCashYear]:
    """Years whose closing cash is below zero, with the shortfall."""
    kind = StrategyKind(strategy)
    years = []
    for d in results.detailed_data:
        closing = d.self_available_cash if kind is StrategyKind.SELF_FINANCED else d.financed_available_cash
        if closing < 0:
            years.append(NegativeCashYear(year=d.year, amount=closing))
    return years


def calculate_total_cash_invested(results: CalculationResults, strategy: StrategyKind | str) -> float:
    """Cash spent on acquisitions (price or down payment, closing costs included)."""
    kind = StrategyKind(strategy)
    if kind is StrategyKind.SELF_FINANCED:
        return sum(d.self_acquisition_outlay for d in results.detailed_data)
    return sum(d.financed_acquisition_outlay for d in results.detailed_data)


def _final_cumulative_capex(results: CalculationResults, kind: StrategyKind) -> float:
    if not results.detailed_data:
        return 0.0
    last = results.detailed_data[-1]
    return last.self_cumulative_capex if kind is StrategyKind.SELF_FINANCED else last.financed_cumulative_capex


def calculate_roi(results: CalculationResults, strategy: StrategyKind | str) -> float:
    """Return on invested cash, in %.

    Final value is the portfolio's market value plus the accumulated capex
    reserve. Returns 0 when nothing was invested.
    """
    kind = StrategyKind(strategy)
    invested = calculate_total_cash_invested(results, kind)
    if invested <= 0:
        return 0.0
    final_value = results.final_year(kind).asset_value + _final_cumulative_capex(results, kind)
    return (final_value - invested) / invested * 100.0


def calculate_alternative_investment(results: CalculationResults) -> tuple[float, float]:
    """Value and ROI % of putting the self-financed outlays in the index instead.

    Each year's outlay compounds at the reserve return until the final year.
    """
    horizon = results.horizon_years
    value = sum(
        d.self_acquisition_outlay * (1 + CAPEX_RESERVE_RETURN) ** (horizon - d.year)
        for d in results.detailed_data
    )
    invested = calculate_total_cash_invested(results, StrategyKind.SELF_FINANCED)
    roi = (value - invested) / invested * 100.0 if invested > 0 else 0.0
    return value, roi


def _summarize_strategy(results: CalculationResults, kind: StrategyKind) -> StrategySummary:
    records = results.records(kind)
    final = records[-1]
    negative_years = find_negative_cash_years(results, kind)
    return StrategySummary(
        final_net_worth=final.net_worth,
        total_cash_flow=final.cumulative_cash_flow,
        total_units=final.units,
        final_asset_value=final.asset_value,
        final_loan_balance=final.loan_balance,
        cumulative_capex=_final_cumulative_capex(results, kind),
        total_cash_invested=calculate_total_cash_invested(results, kind),
        roi_pct=calculate_roi(results, kind),
        break_even_year=find_break_even_year(records),
        cash_flow_break_even_year=find_cash_flow_break_even_year(records),
        roi_break_even_year=find_roi_break_even_year(records),
        negative_cash_years=negative_years,
        negative_cash_total=sum(y.amount for y in negative_years),
    )


def calculate_summary_metrics(results: CalculationResults) -> SummaryMetrics:
    """Derive the dashboard summary from a run's per-year records.

    Raises:
        SimulationError: If the results hold no years or the strategies differ in length.
    """
    if not results.self_financed or len(results.self_financed) != len(results.financed):
        raise SimulationError("Cannot summarize results without matching yearly records")

    self_summary = _summarize_strategy(results, StrategyKind.SELF_FINANCED)
    fin_summary = _summarize_strategy(results, StrategyKind.FINANCED)

    net_equity = fin_summary.final_asset_value - fin_summary.final_loan_balance
    leverage = fin_summary.final_asset_value / net_equity if net_equity > 0 else 1.0
    units_per_dollar = (
        fin_summary.total_units / fin_summary.total_cash_invested
        if fin_summary.total_cash_invested > 0 else 0.0
    )
    alt_value, alt_roi = calculate_alternative_investment(results)

    return SummaryMetrics(
        self_financed=self_summary,
        financed=fin_summary,
        comparison=SummaryComparison(
            net_worth_difference=fin_summary.final_net_worth - self_summary.final_net_worth,
            cash_flow_difference=fin_summary.total_cash_flow - self_summary.total_cash_flow,
            units_difference=fin_summary.total_units - self_summary.total_units,
            leverage_multiplier=leverage,
            units_per_dollar=units_per_dollar,
            alternative_investment_value=alt_value,
            alternative_roi_pct=alt_roi,
        ),
    )


def attach_summary(results: CalculationResults) -> CalculationResults:
    """Copy of ``results`` carrying its summary metrics."""
    return results.model_copy(update={"summary_metrics": calculate_summary_metrics(results)})
