"""Fifteen-year projection of the self-financed and bank-financed plans.

Each strategy owns an explicit ``StrategyState`` threaded through the
yearly loop; the two states never share anything. Every year:

1. the year's budget (within the strategy's purchase years) joins the cash,
2. units are bought (all-cash: as many as cash allows; financed: the
   optimizer's maximum sustainable count) and the outlay leaves the cash,
3. the whole portfolio is re-evaluated for the year,
4. the year's cash flow rolls into cash, the capex reserve compounds.

The annual budget therefore reaches the cash position exactly once.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from pydantic import ValidationError

from src.application.services.optimizer import AcquisitionOptimizer
from src.application.services.summary import attach_summary
from src.core.constants import CAPEX_RESERVE_RETURN, HORIZON_YEARS
from src.core.exceptions import ParameterValidationError
from src.core.logging import get_logger, run_context
from src.domain.calculator.economics import (
    PropertyEconomics,
    calculate_asset_value,
    calculate_loan_balance,
    calculate_property_economics,
    property_cost_for_year,
)
from src.domain.calculator.validation import validate_investment_parameters
from src.domain.models.parameters import InvestmentParameters
from src.domain.models.portfolio import AcquisitionCohort, Loan
from src.domain.models.results import (
    CalculationResults,
    ComparisonRecord,
    DetailRecord,
    StrategyKind,
    YearlyMetrics,
)

log = get_logger(__name__)


@dataclass
class StrategyState:
    """Mutable running state of one strategy during a run."""

    kind: StrategyKind
    cohorts: list[AcquisitionCohort] = field(default_factory=list)
    loans: list[Loan] = field(default_factory=list)
    available_cash: float = 0.0
    cumulative_capex: float = 0.0
    cumulative_cash_flow: float = 0.0

    @property
    def total_units(self) -> int:
        return sum(c.units for c in self.cohorts)


@dataclass(frozen=True)
class YearStep:
    """One strategy's year: the emitted record plus its cash movements."""

    metrics: YearlyMetrics
    opening_cash: float
    budget_added: float
    acquisition_outlay: float


class SimulationEngine:
    """Runs both strategies side by side over the projection horizon."""

    def __init__(self, params: InvestmentParameters, horizon_years: int = HORIZON_YEARS):
        self.params = params
        self.horizon_years = horizon_years
        self.optimizer = AcquisitionOptimizer(params)
        self.run_id = uuid.uuid4().hex[:8]

    def run(self) -> CalculationResults:
        """Simulate every year for both strategies.

        Returns:
            CalculationResults without summary metrics.
        """
        with run_context(run_id=self.run_id):
            return self._run()

    def _run(self) -> CalculationResults:
        params = self.params
        log.info(
            "simulation_started",
            horizon=self.horizon_years,
            initial_cost=params.initial_cost,
            annual_budget=params.annual_budget,
            ltv=params.ltv_ratio,
        )

        self_state = StrategyState(StrategyKind.SELF_FINANCED)
        fin_state = StrategyState(StrategyKind.FINANCED)

        self_records: list[YearlyMetrics] = []
        fin_records: list[YearlyMetrics] = []
        comparison: list[ComparisonRecord] = []
        detailed: list[DetailRecord] = []

        for year in range(1, self.horizon_years + 1):
            cost = property_cost_for_year(params, year)

            self_step = self._step_self_financed(self_state, year, cost)
            fin_step = self._step_financed(fin_state, year, cost)
            s, f = self_step.metrics, fin_step.metrics

            self_records.append(s)
            fin_records.append(f)
            comparison.append(ComparisonRecord(
                year=year,
                property_cost=cost,
                self_new_units=s.new_units,
                self_total_units=s.units,
                self_cash_flow=s.cash_flow,
                self_asset_value=s.asset_value,
                financed_new_units=f.new_units,
                financed_total_units=f.units,
                financed_cash_flow=f.cash_flow,
                financed_asset_value=f.asset_value,
                loan_balance=f.loan_balance,
                net_equity=f.net_equity,
                net_worth_diff=f.net_worth - s.net_worth,
                cash_flow_diff=f.cash_flow - s.cash_flow,
                cumulative_cash_flow_diff=f.cumulative_cash_flow - s.cumulative_cash_flow,
                units_diff=f.units - s.units,
            ))
            detailed.append(DetailRecord(
                year=year,
                self_cumulative_capex=self_state.cumulative_capex,
                financed_cumulative_capex=fin_state.cumulative_capex,
                self_available_cash=self_state.available_cash,
                financed_available_cash=fin_state.available_cash,
                self_opening_cash=self_step.opening_cash,
                financed_opening_cash=fin_step.opening_cash,
                self_budget_added=self_step.budget_added,
                financed_budget_added=fin_step.budget_added,
                self_acquisition_outlay=self_step.acquisition_outlay,
                financed_acquisition_outlay=fin_step.acquisition_outlay,
            ))

        log.info(
            "simulation_completed",
            self_units=self_state.total_units,
            financed_units=fin_state.total_units,
            self_net_worth=round(self_records[-1].net_worth, 2) if self_records else 0.0,
            financed_net_worth=round(fin_records[-1].net_worth, 2) if fin_records else 0.0,
        )

        return CalculationResults(
            input_params=params,
            self_financed=self_records,
            financed=fin_records,
            comparison=comparison,
            detailed_data=detailed,
        )

    def _add_budget(self, state: StrategyState, year: int, purchase_years: int) -> float:
        budget = self.params.annual_budget if year <= purchase_years else 0.0
        state.available_cash += budget
        return budget

    def _step_self_financed(self, state: StrategyState, year: int, cost: float) -> YearStep:
        opening_cash = state.available_cash
        budget = self._add_budget(state, year, self.params.self_purchase_years)

        unit_outlay = self.optimizer.self_financed_cost_per_unit(cost)
        new_units = self.optimizer.affordable_units(state.available_cash, unit_outlay)
        outlay = 0.0
        if new_units > 0:
            outlay = new_units * unit_outlay
            state.available_cash -= outlay
            state.cohorts.append(AcquisitionCohort(year, new_units, cost))

        economics = calculate_property_economics(
            year, state.cohorts, self.params, state.total_units
        )
        # Purchases were paid out of cash above, not out of the cash flow
        cash_flow = economics.noi - economics.capex - economics.taxes

        metrics = self._close_year(state, year, new_units, economics, cash_flow, loan_balance=0.0)
        return YearStep(metrics, opening_cash, budget, outlay)

    def _step_financed(self, state: StrategyState, year: int, cost: float) -> YearStep:
        opening_cash = state.available_cash
        budget = self._add_budget(state, year, self.params.financed_purchase_years)

        decision = self.optimizer.optimize(
            year, cost, state.available_cash, state.cohorts, state.loans, keep_candidates=False
        )
        outlay = 0.0
        if decision.units > 0:
            outlay = decision.upfront_total
            state.available_cash -= outlay
            state.cohorts.append(AcquisitionCohort(year, decision.units, cost))
            state.loans.append(Loan(
                units=decision.units,
                loan_amount_per_unit=decision.loan_amount_per_unit,
                year_originated=year,
                interest_rate_pct=self.params.interest_rate,
                term_years=self.params.loan_term,
            ))

        economics = calculate_property_economics(
            year, state.cohorts, self.params, state.total_units, state.loans
        )
        cash_flow = economics.noi - economics.debt_service - economics.capex - economics.taxes
        loan_balance = calculate_loan_balance(year, state.loans)

        metrics = self._close_year(state, year, decision.units, economics, cash_flow, loan_balance)
        return YearStep(metrics, opening_cash, budget, outlay)

    def _close_year(
        self,
        state: StrategyState,
        year: int,
        new_units: int,
        economics: PropertyEconomics,
        cash_flow: float,
        loan_balance: float,
    ) -> YearlyMetrics:
        """Roll reserves and cash forward and snapshot the year."""
        state.cumulative_capex += economics.capex
        if year > 1:
            state.cumulative_capex *= 1 + CAPEX_RESERVE_RETURN

        # May go negative on an existing portfolio; that is accepted
        state.available_cash += cash_flow
        state.cumulative_cash_flow += cash_flow

        asset_value = calculate_asset_value(year, state.cohorts, self.params)
        net_equity = asset_value - loan_balance

        log.debug(
            "year_simulated",
            strategy=state.kind.value,
            year=year,
            new_units=new_units,
            units=state.total_units,
            cash_flow=round(cash_flow, 2),
            available_cash=round(state.available_cash, 2),
        )

        return YearlyMetrics(
            year=year,
            units=state.total_units,
            new_units=new_units,
            cash_flow=cash_flow,
            cumulative_cash_flow=state.cumulative_cash_flow,
            asset_value=asset_value,
            net_worth=net_equity + state.cumulative_cash_flow,
            loan_balance=loan_balance,
            net_equity=net_equity,
            gpr=economics.gpr,
            egi=economics.egi,
            noi=economics.noi,
            depreciation=economics.depreciation,
            debt_service=economics.debt_service,
            interest_expense=economics.interest_expense,
            taxable_income=economics.taxable_income,
            taxes=economics.taxes,
            net_income=economics.net_income,
            capex=economics.capex,
        )


def perform_calculations(params: InvestmentParameters) -> CalculationResults:
    """Run the engine on already-validated parameters."""
    return SimulationEngine(params).run()


def calculate_all(
    params: Union[InvestmentParameters, Mapping[str, Any]],
) -> CalculationResults:
    """Validate, simulate and summarize.

    Args:
        params: Parameter model, or a raw mapping (snake_case or camelCase keys)

    Returns:
        CalculationResults with summary metrics attached.

    Raises:
        ParameterValidationError: If any parameter is malformed or out of range.
    """
    if not isinstance(params, InvestmentParameters):
        try:
            params = InvestmentParameters.model_validate(dict(params))
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
            log.warning("parameter_validation_failed", errors=errors)
            raise ParameterValidationError(errors) from exc

    errors = validate_investment_parameters(params)
    if errors:
        log.warning("parameter_validation_failed", errors=errors)
        raise ParameterValidationError(errors)

    return attach_summary(perform_calculations(params))
