"""
Acquisition optimizer for the bank-financed strategy.

Each year, searches every candidate unit count the available cash can
cover and keeps the largest one whose projected cash balance stays
non-negative. Candidates are evaluated one by one rather than solved for;
the existing portfolio and the per-unit economics of the new cohort are
computed once per year, so each candidate costs a single projection.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from src.core.logging import get_logger
from src.domain.calculator.economics import calculate_property_economics
from src.domain.calculator.financial import annual_debt_service
from src.domain.models.parameters import InvestmentParameters
from src.domain.models.portfolio import AcquisitionCohort, Loan

log = get_logger(__name__)


@dataclass(frozen=True)
class CandidateEvaluation:
    """Projected cash balance for buying ``units`` this year."""

    units: int
    balance: float

    @property
    def sustainable(self) -> bool:
        return self.balance >= 0


@dataclass(frozen=True)
class AcquisitionDecision:
    """Outcome of one year's search."""

    year: int
    units: int
    cost_per_unit: float
    upfront_per_unit: float
    loan_amount_per_unit: float
    balance: float
    max_units: int
    candidates: tuple[CandidateEvaluation, ...] = ()

    @property
    def upfront_total(self) -> float:
        return self.units * self.upfront_per_unit

    @property
    def loan_principal(self) -> float:
        return self.units * self.loan_amount_per_unit


class AcquisitionOptimizer:
    """Finds the maximum sustainable number of financed units per year.

    Also owns the closing-cost convention: every cash outlay per unit, for
    either strategy, is computed here so the optimizer and the yearly loop
    can never disagree on it.

    Attributes:
        params: Investment parameters of the run
    """

    def __init__(self, params: InvestmentParameters):
        self.params = params

    # --- Per-unit cash conventions ---

    def closing_costs_per_unit(self, cost_per_unit: float) -> float:
        return cost_per_unit * (self.params.closing_cost_percent / 100.0)

    def upfront_cost_per_unit(self, cost_per_unit: float) -> float:
        """Cash needed per financed unit: down payment plus closing costs."""
        down_payment = cost_per_unit * (1 - self.params.ltv_ratio / 100.0)
        return down_payment + self.closing_costs_per_unit(cost_per_unit)

    def self_financed_cost_per_unit(self, cost_per_unit: float) -> float:
        """Cash needed per all-cash unit: price plus closing costs."""
        return cost_per_unit + self.closing_costs_per_unit(cost_per_unit)

    def loan_amount_per_unit(self, cost_per_unit: float) -> float:
        return cost_per_unit * (self.params.ltv_ratio / 100.0)

    @staticmethod
    def affordable_units(cash: float, outlay_per_unit: float) -> int:
        """Whole units ``cash`` can pay for; 0 when the outlay is degenerate."""
        if cash <= 0 or outlay_per_unit <= 0:
            return 0
        ratio = cash / outlay_per_unit
        if not math.isfinite(ratio):
            return 0
        return int(math.floor(ratio))

    def candidate_ceiling(self, year: int, cash: float, cost_per_unit: float) -> int:
        """Largest unit count worth evaluating: affordability, then the yearly cap."""
        units = self.affordable_units(cash, self.upfront_cost_per_unit(cost_per_unit))
        if year <= self.params.max_units_financed_limit_years:
            units = min(units, max(0, self.params.max_units_financed))
        return units

    # --- Projection ---

    def _existing_portfolio(
        self,
        year: int,
        cohorts: Sequence[AcquisitionCohort],
        loans: Sequence[Loan],
    ) -> tuple[float, float]:
        """(NOI, debt service) of the portfolio held before this year's purchase."""
        total_units = sum(c.units for c in cohorts)
        existing = calculate_property_economics(year, cohorts, self.params, total_units, loans)
        return existing.noi, existing.debt_service

    def _unit_margin(self, year: int, cost_per_unit: float) -> float:
        """Same-year cash effect of one more financed unit: NOI - upfront - EMI.

        Every term of a new cohort's NOI and of its level payment scales
        with the unit count, so this is computed once per year.
        """
        unit_noi = calculate_property_economics(
            year, [AcquisitionCohort(year, 1, cost_per_unit)], self.params, 1
        ).noi
        unit_emi = annual_debt_service(
            self.loan_amount_per_unit(cost_per_unit),
            self.params.interest_rate,
            self.params.loan_term,
        )
        return unit_noi - self.upfront_cost_per_unit(cost_per_unit) - unit_emi

    @staticmethod
    def _project_balance(units: int, unit_margin: float, base_balance: float) -> float:
        # ``base_balance`` = cash (budget included) + existing NOI - existing debt service
        return base_balance + units * unit_margin

    def evaluate(
        self,
        year: int,
        units: int,
        cost_per_unit: float,
        cash: float,
        cohorts: Sequence[AcquisitionCohort] = (),
        loans: Sequence[Loan] = (),
    ) -> CandidateEvaluation:
        """Project the cash balance of buying ``units`` on top of the prior portfolio."""
        existing_noi, existing_ds = self._existing_portfolio(year, cohorts, loans)
        balance = self._project_balance(
            units, self._unit_margin(year, cost_per_unit), cash + existing_noi - existing_ds
        )
        return CandidateEvaluation(units=units, balance=balance)

    def optimize(
        self,
        year: int,
        cost_per_unit: float,
        cash: float,
        cohorts: Sequence[AcquisitionCohort] = (),
        loans: Sequence[Loan] = (),
        max_units: Optional[int] = None,
        keep_candidates: bool = True,
    ) -> AcquisitionDecision:
        """Pick the largest sustainable unit count for this year.

        Args:
            year: Acquisition year
            cost_per_unit: Unit price this year
            cash: Cash available, current year's budget included
            cohorts: Cohorts bought in prior years
            loans: Loans originated in prior years
            max_units: Candidate ceiling; defaults to ``candidate_ceiling``
            keep_candidates: Evaluate and return every candidate. When off,
                candidates are scanned from the ceiling down and the scan
                stops at the first sustainable count; the yearly loop uses
                this since the ceiling grows with the portfolio.

        Returns:
            AcquisitionDecision; ``units == 0`` when no candidate is sustainable,
            with the balance of the existing portfolio alone.
        """
        ceiling = self.candidate_ceiling(year, cash, cost_per_unit) if max_units is None else max(0, max_units)
        existing_noi, existing_ds = self._existing_portfolio(year, cohorts, loans)
        base_balance = cash + existing_noi - existing_ds
        unit_margin = self._unit_margin(year, cost_per_unit) if ceiling > 0 else 0.0

        candidates: list[CandidateEvaluation] = []
        units, balance, evaluated = 0, base_balance, 0
        if keep_candidates:
            for candidate in range(1, ceiling + 1):
                projected = self._project_balance(candidate, unit_margin, base_balance)
                candidates.append(CandidateEvaluation(units=candidate, balance=projected))
                if projected >= 0:
                    units, balance = candidate, projected
            evaluated = ceiling
        else:
            # Largest first: the first sustainable count found is the answer
            for candidate in range(ceiling, 0, -1):
                evaluated += 1
                projected = self._project_balance(candidate, unit_margin, base_balance)
                if projected >= 0:
                    units, balance = candidate, projected
                    break

        log.debug(
            "acquisition_search",
            year=year,
            ceiling=ceiling,
            units=units,
            balance=round(balance, 2),
            evaluated=evaluated,
        )

        return AcquisitionDecision(
            year=year,
            units=units,
            cost_per_unit=cost_per_unit,
            upfront_per_unit=self.upfront_cost_per_unit(cost_per_unit),
            loan_amount_per_unit=self.loan_amount_per_unit(cost_per_unit),
            balance=balance,
            max_units=ceiling,
            candidates=tuple(candidates),
        )
