"""Portfolio building blocks: acquisition cohorts and their loans.

Both are append-only records. A strategy's cohort list fully determines
asset value, rent and depreciation in any later year; a loan's balance is
a pure function of its fields and the evaluation year.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AcquisitionCohort:
    """Units bought in the same year at the same per-unit cost."""

    year_originated: int
    units: int
    cost_per_unit: float

    @property
    def total_cost(self) -> float:
        return self.cost_per_unit * self.units

    def years_owned(self, year: int) -> int:
        return max(0, year - self.year_originated)


@dataclass(frozen=True)
class Loan:
    """Amortizing loan financing one cohort (1:1 with its acquisition year)."""

    units: int
    loan_amount_per_unit: float
    year_originated: int
    interest_rate_pct: float
    term_years: int

    @property
    def principal(self) -> float:
        return self.loan_amount_per_unit * self.units

    @property
    def term_months(self) -> int:
        return self.term_years * 12

    def months_elapsed(self, year: int) -> int:
        """Months paid at the start of ``year`` (negative before origination)."""
        return (year - self.year_originated) * 12

    def is_active(self, year: int) -> bool:
        """Originated and not yet fully amortized at the start of ``year``."""
        elapsed = self.months_elapsed(year)
        return 0 <= elapsed < self.term_months
