"""Property economics for a multi-cohort portfolio.

Aggregates rent, operating expenses, depreciation, debt service and tax
across every cohort (and loan) a strategy owns, for one evaluation year.
All functions are pure: safe to call with empty cohort or loan lists.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

from src.core.constants import (
    ENTITY_TAX_RATE,
    MONTHS_PER_YEAR,
    RESIDENTIAL_DEPRECIATION_YEARS,
)
from src.domain.calculator.financial import (
    annual_debt_service,
    interest_for_year,
    remaining_balance,
)
from src.domain.models.parameters import EntityType, InvestmentParameters
from src.domain.models.portfolio import AcquisitionCohort, Loan


@dataclass(frozen=True)
class PropertyEconomics:
    """One year's income statement for a portfolio.

    NOI excludes both the capex reserve and debt service: they are cash-flow
    items, not operating expenses.
    """

    gpr: float = 0.0
    vacancy_loss: float = 0.0
    egi: float = 0.0
    management: float = 0.0
    maintenance: float = 0.0
    property_tax: float = 0.0
    insurance: float = 0.0
    noi: float = 0.0
    depreciation: float = 0.0
    debt_service: float = 0.0
    interest_expense: float = 0.0
    capex: float = 0.0
    taxable_income: float = 0.0
    taxes: float = 0.0
    net_income: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def property_cost_for_year(params: InvestmentParameters, year: int) -> float:
    """Per-unit acquisition cost in ``year`` (year 1 = initial cost)."""
    return params.initial_cost * (1 + params.cost_increase / 100.0) ** (year - 1)


def calculate_tax(params: InvestmentParameters, taxable_income: float) -> float:
    """Entity-level income tax; pass-through entities pay none here."""
    if params.passthrough_llc is EntityType.PASS_THROUGH:
        return 0.0
    return max(0.0, taxable_income * ENTITY_TAX_RATE)


def calculate_property_economics(
    year: int,
    cohorts: Sequence[AcquisitionCohort],
    params: InvestmentParameters,
    total_units: int,
    loans: Iterable[Loan] = (),
) -> PropertyEconomics:
    """Compute the portfolio's income statement for one evaluation year.

    Args:
        year: Evaluation year (1-based)
        cohorts: Every cohort owned
        params: Investment parameters
        total_units: Unit count used for per-unit charges (insurance). Passed
            explicitly because callers may evaluate hypothetical portfolios.
        loans: Loans to service this year (empty for the all-cash strategy)

    Returns:
        PropertyEconomics with all aggregate figures.
    """
    gpr = 0.0
    property_tax = 0.0
    depreciation = 0.0

    rent_factor = params.rental_rate / 100.0 * MONTHS_PER_YEAR
    for cohort in cohorts:
        years_owned = cohort.years_owned(year)

        rent = (
            cohort.cost_per_unit
            * rent_factor
            * (1 + params.rent_growth_rate / 100.0) ** years_owned
        )
        gpr += rent * cohort.units

        assessed_value = (
            cohort.cost_per_unit
            * (params.assessed_value_percent / 100.0)
            * (1 + params.assessed_growth_rate / 100.0) ** years_owned
        )
        property_tax += assessed_value * (params.tax_rate / 100.0) * cohort.units

        building_value = cohort.cost_per_unit * (1 - params.land_percent / 100.0)
        depreciation += building_value / RESIDENTIAL_DEPRECIATION_YEARS * cohort.units

    vacancy_loss = gpr * (params.vacancy_rate / 100.0)
    egi = gpr - vacancy_loss
    management = egi * (params.management_rate / 100.0)
    maintenance = egi * (params.maintenance_rate / 100.0)
    insurance = params.insurance * total_units
    noi = egi - management - maintenance - property_tax - insurance

    debt_service = 0.0
    interest_expense = 0.0
    for loan in loans:
        if not loan.is_active(year):
            continue
        debt_service += annual_debt_service(
            loan.loan_amount_per_unit, loan.interest_rate_pct, loan.term_years
        ) * loan.units
        interest_expense += interest_for_year(
            loan.loan_amount_per_unit,
            loan.interest_rate_pct,
            loan.term_years,
            loan.months_elapsed(year),
        ) * loan.units

    capex = egi * (params.capex_rate / 100.0)

    taxable_income = noi - depreciation - interest_expense
    taxes = calculate_tax(params, taxable_income)

    return PropertyEconomics(
        gpr=gpr,
        vacancy_loss=vacancy_loss,
        egi=egi,
        management=management,
        maintenance=maintenance,
        property_tax=property_tax,
        insurance=insurance,
        noi=noi,
        depreciation=depreciation,
        debt_service=debt_service,
        interest_expense=interest_expense,
        capex=capex,
        taxable_income=taxable_income,
        taxes=taxes,
        net_income=taxable_income - taxes,
    )


def calculate_asset_value(
    year: int,
    cohorts: Iterable[AcquisitionCohort],
    params: InvestmentParameters,
) -> float:
    """Market value of all cohorts, each appreciating from its own purchase year."""
    growth = 1 + params.appreciation_rate / 100.0
    return sum(
        cohort.cost_per_unit * growth ** cohort.years_owned(year) * cohort.units
        for cohort in cohorts
    )


def calculate_loan_balance(year: int, loans: Iterable[Loan]) -> float:
    """Outstanding principal at the start of ``year`` across all loans."""
    total = 0.0
    for loan in loans:
        elapsed = loan.months_elapsed(year)
        if elapsed < 0:
            continue
        total += remaining_balance(
            loan.loan_amount_per_unit, loan.interest_rate_pct, loan.term_years, elapsed
        ) * loan.units
    return total
