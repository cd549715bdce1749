"""Business-rule validation for investment parameters.

Validation runs before the engine and reports every violated rule as a
human-readable message. The engine itself trusts its input.
"""

from __future__ import annotations

from src.domain.models.parameters import InvestmentParameters

MAX_PURCHASE_YEARS = 30

# Operating percentages that must stay within 0-100
_PERCENT_FIELDS = {
    "vacancy_rate": "Vacancy rate",
    "management_rate": "Management rate",
    "maintenance_rate": "Maintenance rate",
    "capex_rate": "CapEx rate",
    "land_percent": "Land value percent",
    "assessed_value_percent": "Assessed value percent",
}


def validate_investment_parameters(params: InvestmentParameters) -> list[str]:
    """Check a parameter set against the model's documented ranges.

    Returns:
        List of error messages; empty when the parameters are valid.
    """
    errors: list[str] = []

    if params.annual_budget <= 0:
        errors.append("Annual budget must be greater than 0")

    if params.initial_cost <= 0:
        errors.append("Initial property cost must be greater than 0")

    if params.rental_rate <= 0:
        errors.append("Rental rate must be greater than 0")

    if params.interest_rate < 0:
        errors.append("Interest rate cannot be negative")

    if not 0 <= params.ltv_ratio <= 100:
        errors.append("LTV ratio must be between 0 and 100")

    if not 0 <= params.self_purchase_years <= MAX_PURCHASE_YEARS:
        errors.append(f"Self purchase years must be between 0 and {MAX_PURCHASE_YEARS}")

    if not 0 <= params.financed_purchase_years <= MAX_PURCHASE_YEARS:
        errors.append(f"Financed purchase years must be between 0 and {MAX_PURCHASE_YEARS}")

    if params.loan_term < 1:
        errors.append("Loan term must be at least 1 year")

    if params.closing_cost_percent < 0:
        errors.append("Closing cost percent cannot be negative")

    if params.max_units_financed < 0 or params.max_units_financed_limit_years < 0:
        errors.append("Financing cap and its duration cannot be negative")

    for field, label in _PERCENT_FIELDS.items():
        value = getattr(params, field)
        if not 0 <= value <= 100:
            errors.append(f"{label} must be between 0 and 100")

    return errors
