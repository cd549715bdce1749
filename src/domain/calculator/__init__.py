"""Pure calculation functions: amortization, property economics, validation."""

from .economics import (
    PropertyEconomics,
    calculate_asset_value,
    calculate_loan_balance,
    calculate_property_economics,
    property_cost_for_year,
)
from .financial import (
    annual_debt_service,
    calculate_monthly_payment,
    calculate_remaining_balance,
    generate_amortization_schedule,
    interest_for_year,
    level_payment,
    remaining_balance,
)
from .validation import validate_investment_parameters

__all__ = [
    "PropertyEconomics",
    "annual_debt_service",
    "calculate_asset_value",
    "calculate_loan_balance",
    "calculate_monthly_payment",
    "calculate_property_economics",
    "calculate_remaining_balance",
    "generate_amortization_schedule",
    "interest_for_year",
    "level_payment",
    "property_cost_for_year",
    "remaining_balance",
    "validate_investment_parameters",
]
