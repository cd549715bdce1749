"""Investment parameter model.

One immutable parameter set drives one 15-year simulation run. Field names
are snake_case; the camelCase names used by form payloads and saved
scenarios (``initialCost``, ``ltvRatio``, ``passthroughLLC`` ...) are
accepted as aliases.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from src.core.exceptions import InvalidParameterError


class EntityType(str, Enum):
    """Ownership structure, decides whether entity-level income tax applies."""

    PASS_THROUGH = "yes"
    ENTITY_TAXED = "no"


class InvestmentParameters(BaseModel):
    """Validated-by-caller input for one simulation run.

    All rates are percentages (7.0 means 7%). Range checks are not enforced
    here: see ``validate_investment_parameters`` for the business rules.
    """

    # Acquisition
    initial_cost: float = Field(default=160_000.0, description="Per-unit cost in year 1")
    annual_budget: float = Field(default=170_000.0, description="Cash injected each purchase year")
    self_purchase_years: int = Field(default=5, description="Years the budget funds the self-financed plan")
    financed_purchase_years: int = Field(default=5, description="Years the budget funds the financed plan")
    cost_increase: float = Field(default=1.0, description="Annual per-unit cost escalation %")
    closing_cost_percent: float = Field(default=2.0, description="Closing costs as % of unit cost")

    # Income
    rental_rate: float = Field(default=1.0, description="Monthly rent as % of unit cost")
    rent_growth_rate: float = Field(default=3.0, description="Annual rent growth %")
    vacancy_rate: float = Field(default=5.0, description="Vacancy loss as % of gross rent")

    # Operating expenses
    management_rate: float = Field(default=8.0, description="Management fee as % of EGI")
    maintenance_rate: float = Field(default=1.0, description="Maintenance as % of EGI")
    insurance: float = Field(default=1_300.0, description="Annual insurance per unit")
    tax_rate: float = Field(default=1.5, description="Property tax % of assessed value")
    assessed_value_percent: float = Field(default=20.0, description="Assessed value as % of cost")
    assessed_growth_rate: float = Field(default=2.5, description="Annual assessed value growth %")
    capex_rate: float = Field(default=5.0, description="CapEx reserve as % of EGI")

    # Financing
    interest_rate: float = Field(default=7.0, description="Annual loan interest rate %")
    ltv_ratio: float = Field(default=70.0, description="Loan-to-value %")
    loan_term: int = Field(default=5, description="Loan term in years")
    max_units_financed: int = Field(default=2, description="Cap on units financed per year")
    max_units_financed_limit_years: int = Field(default=3, description="Years during which the cap applies")

    # Valuation & tax
    appreciation_rate: float = Field(default=3.0, description="Annual property appreciation %")
    land_percent: float = Field(default=20.0, description="Non-depreciable land share %")
    passthrough_llc: EntityType = Field(
        default=EntityType.PASS_THROUGH,
        alias="passthroughLLC",
        description="Pass-through entity flag ('yes' / 'no')",
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
        "extra": "ignore",
    }

    @field_validator("passthrough_llc", mode="before")
    @classmethod
    def normalize_entity_flag(cls, v: Any) -> Any:
        """Accept booleans and loose 'Yes'/'NO' spellings."""
        if isinstance(v, bool):
            return EntityType.PASS_THROUGH if v else EntityType.ENTITY_TAXED
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_pass_through(self) -> bool:
        return self.passthrough_llc is EntityType.PASS_THROUGH

    def with_overrides(self, **changes: Any) -> InvestmentParameters:
        """Return a re-validated copy with some fields replaced."""
        unknown = [k for k in changes if k not in type(self).model_fields]
        if unknown:
            raise InvalidParameterError(unknown[0], changes[unknown[0]], "unknown parameter")
        return type(self).model_validate({**self.model_dump(), **changes})


# Market presets, applied as overrides on any parameter set
PARAMETER_PRESETS: dict[str, dict[str, float]] = {
    "conservative": {
        "appreciation_rate": 2.0,
        "rent_growth_rate": 2.0,
        "interest_rate": 6.5,
        "vacancy_rate": 7.0,
        "maintenance_rate": 1.2,
    },
    "moderate": {
        "appreciation_rate": 3.0,
        "rent_growth_rate": 3.0,
        "interest_rate": 7.0,
        "vacancy_rate": 5.0,
        "maintenance_rate": 1.0,
    },
    "aggressive": {
        "appreciation_rate": 5.0,
        "rent_growth_rate": 4.0,
        "interest_rate": 7.5,
        "vacancy_rate": 3.0,
        "maintenance_rate": 0.8,
    },
}


def get_default_parameters() -> InvestmentParameters:
    """Parameter set with every field at its default."""
    return InvestmentParameters()


def apply_preset(params: InvestmentParameters, name: str) -> InvestmentParameters:
    """Apply a named market preset on top of an existing parameter set."""
    key = name.strip().lower()
    if key not in PARAMETER_PRESETS:
        raise InvalidParameterError(
            "preset", name, f"expected one of {sorted(PARAMETER_PRESETS)}"
        )
    return params.with_overrides(**PARAMETER_PRESETS[key])
