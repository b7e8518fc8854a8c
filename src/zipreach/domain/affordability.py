# src/zipreach/domain/affordability.py
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AffordabilityTier = Literal["affordable", "stretch", "unaffordable", "unknown"]

# Tiers that can be placed on the map (unknown never is)
MarkerTier = Literal["affordable", "stretch", "unaffordable"]


def _strip_percent(v: Any) -> Any:
    if isinstance(v, str):
        s = v.strip().replace(",", "").replace("$", "")
        if s.endswith("%"):
            s = s[:-1]
        return s
    return v


class AffordabilityInputs(BaseModel):
    """
    Financial profile a buyer edits between searches.

    Every percentage is a plain number: 6.5 means 6.5%, never 0.065.
    Instances are frozen; derive an edited profile with
    ``inputs.model_copy(update={...})``.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    annual_income: float | None = None
    down_payment_pct: float = Field(default=20.0, description="3-50, e.g. 20 for 20% down")
    interest_rate: float = Field(default=6.5, description="annual, e.g. 6.5 for 6.5%")
    loan_term_years: Literal[15, 30] = 30

    # Advanced overrides
    property_tax_rate: float = Field(default=1.1, description="% of home value per year")
    annual_insurance: float = 1500.0
    monthly_debts: float = 0.0       # car, student loans, credit cards
    hoa_monthly: float = 0.0
    front_dti_pct: float = 28.0
    back_dti_pct: float = 36.0

    # Groceries, utilities, gas, ...
    monthly_spending: float = 0.0
    include_spending: bool = False

    manual_max_price: float | None = None
    use_manual_max_price: bool = False

    @field_validator(
        "annual_income",
        "down_payment_pct",
        "interest_rate",
        "property_tax_rate",
        "annual_insurance",
        "monthly_debts",
        "hoa_monthly",
        "front_dti_pct",
        "back_dti_pct",
        "monthly_spending",
        "manual_max_price",
        mode="before",
    )
    @classmethod
    def _percent_and_currency_strings(cls, v: Any) -> Any:
        v = _strip_percent(v)
        if v == "":
            return None
        return v

    @field_validator("down_payment_pct")
    @classmethod
    def _down_payment_range(cls, v: float) -> float:
        if not (3.0 <= v <= 50.0):
            raise ValueError("down_payment_pct must be between 3 and 50")
        return v

    @field_validator("loan_term_years", mode="before")
    @classmethod
    def _term_as_int(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().isdigit():
            return int(v.strip())
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v

    @property
    def has_income(self) -> bool:
        return self.annual_income is not None and self.annual_income > 0

    @property
    def gross_monthly_income(self) -> float:
        return (self.annual_income or 0.0) / 12


def default_inputs(annual_income: float | None = None, **overrides: Any) -> AffordabilityInputs:
    """
    Inputs seeded from AppConfig defaults (ZIPREACH_DEFAULT_* env vars).
    """
    from zipreach.adapters.config import config

    base: dict[str, Any] = {
        "annual_income": annual_income,
        "down_payment_pct": config.DEFAULT_DOWN_PAYMENT_PCT,
        "interest_rate": config.DEFAULT_INTEREST_RATE,
        "loan_term_years": config.DEFAULT_LOAN_TERM_YEARS,
        "property_tax_rate": config.DEFAULT_PROPERTY_TAX_RATE,
        "annual_insurance": config.DEFAULT_ANNUAL_INSURANCE,
        "front_dti_pct": config.DEFAULT_FRONT_DTI_PCT,
        "back_dti_pct": config.DEFAULT_BACK_DTI_PCT,
    }
    base.update(overrides)
    return AffordabilityInputs(**base)
