# src/zipreach/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # Raw datasets
    # -----------------------------
    DATA_DIR: str = Field(default="data")
    HOUSING_DATA_FILE: str = Field(default="housing-data.json")
    CENTROIDS_FILE: str = Field(default="zip-centroids.json")

    # Missing files degrade to empty tables instead of raising
    ALLOW_MISSING_DATA: bool = Field(default=True)

    # Raw table cache
    CACHE_MAX_ENTRIES: int = Field(default=8)
    CACHE_TTL_SECONDS: float = Field(default=30 * 24 * 60 * 60)

    # -----------------------------
    # Affordability defaults (plain percents, 6.5 means 6.5%)
    # -----------------------------
    DEFAULT_DOWN_PAYMENT_PCT: float = Field(default=20.0)
    DEFAULT_INTEREST_RATE: float = Field(default=6.5)
    DEFAULT_LOAN_TERM_YEARS: int = Field(default=30)
    DEFAULT_PROPERTY_TAX_RATE: float = Field(default=1.1)
    DEFAULT_ANNUAL_INSURANCE: float = Field(default=1500.0)
    DEFAULT_FRONT_DTI_PCT: float = Field(default=28.0)
    DEFAULT_BACK_DTI_PCT: float = Field(default=36.0)

    model_config = SettingsConfigDict(
        env_prefix="ZIPREACH_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "DEFAULT_DOWN_PAYMENT_PCT",
        "DEFAULT_INTEREST_RATE",
        "DEFAULT_PROPERTY_TAX_RATE",
        "DEFAULT_FRONT_DTI_PCT",
        "DEFAULT_BACK_DTI_PCT",
        mode="before",
    )
    @classmethod
    def _to_non_negative_percent(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        try:
            f = float(v)
        except (TypeError, ValueError) as err:
            raise ValueError("rate must be numeric or percent-like") from err
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f

    @field_validator("DEFAULT_LOAN_TERM_YEARS", mode="before")
    @classmethod
    def _term_supported(cls, v: Any) -> Any:
        n = int(v)
        if n not in (15, 30):
            raise ValueError("DEFAULT_LOAN_TERM_YEARS must be 15 or 30")
        return n

    @field_validator("CACHE_MAX_ENTRIES", mode="before")
    @classmethod
    def _capacity_positive(cls, v: Any) -> Any:
        n = int(v)
        if n <= 0:
            raise ValueError("CACHE_MAX_ENTRIES must be > 0")
        return n


config = AppConfig()
