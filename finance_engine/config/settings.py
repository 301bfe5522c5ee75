"""
Configuration Management for the Finance Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All policy constants live here.
The emergency-fund horizon, the expense-ratio assumption and the
contribution bounds are product policy, so they are settings rather
than literals inside the calculators.
"""

from decimal import Decimal
from functools import cached_property, lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForecastSettings(BaseSettings):
    """Debt projection and forecast configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FORECAST_",
        extra="ignore"
    )

    max_months: int = Field(
        default=1200,
        ge=1,
        le=6000,
        description="Iteration ceiling for payoff forecasts (1200 = 100 years)"
    )
    sync_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Difference above which stored debt values are considered stale"
    )


class AllocationSettings(BaseSettings):
    """Goal income-allocation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ALLOCATION_",
        extra="ignore"
    )

    max_total_percentage: Decimal = Field(
        default=Decimal("100"),
        gt=0,
        le=100,
        description="Upper bound for the sum of active goals' income percentages"
    )
    income_window_months: int = Field(
        default=4,
        ge=1,
        le=24,
        description="Trailing months of income used for the income basis"
    )
    conflict_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a goal write that loses an optimistic version race"
    )


class EmergencyFundSettings(BaseSettings):
    """Emergency fund advisor policy."""

    model_config = SettingsConfigDict(
        env_prefix="EMERGENCY_FUND_",
        extra="ignore"
    )

    reserve_months: int = Field(
        default=6,
        ge=1,
        description="Months of expenses the fund should cover"
    )
    paydown_months: int = Field(
        default=30,
        ge=1,
        description="Horizon over which the remaining gap is paid down"
    )
    expense_ratio: Decimal = Field(
        default=Decimal("0.8"),
        gt=0,
        le=1,
        description="Share of income assumed spent when expense history is absent"
    )
    min_percentage: Decimal = Field(
        default=Decimal("5"),
        ge=0,
        le=100,
        description="Lowest recommended share of income"
    )
    max_percentage: Decimal = Field(
        default=Decimal("20"),
        ge=0,
        le=100,
        description="Highest recommended share of income"
    )
    met_threshold: Decimal = Field(
        default=Decimal("0.95"),
        gt=0,
        le=1,
        description="Fraction of target at which the fund counts as met"
    )

    @model_validator(mode='after')
    def validate_bounds(self) -> 'EmergencyFundSettings':
        """The percentage window must not be inverted."""
        if self.min_percentage > self.max_percentage:
            raise ValueError("min_percentage cannot exceed max_percentage")
        return self


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False renders console-friendly lines)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Each section is read
    from the environment on first access and kept for the life of this
    object; get_settings.cache_clear() starts over.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @cached_property
    def forecast(self) -> ForecastSettings:
        return ForecastSettings()

    @cached_property
    def allocation(self) -> AllocationSettings:
        return AllocationSettings()

    @cached_property
    def emergency_fund(self) -> EmergencyFundSettings:
        return EmergencyFundSettings()

    @cached_property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("forecast", "allocation", "emergency_fund", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
