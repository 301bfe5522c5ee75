"""Configuration package."""

from finance_engine.config.settings import (
    AllocationSettings,
    AppSettings,
    EmergencyFundSettings,
    ForecastSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AllocationSettings",
    "AppSettings",
    "EmergencyFundSettings",
    "ForecastSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
