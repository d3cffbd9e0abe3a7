"""Configuration package."""

from payment_tracker.config.settings import (
    AppSettings,
    AuthSettings,
    CurrencySettings,
    GitHubSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "CurrencySettings",
    "GitHubSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
