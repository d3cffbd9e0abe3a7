"""
Configuration Management for Payment Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from payment_tracker.models.payment import Currency, normalize_currency


class GitHubSettings(BaseSettings):
    """GitHub contents API storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    owner: str = Field(
        default="",
        description="Owner of the repository holding the payments document"
    )
    repo: str = Field(
        default="",
        description="Repository holding the payments document"
    )
    # Without a token every remote call fails and the app runs on local data
    token: str = Field(
        default="",
        description="Personal access token with contents read/write scope"
    )
    branch: str = Field(
        default="main",
        description="Branch the document is committed to"
    )
    file_path: str = Field(
        default="payments.json",
        description="Path of the payments document inside the repository"
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.owner and self.repo and self.token)


class CurrencySettings(BaseSettings):
    """Exchange rate source configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CURRENCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_url: str = Field(
        default="https://api.frankfurter.dev/v1",
        description="Frankfurter API base URL"
    )
    cache_duration_hours: float = Field(
        default=24,
        gt=0,
        description="How long fetched rates are served from cache"
    )
    reporting_currency: Currency = Field(
        default=Currency.EUR,
        description="Currency grand totals are reported in"
    )

    @field_validator("reporting_currency", mode="before")
    @classmethod
    def normalize_reporting_currency(cls, v) -> Currency:
        return normalize_currency(v)

    @property
    def cache_duration(self) -> timedelta:
        return timedelta(hours=self.cache_duration_hours)


class AuthSettings(BaseSettings):
    """Credentials for the single dashboard user."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    username: str = Field(default="admin")
    password: str = Field(default="as2026admin")
    full_name: str = Field(default="Sistem Yöneticisi")


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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    local_data_dir: str = Field(
        default="data",
        description="Directory holding the read-only fallback copy of the document"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for outbound HTTP calls"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def github(self) -> GitHubSettings:
        return GitHubSettings()

    @property
    def currency(self) -> CurrencySettings:
        return CurrencySettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

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

    try:
        github = settings.github
        results["github"] = github.is_configured
        if not github.is_configured:
            results["github_error"] = (
                "GITHUB_OWNER, GITHUB_REPO and GITHUB_TOKEN must be set; "
                "running on local data"
            )
    except Exception as e:
        results["github"] = False
        results["github_error"] = str(e)

    try:
        _ = settings.currency
        results["currency"] = True
    except Exception as e:
        results["currency"] = False
        results["currency_error"] = str(e)

    try:
        _ = settings.auth
        results["auth"] = True
    except Exception as e:
        results["auth"] = False
        results["auth_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
