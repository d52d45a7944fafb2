"""
Configuration Management for Household Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The budget is read once at process start and then handed to the
ledger components as an explicit value; nothing reads it as a global.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Budget and presentation defaults for the ledger."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    budget: Decimal = Field(
        default=Decimal("500000"),
        gt=0,
        description="Fixed budget for the session, in whole currency units"
    )
    default_description: str = Field(
        default="지출",
        min_length=1,
        description="Label used when an expense is entered without a description"
    )
    currency_symbol: str = Field(
        default="₩",
        description="Glyph prefixed to every displayed amount"
    )
    backend: Literal["local", "firestore"] = Field(
        default="local",
        description="Which expense repository to use"
    )
    refresh_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="How often the page checks for live-sync pushes (remote backend)"
    )


class FirestoreSettings(BaseSettings):
    """Firestore (remote, live-synced) storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to the Firebase service account credentials JSON"
    )
    project_id: Optional[str] = Field(
        default=None,
        description="Firebase project id (taken from the credentials if unset)"
    )
    collection_name: str = Field(
        default="expenses",
        min_length=1,
        description="Name of the flat collection holding one document per expense"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firebase credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


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
        description="Minimum level for structured logs"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    # Sub-settings are loaded lazily so the local backend works
    # without any Firestore configuration present.

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def firestore(self) -> FirestoreSettings:
        return FirestoreSettings()

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

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry for each failure. Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "firestore", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
