"""Configuration package."""

from household_ledger.config.settings import (
    AppSettings,
    FirestoreSettings,
    LedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "FirestoreSettings",
    "LedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
