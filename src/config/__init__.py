"""Configuration package."""

from src.config.settings import (
    THAI_TAX_BRACKETS,
    AppSettings,
    Settings,
    StorageSettings,
    TaxSettings,
    get_settings,
)

__all__ = [
    "THAI_TAX_BRACKETS",
    "AppSettings",
    "Settings",
    "StorageSettings",
    "TaxSettings",
    "get_settings",
]
