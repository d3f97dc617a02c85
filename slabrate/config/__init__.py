"""Configuration package."""

from slabrate.config.settings import (
    AppSettings,
    ChargeSettings,
    Settings,
    SlabSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ChargeSettings",
    "Settings",
    "SlabSettings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
