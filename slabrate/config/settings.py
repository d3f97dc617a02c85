"""
Configuration Management for the Slab Rate Engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Default starting rates, ancillary charge rates and display names come
from one validated source; no component reads them ad hoc.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SlabSettings(BaseSettings):
    """Built-in slab schedule configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SLAB_",
        extra="ignore"
    )

    default_starting_rate: Decimal = Field(
        default=Decimal("75"),
        gt=0,
        description="Starting rate (per foot) used when none is supplied"
    )
    default_selector: str = Field(
        default="1",
        min_length=1,
        description="Schedule used when a selector cannot be resolved"
    )

    # Display names for the built-in schedules
    type1_name: str = Field(
        default="Traditional Rates",
        description="Display name for schedule #1"
    )
    type2_name: str = Field(
        default="Progressive Rates",
        description="Display name for schedule #2"
    )
    type3_name: str = Field(
        default="Rebore Rates",
        description="Display name for schedule #3"
    )


class ChargeSettings(BaseSettings):
    """Default rates for the charges billed alongside drilling."""

    model_config = SettingsConfigDict(
        env_prefix="CHARGE_",
        extra="ignore"
    )

    pvc_7_inch_rate: Decimal = Field(
        default=Decimal("400"),
        ge=0,
        description="7\" PVC casing rate per foot"
    )
    pvc_10_inch_rate: Decimal = Field(
        default=Decimal("700"),
        ge=0,
        description="10\" PVC casing rate per foot"
    )
    bata_amount: Decimal = Field(
        default=Decimal("2000"),
        ge=0,
        description="Flat logistics/labour surcharge per bore"
    )
    existing_bore_rate: Decimal = Field(
        default=Decimal("40"),
        ge=0,
        description="Flat per-foot rate for an existing bore (rebore jobs)"
    )
    tax_rate: Decimal = Field(
        default=Decimal("18"),
        ge=0,
        le=100,
        description="Tax rate in percent (GST)"
    )
    tax_enabled: bool = Field(
        default=False,
        description="Apply tax by default"
    )


class StorageSettings(BaseSettings):
    """Custom schedule storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    custom_tables_path: str = Field(
        default="custom_slabs.json",
        description="Path to the JSON document holding custom slab tables"
    )

    @field_validator('custom_tables_path')
    @classmethod
    def validate_custom_tables_path(cls, v: str) -> str:
        """Warn if the parent directory doesn't exist (it may be created later)."""
        parent = Path(v).expanduser().parent
        if not parent.exists():
            import warnings
            warnings.warn(
                f"Directory for custom slab tables not found: {parent}. "
                "It will be created on first save."
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Presentation
    display_decimals: int = Field(
        default=2,
        ge=0,
        le=4,
        description="Decimal places used when amounts are displayed"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Currency symbol used in breakdown text"
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

    @property
    def slabs(self) -> SlabSettings:
        return SlabSettings()

    @property
    def charges(self) -> ChargeSettings:
        return ChargeSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
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

    for name in ("slabs", "charges", "storage", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
