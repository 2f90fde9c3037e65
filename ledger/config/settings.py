"""
Configuration Management for the Personal Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Validation limits, storage location and logging live side by side
so it is easy to see every knob the core exposes.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Business limits for transactions."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    max_title_length: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Maximum title length in characters"
    )
    max_transaction_value: Decimal = Field(
        default=Decimal("999999999.99"),
        gt=0,
        description="Largest amount a single transaction may have"
    )
    recent_transactions_days: int = Field(
        default=30,
        ge=1,
        description="Size of the trailing window for recent transactions"
    )
    date_filter_tolerance_days: int = Field(
        default=1,
        ge=0,
        le=7,
        description="Margin applied to both ends of a date range filter"
    )
    max_installments: int = Field(
        default=360,
        ge=1,
        description="Maximum installments of a recurring transaction (30 years)"
    )


class StorageSettings(BaseSettings):
    """Record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: Literal["memory", "json"] = Field(
        default="memory",
        description="Which record store implementation to use"
    )
    data_dir: Path = Field(
        default=Path("ledger_data"),
        description="Directory holding the JSON record files"
    )
    transactions_file: str = Field(
        default="transactions.json",
        description="File name of the transaction records"
    )

    @field_validator('transactions_file')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """File names only; the directory comes from data_dir."""
        if not v or Path(v).name != v:
            raise ValueError(f"Expected a bare file name, got: {v!r}")
        return v

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file


class LoggingSettings(BaseSettings):
    """structlog configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )
    json_output: bool = Field(
        default=True,
        description="Render JSON lines instead of console output"
    )
    audit_history_size: int = Field(
        default=1000,
        ge=0,
        description="Audit events kept in memory; the oldest are dropped first"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
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

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the failures.
    """
    results = {}
    settings = get_settings()

    for name in ("ledger", "storage", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
