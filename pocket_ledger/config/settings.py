"""
Configuration Management for Pocket Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every section has working defaults, so a bare environment gives a usable
ledger stored under ./ledger_data.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Storage backend: 'json' files on disk or 'memory'"
    )
    data_dir: Path = Field(
        default=Path("ledger_data"),
        description="Directory holding one JSON file per storage key"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a file write before giving up"
    )
    retry_wait_seconds: float = Field(
        default=0.2,
        ge=0.0,
        le=10.0,
        description="Base wait between write attempts (exponential)"
    )

    @field_validator("data_dir")
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Allow ~ in the configured path."""
        return v.expanduser()


class AuditSettings(BaseSettings):
    """Audit trail configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    enabled: bool = Field(
        default=True,
        description="Persist audit events alongside the ledger data"
    )
    max_events: int = Field(
        default=500,
        ge=10,
        le=100000,
        description="Oldest audit events are dropped past this count"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level for the stdlib logger behind structlog"
    )

    # Validation thresholds
    large_amount_warning: Decimal = Field(
        default=Decimal("1000000"),
        gt=0,
        description="Amounts above this get a non-blocking warning"
    )

    # Month close
    warn_on_empty_reset: bool = Field(
        default=True,
        description="Warn when a month is closed with no active transactions in it"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def audit(self) -> AuditSettings:
        return AuditSettings()

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

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "audit", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
