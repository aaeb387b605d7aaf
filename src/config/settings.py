"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Backend selection, the tax schedule parameters and logging are all
resolved once at startup from these settings.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.models.reports import TaxBracket, TaxSchedule


class StorageSettings(BaseSettings):
    """Storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Left unset, the volatile in-memory backend is used.
    database_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "STORAGE_DATABASE_URL"),
        description="SQLAlchemy database URL for the durable backend"
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times to try reaching the database at startup"
    )
    connect_backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Base of the exponential backoff between connection attempts"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every SQL statement (debugging only)"
    )

    @field_validator("database_url")
    @classmethod
    def blank_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def durable_configured(self) -> bool:
        return self.database_url is not None


# Thai personal income tax brackets (tax year 2567 / 2024).
THAI_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(lower=Decimal("0"), upper=Decimal("150000"), rate=Decimal("0")),
    TaxBracket(lower=Decimal("150000"), upper=Decimal("300000"), rate=Decimal("0.05")),
    TaxBracket(lower=Decimal("300000"), upper=Decimal("500000"), rate=Decimal("0.10")),
    TaxBracket(lower=Decimal("500000"), upper=Decimal("750000"), rate=Decimal("0.15")),
    TaxBracket(lower=Decimal("750000"), upper=Decimal("1000000"), rate=Decimal("0.20")),
    TaxBracket(lower=Decimal("1000000"), upper=Decimal("2000000"), rate=Decimal("0.25")),
    TaxBracket(lower=Decimal("2000000"), upper=Decimal("5000000"), rate=Decimal("0.30")),
    TaxBracket(lower=Decimal("5000000"), upper=None, rate=Decimal("0.35")),
)


class TaxSettings(BaseSettings):
    """Deduction parameters for the income-tax estimate."""

    model_config = SettingsConfigDict(
        env_prefix="TAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    personal_deduction: Decimal = Field(default=Decimal("60000"), ge=0)
    social_security_rate: Decimal = Field(default=Decimal("0.05"), ge=0, le=1)
    social_security_cap: Decimal = Field(
        default=Decimal("15000"),
        ge=0,
        description="Annual ceiling on social-security contributions"
    )
    provident_fund_rate: Decimal = Field(default=Decimal("0.03"), ge=0, le=1)
    provident_fund_cap: Decimal = Field(default=Decimal("500000"), ge=0)

    def to_schedule(self) -> TaxSchedule:
        return TaxSchedule(
            personal_deduction=self.personal_deduction,
            social_security_rate=self.social_security_rate,
            social_security_cap=self.social_security_cap,
            provident_fund_rate=self.provident_fund_rate,
            provident_fund_cap=self.provident_fund_cap,
            brackets=THAI_TAX_BRACKETS,
        )


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
        description="Minimum level for the structured log"
    )
    trend_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Length of the trailing trend series"
    )

    @field_validator("log_level")
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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def tax(self) -> TaxSettings:
        return TaxSettings()

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
