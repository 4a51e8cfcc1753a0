"""
Settings for scentledger, read from the environment and an optional .env.

Each concern has its own group and env prefix: STORAGE_, ALLOCATION_,
FX_ and API_.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the ledger database lives and how it is pooled."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", validate_default=True)

    data_dir: Path = Path("data")
    db_name: str = "scentledger.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="SQLite busy timeout in ms")

    @field_validator("data_dir")
    @classmethod
    def create_data_dir(cls, v: Path) -> Path:
        v = v.expanduser()
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class AllocationSettings(BaseSettings):
    """Re-plan budget for a sale whose lot decrement lost a race."""

    model_config = SettingsConfigDict(env_prefix="ALLOCATION_")

    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=0.05, ge=0, description="Base backoff in seconds")


class ExchangeRateSettings(BaseSettings):
    """USD -> DOP supplier."""

    model_config = SettingsConfigDict(env_prefix="FX_")

    api_url: str = "https://api.currencyapi.com/v3/latest"
    api_key: str | None = None
    cache_ttl_seconds: int = Field(default=6 * 60 * 60, ge=0)
    default_usd_to_dop: float = Field(default=62.25, gt=0)
    manual_rate: float | None = Field(default=None, gt=0)
    timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=3, ge=1)


class APISettings(BaseSettings):
    """HTTP server."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Top-level settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "ScentLedger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    allocation: AllocationSettings = Field(default_factory=AllocationSettings)
    exchange_rate: ExchangeRateSettings = Field(default_factory=ExchangeRateSettings)
    api: APISettings = Field(default_factory=APISettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
