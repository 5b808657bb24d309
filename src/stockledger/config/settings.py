"""
Application settings with Pydantic v2 validation.

Loads configuration from ``STOCKLEDGER_``-prefixed environment variables
(or a ``.env`` file) with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="STOCKLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    data_dir: Path = Path("data")

    # Row locking
    lock_timeout_seconds: float = Field(default=5.0, gt=0)

    # Retry settings (whole-call retry on storage contention)
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=0.05, ge=0)
    retry_multiplier: float = Field(default=2.0, ge=1)

    # Allocation defaults
    default_strategy: Literal["FEFO", "FIFO"] = "FEFO"
    exclude_expired: bool = False

    @field_validator("default_strategy", mode="before")
    @classmethod
    def upper_strategy(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
