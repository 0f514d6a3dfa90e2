"""Application configuration using pydantic-settings."""

import re
from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CURRENCY_CODE_RE = re.compile(r"^[A-Z]{3,5}$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./carryfolio.db"

    # Valuation
    DISPLAY_CURRENCY: str = "USD"
    FINANCIAL_GOAL: Optional[Decimal] = None

    # Exchange rate provider (jsDelivr-hosted currency API)
    EXCHANGE_RATE_API_URL: str = "https://cdn.jsdelivr.net"
    EXCHANGE_RATE_API_PACKAGE: str = "/npm/@fawazahmed0/currency-api"
    EXCHANGE_RATE_TIMEOUT_SECONDS: float = 30.0

    @field_validator("DISPLAY_CURRENCY", mode="before")
    @classmethod
    def validate_display_currency(cls, v: str) -> str:
        """Normalize DISPLAY_CURRENCY to an uppercase currency code."""
        code = str(v).strip().upper()
        if not _CURRENCY_CODE_RE.match(code):
            raise ValueError(
                f"DISPLAY_CURRENCY must be a 3-5 letter currency code, got {v!r}"
            )
        return code

    @field_validator("FINANCIAL_GOAL", mode="before")
    @classmethod
    def empty_goal_is_none(cls, v):
        """Treat an empty FINANCIAL_GOAL (``FINANCIAL_GOAL=``) as no goal."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
