"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRICE_CACHE_PATH = "data/price_cache.json"


class AppSettings(BaseSettings):
    """Configuration options for the equity tracker service."""

    app_name: str = Field(default="Portfolio Equity Tracker")

    alphavantage_api_key: str = Field(default="demo", description="Read from ALPHAVANTAGE_API_KEY.")
    alphavantage_requests_per_minute: int = Field(default=5, ge=1)
    alphavantage_output_size: Literal["compact", "full"] = Field(default="full")

    price_cache_path: str = Field(
        default=DEFAULT_PRICE_CACHE_PATH,
        description="JSON file holding cached daily closes per symbol.",
    )
    price_cache_max_age_days: int | None = Field(
        default=None,
        ge=0,
        description="Re-fetch cached series whose latest close is older than this many days.",
    )
    price_fetch_concurrency: int = Field(default=2, ge=1)
    price_fetch_timeout_seconds: float = Field(default=30.0, gt=0)

    others_threshold_pct: float = Field(
        default=1.0,
        ge=0.0,
        le=100.0,
        description="Holdings below this share of total equity are grouped as Others.",
    )

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="equity-tracker")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"alphavantage_api_key"}
        return {k: ("***" if k in hidden else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return cached application settings."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_PRICE_CACHE_PATH",
    "get_settings",
]
