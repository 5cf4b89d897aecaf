"""Application settings loaded from the environment."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tidewatch.domain.models.configuration import (
    DEFAULT_OBSERVATION_START,
    SPOT_SERIES_ID,
    AcquisitionConfig,
)


class Settings(BaseSettings):
    """Tidewatch settings.

    Every field can be set through a ``TIDEWATCH_``-prefixed environment variable
    or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIDEWATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # FRED
    fred_api_key: str | None = Field(default=None, description="FRED API key")
    fred_base_url: str = Field(
        default="https://api.stlouisfed.org/fred",
        description="FRED API root, or the root of a pass-through proxy",
    )
    observation_start: str | None = Field(default=DEFAULT_OBSERVATION_START)

    # CoinGecko
    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3")
    coingecko_coin_id: str = Field(default="bitcoin")
    spot_series_id: str = Field(default=SPOT_SERIES_ID)

    # Network
    http_timeout_seconds: float = Field(default=20.0, gt=0)

    # Acquisition policy
    retry_delay_seconds: float = Field(default=30.0, ge=0)
    retry_ceiling: int = Field(default=3, ge=0)
    refresh_interval_seconds: float = Field(default=900.0, gt=0)
    trend_window: int = Field(default=12, ge=1)

    # Storage
    cache_dir: Path = Field(default=Path.home() / ".tidewatch" / "cache")

    # Logging
    log_level: str = Field(default="INFO")

    def to_acquisition_config(self) -> AcquisitionConfig:
        return AcquisitionConfig(
            spot_series_id=self.spot_series_id,
            retry_delay_seconds=self.retry_delay_seconds,
            retry_ceiling=self.retry_ceiling,
            trend_window=self.trend_window,
            observation_start=self.observation_start,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
