"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., CHART_SIGNALS__OVERBOUGHT=75)
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Labels of the chart resolution table (see engine.window.RESOLUTIONS)
VALID_RESOLUTION_LABELS = frozenset({"1D", "5D", "1M", "3M", "6M", "1Y", "5Y"})
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class SourceConfig(BaseModel):
    """Series API connection configuration."""

    base_url: str = "http://127.0.0.1:3000/api"
    api_key: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0, le=120)


class SignalConfig(BaseModel):
    """Which series feed the signal engine, and the oscillator thresholds."""

    rsi_period: int = Field(default=14, ge=2, le=100)
    sma_fast: int = Field(default=20, ge=2, le=200)
    sma_slow: int = Field(default=50, ge=3, le=400)
    overbought: float = Field(default=70.0, gt=0, lt=100)
    oversold: float = Field(default=30.0, gt=0, lt=100)

    @model_validator(mode="after")
    def validate_ordering(self) -> SignalConfig:
        if self.oversold >= self.overbought:
            raise ValueError(
                f"oversold ({self.oversold}) must be below "
                f"overbought ({self.overbought})"
            )
        if self.sma_fast >= self.sma_slow:
            raise ValueError(
                f"sma_fast ({self.sma_fast}) must be shorter than "
                f"sma_slow ({self.sma_slow})"
            )
        return self


class ChartConfig(BaseModel):
    """Stock chart defaults: resolution and selectable indicator periods."""

    default_resolution: str = "1Y"
    sma_periods: list[int] = Field(default=[20, 50, 200])
    rsi_periods: list[int] = Field(default=[14])
    fetch_timeout_seconds: float = Field(default=30.0, gt=0, le=300)

    @field_validator("default_resolution")
    @classmethod
    def validate_resolution(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_RESOLUTION_LABELS:
            raise ValueError(
                f"default_resolution must be one of "
                f"{sorted(VALID_RESOLUTION_LABELS)}, got {v}"
            )
        return v

    @field_validator("sma_periods", "rsi_periods")
    @classmethod
    def validate_periods(cls, v: list[int]) -> list[int]:
        if len(v) == 0:
            raise ValueError("Indicator periods must not be empty")
        if any(p < 1 for p in v):
            raise ValueError(f"Indicator periods must be >= 1, got {v}")
        if len(set(v)) != len(v):
            raise ValueError(f"Indicator periods must be unique, got {v}")
        return v


class WidgetConfig(BaseModel):
    """Technical-analysis widget lookbacks (daily series, no price)."""

    resolution_token: str = "D"
    sma_lookback_days: int = Field(default=90, ge=1, le=3650)
    rsi_lookback_days: int = Field(default=30, ge=1, le=3650)


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Env var examples:
        CHART_LOG_LEVEL=DEBUG
        CHART_SOURCE__BASE_URL=https://dashboard.example.com/api
        CHART_SIGNALS__OVERBOUGHT=75
        CHART_WATCHLIST='["AAPL","TSLA"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="CHART_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    source: SourceConfig = SourceConfig()
    signals: SignalConfig = SignalConfig()
    chart: ChartConfig = ChartConfig()
    widget: WidgetConfig = WidgetConfig()
    watchlist: list[str] = Field(
        default=["AAPL", "MSFT", "NVDA", "TSLA", "SPY"],
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v

    @field_validator("watchlist")
    @classmethod
    def validate_watchlist(cls, v: list[str]) -> list[str]:
        if len(v) == 0:
            raise ValueError("Watchlist must not be empty")
        for symbol in v:
            if not re.match(r"^[A-Z.]{1,6}$", symbol):
                raise ValueError(f"Invalid symbol: {symbol}")
        return v
