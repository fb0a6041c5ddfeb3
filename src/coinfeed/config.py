"""
Coinfeed configuration using Pydantic Settings.

This module provides configuration management for the aggregation core,
allowing environment-based configuration with type validation and defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderConfig(BaseSettings):
    """Upstream provider configuration."""

    model_config = SettingsConfigDict(env_prefix="COINFEED_PROVIDER_")

    # Endpoints
    coingecko_url: str = "https://api.coingecko.com/api/v3"
    coinpaprika_url: str = "https://api.coinpaprika.com/v1"
    fear_greed_url: str = "https://api.alternative.me"
    cryptocompare_url: str = "https://min-api.cryptocompare.com"

    # Provider chain
    primary: str = Field(default="coingecko", description="Primary provider name")
    fallback: str = Field(default="coinpaprika", description="Fallback provider name")

    # Request settings
    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=60.0,
        description="Per-request timeout in seconds",
    )
    vs_currency: Literal["usd"] = Field(
        default="usd",
        description="Quote currency; records hold USD values only",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Coins per listing page",
    )
    include_sparkline: bool = False


class StoreConfig(BaseSettings):
    """Local persistence configuration."""

    model_config = SettingsConfigDict(env_prefix="COINFEED_STORE_")

    directory: Path = Field(
        default=Path(".coinfeed"),
        description="Directory holding cached snapshots and preferences",
    )


class SchedulerConfig(BaseSettings):
    """Refresh timer configuration."""

    model_config = SettingsConfigDict(env_prefix="COINFEED_SCHEDULER_")

    coins_interval_seconds: float = Field(
        default=30.0,
        ge=5.0,
        le=3600.0,
        description="Seconds between coin listing refreshes",
    )
    global_interval_seconds: float = Field(
        default=120.0,
        ge=5.0,
        le=3600.0,
        description="Seconds between global summary refreshes",
    )
    stop_timeout_seconds: float = Field(default=6.0, gt=0.0)

    @model_validator(mode="after")
    def coins_refresh_faster(self) -> "SchedulerConfig":
        """Global stats move slowly; never poll them more often than coins."""
        if self.coins_interval_seconds > self.global_interval_seconds:
            raise ValueError(
                "coins_interval_seconds must not exceed global_interval_seconds"
            )
        return self


class AggregatorConfig(BaseSettings):
    """Aggregator and view configuration."""

    model_config = SettingsConfigDict(env_prefix="COINFEED_AGGREGATOR_")

    pinned_symbols: list[str] = Field(
        default=["BTC", "ETH", "BNB", "SOL", "XRP"],
        description="Symbols listed first, in this order, under the default sort",
    )
    default_watchlist: list[str] = Field(
        default=["btc", "eth", "sol"],
        description="Watchlist coin ids created on first launch",
    )
    default_favorites: list[str] = Field(default_factory=list)
    top_movers_count: int = Field(default=3, ge=1, le=50)

    @field_validator("pinned_symbols", "default_favorites")
    @classmethod
    def upper_symbols(cls, v: list[str]) -> list[str]:
        """Symbols are compared uppercased."""
        return [s.strip().upper() for s in v if s.strip()]

    @field_validator("default_watchlist")
    @classmethod
    def lower_ids(cls, v: list[str]) -> list[str]:
        """Coin ids are lowercased symbols."""
        return [s.strip().lower() for s in v if s.strip()]


class CoinfeedConfig(BaseSettings):
    """Root configuration combining all sub-configs."""

    model_config = SettingsConfigDict(env_prefix="COINFEED_")

    # Sub-configurations
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)

    # Global settings
    debug: bool = False
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    @classmethod
    def from_env(cls) -> "CoinfeedConfig":
        """
        Load configuration from environment variables.

        Returns:
            Configured CoinfeedConfig instance

        """
        return cls(
            provider=ProviderConfig(),
            store=StoreConfig(),
            scheduler=SchedulerConfig(),
            aggregator=AggregatorConfig(),
        )
