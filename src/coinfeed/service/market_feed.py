"""
Market feed assembly.

This module wires providers, the local store, the aggregator, the refresh
scheduler and the insights service together from configuration, hiding
provider-specific construction from the rest of the application.
"""

import logging
from types import TracebackType
from typing import Self

import httpx

from src.coinfeed.adapters.alternative import FearGreedClient
from src.coinfeed.adapters.coingecko import CoinGeckoClient
from src.coinfeed.adapters.coinpaprika import CoinPaprikaClient
from src.coinfeed.adapters.cryptocompare import CryptoCompareNewsClient
from src.coinfeed.config import CoinfeedConfig, ProviderConfig
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.query import CoinQuery
from src.coinfeed.protocols.market import SnapshotStore
from src.coinfeed.service.aggregator import MarketAggregator
from src.coinfeed.service.insights import MarketInsights
from src.coinfeed.service.scheduler import RefreshScheduler
from src.coinfeed.storage.local_store import LocalStore

logger = logging.getLogger(__name__)


def create_provider(
    name: str,
    config: ProviderConfig,
    http_client: httpx.AsyncClient | None = None,
) -> CoinGeckoClient | CoinPaprikaClient:
    """
    Build a market-data provider by name.

    Args:
        name: Provider name ("coingecko" or "coinpaprika")
        config: Endpoint and timeout settings
        http_client: Optional shared client

    Returns:
        Provider client satisfying MarketDataProvider

    Raises:
        ValueError: If the provider is not supported

    """
    match name.lower():
        case "coingecko":
            return CoinGeckoClient(
                config.coingecko_url,
                timeout=config.timeout_seconds,
                http_client=http_client,
            )
        case "coinpaprika":
            return CoinPaprikaClient(
                config.coinpaprika_url,
                timeout=config.timeout_seconds,
                http_client=http_client,
            )
        case _:
            raise ValueError(f"Unsupported provider: {name}")


def build_query(config: ProviderConfig) -> CoinQuery:
    """First listing page as configured."""
    return CoinQuery(
        vs_currency=config.vs_currency,
        per_page=config.page_size,
        sparkline=config.include_sparkline,
    )


def default_preferences(config: CoinfeedConfig) -> UserPreferences:
    return UserPreferences(
        favorite_symbols=config.aggregator.default_favorites,
        watchlist_ids=config.aggregator.default_watchlist,
    )


def create_aggregator(
    config: CoinfeedConfig,
    *,
    store: SnapshotStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> MarketAggregator:
    """
    Build an aggregator with the configured provider chain.

    Raises:
        ValueError: If a provider is unsupported or both names are the same

    """
    provider_config = config.provider
    if provider_config.primary.lower() == provider_config.fallback.lower():
        raise ValueError("Primary and fallback providers must differ")

    return MarketAggregator(
        create_provider(provider_config.primary, provider_config, http_client),
        create_provider(provider_config.fallback, provider_config, http_client),
        store or LocalStore(config.store.directory),
        query=build_query(provider_config),
        pinned_symbols=config.aggregator.pinned_symbols,
        default_preferences=default_preferences(config),
        top_movers_count=config.aggregator.top_movers_count,
    )


class MarketFeed:
    """
    Aggregator, scheduler and insights built from one configuration.

    Owns the provider HTTP clients; use as an async context manager or call
    ``start`` and ``aclose``.
    """

    def __init__(
        self,
        config: CoinfeedConfig,
        *,
        store: SnapshotStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        provider_config = config.provider

        self.aggregator = create_aggregator(
            config, store=store, http_client=http_client
        )
        self.scheduler = RefreshScheduler.from_config(
            self.aggregator, config.scheduler
        )

        providers = [self.aggregator.primary, self.aggregator.fallback]
        coingecko = next(
            (p for p in providers if isinstance(p, CoinGeckoClient)), None
        )
        if coingecko is None:
            coingecko = CoinGeckoClient(
                provider_config.coingecko_url,
                timeout=provider_config.timeout_seconds,
                http_client=http_client,
            )

        self.insights = MarketInsights(
            coingecko,
            FearGreedClient(
                provider_config.fear_greed_url,
                timeout=provider_config.timeout_seconds,
                http_client=http_client,
            ),
            CryptoCompareNewsClient(
                provider_config.cryptocompare_url,
                timeout=provider_config.timeout_seconds,
                http_client=http_client,
            ),
        )

    async def start(self) -> None:
        """Restore cached data, then start periodic refreshes."""
        self.aggregator.restore_cached()
        self.scheduler.start()

    async def aclose(self) -> None:
        await self.scheduler.stop(self.config.scheduler.stop_timeout_seconds)
        await self.aggregator.cancel_pending()

        clients = [
            self.aggregator.primary,
            self.aggregator.fallback,
            self.insights.coingecko,
            self.insights.fear_greed_client,
            self.insights.news_client,
        ]
        closed: list[object] = []
        for client in clients:
            if client is None or any(client is c for c in closed):
                continue
            closed.append(client)
            await client.aclose()  # type: ignore[attr-defined]
        logger.info("Market feed closed")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
