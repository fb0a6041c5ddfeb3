"""
Supplementary market insights.

Fear & greed index, trending coins, news headlines, price history and spot
prices. Each lookup is independent and best-effort: a provider failure is
logged, remembered in ``last_errors`` and reported as ``None``.
"""

import logging
from collections.abc import Awaitable, Sequence
from typing import TypeVar

from src.coinfeed.adapters.alternative import FearGreedClient
from src.coinfeed.adapters.coingecko import CoinGeckoClient
from src.coinfeed.adapters.cryptocompare import CryptoCompareNewsClient
from src.coinfeed.errors import ProviderError
from src.coinfeed.model.insights import (
    FearGreedHistory,
    NewsItem,
    PricePoint,
    TrendingCoin,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MarketInsights:
    """Read-only lookups shown beside the coin list."""

    def __init__(
        self,
        coingecko: CoinGeckoClient,
        fear_greed: FearGreedClient,
        news: CryptoCompareNewsClient,
        *,
        fear_greed_days: int = 30,
    ) -> None:
        self.coingecko = coingecko
        self.fear_greed_client = fear_greed
        self.news_client = news
        self.fear_greed_days = fear_greed_days
        self.last_errors: dict[str, str] = {}

    async def _attempt(self, what: str, call: Awaitable[T]) -> T | None:
        try:
            result = await call
        except ProviderError as e:
            logger.warning(f"Insight lookup '{what}' failed: {e}")
            self.last_errors[what] = str(e)
            return None
        self.last_errors.pop(what, None)
        return result

    async def fear_greed(self) -> FearGreedHistory | None:
        """Current, yesterday, last-week and last-month index readings."""
        return await self._attempt(
            "fear_greed", self.fear_greed_client.fetch_index(self.fear_greed_days)
        )

    async def trending(self) -> list[TrendingCoin] | None:
        return await self._attempt("trending", self.coingecko.fetch_trending())

    async def headlines(self, limit: int = 5) -> list[NewsItem] | None:
        """Latest headlines, at most ``limit``."""
        items = await self._attempt("headlines", self.news_client.fetch_news())
        return items[:limit] if items is not None else None

    async def price_history(
        self, provider_id: str, days: int = 7
    ) -> list[PricePoint] | None:
        """
        Price samples for a coin over the past ``days`` days.

        ``provider_id`` is the CoinGecko id carried on CoinRecord.provider_id.
        """
        return await self._attempt(
            "price_history", self.coingecko.fetch_history(provider_id, days)
        )

    async def current_prices(
        self, provider_ids: Sequence[str]
    ) -> dict[str, float] | None:
        return await self._attempt(
            "current_prices", self.coingecko.fetch_prices(provider_ids)
        )
