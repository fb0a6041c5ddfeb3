"""
CoinGecko provider client.

The primary market-data source. Implements MarketDataProvider plus the
supplementary lookups used by the insights service (spot prices, price
history, trending coins).
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from src.coinfeed.adapters.coingecko.data import (
    CoinGeckoGlobal,
    CoinGeckoMarket,
    CoinGeckoMarketChart,
    CoinGeckoTrending,
)
from src.coinfeed.adapters.http import JsonHttpClient
from src.coinfeed.errors import DecodeError
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.insights import PricePoint, TrendingCoin
from src.coinfeed.model.query import CoinQuery

logger = logging.getLogger(__name__)

COINGECKO_URL = "https://api.coingecko.com/api/v3"

_MARKETS = TypeAdapter(list[CoinGeckoMarket])
_GLOBAL = TypeAdapter(CoinGeckoGlobal)
_SIMPLE_PRICE = TypeAdapter(dict[str, dict[str, float]])
_MARKET_CHART = TypeAdapter(CoinGeckoMarketChart)
_TRENDING = TypeAdapter(CoinGeckoTrending)


class CoinGeckoClient(JsonHttpClient):
    """Async client for the public CoinGecko v3 API."""

    provider_name = "coingecko"

    def __init__(
        self,
        base_url: str = COINGECKO_URL,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, http_client=http_client)

    @staticmethod
    def _market_params(query: CoinQuery) -> dict[str, Any]:
        return {
            "vs_currency": query.vs_currency,
            "order": query.order,
            "per_page": query.per_page,
            "page": query.page,
            "sparkline": str(query.sparkline).lower(),
            "price_change_percentage": ",".join(query.price_change_windows),
        }

    async def fetch_coins(self, query: CoinQuery) -> list[CoinRecord]:
        """Fetch one page of ``/coins/markets``."""
        payload = await self._get_json("/coins/markets", self._market_params(query))
        rows = self._decode(_MARKETS, payload, "markets")

        records: list[CoinRecord] = []
        skipped = 0
        for row in rows:
            if not row.is_complete:
                skipped += 1
                continue
            try:
                records.append(row.to_record())
            except ValidationError:
                skipped += 1

        if rows and not records:
            raise DecodeError(
                self.name, f"none of {len(rows)} market rows could be decoded"
            )
        if skipped:
            logger.warning(f"coingecko: skipped {skipped} incomplete market rows")
        return records

    async def fetch_global(self) -> GlobalSummary:
        """Fetch ``/global``."""
        payload = await self._get_json("/global")
        envelope = self._decode(_GLOBAL, payload, "global")
        if not envelope.data.has_currency("usd"):
            raise DecodeError(self.name, "global payload has no usd totals")
        return envelope.data.to_summary("usd")

    async def fetch_prices(
        self, coin_ids: Sequence[str], vs_currency: str = "usd"
    ) -> dict[str, float]:
        """
        Fetch spot prices for CoinGecko coin ids.

        Ids the upstream does not know are absent from the result.
        """
        if not coin_ids:
            return {}
        payload = await self._get_json(
            "/simple/price",
            {"ids": ",".join(coin_ids), "vs_currencies": vs_currency},
        )
        quotes = self._decode(_SIMPLE_PRICE, payload, "simple price")
        return {
            coin_id: quote[vs_currency]
            for coin_id, quote in quotes.items()
            if vs_currency in quote
        }

    async def fetch_history(
        self, coin_id: str, days: int, vs_currency: str = "usd"
    ) -> list[PricePoint]:
        """Fetch price history for the past ``days`` days."""
        payload = await self._get_json(
            f"/coins/{coin_id}/market_chart",
            {"vs_currency": vs_currency, "days": days},
        )
        chart = self._decode(_MARKET_CHART, payload, "market chart")
        return chart.to_points()

    async def fetch_trending(self) -> list[TrendingCoin]:
        """Fetch the trending search list."""
        payload = await self._get_json("/search/trending")
        return self._decode(_TRENDING, payload, "trending").to_trending()
