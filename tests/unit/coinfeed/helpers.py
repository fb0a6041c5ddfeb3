"""Test helpers for coinfeed tests."""

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from src.coinfeed.errors import NetworkError
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.query import CoinQuery


def load_fixture(filename: str) -> Any:
    """
    Load a JSON fixture file.

    Args:
        filename: Relative path from fixtures directory

    Returns:
        Parsed JSON data

    Example:
        markets = load_fixture("coingecko/markets.json")
    """
    fixtures_dir = Path(__file__).parent.parent.parent / "fixtures"
    fixture_path = fixtures_dir / filename

    with fixture_path.open() as f:
        return json.load(f)


class CoinBuilder:
    """Builder for creating test coin records."""

    def __init__(self, symbol: str = "BTC") -> None:
        """Initialize with sensible defaults."""
        self._data: dict[str, Any] = {
            "id": symbol.lower(),
            "symbol": symbol,
            "display_name": symbol.title(),
            "price": 100.0,
            "daily_change_percent": 1.0,
            "hourly_change_percent": 0.1,
            "volume_24h": 1_000_000.0,
            "market_cap": 1_000_000_000.0,
        }

    def with_name(self, name: str) -> "CoinBuilder":
        self._data["display_name"] = name
        return self

    def with_price(self, price: float) -> "CoinBuilder":
        self._data["price"] = price
        return self

    def with_cap(self, market_cap: float) -> "CoinBuilder":
        self._data["market_cap"] = market_cap
        return self

    def with_change(self, daily: float) -> "CoinBuilder":
        self._data["daily_change_percent"] = daily
        return self

    def with_hourly(self, hourly: float | None) -> "CoinBuilder":
        self._data["hourly_change_percent"] = hourly
        return self

    def with_volume(self, volume: float) -> "CoinBuilder":
        self._data["volume_24h"] = volume
        return self

    def favorite(self) -> "CoinBuilder":
        self._data["is_favorite"] = True
        return self

    def build(self) -> CoinRecord:
        return CoinRecord.model_validate(self._data)


def coin(symbol: str, cap: float = 1e9, change: float = 1.0) -> CoinRecord:
    """Shorthand for a coin with a given market cap and 24h change."""
    return CoinBuilder(symbol).with_cap(cap).with_change(change).build()


def symbols(coins: Any) -> list[str]:
    return [c.symbol for c in coins]


def global_summary(btc: float = 52.0, total: float = 2.4e12) -> GlobalSummary:
    return GlobalSummary(
        total_market_cap_usd=total,
        total_volume_usd=8.5e10,
        market_cap_percent_by_asset={"btc": btc, "eth": 15.0},
        market_cap_change_percent_24h=1.2,
    )


class FakeProvider:
    """
    Scripted MarketDataProvider.

    Each fetch pops the next scripted result; an exception instance is
    raised instead of returned. With ``gate`` set, fetches block until the
    gate is opened so tests can observe in-flight behavior.
    """

    def __init__(
        self,
        name: str = "fake",
        coins: list[Any] | None = None,
        summaries: list[Any] | None = None,
    ) -> None:
        self._name = name
        self.coin_results: list[Any] = list(coins or [])
        self.global_results: list[Any] = list(summaries or [])
        self.coin_calls = 0
        self.global_calls = 0
        self.queries: list[CoinQuery] = []
        self.gate: asyncio.Event | None = None

    @property
    def name(self) -> str:
        return self._name

    def hold(self) -> asyncio.Event:
        """Make subsequent fetches wait for the returned event."""
        self.gate = asyncio.Event()
        return self.gate

    async def _next(self, results: list[Any]) -> Any:
        if self.gate is not None:
            await self.gate.wait()
        if not results:
            raise NetworkError(self._name, "no scripted result")
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_coins(self, query: CoinQuery) -> list[CoinRecord]:
        self.coin_calls += 1
        self.queries.append(query)
        return list(await self._next(self.coin_results))

    async def fetch_global(self) -> GlobalSummary:
        self.global_calls += 1
        result: GlobalSummary = await self._next(self.global_results)
        return result


def failing_provider(name: str = "down") -> FakeProvider:
    """Provider whose every call fails with a network error."""
    error = NetworkError(name, "connection refused")
    return FakeProvider(name, coins=[error], summaries=[error])


def mock_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def json_route(
    routes: dict[str, Any], status_code: int = 200
) -> Callable[[httpx.Request], httpx.Response]:
    """
    Handler answering by URL path suffix.

    Unmatched paths answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        for suffix, body in routes.items():
            if request.url.path.endswith(suffix):
                return httpx.Response(status_code, json=body)
        return httpx.Response(404, json={"error": "not found"})

    return handler
