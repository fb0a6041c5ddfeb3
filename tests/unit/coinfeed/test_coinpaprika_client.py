"""Tests for the CoinPaprika fallback client."""

import httpx
import pytest

from src.coinfeed.adapters.coinpaprika import CoinPaprikaClient
from src.coinfeed.errors import DecodeError
from src.coinfeed.model.query import CoinQuery
from tests.unit.coinfeed.helpers import json_route, load_fixture, mock_client

BASE_URL = "https://paprika.test/v1"


class TestCoinPaprikaClient:
    """Test ticker and global decoding."""

    @pytest.mark.asyncio
    async def test_tickers_are_ranked_and_normalized(self) -> None:
        # Given: Tickers out of rank order, one without a USD quote
        client = CoinPaprikaClient(
            BASE_URL,
            http_client=mock_client(
                json_route({"/tickers": load_fixture("coinpaprika/tickers.json")})
            ),
        )

        # When: Fetching a page
        coins = await client.fetch_coins(CoinQuery())

        # Then: Ranked, quote-less row skipped, ids match the primary's scheme
        assert [c.id for c in coins] == ["btc", "eth"]
        assert coins[0].provider_id == "btc-bitcoin"
        assert coins[0].hourly_change_percent is None
        assert coins[1].hourly_change_percent == -0.1
        assert coins[0].icon_url is None

    @pytest.mark.asyncio
    async def test_page_maps_to_limit_and_offset(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        client = CoinPaprikaClient(BASE_URL, http_client=mock_client(handler))

        await client.fetch_coins(CoinQuery(per_page=25, page=3))

        assert seen[0].url.params["limit"] == "25"
        assert seen[0].url.params["offset"] == "50"

    @pytest.mark.asyncio
    async def test_result_trimmed_to_page_size(self) -> None:
        client = CoinPaprikaClient(
            BASE_URL,
            http_client=mock_client(
                json_route({"/tickers": load_fixture("coinpaprika/tickers.json")})
            ),
        )

        coins = await client.fetch_coins(CoinQuery(per_page=1))

        assert [c.symbol for c in coins] == ["BTC"]

    @pytest.mark.asyncio
    async def test_global_leaves_eth_dominance_absent(self) -> None:
        client = CoinPaprikaClient(
            BASE_URL,
            http_client=mock_client(
                json_route({"/global": load_fixture("coinpaprika/global.json")})
            ),
        )

        summary = await client.fetch_global()

        assert summary.total_market_cap_usd == 2.4e12
        assert summary.dominance("btc") == 52.7
        assert summary.dominance("eth") is None
        assert summary.market_cap_change_percent_24h is None

    @pytest.mark.asyncio
    async def test_global_missing_field_is_decode_error(self) -> None:
        payload = load_fixture("coinpaprika/global.json")
        del payload["bitcoin_dominance_percentage"]
        client = CoinPaprikaClient(
            BASE_URL, http_client=mock_client(json_route({"/global": payload}))
        )

        with pytest.raises(DecodeError):
            await client.fetch_global()

    @pytest.mark.asyncio
    async def test_tickers_without_any_quote_is_decode_error(self) -> None:
        tickers = [
            t for t in load_fixture("coinpaprika/tickers.json") if not t["quotes"]
        ]
        client = CoinPaprikaClient(
            BASE_URL, http_client=mock_client(json_route({"/tickers": tickers}))
        )

        with pytest.raises(DecodeError, match="none of 1 tickers"):
            await client.fetch_coins(CoinQuery())
