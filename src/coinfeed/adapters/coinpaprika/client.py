"""CoinPaprika provider client, used as the fallback market-data source."""

import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from src.coinfeed.adapters.coinpaprika.data import PaprikaGlobal, PaprikaTicker
from src.coinfeed.adapters.http import JsonHttpClient
from src.coinfeed.errors import DecodeError
from src.coinfeed.model.coin import CoinRecord
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.query import CoinQuery

logger = logging.getLogger(__name__)

COINPAPRIKA_URL = "https://api.coinpaprika.com/v1"

_TICKERS = TypeAdapter(list[PaprikaTicker])
_GLOBAL = TypeAdapter(PaprikaGlobal)


class CoinPaprikaClient(JsonHttpClient):
    """
    Async client for the public CoinPaprika v1 API.

    Listing pages are addressed with ``limit``/``offset`` and re-ranked
    locally, since the upstream does not guarantee rank order.
    """

    provider_name = "coinpaprika"

    def __init__(
        self,
        base_url: str = COINPAPRIKA_URL,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, http_client=http_client)

    async def fetch_coins(self, query: CoinQuery) -> list[CoinRecord]:
        payload = await self._get_json(
            "/tickers", {"limit": query.per_page, "offset": query.offset}
        )
        tickers = self._decode(_TICKERS, payload, "tickers")
        tickers.sort(key=lambda t: t.sort_rank)

        records: list[CoinRecord] = []
        skipped = 0
        for ticker in tickers[: query.per_page]:
            try:
                record = ticker.to_record(query.vs_currency)
            except ValidationError:
                record = None
            if record is None:
                skipped += 1
                continue
            records.append(record)

        if tickers and not records:
            raise DecodeError(
                self.name, f"none of {len(tickers)} tickers had a usable quote"
            )
        if skipped:
            logger.warning(
                f"coinpaprika: skipped {skipped} tickers without a usable quote"
            )
        return records

    async def fetch_global(self) -> GlobalSummary:
        payload = await self._get_json("/global")
        return self._decode(_GLOBAL, payload, "global").to_summary()
