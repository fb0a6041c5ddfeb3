"""
CoinPaprika REST API Pydantic Models.

Raw ``/tickers`` and ``/global`` payloads and their conversion into domain
models. CoinPaprika reports dominance in percent already, and only for
bitcoin.
"""

from pydantic import BaseModel, ConfigDict

from src.coinfeed.model.coin import CoinRecord, coin_identity
from src.coinfeed.model.global_summary import GlobalSummary


class PaprikaQuote(BaseModel):
    """One currency quote inside a ticker."""

    price: float | None = None
    volume_24h: float | None = None
    market_cap: float | None = None
    percent_change_24h: float | None = None
    percent_change_1h: float | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_complete(self) -> bool:
        return None not in (
            self.price,
            self.volume_24h,
            self.market_cap,
            self.percent_change_24h,
        )


class PaprikaTicker(BaseModel):
    """One row of ``/tickers``."""

    id: str
    name: str
    symbol: str
    rank: int = 0
    quotes: dict[str, PaprikaQuote]

    model_config = ConfigDict(extra="ignore")

    def quote(self, currency: str) -> PaprikaQuote | None:
        return self.quotes.get(currency.upper())

    @property
    def sort_rank(self) -> int:
        """Unranked tickers (rank 0) go after every ranked one."""
        return self.rank if self.rank > 0 else 1_000_000_000

    def to_record(self, currency: str = "usd") -> CoinRecord | None:
        """
        Convert to the domain model.

        Returns None when the quote for ``currency`` is missing or
        incomplete. Paprika has no sparkline or icon.
        """
        quote = self.quote(currency)
        if quote is None or not quote.is_complete:
            return None

        return CoinRecord(
            id=coin_identity(self.symbol),
            symbol=self.symbol,
            display_name=self.name,
            price=quote.price,  # type: ignore[arg-type]
            daily_change_percent=quote.percent_change_24h,  # type: ignore[arg-type]
            hourly_change_percent=quote.percent_change_1h,
            volume_24h=quote.volume_24h,  # type: ignore[arg-type]
            market_cap=quote.market_cap,  # type: ignore[arg-type]
            provider_id=self.id,
        )


class PaprikaGlobal(BaseModel):
    """Body of ``/global``."""

    market_cap_usd: float
    volume_24h_usd: float
    bitcoin_dominance_percentage: float
    market_cap_change_24h: float | None = None

    model_config = ConfigDict(extra="ignore")

    def to_summary(self) -> GlobalSummary:
        return GlobalSummary(
            total_market_cap_usd=self.market_cap_usd,
            total_volume_usd=self.volume_24h_usd,
            market_cap_percent_by_asset={"btc": self.bitcoin_dominance_percentage},
            market_cap_change_percent_24h=self.market_cap_change_24h,
        )
