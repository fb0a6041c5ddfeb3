"""
CoinGecko REST API Pydantic Models.

This module implements Pydantic models that parse CoinGecko responses and
convert them into domain models.

Key design principles:
- Pydantic models inherit ONLY from BaseModel
- Raw fields store provider data as-is (with _raw suffix where renamed)
- Conversion methods produce domain models; nothing else leaves this module
- Unknown fields are ignored, missing required fields are decode errors
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.coinfeed.model.coin import CoinRecord, coin_identity
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.insights import PricePoint, TrendingCoin


# Markets endpoint
class CoinGeckoSparkline(BaseModel):
    """Seven-day sparkline attached to a market row."""

    price: list[float] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class CoinGeckoMarket(BaseModel):
    """
    One row of ``/coins/markets``.

    Numeric fields are nullable upstream for thinly traded coins.
    """

    id: str
    symbol: str
    name: str
    image: str | None = None
    price_raw: float | None = Field(alias="current_price", default=None)
    market_cap_raw: float | None = Field(alias="market_cap", default=None)
    total_volume_raw: float | None = Field(alias="total_volume", default=None)
    change_24h_raw: float | None = Field(
        alias="price_change_percentage_24h", default=None
    )
    change_24h_in_currency_raw: float | None = Field(
        alias="price_change_percentage_24h_in_currency", default=None
    )
    change_1h_raw: float | None = Field(
        alias="price_change_percentage_1h_in_currency", default=None
    )
    sparkline_in_7d: CoinGeckoSparkline | None = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @property
    def daily_change(self) -> float | None:
        """24h change, preferring the plain field over the windowed one."""
        if self.change_24h_raw is not None:
            return self.change_24h_raw
        return self.change_24h_in_currency_raw

    @property
    def is_complete(self) -> bool:
        """Whether every field a CoinRecord requires is present."""
        return None not in (
            self.price_raw,
            self.market_cap_raw,
            self.total_volume_raw,
            self.daily_change,
        )

    def to_record(self) -> CoinRecord:
        """Convert to the domain model. Only valid when ``is_complete``."""
        sparkline = None
        if self.sparkline_in_7d and self.sparkline_in_7d.price:
            sparkline = tuple(self.sparkline_in_7d.price)

        return CoinRecord(
            id=coin_identity(self.symbol),
            symbol=self.symbol,
            display_name=self.name,
            price=self.price_raw,  # type: ignore[arg-type]
            daily_change_percent=self.daily_change,  # type: ignore[arg-type]
            hourly_change_percent=self.change_1h_raw,
            volume_24h=self.total_volume_raw,  # type: ignore[arg-type]
            market_cap=self.market_cap_raw,  # type: ignore[arg-type]
            sparkline=sparkline,
            icon_url=self.image,
            provider_id=self.id,
        )


# Global endpoint
class CoinGeckoGlobalData(BaseModel):
    """Body of ``/global`` under its ``data`` key."""

    total_market_cap: dict[str, float]
    total_volume: dict[str, float]
    market_cap_percentage: dict[str, float]
    market_cap_change_percentage_24h_usd: float | None = None

    model_config = ConfigDict(extra="ignore")

    def has_currency(self, currency: str) -> bool:
        return currency in self.total_market_cap and currency in self.total_volume

    def to_summary(self, currency: str = "usd") -> GlobalSummary:
        """
        Convert to the domain model.

        ``market_cap_percentage`` is already in percent.
        """
        return GlobalSummary(
            total_market_cap_usd=self.total_market_cap[currency],
            total_volume_usd=self.total_volume[currency],
            market_cap_percent_by_asset=self.market_cap_percentage,
            market_cap_change_percent_24h=self.market_cap_change_percentage_24h_usd,
        )


class CoinGeckoGlobal(BaseModel):
    """Envelope of ``/global``."""

    data: CoinGeckoGlobalData

    model_config = ConfigDict(extra="ignore")


# Market chart endpoint
class CoinGeckoMarketChart(BaseModel):
    """Body of ``/coins/{id}/market_chart``; timestamps are epoch milliseconds."""

    prices: list[tuple[float, float]]

    model_config = ConfigDict(extra="ignore")

    def to_points(self) -> list[PricePoint]:
        return [
            PricePoint(
                timestamp=datetime.fromtimestamp(ms / 1000.0, tz=UTC),
                price=price,
            )
            for ms, price in self.prices
        ]


# Trending endpoint
class CoinGeckoTrendingItem(BaseModel):
    """Coin entry inside ``/search/trending``."""

    id: str
    symbol: str
    name: str
    market_cap_rank: int | None = None
    price_btc: float | None = None

    model_config = ConfigDict(extra="ignore")


class CoinGeckoTrendingWrapper(BaseModel):
    item: CoinGeckoTrendingItem

    model_config = ConfigDict(extra="ignore")


class CoinGeckoTrending(BaseModel):
    """Body of ``/search/trending``."""

    coins: list[CoinGeckoTrendingWrapper]

    model_config = ConfigDict(extra="ignore")

    def to_trending(self) -> list[TrendingCoin]:
        return [
            TrendingCoin(
                provider_id=wrapper.item.id,
                symbol=wrapper.item.symbol.upper(),
                name=wrapper.item.name,
                market_cap_rank=wrapper.item.market_cap_rank,
                price_btc=wrapper.item.price_btc,
            )
            for wrapper in self.coins
        ]
