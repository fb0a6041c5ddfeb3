"""
Supplementary market insight models.

Read-only data shown alongside the coin list: the fear & greed index,
trending coins, news headlines and price history.
"""

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FearGreedReading(BaseModel):
    """One daily fear & greed index value (0 = extreme fear, 100 = extreme greed)."""

    value: int = Field(..., ge=0, le=100)
    classification: str
    timestamp: datetime

    model_config = ConfigDict(frozen=True)


class FearGreedHistory(BaseModel):
    """
    Daily readings, newest first.

    Offsets follow the upstream ordering: index 1 is yesterday, 6 a week
    ago, 29 a month ago.
    """

    readings: tuple[FearGreedReading, ...] = ()

    model_config = ConfigDict(frozen=True)

    def _at(self, index: int) -> FearGreedReading | None:
        return self.readings[index] if len(self.readings) > index else None

    @property
    def current(self) -> FearGreedReading | None:
        return self._at(0)

    @property
    def yesterday(self) -> FearGreedReading | None:
        return self._at(1)

    @property
    def last_week(self) -> FearGreedReading | None:
        return self._at(6)

    @property
    def last_month(self) -> FearGreedReading | None:
        return self._at(29)


class TrendingCoin(BaseModel):
    """A coin from the provider's trending search list."""

    provider_id: str
    symbol: str
    name: str
    market_cap_rank: int | None = None
    price_btc: float | None = Field(default=None, ge=0.0)

    model_config = ConfigDict(frozen=True)


class NewsItem(BaseModel):
    """A news headline."""

    title: str
    source: str
    url: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def has_link(self) -> bool:
        return bool(self.url)


class PricePoint(BaseModel):
    """One historical price sample."""

    timestamp: datetime
    price: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True)


def price_change_percent(points: Sequence[PricePoint]) -> float | None:
    """Percent change from the first to the last sample."""
    if len(points) < 2 or points[0].price == 0:
        return None
    return (points[-1].price - points[0].price) / points[0].price * 100.0
