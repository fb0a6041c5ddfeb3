"""
Coin record domain model.

One tradable asset's market snapshot, normalized from whichever provider
supplied it. Identity is derived from the ticker symbol so that favorite
and sort state survive provider switches and wholesale list replacement.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.coinfeed.domain.primitives import Percentage, Price, UsdAmount


def coin_identity(symbol: str) -> str:
    """Provider-independent coin id for a ticker symbol."""
    return symbol.strip().lower()


class CoinRecord(BaseModel):
    """
    Normalized market data for a single coin.

    The model is frozen; use ``with_favorite`` to derive an updated copy.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Lowercased ticker symbol")
    symbol: str = Field(..., min_length=1, max_length=20)
    display_name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0.0, description="Price in USD")
    daily_change_percent: float
    hourly_change_percent: float | None = None
    volume_24h: float = Field(..., ge=0.0)
    market_cap: float = Field(..., ge=0.0)
    is_favorite: bool = False
    sparkline: tuple[float, ...] | None = None
    icon_url: str | None = None
    provider_id: str | None = Field(
        default=None, description="Upstream id, used for follow-up lookups"
    )

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return v.lower()

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def identity_for(cls, symbol: str) -> str:
        """Id a record with this symbol would carry."""
        return coin_identity(symbol)

    def with_favorite(self, is_favorite: bool) -> "CoinRecord":
        """Copy of this record with the favorite flag set."""
        if is_favorite == self.is_favorite:
            return self
        return self.model_copy(update={"is_favorite": is_favorite})

    def matches(self, text: str) -> bool:
        """Case-insensitive substring match on symbol or name."""
        needle = text.strip().lower()
        if not needle:
            return True
        return needle in self.symbol.lower() or needle in self.display_name.lower()

    @property
    def price_primitive(self) -> Price:
        return Price(value=self.price, symbol=self.symbol)

    @property
    def daily_change(self) -> Percentage:
        return Percentage(value=self.daily_change_percent)

    @property
    def market_cap_amount(self) -> UsdAmount:
        return UsdAmount(value=self.market_cap)

    @property
    def volume_amount(self) -> UsdAmount:
        return UsdAmount(value=self.volume_24h)

    def format_summary(self) -> str:
        """Format a one-line, human-readable summary."""
        star = "*" if self.is_favorite else " "
        return (
            f"{star}{self.symbol:<6} {self.price_primitive.format_display():>14} "
            f"{self.daily_change.format_signed():>8} "
            f"cap {self.market_cap_amount.format_abbreviated()}"
        )


def dedupe_coins(coins: Iterable[CoinRecord]) -> list[CoinRecord]:
    """
    Drop records whose id was already seen, keeping the first.

    Listings arrive ordered by market cap, so the larger asset keeps the
    shared ticker.
    """
    seen: set[str] = set()
    unique: list[CoinRecord] = []
    for coin in coins:
        if coin.id in seen:
            continue
        seen.add(coin.id)
        unique.append(coin)
    return unique
