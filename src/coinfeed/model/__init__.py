"""Market data models."""

from src.coinfeed.model.board import MarketBoard
from src.coinfeed.model.coin import CoinRecord, coin_identity, dedupe_coins
from src.coinfeed.model.global_summary import GlobalSummary
from src.coinfeed.model.insights import (
    FearGreedHistory,
    FearGreedReading,
    NewsItem,
    PricePoint,
    TrendingCoin,
)
from src.coinfeed.model.preferences import UserPreferences
from src.coinfeed.model.query import CoinQuery
from src.coinfeed.model.snapshot import MarketSnapshot
from src.coinfeed.model.view import ViewState

__all__ = [
    "CoinQuery",
    "CoinRecord",
    "FearGreedHistory",
    "FearGreedReading",
    "GlobalSummary",
    "MarketBoard",
    "MarketSnapshot",
    "NewsItem",
    "PricePoint",
    "TrendingCoin",
    "UserPreferences",
    "ViewState",
    "coin_identity",
    "dedupe_coins",
]
