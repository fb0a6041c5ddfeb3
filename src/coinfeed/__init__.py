"""Market data aggregation package."""

from src.coinfeed.model import MarketBoard, MarketSnapshot
from src.coinfeed.service import MarketAggregator, MarketFeed, create_aggregator

__all__ = [
    "MarketAggregator",
    "MarketBoard",
    "MarketFeed",
    "MarketSnapshot",
    "create_aggregator",
]
