"""Aggregation, scheduling and insight services."""

from src.coinfeed.service.aggregator import MarketAggregator
from src.coinfeed.service.insights import MarketInsights
from src.coinfeed.service.market_feed import (
    MarketFeed,
    create_aggregator,
    create_provider,
)
from src.coinfeed.service.scheduler import RefreshScheduler

__all__ = [
    "MarketAggregator",
    "MarketFeed",
    "MarketInsights",
    "RefreshScheduler",
    "create_aggregator",
    "create_provider",
]
