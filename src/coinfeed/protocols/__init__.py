"""Market data protocols."""

from src.coinfeed.protocols.market import (
    MarketDataProvider,
    SnapshotPart,
    SnapshotStore,
)

__all__ = [
    "MarketDataProvider",
    "SnapshotPart",
    "SnapshotStore",
]
