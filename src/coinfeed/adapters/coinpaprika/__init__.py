"""CoinPaprika adapter (fallback provider)."""

from src.coinfeed.adapters.coinpaprika.client import COINPAPRIKA_URL, CoinPaprikaClient

__all__ = ["COINPAPRIKA_URL", "CoinPaprikaClient"]
