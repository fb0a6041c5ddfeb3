"""CoinGecko adapter (primary provider)."""

from src.coinfeed.adapters.coingecko.client import COINGECKO_URL, CoinGeckoClient

__all__ = ["COINGECKO_URL", "CoinGeckoClient"]
