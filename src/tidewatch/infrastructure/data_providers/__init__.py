"""Upstream data providers."""

from tidewatch.infrastructure.data_providers.base import ResilientHttpProvider, looks_like_markup
from tidewatch.infrastructure.data_providers.coingecko import CoinGeckoSpotPriceProvider
from tidewatch.infrastructure.data_providers.fred import FredMacroeconomicProvider

__all__ = [
    "CoinGeckoSpotPriceProvider",
    "FredMacroeconomicProvider",
    "ResilientHttpProvider",
    "looks_like_markup",
]
