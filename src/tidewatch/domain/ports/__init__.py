"""Ports (interfaces) implemented by the infrastructure layer."""

from tidewatch.domain.ports.cache import CacheBackend
from tidewatch.domain.ports.data_providers import MacroeconomicDataProvider, SpotPriceProvider

__all__ = ["CacheBackend", "MacroeconomicDataProvider", "SpotPriceProvider"]
