"""Cache backends and the series cache store."""

from tidewatch.infrastructure.cache.backends import InMemoryCacheBackend, LocalFileCacheBackend
from tidewatch.infrastructure.cache.store import SPOT_KEY, SeriesCacheStore, series_key

__all__ = [
    "InMemoryCacheBackend",
    "LocalFileCacheBackend",
    "SPOT_KEY",
    "SeriesCacheStore",
    "series_key",
]
