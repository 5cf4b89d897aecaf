"""Cache backend port."""

from abc import ABC, abstractmethod


class CacheBackend(ABC):
    """Synchronous string key-value storage scoped to one client."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def keys(self) -> list[str]:
        """All stored keys."""
