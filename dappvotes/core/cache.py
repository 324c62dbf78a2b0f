"""Abstract cache backend interface."""

from abc import ABC, abstractmethod
from typing import Any

from dappvotes.constants import CACHE_NAMESPACE


class CacheBackend(ABC):
    """Abstract base class for cache backends.

    Backends store JSON-compatible values. Entries never expire on their own;
    freshness is decided by the cache store from the sibling timestamp entry.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key: The namespaced cache key.

        Returns:
            The cached value if found, None otherwise.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> bool:
        """
        Store a value in the cache, overwriting any previous value.

        Args:
            key: The namespaced cache key.
            value: A JSON-compatible value.

        Returns:
            True if the value was stored successfully.
        """
        ...

    @abstractmethod
    async def set_many(self, items: dict[str, Any]) -> bool:
        """Store several values together (payload plus its timestamp)."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key. Returns False if it didn't exist."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if a key exists in the cache."""
        ...

    @abstractmethod
    async def clear(self) -> bool:
        """
        Clear all DappVotes keys from the cache.

        Returns:
            True if the cache was cleared successfully.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the cache connection."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Check if the cache backend is healthy."""
        ...

    def make_key(self, key: str) -> str:
        """
        Create a namespaced cache key.

        Args:
            key: Logical key such as ``polls`` or ``poll_3``.

        Returns:
            A formatted cache key.
        """
        return f"{CACHE_NAMESPACE}:{key}"
