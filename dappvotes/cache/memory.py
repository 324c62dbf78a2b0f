"""In-memory cache backend implementation."""

import asyncio
import copy
import logging
from typing import Any

from dappvotes.constants import CACHE_NAMESPACE
from dappvotes.core.cache import CacheBackend

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheBackend):
    """Process-local cache backend. Survives only as long as the process."""

    def __init__(self) -> None:
        self._store: dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        """Retrieve a copy of a value from memory."""
        async with self._lock:
            if key not in self._store:
                return None
            return copy.deepcopy(self._store[key])

    async def set(self, key: str, value: Any) -> bool:
        """Store a copy of a value in memory."""
        async with self._lock:
            self._store[key] = copy.deepcopy(value)
            return True

    async def set_many(self, items: dict[str, Any]) -> bool:
        """Store several values under one lock acquisition."""
        async with self._lock:
            for key, value in items.items():
                self._store[key] = copy.deepcopy(value)
            return True

    async def delete(self, key: str) -> bool:
        """Delete a key from memory."""
        async with self._lock:
            if key in self._store:
                del self._store[key]
                return True
            return False

    async def exists(self, key: str) -> bool:
        """Check if a key exists in memory."""
        async with self._lock:
            return key in self._store

    async def clear(self) -> bool:
        """Clear all DappVotes keys from memory."""
        async with self._lock:
            prefix = f"{CACHE_NAMESPACE}:"
            keys_to_delete = [k for k in self._store if k.startswith(prefix)]
            for key in keys_to_delete:
                del self._store[key]
            logger.debug(f"[MemoryCache] Cleared {len(keys_to_delete)} keys")
            return True

    async def close(self) -> None:
        """Clear the in-memory store."""
        async with self._lock:
            self._store.clear()

    async def ping(self) -> bool:
        """Memory cache is always available."""
        return True
