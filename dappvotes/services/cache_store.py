"""Freshness-aware cache store over a cache backend."""

import logging
import time
from typing import Any, Callable

from dappvotes.constants import (
    CONTESTANTS_CACHE_PREFIX,
    POLL_CACHE_PREFIX,
    POLLS_CACHE_KEY,
    TIMESTAMP_SUFFIX,
)
from dappvotes.core.cache import CacheBackend

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_MS = 30_000


def poll_key(poll_id: int) -> str:
    """Logical key of a single poll."""
    return f"{POLL_CACHE_PREFIX}{poll_id}"


def contestants_key(poll_id: int) -> str:
    """Logical key of a poll's contestant list."""
    return f"{CONTESTANTS_CACHE_PREFIX}{poll_id}"


def polls_key() -> str:
    """Logical key of the poll list."""
    return POLLS_CACHE_KEY


def _now_ms() -> int:
    return int(time.time() * 1000)


class CacheStore:
    """
    Key-value store where every payload has a sibling write timestamp.

    ``load`` only returns fresh payloads; stale payloads stay in place and
    are reachable through ``load_stale`` as a fallback after a failed fetch.
    """

    def __init__(
        self,
        backend: CacheBackend,
        freshness_ms: int = DEFAULT_FRESHNESS_MS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """
        Initialize the store.

        Args:
            backend: Storage backend.
            freshness_ms: Maximum age of a fresh entry.
            clock: Current time in epoch milliseconds.
        """
        self._backend = backend
        self._freshness_ms = freshness_ms
        self._clock = clock

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def _keys(self, key: str) -> tuple[str, str]:
        return (
            self._backend.make_key(key),
            self._backend.make_key(f"{key}{TIMESTAMP_SUFFIX}"),
        )

    async def save(self, key: str, value: Any) -> bool:
        """Write a payload and the current instant. Last writer wins."""
        data_key, timestamp_key = self._keys(key)
        stored = await self._backend.set_many({data_key: value, timestamp_key: self._clock()})
        if not stored:
            logger.warning(f"[CacheStore] Failed to save {key}")
        return stored

    async def is_valid(self, key: str) -> bool:
        """True while the entry is younger than the freshness window."""
        _, timestamp_key = self._keys(key)
        written_at = await self._backend.get(timestamp_key)
        if written_at is None:
            return False
        try:
            age = self._clock() - int(written_at)
        except (TypeError, ValueError):
            logger.warning(f"[CacheStore] Unreadable timestamp for {key}: {written_at!r}")
            return False
        return age < self._freshness_ms

    async def load(self, key: str) -> Any | None:
        """Return the payload only while it is fresh."""
        if not await self.is_valid(key):
            return None
        data_key, _ = self._keys(key)
        return await self._backend.get(data_key)

    async def load_stale(self, key: str) -> Any | None:
        """Return the payload regardless of age."""
        data_key, _ = self._keys(key)
        return await self._backend.get(data_key)
