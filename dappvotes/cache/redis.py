"""Redis cache backend implementation."""

import json
import logging
from typing import Any

import redis.asyncio as redis

from dappvotes.constants import CACHE_NAMESPACE
from dappvotes.core.cache import CacheBackend
from dappvotes.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackend):
    """Redis-based persistent cache backend.

    Read and write failures are logged and reported as misses so a broken
    cache never takes the chain reads down with it.
    """

    def __init__(self, redis_url: str) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Redis connection URL.
        """
        self._redis_url = redis_url
        self._client: Any = None

    async def _get_client(self) -> Any:
        """Get or create Redis client."""
        if self._client is None:
            try:
                self._client = redis.from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
            except Exception as e:
                raise CacheError(f"Failed to connect to Redis: {e}", "connect") from e
        return self._client

    async def get(self, key: str) -> Any | None:
        """Retrieve a value from Redis."""
        data = None
        try:
            client = await self._get_client()
            data = await client.get(key)
            if data is None:
                return None
            return json.loads(data)
        except json.JSONDecodeError:
            return data
        except Exception as e:
            logger.warning(f"Redis GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> bool:
        """Store a value in Redis without expiry."""
        try:
            client = await self._get_client()
            await client.set(key, json.dumps(value, default=str))
            return True
        except Exception as e:
            logger.warning(f"Redis SET error for key {key}: {e}")
            return False

    async def set_many(self, items: dict[str, Any]) -> bool:
        """Store several values in one MSET round trip."""
        try:
            client = await self._get_client()
            await client.mset(
                {key: json.dumps(value, default=str) for key, value in items.items()}
            )
            return True
        except Exception as e:
            logger.warning(f"Redis MSET error for keys {list(items)}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key from Redis."""
        try:
            client = await self._get_client()
            result = await client.delete(key)
            return result > 0
        except Exception as e:
            logger.warning(f"Redis DELETE error for key {key}: {e}")
            return False

    async def exists(self, key: str) -> bool:
        """Check if a key exists in Redis."""
        try:
            client = await self._get_client()
            return await client.exists(key) > 0
        except Exception as e:
            logger.warning(f"Redis EXISTS error for key {key}: {e}")
            return False

    async def clear(self) -> bool:
        """Clear all DappVotes keys from Redis."""
        try:
            client = await self._get_client()
            cursor = 0
            while True:
                cursor, keys = await client.scan(
                    cursor, match=f"{CACHE_NAMESPACE}:*", count=100
                )
                if keys:
                    await client.delete(*keys)
                if cursor == 0:
                    break
            return True
        except Exception as e:
            logger.warning(f"Redis CLEAR error: {e}")
            return False

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            client = await self._get_client()
            return await client.ping()
        except Exception:
            return False
