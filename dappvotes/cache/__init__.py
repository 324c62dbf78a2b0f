"""Cache implementations package."""

from dappvotes.cache.memory import MemoryCacheBackend
from dappvotes.cache.redis import RedisCacheBackend

__all__ = [
    "MemoryCacheBackend",
    "RedisCacheBackend",
]
