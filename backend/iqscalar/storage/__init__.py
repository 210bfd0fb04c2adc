"""
Key-value storage backends for per-user assessment state.
"""
from .backends import InMemoryStorage, KeyValueStorage, RedisStorage, StorageError

__all__ = ["KeyValueStorage", "InMemoryStorage", "RedisStorage", "StorageError"]
