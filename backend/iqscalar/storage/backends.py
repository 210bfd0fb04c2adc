"""
Storage backends for per-user assessment state.

Provides an abstract key-value interface and implementations for storing
exposure records, daily quiz answers, test history, achievements and
in-flight sessions. Values must be JSON-serializable so the same state can
live in memory or in Redis.
"""
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import redis

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """
    Raised when a backend cannot read or write a key.

    Callers doing a read-modify-write must abort on this error rather than
    treat the record as empty and overwrite it.
    """


class KeyValueStorage(ABC):
    """
    Abstract storage interface for assessment state.

    This interface allows different storage backends to be used,
    making it easy to switch from in-memory to Redis, etc.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Get value for a key.

        Args:
            key: Storage key

        Returns:
            Stored value or None if not found
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Set value for a key with optional TTL.

        Args:
            key: Storage key
            value: Value to store (JSON-serializable)
            ttl: Time-to-live in seconds (None = no expiration)
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Delete a key.

        Args:
            key: Storage key to delete
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all stored data."""
        pass

    @abstractmethod
    def lock(self, key: str) -> Any:
        """
        Return a context manager holding an exclusive lock on ``key``.

        Used to guard read-modify-write sequences on per-user records so two
        concurrent requests for the same user cannot both act on a stale value.
        """
        pass

    def close(self) -> None:
        """Release backend resources. No-op by default."""


class InMemoryStorage(KeyValueStorage):
    """
    In-memory storage backend.

    Uses Python dictionaries with TTL support via expiration timestamps.
    Thread-safe with locks for concurrent access.

    Note: Data is lost on process restart. For production with multiple
    workers, use Redis.
    """

    def __init__(self, cleanup_interval: int = 60):
        """
        Initialize in-memory storage.

        Args:
            cleanup_interval: How often to cleanup expired entries (seconds)
        """
        self._data: Dict[str, Any] = {}
        self._expiry: Dict[str, float] = {}
        self._lock = threading.RLock()
        # key -> [lock, number of threads holding or waiting on it]
        self._key_locks: Dict[str, List[Any]] = {}
        self._cleanup_interval = cleanup_interval
        self._last_cleanup = time.time()

    def get(self, key: str) -> Optional[Any]:
        """Get value for a key, returning None if expired or not found."""
        with self._lock:
            self._maybe_cleanup()

            if key not in self._data:
                return None

            if key in self._expiry and time.time() > self._expiry[key]:
                del self._data[key]
                del self._expiry[key]
                return None

            # Round-trip through JSON so callers never share mutable state
            # with the store, matching the Redis backend's semantics.
            return json.loads(self._data[key])

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Set value for a key with optional TTL."""
        serialized = json.dumps(value)
        with self._lock:
            self._data[key] = serialized

            if ttl is not None:
                self._expiry[key] = time.time() + ttl
            elif key in self._expiry:
                del self._expiry[key]

    def delete(self, key: str) -> None:
        """Delete a key."""
        with self._lock:
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    def clear(self) -> None:
        """Clear all stored data."""
        with self._lock:
            self._data.clear()
            self._expiry.clear()

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """
        Per-key reentrant lock.

        The entry for ``key`` is dropped once no thread holds or waits on it,
        so short-lived keys such as sessions do not accumulate locks.
        """
        with self._lock:
            entry = self._key_locks.get(key)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._key_locks[key] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[key]

    def _maybe_cleanup(self) -> None:
        """Cleanup expired entries if cleanup interval has passed."""
        current_time = time.time()

        if current_time - self._last_cleanup < self._cleanup_interval:
            return

        self._last_cleanup = current_time
        expired_keys = [
            key for key, expiry in self._expiry.items() if current_time > expiry
        ]

        for key in expired_keys:
            self._data.pop(key, None)
            del self._expiry[key]


class RedisStorage(KeyValueStorage):
    """
    Redis storage backend.

    Shares assessment state across multiple workers/servers.

    Features:
    - Connection pooling for efficient resource usage
    - JSON serialization for cross-platform compatibility
    - Namespaced keys to avoid collisions with other Redis data
    - Redis locks for per-user read-modify-write sequences
    - Errors are logged and raised as StorageError
    """

    # Key prefix to namespace assessment data in Redis
    KEY_PREFIX = "iqscalar:"

    # Upper bound on how long a per-user lock may be held (seconds)
    LOCK_TIMEOUT = 10

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: Optional[str] = None,
        connection_pool_size: int = 10,
        socket_timeout: float = 5.0,
        socket_connect_timeout: float = 5.0,
        retry_on_timeout: bool = True,
    ):
        """
        Initialize Redis storage with connection pooling.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0
                       or redis://:password@host:port/db)
            key_prefix: Optional custom prefix for keys (defaults to "iqscalar:")
            connection_pool_size: Maximum number of connections in the pool
            socket_timeout: Timeout for socket operations in seconds
            socket_connect_timeout: Timeout for socket connections in seconds
            retry_on_timeout: Whether to retry on timeout errors
        """
        self._key_prefix = key_prefix or self.KEY_PREFIX

        self._pool = redis.ConnectionPool.from_url(
            redis_url,
            max_connections=connection_pool_size,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_connect_timeout,
            retry_on_timeout=retry_on_timeout,
        )
        self._redis = redis.Redis(connection_pool=self._pool)

        try:
            self._redis.ping()
            logger.info("Successfully connected to Redis for assessment storage")
        except redis.ConnectionError as e:
            logger.warning(
                f"Could not connect to Redis on startup: {e}. "
                "Assessment storage will fail until Redis is available."
            )

    def _make_key(self, key: str) -> str:
        """Create a namespaced key to avoid collisions."""
        return f"{self._key_prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from Redis.

        Returns:
            Stored value or None if not found

        Raises:
            StorageError: On a Redis error or an undecodable stored value
        """
        try:
            value = self._redis.get(self._make_key(key))
            if value is None:
                return None
            return json.loads(value.decode("utf-8"))  # type: ignore[union-attr]
        except redis.RedisError as e:
            logger.error(f"Redis error during get({key}): {e}")
            raise StorageError(f"Could not read {key}") from e
        except ValueError as e:
            logger.error(f"JSON decode error during get({key}): {e}")
            raise StorageError(f"Stored value for {key} is not valid JSON") from e

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Set value in Redis with optional TTL.

        Raises:
            StorageError: On a Redis error or an unserializable value
        """
        try:
            serialized = json.dumps(value)
            full_key = self._make_key(key)

            if ttl is not None and ttl > 0:
                self._redis.setex(full_key, ttl, serialized)
            else:
                self._redis.set(full_key, serialized)
        except redis.RedisError as e:
            logger.error(f"Redis error during set({key}): {e}")
            raise StorageError(f"Could not write {key}") from e
        except (TypeError, ValueError) as e:
            logger.error(f"JSON encode error during set({key}): {e}")
            raise StorageError(f"Value for {key} is not JSON-serializable") from e

    def delete(self, key: str) -> None:
        """Delete a key from Redis."""
        try:
            self._redis.delete(self._make_key(key))
        except redis.RedisError as e:
            logger.error(f"Redis error during delete({key}): {e}")
            raise StorageError(f"Could not delete {key}") from e

    def clear(self) -> None:
        """
        Clear all assessment keys.

        Only clears keys with the assessment prefix, not the entire database.
        """
        try:
            pattern = f"{self._key_prefix}*"
            cursor: int = 0
            while True:
                result = self._redis.scan(cursor, match=pattern, count=100)
                cursor, keys = result  # type: ignore[misc]
                if keys:
                    self._redis.delete(*keys)
                if cursor == 0:
                    break
        except redis.RedisError as e:
            logger.error(f"Redis error during clear(): {e}")
            raise StorageError("Could not clear assessment keys") from e

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """Distributed lock on ``key`` backed by a Redis lock."""
        with self._redis.lock(
            self._make_key(f"lock:{key}"), timeout=self.LOCK_TIMEOUT
        ):
            yield

    def is_connected(self) -> bool:
        """
        Check if Redis connection is healthy.

        Returns:
            True if connected and responsive, False otherwise
        """
        try:
            self._redis.ping()
            return True
        except redis.RedisError:
            return False

    def close(self) -> None:
        """
        Close the Redis connection pool.

        Should be called when shutting down the application.
        """
        self._pool.disconnect()
