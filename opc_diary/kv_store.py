"""
Key-Value Store contract for the OPC Diary data store.

A thin, synchronous contract over a persistent string-keyed, string-valued
store scoped to one application namespace:

- get(key) -> value or None
- set(key, value) -> None, raising QuotaExceededError when capacity runs out
- remove(key) -> None

There are no transactions and no atomic multi-key writes. Two backends are
provided: a dict-backed store (the local storage analogue, also used in tests)
and a Redis-backed store for shared deployments.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import redis
from redis.exceptions import ConnectionError, RedisError, ResponseError

from .config import Settings, settings as default_settings
from .exceptions import QuotaExceededError, StorageUnavailableError

logger = logging.getLogger(__name__)


def entry_size(key: str, value: str) -> int:
    """Bytes a key/value pair occupies (UTF-16, as browsers account it)."""
    return len(key.encode("utf-16-le")) + len(value.encode("utf-16-le"))


class KeyValueStore(ABC):
    """
    Abstract string store.

    Keys passed in are logical; implementations prepend ``namespace`` so that
    several applications can share one physical store.
    """

    def __init__(self, namespace: str = "", quota_bytes: Optional[int] = None):
        self.namespace = namespace
        self.quota_bytes = quota_bytes

    def _physical(self, key: str) -> str:
        return f"{self.namespace}{key}"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string or None when the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a string, replacing any previous value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key; removing an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """List logical keys starting with ``prefix``."""
        pass

    @abstractmethod
    def used_bytes(self) -> int:
        """Bytes currently occupied by this namespace."""
        pass

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        """Remove every key in this namespace."""
        for key in self.keys():
            self.remove(key)

    def _check_quota(self, key: str, value: str, previous: Optional[str]) -> None:
        if self.quota_bytes is None:
            return
        physical = self._physical(key)
        freed = entry_size(physical, previous) if previous is not None else 0
        projected = self.used_bytes() - freed + entry_size(physical, value)
        if projected > self.quota_bytes:
            logger.error(f"Quota exceeded writing '{key}': {projected} > {self.quota_bytes} bytes")
            raise QuotaExceededError(key, projected, self.quota_bytes)


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store with browser-style quota accounting.

    A write that would exceed the quota raises QuotaExceededError and leaves
    the previous value in place.
    """

    def __init__(self, namespace: str = "", quota_bytes: Optional[int] = None):
        super().__init__(namespace, quota_bytes)
        self._data: Dict[str, str] = {}
        self._used = 0

    def get(self, key: str) -> Optional[str]:
        return self._data.get(self._physical(key))

    def set(self, key: str, value: str) -> None:
        physical = self._physical(key)
        previous = self._data.get(physical)
        self._check_quota(key, value, previous)
        if previous is not None:
            self._used -= entry_size(physical, previous)
        self._data[physical] = value
        self._used += entry_size(physical, value)

    def remove(self, key: str) -> None:
        physical = self._physical(key)
        previous = self._data.pop(physical, None)
        if previous is not None:
            self._used -= entry_size(physical, previous)

    def keys(self, prefix: str = "") -> List[str]:
        start = self._physical(prefix)
        cut = len(self.namespace)
        return [k[cut:] for k in self._data if k.startswith(start)]

    def used_bytes(self) -> int:
        return self._used


class RedisKeyValueStore(KeyValueStore):
    """
    Redis-backed store.

    The quota is checked per write against the entry size alone, without a
    namespace scan. Redis OOM rejections surface as QuotaExceededError,
    connection failures as StorageUnavailableError.
    """

    def __init__(self, client: "redis.Redis", namespace: str = "", quota_bytes: Optional[int] = None):
        super().__init__(namespace, quota_bytes)
        self.client = client

    @classmethod
    def from_url(cls, url: str, namespace: str = "", quota_bytes: Optional[int] = None) -> "RedisKeyValueStore":
        client = redis.from_url(
            url,
            decode_responses=True,  # Auto-decode bytes to strings
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30
        )
        return cls(client, namespace, quota_bytes)

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(self._physical(key))
        except ConnectionError as e:
            raise StorageUnavailableError("redis", str(e)) from e

    def _check_quota(self, key: str, value: str, previous: Optional[str] = None) -> None:
        """Per-write limit on the entry size; Redis maxmemory bounds the total."""
        if self.quota_bytes is None:
            return
        size = entry_size(self._physical(key), value)
        if size > self.quota_bytes:
            logger.error(f"Quota exceeded writing '{key}': {size} > {self.quota_bytes} bytes")
            raise QuotaExceededError(key, size, self.quota_bytes)

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        try:
            self.client.set(self._physical(key), value)
        except ConnectionError as e:
            raise StorageUnavailableError("redis", str(e)) from e
        except ResponseError as e:
            if str(e).startswith("OOM"):
                logger.error(f"Redis refused write for '{key}': {e}")
                raise QuotaExceededError(key) from e
            raise

    def remove(self, key: str) -> None:
        try:
            self.client.delete(self._physical(key))
        except ConnectionError as e:
            raise StorageUnavailableError("redis", str(e)) from e

    def keys(self, prefix: str = "") -> List[str]:
        cut = len(self.namespace)
        try:
            return [k[cut:] for k in self.client.scan_iter(match=f"{self._physical(prefix)}*")]
        except ConnectionError as e:
            raise StorageUnavailableError("redis", str(e)) from e

    def used_bytes(self) -> int:
        total = 0
        try:
            for physical in self.client.scan_iter(match=f"{self.namespace}*"):
                value = self.client.get(physical)
                if value is not None:
                    total += entry_size(physical, value)
        except RedisError as e:
            raise StorageUnavailableError("redis", str(e)) from e
        return total


def create_store(config: Settings = None) -> KeyValueStore:
    """Build the store selected by ``storage_backend``."""
    config = config or default_settings
    if config.storage_backend == "redis":
        store = RedisKeyValueStore.from_url(
            config.redis_url,
            namespace=config.key_prefix,
            quota_bytes=config.storage_quota_bytes
        )
        try:
            store.client.ping()
            logger.info(f"Redis store connected: {config.redis_url}")
        except (RedisError, ConnectionError) as e:
            raise StorageUnavailableError("redis", str(e)) from e
        return store

    logger.info("Using in-memory key-value store")
    return InMemoryKeyValueStore(namespace=config.key_prefix, quota_bytes=config.storage_quota_bytes)


__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_store",
    "entry_size",
]
