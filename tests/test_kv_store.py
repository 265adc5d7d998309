"""
Tests for the key-value store contract.

Covers the in-memory store (namespacing, quota accounting) and the Redis
store against a mocked client.
"""

import pytest
from unittest.mock import MagicMock
from redis.exceptions import ConnectionError, ResponseError

from opc_diary.exceptions import QuotaExceededError, StorageUnavailableError
from opc_diary.kv_store import InMemoryKeyValueStore, RedisKeyValueStore, entry_size


class TestInMemoryStore:
    """Basic get/set/remove behaviour."""

    def test_get_missing_returns_none(self, store):
        """Absent keys read as None."""
        assert store.get("users") is None

    def test_set_then_get(self, store):
        """Writes are visible immediately in the same context."""
        store.set("users", "[]")
        assert store.get("users") == "[]"
        assert store.contains("users")

    def test_remove_is_idempotent(self, store):
        """Removing twice is harmless."""
        store.set("k", "v")
        store.remove("k")
        store.remove("k")
        assert store.get("k") is None

    def test_keys_are_namespaced(self):
        """keys() lists logical names, optionally filtered by prefix."""
        store = InMemoryKeyValueStore(namespace="opc_")
        store.set("chat_A_B", "[]")
        store.set("projects_A", "[]")
        assert sorted(store.keys()) == ["chat_A_B", "projects_A"]
        assert store.keys("chat_") == ["chat_A_B"]

    def test_clear(self, store):
        """clear() empties the namespace and resets usage."""
        store.set("a", "1")
        store.set("b", "2")
        store.clear()
        assert store.keys() == []
        assert store.used_bytes() == 0


class TestQuota:
    """Quota accounting mirrors browser local storage (UTF-16)."""

    def test_used_bytes_counts_utf16(self):
        """Each code unit of key and value costs two bytes."""
        store = InMemoryKeyValueStore(namespace="")
        store.set("ab", "xyz")
        assert store.used_bytes() == 10
        assert entry_size("ab", "xyz") == 10

    def test_overwrite_replaces_usage(self):
        """Overwriting a key frees the old value's bytes first."""
        store = InMemoryKeyValueStore(namespace="", quota_bytes=20)
        store.set("k", "123456789")  # 2 + 18 = 20 bytes
        store.set("k", "12345")
        assert store.used_bytes() == 12

    def test_write_over_quota_raises_and_keeps_previous(self):
        """A rejected write leaves the old value intact."""
        store = InMemoryKeyValueStore(namespace="", quota_bytes=16)
        store.set("k", "old")
        with pytest.raises(QuotaExceededError) as exc:
            store.set("k", "x" * 50)
        assert exc.value.key == "k"
        assert exc.value.quota == 16
        assert store.get("k") == "old"


class TestRedisStore:
    """Redis backend against a mocked client."""

    def _store(self, **kwargs):
        client = MagicMock()
        return RedisKeyValueStore(client, namespace="opc_", **kwargs), client

    def test_get_uses_physical_key(self):
        """Logical keys are prefixed with the namespace."""
        store, client = self._store()
        client.get.return_value = "[]"
        assert store.get("users") == "[]"
        client.get.assert_called_once_with("opc_users")

    def test_set_writes_value(self):
        """Without a quota, set goes straight through."""
        store, client = self._store()
        client.get.return_value = None
        store.set("users", "[]")
        client.set.assert_called_once_with("opc_users", "[]")

    def test_oom_maps_to_quota_error(self):
        """Redis OOM rejections surface as QuotaExceededError."""
        store, client = self._store()
        client.get.return_value = None
        client.set.side_effect = ResponseError("OOM command not allowed when used memory > 'maxmemory'.")
        with pytest.raises(QuotaExceededError):
            store.set("users", "[]")

    def test_connection_error_maps_to_unavailable(self):
        """Connection failures surface as StorageUnavailableError."""
        store, client = self._store()
        client.get.side_effect = ConnectionError("refused")
        with pytest.raises(StorageUnavailableError):
            store.get("users")

    def test_oversize_entry_rejected_without_round_trips(self):
        """An entry larger than the quota never reaches Redis."""
        store, client = self._store(quota_bytes=40)
        with pytest.raises(QuotaExceededError) as exc:
            store.set("b", "y" * 20)
        assert exc.value.size == 50
        client.set.assert_not_called()
        client.get.assert_not_called()

    def test_write_does_not_scan_namespace(self):
        """Writes under the quota cost a single SET."""
        store, client = self._store(quota_bytes=1024)
        store.set("users", "[]")
        client.set.assert_called_once_with("opc_users", "[]")
        client.scan_iter.assert_not_called()
        client.get.assert_not_called()

    def test_keys_strip_namespace(self):
        """keys() returns logical names."""
        store, client = self._store()
        client.scan_iter.return_value = ["opc_chat_A_B"]
        assert store.keys("chat_") == ["chat_A_B"]
        client.scan_iter.assert_called_once_with(match="opc_chat_*")
