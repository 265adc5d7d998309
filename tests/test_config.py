"""
Tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from opc_diary.config import Settings
from opc_diary.kv_store import InMemoryKeyValueStore, create_store


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OPC_POLL_INTERVAL_SECONDS", raising=False)
        monkeypatch.delenv("OPC_PUBLISH_DELAY_SECONDS", raising=False)
        config = Settings(_env_file=None)
        assert config.key_prefix == "opc_"
        assert config.poll_interval_seconds == 2.0
        assert config.publish_delay_seconds == 0.8
        assert config.storage_backend == "memory"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OPC_KEY_PREFIX", "test_")
        monkeypatch.setenv("OPC_LOG_LEVEL", "debug")
        monkeypatch.setenv("OPC_ENVIRONMENT", "Production")
        config = Settings(_env_file=None)
        assert config.key_prefix == "test_"
        assert config.log_level == "DEBUG"
        assert config.is_production

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("OPC_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_memory_backend_uses_prefix_and_quota(self, test_settings):
        store = create_store(test_settings)
        assert isinstance(store, InMemoryKeyValueStore)
        assert store.namespace == "opc_"
        assert store.quota_bytes == test_settings.storage_quota_bytes
