"""OPC Diary: local persistence and synchronization core."""

from .dependencies import DiaryApp, build_app
from .kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from .session import SessionManager

__all__ = [
    "DiaryApp",
    "build_app",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "SessionManager",
]
