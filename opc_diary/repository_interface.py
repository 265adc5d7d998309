"""
Abstract Repository Interface for the OPC Diary data store.

Defines the contract every record family follows. A repository owns the key
naming for its family and speaks in domain entities, never raw keys:

- load(*scope) never fails outward; any failure yields the empty default
- save(*scope, value) fully replaces the scope's value (no partial writes)
  and raises QuotaExceededError when the store is full
- delete(*scope) drops the scope's key

Callers read-modify-write. Two writers to the same scope clobber each other
(last write wins at key granularity).
"""

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .codec import EntityCodec
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordRepository(ABC, Generic[T]):
    """
    Abstract base class for one entity family.

    Subclasses supply ``codec`` and ``key_for``; load/save/delete are shared.
    """

    codec: EntityCodec

    def __init__(self, store: KeyValueStore):
        self.store = store

    # =============================================================================
    # ABSTRACT METHODS
    # =============================================================================

    @abstractmethod
    def key_for(self, *scope: str) -> str:
        """
        Map scope arguments to the logical store key.

        Args:
            *scope: Domain identifiers (e.g. a company name)

        Returns:
            Logical key for the scope
        """
        pass

    # =============================================================================
    # SHARED OPERATIONS
    # =============================================================================

    def load(self, *scope: str) -> T:
        """
        Load the scope's entities.

        Returns:
            Decoded value, or the family's empty default if the key is absent,
            malformed or the store cannot be read
        """
        key = self.key_for(*scope)
        try:
            raw = self.store.get(key)
        except Exception as e:
            logger.warning(f"Store read failed for '{key}': {e}; treating as empty")
            return self.codec.empty()
        return self.codec.decode(raw, key)

    def save(self, *args) -> None:
        """
        Replace the scope's value.

        Args:
            *args: Scope arguments followed by the value to store

        Raises:
            QuotaExceededError: If the store is full
        """
        *scope, value = args
        key = self.key_for(*scope)
        self.store.set(key, self.codec.encode(value))
        logger.debug(f"Saved '{key}'")

    def delete(self, *scope: str) -> None:
        """Drop the scope's key."""
        key = self.key_for(*scope)
        self.store.remove(key)
        logger.debug(f"Removed '{key}'")

    def exists(self, *scope: str) -> bool:
        return self.store.get(self.key_for(*scope)) is not None


__all__ = ["RecordRepository"]
