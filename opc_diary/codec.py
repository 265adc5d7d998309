"""
Entity codec: entity graphs to and from the store's string values.

Values are JSON. ``decode`` never raises: a missing key yields the family's
empty default, and a malformed value is logged and treated as empty too
("no data yet" and "corrupt data" are handled identically). ``decode_strict``
exposes the DecodeError for callers that need to tell the two apart.
"""

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from .exceptions import DecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityCodec(Generic[T]):
    """
    Codec for one entity family.

    Args:
        type_: Python type of the decoded value (e.g. ``List[UserProfile]``)
        empty: Factory producing the family's empty default
    """

    def __init__(self, type_: Any, empty: Callable[[], T]):
        self.adapter = TypeAdapter(type_)
        self.empty = empty

    def encode(self, value: T) -> str:
        return self.adapter.dump_json(value, by_alias=True).decode("utf-8")

    def decode_strict(self, raw: Optional[str], key: str = "?") -> T:
        if raw is None:
            return self.empty()
        try:
            return self.adapter.validate_json(raw)
        except ValidationError as e:
            raise DecodeError(key, f"{e.error_count()} validation error(s)") from e
        except (ValueError, TypeError) as e:
            raise DecodeError(key, str(e)) from e

    def decode(self, raw: Optional[str], key: str = "?") -> T:
        try:
            return self.decode_strict(raw, key)
        except DecodeError as e:
            logger.warning(f"{e}; treating as empty")
            return self.empty()


class TextCodec(EntityCodec[Optional[str]]):
    """Plain string values (e.g. the last active user), stored unquoted."""

    def __init__(self):
        self.empty = lambda: None

    def encode(self, value: Optional[str]) -> str:
        return value or ""

    def decode_strict(self, raw: Optional[str], key: str = "?") -> Optional[str]:
        return raw or None


__all__ = ["EntityCodec", "TextCodec"]
