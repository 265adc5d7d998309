"""Outcome of a mutation whose persistence may have failed."""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .exceptions import QuotaExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

QUOTA_NOTICE = "Storage full! The change was applied but may not survive a reload. Try clearing space."


@dataclass
class Saved(Generic[T]):
    """
    Result of an in-memory mutation plus whether it reached the store.

    ``value`` is always the updated state; when ``persisted`` is False,
    ``notice`` carries the warning to show the user.
    """
    value: T
    persisted: bool = True
    notice: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.persisted


def attempt(save: Callable[[], None], value: T) -> Saved[T]:
    """Run ``save``; a quota rejection downgrades to a warning."""
    try:
        save()
    except QuotaExceededError as e:
        logger.error(f"Change kept in memory only: {e}")
        return Saved(value, persisted=False, notice=QUOTA_NOTICE)
    return Saved(value)


__all__ = ["Saved", "attempt", "QUOTA_NOTICE"]
