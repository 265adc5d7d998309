"""Time source and creation-time identifiers."""

import threading
import time
from datetime import datetime


class Clock:
    """
    Wall clock in epoch milliseconds.

    Ids are creation-time tokens (the millisecond timestamp as a string);
    two ids requested within the same millisecond are bumped apart so they
    stay unique.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._last_id = 0

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def new_id(self) -> str:
        with self._lock:
            candidate = max(self.now_ms(), self._last_id + 1)
            self._last_id = candidate
            return str(candidate)

    def display_date(self, timestamp_ms: int) -> str:
        """Short local date shown next to a diary entry."""
        return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%m/%d/%Y")

