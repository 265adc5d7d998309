"""
Notification polling: unread badges and pending friend requests.

There is no push channel between sessions, so each active session re-reads
the store on a fixed interval and recomputes its badge state from scratch.
Consumers depend on NotificationSource only, so a real subscription could
replace polling without touching them.

Per tick, for the active identity:
1. pending friend requests: others following me whom I don't follow back
2. unread flags, looking only at the newest message of each relevant thread:
   - a user: the supervisor mailbox and every mutual-friend peer thread
   - the supervisor: the mailbox of every tracked user
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional

from .config import Settings, settings as default_settings
from .constants import SUPERVISOR_SENDER, USER_SENDER
from .messaging import last_is_unread_from
from .repository import Repositories
from .social_graph import friends_of, pending_requests

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationState:
    """Badge view-model published on every tick."""
    friend_request_count: int = 0
    unread_peers: FrozenSet[str] = frozenset()
    unread_supervisor: bool = False
    unread_by_tracked_user: Dict[str, bool] = field(default_factory=dict)

    @property
    def has_unread(self) -> bool:
        return bool(self.unread_peers) or self.unread_supervisor or any(self.unread_by_tracked_user.values())


Listener = Callable[[NotificationState], None]


class NotificationSource(ABC):
    """Anything that can publish NotificationState updates to listeners."""

    def __init__(self):
        self._listeners: List[Listener] = []
        self.state = NotificationState()

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, state: NotificationState) -> None:
        self.state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}", exc_info=True)

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def cancel(self) -> None:
        pass


class NotificationPoller(NotificationSource):
    """
    Periodic full re-scan of the store for one session identity.

    Args:
        repos: Repository bundle to read from
        company_name: Active identity (ignored for the supervisor)
        is_supervisor: Scan tracked users' mailboxes instead of own threads
        config: Settings (poll interval)
    """

    def __init__(
        self,
        repos: Repositories,
        company_name: str,
        is_supervisor: bool = False,
        config: Settings = None
    ):
        super().__init__()
        self.repos = repos
        self.company_name = company_name
        self.is_supervisor = is_supervisor
        self.interval = (config or default_settings).poll_interval_seconds
        self._task: Optional[asyncio.Task] = None

    # =============================================================================
    # Scan
    # =============================================================================

    def compute(self) -> NotificationState:
        """Recompute badge state from the store's current contents."""
        if self.is_supervisor:
            tracked = {
                name: last_is_unread_from(self.repos.instructions.load(name), USER_SENDER)
                for name in self.repos.supervisor_tracking.load()
            }
            return NotificationState(unread_by_tracked_user=tracked)

        me = self.company_name
        edges = self.repos.connections.load()
        unread_peers = frozenset(
            friend for friend in friends_of(edges, me)
            if last_is_unread_from(self.repos.chats.load(me, friend), friend)
        )
        return NotificationState(
            friend_request_count=len(pending_requests(edges, me)),
            unread_peers=unread_peers,
            unread_supervisor=last_is_unread_from(self.repos.instructions.load(me), SUPERVISOR_SENDER),
        )

    def poll_once(self) -> NotificationState:
        state = self.compute()
        logger.debug(f"Poll for '{self.company_name}': {state}")
        self._publish(state)
        return state

    # =============================================================================
    # Lifecycle
    # =============================================================================

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        """Begin ticking on the running event loop. Idempotent."""
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Notification polling started for '{self.company_name}' every {self.interval}s")

    async def _run(self) -> None:
        while True:
            self.poll_once()
            await asyncio.sleep(self.interval)

    def cancel(self) -> None:
        """Stop ticking without waiting for the task to unwind."""
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info(f"Notification polling stopped for '{self.company_name}'")

    async def stop(self) -> None:
        """Stop ticking and wait until the task has finished."""
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass


__all__ = ["NotificationState", "NotificationSource", "NotificationPoller"]
