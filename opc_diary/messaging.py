"""
Private messaging: the supervisor mailbox and peer threads.

Supervisor <-> user threads live under the user's name alone and use the
SUPERVISOR / USER sender markers. Peer threads live under the sorted pair
of names and use each participant's company name as sender, so both sides
read and write the same key.

Appending is add-only. Opening a thread flips the trailing unread messages
from the counterparty to read in one batch; opening it again is a no-op.
"""

import logging
from typing import List, Optional

from .clock import Clock
from .constants import SUPERVISOR_SENDER, USER_SENDER
from .exceptions import InvalidInputError
from .models import MessageItem
from .results import Saved, attempt
from .repository import Repositories

logger = logging.getLogger(__name__)


def mark_trailing_read(messages: List[MessageItem], counterparty: str) -> int:
    """
    Flip unread counterparty messages at the tail of the thread.

    Walks back from the newest message, passing over our own messages, and
    stops at the first counterparty message that is already read.

    Returns:
        Number of messages flipped
    """
    flipped = 0
    for message in reversed(messages):
        if message.sender != counterparty:
            continue
        if message.read:
            break
        message.read = True
        flipped += 1
    return flipped


def last_is_unread_from(messages: List[MessageItem], counterparty: str) -> bool:
    """Only the newest message counts: unread iff it is theirs and unread."""
    if not messages:
        return False
    last = messages[-1]
    return last.sender == counterparty and not last.read


class MessagingService:
    """Send, read and mark messages across both thread kinds."""

    def __init__(self, repos: Repositories, clock: Clock = None):
        self.repos = repos
        self.clock = clock or Clock()

    def _new_message(self, sender: str, content: str) -> MessageItem:
        if not content or not content.strip():
            raise InvalidInputError("message", "must not be empty")
        return MessageItem(
            id=self.clock.new_id(),
            sender=sender,
            content=content,
            timestamp=self.clock.now_ms(),
            read=False,
        )

    # =============================================================================
    # Supervisor mailbox
    # =============================================================================

    def instructions(self, company_name: str) -> List[MessageItem]:
        return self.repos.instructions.load(company_name)

    def send_instruction(self, company_name: str, content: str, from_supervisor: bool) -> Saved[MessageItem]:
        """Append to ``company_name``'s mailbox from either side."""
        message = self._new_message(SUPERVISOR_SENDER if from_supervisor else USER_SENDER, content)
        thread = self.instructions(company_name)
        thread.append(message)
        return attempt(lambda: self.repos.instructions.save(company_name, thread), message)

    def open_instructions(self, company_name: str, as_supervisor: bool) -> Saved[List[MessageItem]]:
        counterparty = USER_SENDER if as_supervisor else SUPERVISOR_SENDER
        return self._open(self.instructions(company_name), counterparty,
                          lambda thread: self.repos.instructions.save(company_name, thread))

    def instructions_unread(self, company_name: str, as_supervisor: bool) -> bool:
        counterparty = USER_SENDER if as_supervisor else SUPERVISOR_SENDER
        return last_is_unread_from(self.instructions(company_name), counterparty)

    # =============================================================================
    # Peer threads
    # =============================================================================

    def chat(self, me: str, other: str) -> List[MessageItem]:
        return self.repos.chats.load(me, other)

    def send_chat(self, me: str, other: str, content: str) -> Saved[MessageItem]:
        if me == other:
            raise InvalidInputError("recipient", "cannot message yourself")
        message = self._new_message(me, content)
        thread = self.chat(me, other)
        thread.append(message)
        return attempt(lambda: self.repos.chats.save(me, other, thread), message)

    def open_chat(self, me: str, other: str) -> Saved[List[MessageItem]]:
        return self._open(self.chat(me, other), other,
                          lambda thread: self.repos.chats.save(me, other, thread))

    def chat_unread(self, me: str, other: str) -> bool:
        return last_is_unread_from(self.chat(me, other), other)

    def last_message(self, me: str, other: str) -> Optional[MessageItem]:
        thread = self.chat(me, other)
        return thread[-1] if thread else None

    # =============================================================================
    # Shared
    # =============================================================================

    def _open(self, thread: List[MessageItem], counterparty: str, save) -> Saved[List[MessageItem]]:
        flipped = mark_trailing_read(thread, counterparty)
        if not flipped:
            return Saved(thread)
        logger.debug(f"Marked {flipped} message(s) from '{counterparty}' as read")
        return attempt(lambda: save(thread), thread)


__all__ = ["MessagingService", "mark_trailing_read", "last_is_unread_from"]
