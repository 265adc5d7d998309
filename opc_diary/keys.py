"""
Key naming for every record family.

Pure functions from domain identifiers to logical store keys. The store adds
its namespace (``opc_`` by default), so ``projects_key("Acme")`` is persisted
as ``opc_projects_Acme``.
"""

from typing import Tuple

from .constants import (
    USERS_KEY,
    LAST_ACTIVE_USER_KEY,
    PROJECTS_KEY_PREFIX,
    CONNECTIONS_KEY,
    SUPERVISOR_TRACKING_KEY,
    INSTRUCTIONS_KEY_PREFIX,
    CHAT_KEY_PREFIX,
    FORUM_POSTS_KEY,
    JOINED_GROUPS_KEY,
    ADDED_FRIENDS_KEY,
)


def users_key() -> str:
    return USERS_KEY


def last_active_user_key() -> str:
    return LAST_ACTIVE_USER_KEY


def projects_key(company_name: str) -> str:
    return f"{PROJECTS_KEY_PREFIX}{company_name}"


def connections_key() -> str:
    return CONNECTIONS_KEY


def supervisor_tracking_key() -> str:
    return SUPERVISOR_TRACKING_KEY


def instructions_key(company_name: str) -> str:
    """Supervisor mailbox: one thread per user, keyed by the user alone."""
    return f"{INSTRUCTIONS_KEY_PREFIX}{company_name}"


def thread_pair(a: str, b: str) -> Tuple[str, str]:
    """Order two identities so either participant derives the same pair."""
    return (a, b) if a <= b else (b, a)


def chat_key(a: str, b: str) -> str:
    """Peer thread: one per unordered pair, whoever started it."""
    first, second = thread_pair(a, b)
    return f"{CHAT_KEY_PREFIX}{first}_{second}"


def forum_posts_key() -> str:
    return FORUM_POSTS_KEY


def joined_groups_key() -> str:
    return JOINED_GROUPS_KEY


def added_friends_key() -> str:
    return ADDED_FRIENDS_KEY
