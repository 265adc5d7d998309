"""
Repositories for every record family of the OPC Diary data store.

Each class owns the key naming of its family (see keys.py) and converts
between stored strings and domain entities through an EntityCodec.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from . import keys
from .clock import Clock
from .codec import EntityCodec, TextCodec
from .constants import seed_forum_posts
from .kv_store import KeyValueStore
from .models import ForumPost, MessageItem, Project, UserProfile
from .repository_interface import RecordRepository

logger = logging.getLogger(__name__)


# =============================================================================
# USERS
# =============================================================================

class UserRepository(RecordRepository[List[UserProfile]]):
    """
    All profiles under one global key, in registration order.

    Writes match by exact company name; login lookup is case-insensitive.
    """

    codec = EntityCodec(List[UserProfile], list)

    def key_for(self) -> str:
        return keys.users_key()

    def find(self, company_name: str) -> Optional[UserProfile]:
        return next((u for u in self.load() if u.company_name == company_name), None)

    def find_for_login(self, company_name: str, password: str) -> Optional[UserProfile]:
        """First user whose name matches case-insensitively and whose password matches exactly."""
        wanted = company_name.lower()
        return next(
            (u for u in self.load() if u.company_name.lower() == wanted and u.password == password),
            None
        )

    def upsert(self, profile: UserProfile) -> List[UserProfile]:
        """Replace the profile with the same name, or append it."""
        users = self.load()
        for i, existing in enumerate(users):
            if existing.company_name == profile.company_name:
                users[i] = profile
                break
        else:
            users.append(profile)
        self.save(users)
        return users

    def remove(self, company_name: str) -> List[UserProfile]:
        users = [u for u in self.load() if u.company_name != company_name]
        self.save(users)
        return users


class SessionStateRepository(RecordRepository[Optional[str]]):
    """Company name of the most recently logged-in user."""

    codec = TextCodec()

    def key_for(self) -> str:
        return keys.last_active_user_key()


# =============================================================================
# PROJECTS
# =============================================================================

class ProjectRepository(RecordRepository[List[Project]]):
    """One key per user holding that user's full project list."""

    codec = EntityCodec(List[Project], list)

    def key_for(self, company_name: str) -> str:
        return keys.projects_key(company_name)


# =============================================================================
# SOCIAL GRAPH
# =============================================================================

class ConnectionRepository(RecordRepository[Dict[str, List[str]]]):
    """Directed follow edges: company name -> names it follows."""

    codec = EntityCodec(Dict[str, List[str]], dict)

    def key_for(self) -> str:
        return keys.connections_key()


class IdentifierListRepository(RecordRepository[List[str]]):
    """A single global list of identifiers under a fixed key."""

    codec = EntityCodec(List[str], list)

    def __init__(self, store: KeyValueStore, key: str):
        super().__init__(store)
        self._key = key

    def key_for(self) -> str:
        return self._key


# =============================================================================
# MESSAGES
# =============================================================================

class InstructionThreadRepository(RecordRepository[List[MessageItem]]):
    """Supervisor <-> user mailbox, keyed by the user's company name."""

    codec = EntityCodec(List[MessageItem], list)

    def key_for(self, company_name: str) -> str:
        return keys.instructions_key(company_name)


class PeerThreadRepository(RecordRepository[List[MessageItem]]):
    """Peer <-> peer thread, keyed by the sorted pair of company names."""

    codec = EntityCodec(List[MessageItem], list)

    def key_for(self, a: str, b: str) -> str:
        return keys.chat_key(a, b)


# =============================================================================
# FORUM
# =============================================================================

class ForumRepository(RecordRepository[List[ForumPost]]):
    """
    All forum posts under one global key, newest first.

    While the key has never been written the seed posts are returned; after
    the first write the seed is superseded for good.
    """

    codec = EntityCodec(List[ForumPost], list)

    def __init__(self, store: KeyValueStore, clock: Clock):
        super().__init__(store)
        self.clock = clock

    def key_for(self) -> str:
        return keys.forum_posts_key()

    def load(self) -> List[ForumPost]:
        key = self.key_for()
        try:
            raw = self.store.get(key)
        except Exception as e:
            logger.warning(f"Store read failed for '{key}': {e}; treating as empty")
            return []
        if raw is None:
            seed = seed_forum_posts(self.clock.now_ms())
            return [ForumPost.model_validate(post) for post in seed]
        return self.codec.decode(raw, key)


# =============================================================================
# BUNDLE
# =============================================================================

@dataclass
class Repositories:
    """Every repository over one shared store."""
    store: KeyValueStore
    users: UserRepository
    session_state: SessionStateRepository
    projects: ProjectRepository
    connections: ConnectionRepository
    supervisor_tracking: IdentifierListRepository
    joined_groups: IdentifierListRepository
    added_friends: IdentifierListRepository
    instructions: InstructionThreadRepository
    chats: PeerThreadRepository
    forum: ForumRepository

    @classmethod
    def build(cls, store: KeyValueStore, clock: Clock = None) -> "Repositories":
        clock = clock or Clock()
        return cls(
            store=store,
            users=UserRepository(store),
            session_state=SessionStateRepository(store),
            projects=ProjectRepository(store),
            connections=ConnectionRepository(store),
            supervisor_tracking=IdentifierListRepository(store, keys.supervisor_tracking_key()),
            joined_groups=IdentifierListRepository(store, keys.joined_groups_key()),
            added_friends=IdentifierListRepository(store, keys.added_friends_key()),
            instructions=InstructionThreadRepository(store),
            chats=PeerThreadRepository(store),
            forum=ForumRepository(store, clock),
        )


__all__ = [
    "UserRepository",
    "SessionStateRepository",
    "ProjectRepository",
    "ConnectionRepository",
    "IdentifierListRepository",
    "InstructionThreadRepository",
    "PeerThreadRepository",
    "ForumRepository",
    "Repositories",
]
