"""
Social graph derived from the stored follow edges.

The connections mapping holds directed edges only. Relationships are
computed, never stored:

    friend     iff A follows B and B follows A
    requested  iff A follows B only
    follower   iff B follows A only
    none       otherwise

No one's edges change because of someone else's action, except that
following a simulated (non-interactive) counterparty mirrors the edge so
the friendship is accepted at once.
"""

import logging
from typing import Dict, Iterable, List

from .constants import SIMULATED_DIRECTORY, SIMULATED_NAMES
from .models import DirectoryEntry, RelationStatus
from .repository import Repositories
from .results import Saved, attempt

logger = logging.getLogger(__name__)

Edges = Dict[str, List[str]]


# =============================================================================
# Pure derivation
# =============================================================================

def follows(edges: Edges, a: str, b: str) -> bool:
    return b in edges.get(a, [])


def relation_status(edges: Edges, me: str, other: str) -> RelationStatus:
    mine = follows(edges, me, other)
    theirs = follows(edges, other, me)
    if mine and theirs:
        return RelationStatus.FRIEND
    if mine:
        return RelationStatus.REQUESTED
    if theirs:
        return RelationStatus.FOLLOWER
    return RelationStatus.NONE


def followers_of(edges: Edges, me: str) -> List[str]:
    return [name for name, targets in edges.items() if name != me and me in targets]


def friends_of(edges: Edges, me: str) -> List[str]:
    return [other for other in edges.get(me, []) if follows(edges, other, me)]


def pending_requests(edges: Edges, me: str) -> List[str]:
    """Identities that follow ``me`` without being followed back."""
    return [name for name in followers_of(edges, me) if not follows(edges, me, name)]


def toggle_edge(edges: Edges, me: str, other: str, mirror: bool = False) -> Edges:
    """
    Flip the ``me -> other`` edge on a copy of ``edges``.

    With ``mirror`` and the edge turned on, ``other -> me`` is set too.
    """
    updated = {name: list(targets) for name, targets in edges.items()}
    mine = updated.setdefault(me, [])
    if other in mine:
        mine.remove(other)
    else:
        mine.append(other)
        if mirror:
            theirs = updated.setdefault(other, [])
            if me not in theirs:
                theirs.append(me)
    return updated


# =============================================================================
# Repository-backed view
# =============================================================================

class SocialGraph:
    """Follow/friend operations over the connections repository."""

    def __init__(self, repos: Repositories, simulated: Iterable[str] = SIMULATED_NAMES):
        self.repos = repos
        self.simulated = frozenset(simulated)

    def edges(self) -> Edges:
        return self.repos.connections.load()

    def is_simulated(self, name: str) -> bool:
        return name in self.simulated

    def relation_status(self, me: str, other: str) -> RelationStatus:
        return relation_status(self.edges(), me, other)

    def following(self, me: str) -> List[str]:
        return list(self.edges().get(me, []))

    def followers(self, me: str) -> List[str]:
        return followers_of(self.edges(), me)

    def friends(self, me: str) -> List[str]:
        return friends_of(self.edges(), me)

    def pending_requests(self, me: str) -> List[str]:
        return pending_requests(self.edges(), me)

    def toggle_follow(self, me: str, other: str, is_simulated: bool = None) -> Saved[RelationStatus]:
        """
        Follow or unfollow ``other``.

        Args:
            me: Acting identity
            other: Target identity
            is_simulated: Whether ``other`` can never act on its own; defaults
                to membership in the simulated directory

        Returns:
            Saved relation status after the toggle
        """
        if is_simulated is None:
            is_simulated = self.is_simulated(other)
        updated = toggle_edge(self.edges(), me, other, mirror=is_simulated)
        status = relation_status(updated, me, other)
        logger.info(f"'{me}' -> '{other}' is now {status.value}")
        return attempt(lambda: self.repos.connections.save(updated), status)

    # -------------------------------------------------------------------------
    # Supervisor tracking
    # -------------------------------------------------------------------------

    def tracked_users(self) -> List[str]:
        return self.repos.supervisor_tracking.load()

    def toggle_tracking(self, company_name: str) -> Saved[List[str]]:
        return self._toggle_list(self.repos.supervisor_tracking, company_name)

    # -------------------------------------------------------------------------
    # Simple joined-groups / added-friends lists
    # -------------------------------------------------------------------------

    def directory(self, query: str = "") -> List[DirectoryEntry]:
        wanted = query.lower()
        return [
            DirectoryEntry(**entry)
            for entry in SIMULATED_DIRECTORY
            if wanted in entry["name"].lower()
        ]

    def toggle_joined_group(self, group_id: str) -> Saved[List[str]]:
        return self._toggle_list(self.repos.joined_groups, group_id)

    def toggle_added_friend(self, friend_id: str) -> Saved[List[str]]:
        return self._toggle_list(self.repos.added_friends, friend_id)

    def _toggle_list(self, repo, identifier: str) -> Saved[List[str]]:
        items = repo.load()
        items = [i for i in items if i != identifier] if identifier in items else items + [identifier]
        return attempt(lambda: repo.save(items), items)


__all__ = [
    "SocialGraph",
    "relation_status",
    "toggle_edge",
    "followers_of",
    "friends_of",
    "pending_requests",
]
