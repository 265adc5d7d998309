"""Entity schemas for the OPC Diary data store.

Every persisted entity is a pydantic model serialized with camelCase aliases
(the wire format of the stored JSON). Fields are optional-with-default so that
records written by older versions decode without branching on their shape;
unknown fields (e.g. the retired ``likedByMe`` flag) are ignored.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_STAGE, DEFAULT_PROJECT_DESCRIPTION


# =============================================================================
# Enums for validated parameters
# =============================================================================

class ForumCategory(str, Enum):
    """Fixed set of forum categories."""
    DISCUSSION = "Discussion"
    LAUNCH = "Launch"
    HELP = "Help"
    SHOWCASE = "Showcase"
    FEEDBACK = "Feedback"
    RESOURCES = "Resources"


class ProjectStage(str, Enum):
    """Venture stages, in progression order."""
    IDEA = "Idea"
    VALIDATION = "Validation"
    MVP = "MVP"
    LAUNCH = "Launch"
    GROWTH = "Growth"
    PROFITABLE = "Profitable"

    @property
    def rank(self) -> int:
        return list(ProjectStage).index(self)


class RelationStatus(str, Enum):
    """Relationship of one identity towards another."""
    NONE = "none"
    REQUESTED = "requested"  # I follow them, they don't follow me
    FOLLOWER = "follower"  # They follow me, I don't follow them
    FRIEND = "friend"  # Mutual follow


# =============================================================================
# Base Model
# =============================================================================

class StoredModel(BaseModel):
    """Base for persisted entities: camelCase on the wire, defaults for gaps."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Treat explicit nulls like missing fields so defaults apply."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Users
# =============================================================================

class UserProfile(StoredModel):
    """Identity and public info for one account, keyed by company name."""
    company_name: str
    description: str = ""
    dev_time: str = ""
    audience: str = ""
    valuation: str = ""
    avatar: Optional[str] = None
    project_url: Optional[str] = None
    project_cover: Optional[str] = None
    password: str = ""
    title: Optional[str] = None


# =============================================================================
# Projects & Diary
# =============================================================================

class Comment(StoredModel):
    """Reply to a diary entry. Append-only."""
    id: str
    author: str = ""
    content: str = ""
    is_owner: bool = False
    avatar: Optional[str] = None


class DiaryEntry(StoredModel):
    """One dated log within a project."""
    id: str
    content: str = ""
    images: List[str] = Field(default_factory=list)
    timestamp: int = 0  # epoch milliseconds
    date: str = ""
    comments: List[Comment] = Field(default_factory=list)


class ProjectStats(StoredModel):
    """Display strings; cost and profit carry a currency-formatted number."""
    stage: str = DEFAULT_STAGE
    time_spent: str = "0d"
    cost: str = "$0"
    profit: str = "$0"


class Project(StoredModel):
    """One venture owned by exactly one user. Entries are newest-first."""
    id: str
    name: str = ""
    description: str = DEFAULT_PROJECT_DESCRIPTION
    stats: ProjectStats = Field(default_factory=ProjectStats)
    entries: List[DiaryEntry] = Field(default_factory=list)

    def find_entry(self, entry_id: str) -> Optional[DiaryEntry]:
        return next((e for e in self.entries if e.id == entry_id), None)


# =============================================================================
# Messaging
# =============================================================================

class MessageItem(StoredModel):
    """One chat message in a 1:1 thread."""
    id: str
    sender: str
    content: str = ""
    timestamp: int = 0
    read: bool = False


# =============================================================================
# Forum
# =============================================================================

class CommentAuthor(StoredModel):
    name: str = ""
    avatar: str = ""


class PostAuthor(CommentAuthor):
    """Snapshot of the author at post time, not a live reference."""
    title: str = ""


class ForumComment(StoredModel):
    id: str
    author: CommentAuthor = Field(default_factory=CommentAuthor)
    content: str = ""
    timestamp: int = 0


class ForumPost(StoredModel):
    """One forum post. ``likedBy`` is the source of truth for likes."""
    id: str
    author: PostAuthor = Field(default_factory=PostAuthor)
    content: str = ""
    image: Optional[str] = None
    link: Optional[str] = None
    category: ForumCategory = ForumCategory.DISCUSSION
    timestamp: int = 0
    likes: int = 0
    liked_by: List[str] = Field(default_factory=list)
    comments: int = 0
    comments_list: List[ForumComment] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def known_category(cls, v):
        """Unknown categories fall back to Discussion."""
        try:
            return ForumCategory(v)
        except ValueError:
            return ForumCategory.DISCUSSION

    @model_validator(mode="after")
    def derived_counts(self):
        """Keep derived counters at least as large as their sources."""
        self.liked_by = list(dict.fromkeys(self.liked_by))
        self.likes = max(self.likes, len(self.liked_by))
        self.comments = max(self.comments, len(self.comments_list))
        return self


# =============================================================================
# Directory
# =============================================================================

class DirectoryEntry(BaseModel):
    """A simulated group or user listed in the social directory."""
    id: str
    name: str
    avatar: str
    description: str
    type: str  # "group" or "user"

    def as_guest_profile(self) -> UserProfile:
        """Synthetic profile shown when visiting a simulated entry."""
        return UserProfile(
            company_name=self.name,
            description=self.description,
            dev_time="1 Year",
            audience="10K",
            valuation="$5M",
            avatar=None if self.avatar.startswith("#") else self.avatar,
            project_url="https://example.com",
            password="",
            title="Clan Leader" if self.type == "group" else "Founder",
        )
