"""
Diary operations: projects, entries, comments and stats.

Every mutation is a read-modify-write of the owner's whole project list
(one key per user). The in-memory result is always returned; a quota
failure only downgrades it to an unpersisted Saved with a notice.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .clock import Clock
from .config import Settings, settings as default_settings
from .constants import DAY_MS, DEFAULT_PROJECT_DESCRIPTION, GUEST_AVATAR_URL
from .content_analyzer import ContentAnalyzer, RegexContentAnalyzer
from .exceptions import EntryNotFoundError, InvalidInputError, ProjectNotFoundError
from .models import Comment, DiaryEntry, Project, ProjectStage, ProjectStats, UserProfile
from .repository import Repositories
from .results import Saved, attempt

logger = logging.getLogger(__name__)

# Stats fields the owner may overwrite directly.
EDITABLE_STATS = {"stage": "stage", "timeSpent": "time_spent", "time_spent": "time_spent",
                  "cost": "cost", "profit": "profit"}

COLLAPSED_ENTRY_COUNT = 5


# =============================================================================
# Formatting helpers
# =============================================================================

def parse_currency(value: str) -> float:
    """'$1,250.50' -> 1250.5; anything unparseable is 0."""
    try:
        return float(re.sub(r"[^0-9.-]+", "", value or ""))
    except ValueError:
        return 0.0


def format_currency(value: float) -> str:
    """1250.5 -> '$1,250.5'; whole amounts carry no decimals."""
    return "$" + f"{value:,.3f}".rstrip("0").rstrip(".")


def time_spent(entries: List[DiaryEntry], now_ms: int) -> str:
    """Whole days since the oldest entry: '12d', or '1y 3d' past a year."""
    if not entries:
        return "0d"
    start = min(e.timestamp for e in entries)
    days = max(0, now_ms - start) // DAY_MS
    if days > 365:
        return f"{days // 365}y {days % 365}d"
    return f"{days}d"


def advance_stage(current: str, detected: Optional[ProjectStage]) -> str:
    """
    Move the stage forward when the text suggests a later one.

    Stages the owner typed by hand (outside ProjectStage) are left alone.
    """
    if detected is None:
        return current
    try:
        known = ProjectStage(current)
    except ValueError:
        return current
    return detected.value if detected.rank > known.rank else current


@dataclass(frozen=True)
class RoadmapPoint:
    """One stop on the roadmap, oldest entry first."""
    index: int
    entry_id: str
    date: str
    timestamp: int
    excerpt: str
    has_image: bool


# =============================================================================
# Service
# =============================================================================

class DiaryService:
    """
    Project and diary entry operations for one store.

    Args:
        repos: Repository bundle
        analyzer: Financial/stage analyzer applied on publish
        clock: Time and id source
        config: Settings (publish delay)
    """

    def __init__(
        self,
        repos: Repositories,
        analyzer: ContentAnalyzer = None,
        clock: Clock = None,
        config: Settings = None
    ):
        self.repos = repos
        self.analyzer = analyzer or RegexContentAnalyzer()
        self.clock = clock or Clock()
        self.config = config or default_settings

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_projects(self, owner: str) -> List[Project]:
        return self.repos.projects.load(owner)

    def get_project(self, owner: str, project_id: str) -> Project:
        project = next((p for p in self.list_projects(owner) if p.id == project_id), None)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def visible_entries(self, project: Project, expanded: bool = False) -> List[DiaryEntry]:
        """Newest entries first; collapsed view shows only the latest few."""
        if expanded:
            return list(project.entries)
        return project.entries[:COLLAPSED_ENTRY_COUNT]

    def roadmap(self, project: Project) -> List[RoadmapPoint]:
        ordered = sorted(project.entries, key=lambda e: e.timestamp)
        return [
            RoadmapPoint(
                index=i,
                entry_id=e.id,
                date=e.date,
                timestamp=e.timestamp,
                excerpt=e.content[:80],
                has_image=bool(e.images),
            )
            for i, e in enumerate(ordered)
        ]

    def current_time_spent(self, project: Project) -> str:
        return time_spent(project.entries, self.clock.now_ms())

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _mutate(self, owner: str, project_id: str, change) -> tuple:
        """Apply ``change(project)`` to a fresh copy and persist the list."""
        projects = self.list_projects(owner)
        for i, project in enumerate(projects):
            if project.id == project_id:
                result = change(project)
                projects[i] = project
                return result, attempt(lambda: self.repos.projects.save(owner, projects), project)
        raise ProjectNotFoundError(project_id)

    def create_project(self, owner: str, name: str, description: str = "") -> Saved[Project]:
        if not name or not name.strip():
            raise InvalidInputError("name", "project name is required")
        project = Project(
            id=self.clock.new_id(),
            name=name.strip(),
            description=description.strip() or DEFAULT_PROJECT_DESCRIPTION,
            stats=ProjectStats(),
        )
        projects = self.list_projects(owner)
        projects.append(project)
        logger.info(f"Created project {project.id} for '{owner}'")
        return attempt(lambda: self.repos.projects.save(owner, projects), project)

    def add_entry(self, owner: str, project_id: str, content: str, image: Optional[str] = None) -> Saved[DiaryEntry]:
        """
        Publish an entry immediately and accrue its stats.

        Cost and profit found in the text are added to the running totals;
        the stage only moves forward.
        """
        if not (content or "").strip() and not image:
            raise InvalidInputError("entry", "needs text or an image")

        now = self.clock.now_ms()
        entry = DiaryEntry(
            id=self.clock.new_id(),
            content=content or "",
            images=[image] if image else [],
            timestamp=now,
            date=self.clock.display_date(now),
            comments=[],
        )
        figures = self.analyzer.analyze(entry.content)
        detected = self.analyzer.detect_stage(entry.content)

        def change(project: Project) -> DiaryEntry:
            project.entries.insert(0, entry)
            stats = project.stats
            project.stats = ProjectStats(
                stage=advance_stage(stats.stage, detected),
                time_spent=time_spent(project.entries, now),
                cost=format_currency(parse_currency(stats.cost) + figures.cost),
                profit=format_currency(parse_currency(stats.profit) + figures.profit),
            )
            return entry

        result, saved = self._mutate(owner, project_id, change)
        logger.info(f"Published entry {entry.id} in project {project_id}")
        return Saved(result, saved.persisted, saved.notice)

    async def publish_entry(self, owner: str, project_id: str, content: str, image: Optional[str] = None) -> Saved[DiaryEntry]:
        """Same as add_entry, after the configured publish delay."""
        if not (content or "").strip() and not image:
            raise InvalidInputError("entry", "needs text or an image")
        await asyncio.sleep(self.config.publish_delay_seconds)
        return self.add_entry(owner, project_id, content, image)

    def edit_entry(self, owner: str, project_id: str, entry_id: str, content: str) -> Saved[DiaryEntry]:
        def change(project: Project) -> DiaryEntry:
            entry = project.find_entry(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            entry.content = content
            return entry

        result, saved = self._mutate(owner, project_id, change)
        return Saved(result, saved.persisted, saved.notice)

    def delete_entry(self, owner: str, project_id: str, entry_id: str) -> Saved[Project]:
        def change(project: Project) -> None:
            if project.find_entry(entry_id) is None:
                raise EntryNotFoundError(entry_id)
            project.entries = [e for e in project.entries if e.id != entry_id]

        _, saved = self._mutate(owner, project_id, change)
        logger.info(f"Deleted entry {entry_id} from project {project_id}")
        return saved

    def add_comment(
        self,
        owner: str,
        project_id: str,
        entry_id: str,
        author: UserProfile,
        content: str,
        from_home: bool
    ) -> Saved[Comment]:
        """
        Append a comment to an entry of ``owner``'s project.

        The comment is always authored as the viewer's own identity;
        ``from_home`` marks comments written from the owner's home view.
        """
        if not content or not content.strip():
            raise InvalidInputError("comment", "must not be empty")
        comment = Comment(
            id=self.clock.new_id(),
            author=author.company_name,
            content=content,
            is_owner=from_home,
            avatar=author.avatar or GUEST_AVATAR_URL,
        )

        def change(project: Project) -> Comment:
            entry = project.find_entry(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            entry.comments.append(comment)
            return comment

        result, saved = self._mutate(owner, project_id, change)
        return Saved(result, saved.persisted, saved.notice)

    def update_stats(self, owner: str, project_id: str, field: str, value: str) -> Saved[Project]:
        attr = EDITABLE_STATS.get(field)
        if attr is None:
            raise InvalidInputError("stats field", f"unknown field '{field}'")

        def change(project: Project) -> None:
            project.stats = project.stats.model_copy(update={attr: value})

        _, saved = self._mutate(owner, project_id, change)
        return saved


__all__ = [
    "DiaryService",
    "RoadmapPoint",
    "parse_currency",
    "format_currency",
    "time_spent",
    "advance_stage",
]
