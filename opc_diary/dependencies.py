"""
Shared Dependencies for the OPC Diary data store.

Provides:
- The key-value store selected in settings
- The repository bundle over it
- Service instances wired to that bundle
- A session manager per UI session
"""

import logging
from dataclasses import dataclass

from .accounts import AccountService
from .clock import Clock
from .config import Settings, settings as default_settings
from .content_analyzer import ContentAnalyzer, RegexContentAnalyzer
from .diary import DiaryService
from .forum import ForumService
from .kv_store import KeyValueStore, create_store
from .media import ImageEncoder
from .messaging import MessagingService
from .repository import Repositories
from .session import SessionManager
from .social_graph import SocialGraph

logger = logging.getLogger(__name__)


@dataclass
class DiaryApp:
    """Everything a UI surface needs, over one shared store."""
    config: Settings
    clock: Clock
    repos: Repositories
    accounts: AccountService
    diary: DiaryService
    social: SocialGraph
    messaging: MessagingService
    forum: ForumService
    images: ImageEncoder

    @property
    def store(self) -> KeyValueStore:
        return self.repos.store

    def new_session(self, auto_poll: bool = True) -> SessionManager:
        """A fresh session (one per tab) sharing this app's store."""
        session = SessionManager(
            self.repos,
            accounts=self.accounts,
            diary=self.diary,
            config=self.config,
            auto_poll=auto_poll
        )
        session.hydrate()
        return session


def build_app(
    store: KeyValueStore = None,
    config: Settings = None,
    clock: Clock = None,
    analyzer: ContentAnalyzer = None
) -> DiaryApp:
    """Wire store, repositories and services together."""
    config = config or default_settings
    clock = clock or Clock()
    store = store or create_store(config)
    repos = Repositories.build(store, clock)
    logger.info(f"Diary app ready ({type(store).__name__})")
    return DiaryApp(
        config=config,
        clock=clock,
        repos=repos,
        accounts=AccountService(repos, config),
        diary=DiaryService(repos, analyzer or RegexContentAnalyzer(), clock, config),
        social=SocialGraph(repos),
        messaging=MessagingService(repos, clock),
        forum=ForumService(repos, clock),
        images=ImageEncoder(config),
    )


__all__ = ["DiaryApp", "build_app"]
