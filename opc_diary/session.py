"""
Session state: who is logged in and whose data is on screen.

Three identities are in play at once:

- ``profile``: the authenticated profile (or the synthetic supervisor)
- ``viewing_as``: self, a visited guest, or a tracked user the supervisor
  is impersonating for reading and chatting
- ``is_supervisor``: granted only by the master credential

Switching ``viewing_as`` reloads the project list for the new target and
clears the open project, so one user's entries never show under another
identity. Nothing here is persisted except the last active user name.
"""

import logging
from enum import Enum
from typing import Callable, List, Optional

from .accounts import AccountService
from .config import Settings, settings as default_settings
from .constants import SIMULATED_DIRECTORY
from .diary import DiaryService
from .exceptions import NotFoundError, PermissionDeniedError, ProjectNotFoundError
from .models import DirectoryEntry, Project, UserProfile
from .notifications import NotificationPoller, NotificationSource
from .repository import Repositories
from .results import Saved

logger = logging.getLogger(__name__)


STALE_NOTICE = "That item no longer exists. Showing the project list instead."


class ViewMode(str, Enum):
    HOME = "home"
    GUEST = "guest"
    IMPERSONATING = "impersonating"
    FORUM = "forum"


PollerFactory = Callable[[Repositories, str, bool], NotificationSource]


class SessionManager:
    """
    Process-wide session state.

    Init: ``hydrate()`` reads the last active user for the login screen.
    Teardown: ``logout()`` forgets it and stops the notification poller.

    Args:
        repos: Repository bundle
        accounts: Account service
        diary: Diary service
        config: Settings
        poller_factory: Builds the notification source on login
        auto_poll: Start polling on login (needs a running event loop)
    """

    def __init__(
        self,
        repos: Repositories,
        accounts: AccountService = None,
        diary: DiaryService = None,
        config: Settings = None,
        poller_factory: PollerFactory = None,
        auto_poll: bool = True
    ):
        self.repos = repos
        self.config = config or default_settings
        self.accounts = accounts or AccountService(repos, self.config)
        self.diary = diary or DiaryService(repos, config=self.config)
        self.poller_factory = poller_factory or (
            lambda r, name, sup: NotificationPoller(r, name, sup, self.config)
        )
        self.auto_poll = auto_poll

        self.profile: Optional[UserProfile] = None
        self.is_supervisor = False
        self.viewing_as: Optional[UserProfile] = None
        self.view_mode = ViewMode.HOME
        self.projects: List[Project] = []
        self.active_project_id: Optional[str] = None
        self.poller: Optional[NotificationSource] = None
        self.login_hint: Optional[UserProfile] = None
        self.notices: List[str] = []

    # =============================================================================
    # Lifecycle
    # =============================================================================

    @property
    def logged_in(self) -> bool:
        return self.profile is not None

    def hydrate(self) -> Optional[UserProfile]:
        """Load the profile the login screen should greet."""
        self.login_hint = self.accounts.login_hint()
        return self.login_hint

    def login(self, name: str, password: str) -> UserProfile:
        """
        Authenticate and open the owner's home view.

        Raises:
            InvalidCredentialsError: If the attempt is rejected
        """
        profile, is_supervisor = self.accounts.authenticate(name, password)
        self._begin(profile, is_supervisor)
        return profile

    def complete_onboarding(self, profile: UserProfile) -> Saved[UserProfile]:
        """Register a new profile and log it in."""
        saved = self.accounts.register(profile)
        self._note(saved)
        self._begin(profile, False)
        return saved

    def _begin(self, profile: UserProfile, is_supervisor: bool) -> None:
        self._stop_polling()
        self.profile = profile
        self.is_supervisor = is_supervisor
        self._switch(profile, ViewMode.HOME)
        self.poller = self.poller_factory(self.repos, profile.company_name, is_supervisor)
        if self.auto_poll:
            self.poller.start()

    def logout(self) -> None:
        self._stop_polling()
        if not self.is_supervisor:
            self.accounts.forget_last_active()
        logger.info(f"Logged out '{self.profile.company_name if self.profile else '?'}'")
        self.profile = None
        self.is_supervisor = False
        self.viewing_as = None
        self.view_mode = ViewMode.HOME
        self.projects = []
        self.active_project_id = None
        self.notices = []

    def _stop_polling(self) -> None:
        if self.poller is not None:
            self.poller.cancel()
            self.poller = None

    def _note(self, saved: Saved) -> None:
        if not saved.persisted and saved.notice:
            self.notices.append(saved.notice)

    def _require_login(self) -> UserProfile:
        if self.profile is None:
            raise PermissionDeniedError("act without logging in")
        return self.profile

    # =============================================================================
    # Viewing target
    # =============================================================================

    def _switch(self, target: UserProfile, mode: ViewMode) -> None:
        self.viewing_as = target
        self.view_mode = mode
        self.active_project_id = None
        self.refresh_projects()

    def refresh_projects(self) -> List[Project]:
        self.projects = self.diary.list_projects(self.viewing_as.company_name) if self.viewing_as else []
        return self.projects

    @property
    def viewing_self(self) -> bool:
        return (
            self.profile is not None
            and self.viewing_as is not None
            and self.viewing_as.company_name == self.profile.company_name
        )

    @property
    def can_edit(self) -> bool:
        return self.view_mode == ViewMode.HOME and self.viewing_self

    def go_home(self) -> None:
        self._switch(self._require_login(), ViewMode.HOME)

    def open_forum(self) -> None:
        self._require_login()
        self.view_mode = ViewMode.FORUM

    def visit(self, company_name: str) -> UserProfile:
        """
        Show another profile's diary as a guest.

        Simulated directory entries get a synthetic profile; real users are
        read from the store.
        """
        self._require_login()
        simulated = next((e for e in SIMULATED_DIRECTORY if e["name"] == company_name), None)
        if simulated is not None:
            guest = DirectoryEntry(**simulated).as_guest_profile()
        else:
            guest = self.accounts.get_user(company_name)
        self._switch(guest, ViewMode.GUEST)
        return guest

    def impersonate(self, company_name: str) -> UserProfile:
        """Supervisor only: read a tracked user's data as that user."""
        if not self.is_supervisor:
            raise PermissionDeniedError("impersonate users", self.profile.company_name if self.profile else None)
        if company_name not in self.repos.supervisor_tracking.load():
            raise PermissionDeniedError(f"impersonate untracked user '{company_name}'")
        target = self.accounts.get_user(company_name)
        self._switch(target, ViewMode.IMPERSONATING)
        return target

    # =============================================================================
    # Open project
    # =============================================================================

    @property
    def active_project(self) -> Optional[Project]:
        if self.active_project_id is None:
            return None
        return next((p for p in self.projects if p.id == self.active_project_id), None)

    def open_project(self, project_id: str) -> Optional[Project]:
        """
        Select a project of the viewed user.

        A project that vanished (e.g. deleted from another tab) resets the
        selection instead of raising.
        """
        self.refresh_projects()
        self.active_project_id = project_id
        project = self.active_project
        if project is None:
            logger.info(f"Project {project_id} no longer exists; returning to project list")
            self.active_project_id = None
        return project

    def close_project(self) -> None:
        self.active_project_id = None

    # =============================================================================
    # Owner actions on the viewed diary
    # =============================================================================

    def _owner_for_edit(self) -> str:
        if not self.can_edit:
            raise PermissionDeniedError("edit this diary", self.profile.company_name if self.profile else None)
        return self.profile.company_name

    def _recover(self, error: NotFoundError) -> None:
        """Return to the project list after a reference went stale."""
        logger.info(f"{error}; returning to project list")
        self.notices.append(STALE_NOTICE)
        self.refresh_projects()
        self.active_project_id = None

    def _run(self, action: Callable[[], Saved]) -> Optional[Saved]:
        """
        Run a diary action on the open project.

        Returns:
            The action's Saved result, or None when the project or entry no
            longer exists (the view is reset and a notice queued)
        """
        try:
            saved = action()
        except NotFoundError as e:
            self._recover(e)
            return None
        self._note(saved)
        self.refresh_projects()
        if self.active_project is None:
            self.active_project_id = None
        return saved

    def create_project(self, name: str, description: str = "") -> Saved[Project]:
        owner = self._owner_for_edit()
        saved = self.diary.create_project(owner, name, description)
        self._note(saved)
        self.refresh_projects()
        self.active_project_id = saved.value.id
        return saved

    async def publish_entry(self, content: str, image: Optional[str] = None) -> Optional[Saved]:
        owner = self._owner_for_edit()
        try:
            saved = await self.diary.publish_entry(owner, self._active_id(), content, image)
        except NotFoundError as e:
            self._recover(e)
            return None
        return self._run(lambda: saved)

    def edit_entry(self, entry_id: str, content: str) -> Optional[Saved]:
        owner = self._owner_for_edit()
        return self._run(lambda: self.diary.edit_entry(owner, self._active_id(), entry_id, content))

    def delete_entry(self, entry_id: str) -> Optional[Saved]:
        owner = self._owner_for_edit()
        return self._run(lambda: self.diary.delete_entry(owner, self._active_id(), entry_id))

    def update_stats(self, field: str, value: str) -> Optional[Saved]:
        owner = self._owner_for_edit()
        return self._run(lambda: self.diary.update_stats(owner, self._active_id(), field, value))

    def comment(self, entry_id: str, content: str) -> Optional[Saved]:
        """Comment on the viewed diary as yourself; allowed in any view."""
        author = self._require_login()
        owner = self.viewing_as.company_name
        from_home = self.view_mode == ViewMode.HOME
        return self._run(lambda: self.diary.add_comment(
            owner, self._active_id(), entry_id, author, content, from_home=from_home
        ))

    def update_profile(self, profile: UserProfile) -> Saved[UserProfile]:
        actor = self._require_login()
        saved = self.accounts.update_profile(actor.company_name, profile, as_supervisor=self.is_supervisor)
        self._note(saved)
        if profile.company_name == actor.company_name:
            self.profile = profile
            if self.viewing_self:
                self.viewing_as = profile
        return saved

    def delete_user(self, company_name: str) -> Saved:
        """Supervisor only: delete a user and cascade to their own keys."""
        saved = self.accounts.delete_user(company_name, as_supervisor=self.is_supervisor)
        self._note(saved)
        if self.viewing_as is not None and self.viewing_as.company_name == company_name:
            self.go_home()
        return saved

    def _active_id(self) -> str:
        if self.active_project_id is None:
            raise ProjectNotFoundError("no project open")
        return self.active_project_id


__all__ = ["SessionManager", "ViewMode"]
