"""
Accounts: onboarding registration, login lookup, profile edits and the
admin delete cascade.

Passwords are plaintext and compared exactly; the login name is compared
case-insensitively. The supervisor role comes from one master credential in
settings and is never stored among the users.
"""

import logging
from typing import List, Optional, Tuple

from .config import Settings, settings as default_settings
from .constants import SUPERVISOR_COMPANY_NAME, SUPERVISOR_TITLE
from .exceptions import InvalidCredentialsError, InvalidInputError, PermissionDeniedError, UserNotFoundError
from .models import UserProfile
from .repository import Repositories
from .results import Saved, attempt

logger = logging.getLogger(__name__)


def supervisor_profile() -> UserProfile:
    """Synthetic profile for the supervisor session."""
    return UserProfile(
        company_name=SUPERVISOR_COMPANY_NAME,
        description="Overseeing operations.",
        dev_time="Infinite",
        audience="All",
        valuation="∞",
        avatar=None,
        password="",
        title=SUPERVISOR_TITLE,
    )


class AccountService:
    """User profile lifecycle over the users repository."""

    def __init__(self, repos: Repositories, config: Settings = None):
        self.repos = repos
        self.config = config or default_settings

    # =============================================================================
    # Reads
    # =============================================================================

    def list_users(self) -> List[UserProfile]:
        return self.repos.users.load()

    def get_user(self, company_name: str) -> UserProfile:
        user = self.repos.users.find(company_name)
        if user is None:
            raise UserNotFoundError(company_name)
        return user

    def login_hint(self) -> Optional[UserProfile]:
        """Last active user if still registered, else the newest registration."""
        last = self.repos.session_state.load()
        if last:
            user = self.repos.users.find(last)
            if user is not None:
                return user
        users = self.list_users()
        return users[-1] if users else None

    # =============================================================================
    # Authentication
    # =============================================================================

    def is_supervisor_credential(self, name: str, password: str) -> bool:
        return (
            name.lower() == self.config.supervisor_login.lower()
            and password == self.config.supervisor_password
        )

    def authenticate(self, name: str, password: str) -> Tuple[UserProfile, bool]:
        """
        Resolve a login attempt.

        Returns:
            (profile, is_supervisor)

        Raises:
            InvalidCredentialsError: For an unknown name or a wrong password
                alike, so identities cannot be probed
        """
        if self.is_supervisor_credential(name, password):
            logger.info("Supervisor logged in")
            return supervisor_profile(), True

        user = self.repos.users.find_for_login(name, password) if name.strip() else None
        if user is None:
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        self._remember(user.company_name)
        logger.info(f"'{user.company_name}' logged in")
        return user, False

    def _remember(self, company_name: str) -> bool:
        return attempt(lambda: self.repos.session_state.save(company_name), company_name).persisted

    def forget_last_active(self) -> None:
        self.repos.session_state.delete()

    # =============================================================================
    # Mutations
    # =============================================================================

    def register(self, profile: UserProfile) -> Saved[UserProfile]:
        """
        Persist a profile at the end of onboarding and make it the active one.

        A profile with the same company name is replaced in place.

        Raises:
            InvalidInputError: If the company name is blank
        """
        if not profile.company_name.strip():
            raise InvalidInputError("companyName", "must not be blank")

        def save():
            self.repos.users.upsert(profile)
            self.repos.session_state.save(profile.company_name)

        saved = attempt(save, profile)
        logger.info(f"Registered '{profile.company_name}'")
        return saved

    def update_profile(self, actor: str, profile: UserProfile, as_supervisor: bool = False) -> Saved[UserProfile]:
        """
        Replace a stored profile.

        Owners may edit only their own profile; the supervisor may edit any.
        The company name cannot change, since every other key derives from it.
        """
        if not as_supervisor and actor != profile.company_name:
            raise PermissionDeniedError("edit another user's profile", actor)
        users = self.list_users()
        for i, existing in enumerate(users):
            if existing.company_name == profile.company_name:
                users[i] = profile
                break
        else:
            raise UserNotFoundError(profile.company_name)
        return attempt(lambda: self.repos.users.save(users), profile)

    def delete_user(self, company_name: str, as_supervisor: bool) -> Saved[List[UserProfile]]:
        """
        Remove a user and cascade to their projects and supervisor mailbox.

        Peer threads and follow edges naming the user are left as ghosts.
        """
        if not as_supervisor:
            raise PermissionDeniedError("delete users")
        if self.repos.users.find(company_name) is None:
            raise UserNotFoundError(company_name)

        remaining = [u for u in self.list_users() if u.company_name != company_name]
        saved = attempt(lambda: self.repos.users.save(remaining), remaining)
        self.repos.projects.delete(company_name)
        self.repos.instructions.delete(company_name)
        if self.repos.session_state.load() == company_name:
            self.forget_last_active()
        logger.info(f"Deleted user '{company_name}' with projects and mailbox")
        return saved


__all__ = ["AccountService", "supervisor_profile"]
