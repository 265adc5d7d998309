"""
Tests for accounts and session state.

Sessions are created with auto_poll=False unless the test runs inside an
event loop.
"""

import pytest

from opc_diary.exceptions import (
    InvalidCredentialsError,
    InvalidInputError,
    PermissionDeniedError,
    UserNotFoundError,
)
from opc_diary.models import UserProfile
from opc_diary.session import STALE_NOTICE, ViewMode


@pytest.fixture
def session(app):
    return app.new_session(auto_poll=False)


class TestAccounts:
    """Registration, login and the admin cascade."""

    def test_onboarding_then_login(self, app, acme):
        app.accounts.register(acme)
        profile, is_supervisor = app.accounts.authenticate("Acme", "p1")
        assert profile.company_name == "Acme"
        assert is_supervisor is False

    def test_wrong_password_and_unknown_name_look_alike(self, app, acme):
        app.accounts.register(acme)
        with pytest.raises(InvalidCredentialsError) as wrong:
            app.accounts.authenticate("Acme", "nope")
        with pytest.raises(InvalidCredentialsError) as unknown:
            app.accounts.authenticate("Nobody", "p1")
        assert str(wrong.value) == str(unknown.value)

    def test_login_name_is_case_insensitive(self, app, acme):
        app.accounts.register(acme)
        profile, _ = app.accounts.authenticate("aCmE", "p1")
        assert profile.company_name == "Acme"
        with pytest.raises(InvalidCredentialsError):
            app.accounts.authenticate("acme", "P1")

    def test_names_differing_only_in_case_log_in_by_password(self, app, profile_factory):
        app.accounts.register(profile_factory("Acme", "p1"))
        app.accounts.register(profile_factory("ACME", "p2"))
        first, _ = app.accounts.authenticate("acme", "p1")
        second, _ = app.accounts.authenticate("ACME", "p2")
        assert first.company_name == "Acme"
        assert second.company_name == "ACME"
        with pytest.raises(InvalidCredentialsError):
            app.accounts.authenticate("ACME", "p3")

    def test_blank_company_name_rejected(self, app, registered):
        with pytest.raises(InvalidInputError) as exc:
            app.accounts.register(UserProfile(company_name="   ", password="pw"))
        assert exc.value.field == "companyName"
        assert [u.company_name for u in app.accounts.list_users()] == ["Alice", "Bob"]

    def test_legacy_blank_record_does_not_wipe_users(self, app, store, profile_factory):
        store.set("users", '[{"companyName": "Acme", "password": "p1"}, {"companyName": ""}]')
        app.accounts.register(profile_factory("Beta"))
        assert [u.company_name for u in app.accounts.list_users()] == ["Acme", "", "Beta"]
        profile, _ = app.accounts.authenticate("Acme", "p1")
        assert profile.company_name == "Acme"

    def test_supervisor_credential(self, app):
        profile, is_supervisor = app.accounts.authenticate("Daniel", "generasia")
        assert is_supervisor is True
        assert profile.title == "System Admin"
        assert app.accounts.list_users() == []

    def test_login_hint_prefers_last_active(self, app, registered):
        assert app.accounts.login_hint().company_name == "Bob"
        app.accounts.authenticate("Alice", "pw")
        assert app.accounts.login_hint().company_name == "Alice"

    def test_update_own_profile_only(self, app, registered, profile_factory):
        with pytest.raises(PermissionDeniedError):
            app.accounts.update_profile("Alice", profile_factory("Bob", description="hacked"))
        app.accounts.update_profile("Alice", profile_factory("Alice", description="New"))
        assert app.accounts.get_user("Alice").description == "New"

    def test_delete_cascades_and_leaves_ghosts(self, app, store, registered):
        project = app.diary.create_project("Alice", "Rocket").value
        app.diary.add_entry("Alice", project.id, "hello")
        app.messaging.send_instruction("Alice", "hi", from_supervisor=True)
        app.messaging.send_chat("Alice", "Bob", "hey")
        app.social.toggle_follow("Bob", "Alice")

        with pytest.raises(PermissionDeniedError):
            app.accounts.delete_user("Alice", as_supervisor=False)
        app.accounts.delete_user("Alice", as_supervisor=True)

        assert [u.company_name for u in app.accounts.list_users()] == ["Bob"]
        assert store.get("projects_Alice") is None
        assert store.get("instructions_Alice") is None
        assert store.get("chat_Alice_Bob") is not None
        assert app.social.following("Bob") == ["Alice"]
        with pytest.raises(UserNotFoundError):
            app.accounts.get_user("Alice")


class TestSessionLifecycle:
    """Hydrate, login and logout."""

    def test_hydrate_sets_hint_without_login(self, app, registered):
        session = app.new_session(auto_poll=False)
        assert session.login_hint.company_name == "Bob"
        assert not session.logged_in

    def test_onboarding_logs_in(self, session, acme):
        session.complete_onboarding(acme)
        assert session.profile == acme
        assert session.view_mode == ViewMode.HOME
        assert session.can_edit

    def test_logout_forgets_last_active(self, app, session, registered):
        session.login("Alice", "pw")
        session.logout()
        assert not session.logged_in
        assert app.repos.session_state.load() is None
        assert session.poller is None

    def test_supervisor_logout_keeps_last_active(self, app, session, registered):
        session.login("daniel", "generasia")
        assert session.is_supervisor
        session.logout()
        assert app.repos.session_state.load() == "Bob"

    @pytest.mark.asyncio
    async def test_login_starts_and_logout_stops_poller(self, app, registered):
        session = app.new_session()
        session.login("Alice", "pw")
        poller = session.poller
        assert poller.running
        session.logout()
        assert not poller.running


class TestViewSwitching:
    """Switching the viewed identity never leaks another user's project."""

    def test_visit_resets_open_project(self, app, session, registered):
        project = app.diary.create_project("Alice", "Rocket").value
        session.login("Alice", "pw")
        assert session.open_project(project.id) == project

        guest = session.visit("Bob")
        assert guest.company_name == "Bob"
        assert session.view_mode == ViewMode.GUEST
        assert session.active_project_id is None
        assert session.projects == []
        assert not session.can_edit

    def test_visit_simulated_directory_entry(self, session, registered):
        session.login("Alice", "pw")
        guest = session.visit("SaaS Makers")
        assert guest.title == "Clan Leader"

    def test_guest_cannot_edit(self, session, registered):
        session.login("Alice", "pw")
        session.visit("Bob")
        with pytest.raises(PermissionDeniedError):
            session.create_project("Nope")

    def test_guest_may_comment(self, app, session, registered):
        project = app.diary.create_project("Bob", "Rocket").value
        entry = app.diary.add_entry("Bob", project.id, "hello").value
        session.login("Alice", "pw")
        session.visit("Bob")
        session.open_project(project.id)
        saved = session.comment(entry.id, "Nice")
        assert saved.value.author == "Alice"
        assert saved.value.is_owner is False

    def test_impersonation_requires_tracking(self, app, session, registered):
        session.login("daniel", "generasia")
        with pytest.raises(PermissionDeniedError):
            session.impersonate("Alice")
        app.social.toggle_tracking("Alice")
        target = session.impersonate("Alice")
        assert target.company_name == "Alice"
        assert session.view_mode == ViewMode.IMPERSONATING
        assert not session.can_edit

    def test_users_cannot_impersonate(self, session, registered):
        session.login("Alice", "pw")
        with pytest.raises(PermissionDeniedError):
            session.impersonate("Bob")


class TestStaleReferences:
    """References deleted elsewhere reset the view with a notice."""

    def test_missing_project_resets_selection(self, session, registered):
        session.login("Alice", "pw")
        assert session.open_project("gone") is None
        assert session.active_project_id is None

    def test_entry_deleted_in_other_tab(self, app, registered):
        first = app.new_session(auto_poll=False)
        second = app.new_session(auto_poll=False)
        first.login("Alice", "pw")
        second.login("Alice", "pw")

        project = first.create_project("Rocket").value
        entry = app.diary.add_entry("Alice", project.id, "hello").value
        second.open_project(project.id)
        second.delete_entry(entry.id)

        assert first.edit_entry(entry.id, "edited") is None
        assert first.notices == [STALE_NOTICE]
        assert first.active_project_id is None

    @pytest.mark.asyncio
    async def test_publish_through_session(self, app, registered):
        session = app.new_session(auto_poll=False)
        session.login("Alice", "pw")
        session.create_project("Rocket")
        saved = await session.publish_entry("cost 50")
        assert saved.persisted
        assert session.active_project.stats.cost == "$50"
