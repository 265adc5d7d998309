"""
Tests for the follow graph and derived relationships.
"""

import pytest

from opc_diary.models import RelationStatus
from opc_diary.social_graph import (
    followers_of,
    friends_of,
    pending_requests,
    relation_status,
    toggle_edge,
)


class TestRelationStatus:
    """Status is a function of the two directed edges only."""

    @pytest.mark.parametrize("edges,expected", [
        ({}, RelationStatus.NONE),
        ({"A": ["B"]}, RelationStatus.REQUESTED),
        ({"B": ["A"]}, RelationStatus.FOLLOWER),
        ({"A": ["B"], "B": ["A"]}, RelationStatus.FRIEND),
    ])
    def test_edge_configurations(self, edges, expected):
        assert relation_status(edges, "A", "B") == expected

    def test_derived_lists(self):
        edges = {"A": ["B", "C"], "B": ["A"], "D": ["A"]}
        assert friends_of(edges, "A") == ["B"]
        assert sorted(followers_of(edges, "A")) == ["B", "D"]
        assert pending_requests(edges, "A") == ["D"]

    def test_toggle_edge_does_not_mutate_input(self):
        edges = {"A": ["B"]}
        updated = toggle_edge(edges, "A", "C")
        assert edges == {"A": ["B"]}
        assert updated == {"A": ["B", "C"]}


class TestSocialGraph:
    """Repository-backed follow operations."""

    def test_follow_real_user_is_a_request(self, app, registered):
        alice, bob = registered
        saved = app.social.toggle_follow("Alice", "Bob")
        assert saved.persisted
        assert saved.value == RelationStatus.REQUESTED
        assert app.social.relation_status("Bob", "Alice") == RelationStatus.FOLLOWER
        assert app.social.following("Bob") == []

    def test_follow_back_makes_friends(self, app, registered):
        app.social.toggle_follow("Alice", "Bob")
        saved = app.social.toggle_follow("Bob", "Alice")
        assert saved.value == RelationStatus.FRIEND
        assert app.social.friends("Alice") == ["Bob"]
        assert app.social.pending_requests("Alice") == []

    def test_unfollow_only_removes_own_edge(self, app, registered):
        app.social.toggle_follow("Alice", "Bob")
        app.social.toggle_follow("Bob", "Alice")
        saved = app.social.toggle_follow("Alice", "Bob")
        assert saved.value == RelationStatus.FOLLOWER
        assert app.social.following("Bob") == ["Alice"]

    def test_simulated_counterparty_accepts_at_once(self, app, registered):
        saved = app.social.toggle_follow("Alice", "DevSarah")
        assert saved.value == RelationStatus.FRIEND
        assert app.social.edges()["DevSarah"] == ["Alice"]

    def test_unfollow_simulated_keeps_their_edge(self, app, registered):
        app.social.toggle_follow("Alice", "CodeMike")
        saved = app.social.toggle_follow("Alice", "CodeMike")
        assert saved.value == RelationStatus.FOLLOWER

    def test_explicit_simulated_flag(self, app, registered):
        saved = app.social.toggle_follow("Alice", "Bob", is_simulated=True)
        assert saved.value == RelationStatus.FRIEND


class TestTrackingAndLists:
    """Supervisor tracking and the simple directory lists."""

    def test_toggle_tracking(self, app):
        assert app.social.toggle_tracking("Alice").value == ["Alice"]
        assert app.social.tracked_users() == ["Alice"]
        assert app.social.toggle_tracking("Alice").value == []

    def test_directory_search(self, app):
        names = [e.name for e in app.social.directory("saas")]
        assert names == ["SaaS Makers"]
        assert len(app.social.directory()) == 4

    def test_joined_groups_and_added_friends(self, app, store):
        app.social.toggle_joined_group("g1")
        app.social.toggle_added_friend("u2")
        assert store.get("joined_groups") == '["g1"]'
        assert store.get("added_friends") == '["u2"]'
