"""
Tests for the forum service.
"""

import pytest

from opc_diary.exceptions import InvalidInputError, PermissionDeniedError, PostNotFoundError
from opc_diary.models import ForumCategory


@pytest.fixture
def alice(profile_factory):
    return profile_factory("Alice", title="Maker")


@pytest.fixture
def post(app, alice):
    return app.forum.create_post(alice, "Launching my tiny SaaS", category=ForumCategory.SHOWCASE).value


class TestPosts:
    """Creating, editing and deleting posts."""

    def test_new_post_goes_first(self, app, post):
        assert [p.id for p in app.forum.posts()] == [post.id, "f1", "f2"]

    def test_author_snapshot(self, post):
        assert post.author.name == "Alice"
        assert post.author.title == "Maker"
        assert post.author.avatar.endswith("seed=Alice")
        assert post.tags == ["Discussion"]

    def test_default_title(self, app, profile_factory):
        saved = app.forum.create_post(profile_factory("Bob"), "hi")
        assert saved.value.author.title == "Solo Founder"

    def test_empty_post_rejected(self, app, alice):
        with pytest.raises(InvalidInputError):
            app.forum.create_post(alice, "  ")

    def test_only_author_may_edit(self, app, post):
        with pytest.raises(PermissionDeniedError):
            app.forum.edit_post("Bob", post.id, content="hijack")
        app.forum.edit_post("Alice", post.id, content="Edited", category=ForumCategory.HELP)
        edited = app.forum.get_post(post.id)
        assert edited.content == "Edited"
        assert edited.category == ForumCategory.HELP

    def test_only_author_may_delete(self, app, post):
        with pytest.raises(PermissionDeniedError):
            app.forum.delete_post("Bob", post.id)
        app.forum.delete_post("Alice", post.id)
        with pytest.raises(PostNotFoundError):
            app.forum.get_post(post.id)


class TestLikes:
    """Likes toggle per company name."""

    def test_toggle_twice_restores_count(self, app):
        before = app.forum.get_post("f1").likes
        liked = app.forum.toggle_like("Alice", "f1").value
        assert liked.likes == before + 1
        assert liked.liked_by == ["Alice"]
        unliked = app.forum.toggle_like("Alice", "f1").value
        assert unliked.likes == before
        assert unliked.liked_by == []

    def test_likes_are_per_user(self, app):
        app.forum.toggle_like("Alice", "f2")
        app.forum.toggle_like("Bob", "f2")
        assert app.forum.get_post("f2").likes == 17


class TestCommentsAndSearch:
    """Forum comments and lookups."""

    def test_comment_increments_count(self, app, alice):
        app.forum.add_comment(alice, "f2", "Try Stripe")
        post = app.forum.get_post("f2")
        assert post.comments == 1
        assert post.comments_list[-1].author.name == "Alice"

    def test_search_matches_content_author_and_tags(self, app, post):
        assert [p.id for p in app.forum.search("payment")] == ["f2"]
        assert [p.id for p in app.forum.search("codemike")] == ["f1"]
        assert [p.id for p in app.forum.search("bug fix")] == ["f1"]
        assert [p.id for p in app.forum.search("", ForumCategory.SHOWCASE)] == [post.id]

    def test_posts_by(self, app, post):
        assert app.forum.posts_by("Alice") == [post]
