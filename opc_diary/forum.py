"""
Forum: one application-wide, newest-first collection of posts.

Posts snapshot their author's name, avatar and title at post time. Only the
author may edit or delete a post. Likes toggle per (post, company name):
``likedBy`` holds who liked, ``likes`` moves with it.
"""

import logging
from typing import List, Optional

from .clock import Clock
from .constants import AVATAR_URL_TEMPLATE, DEFAULT_FORUM_TAGS, DEFAULT_USER_TITLE
from .exceptions import InvalidInputError, PermissionDeniedError, PostNotFoundError
from .models import CommentAuthor, ForumCategory, ForumComment, ForumPost, PostAuthor, UserProfile
from .repository import Repositories
from .results import Saved, attempt

logger = logging.getLogger(__name__)


def _avatar_for(profile: UserProfile) -> str:
    return profile.avatar or AVATAR_URL_TEMPLATE.format(seed=profile.company_name)


class ForumService:
    """Create, edit, like, comment on and search forum posts."""

    def __init__(self, repos: Repositories, clock: Clock = None):
        self.repos = repos
        self.clock = clock or Clock()

    # =============================================================================
    # Reads
    # =============================================================================

    def posts(self) -> List[ForumPost]:
        return self.repos.forum.load()

    def get_post(self, post_id: str) -> ForumPost:
        post = next((p for p in self.posts() if p.id == post_id), None)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    def search(self, query: str, category: Optional[ForumCategory] = None) -> List[ForumPost]:
        """Case-insensitive match on content, author name or any tag."""
        wanted = (query or "").lower()
        results = []
        for post in self.posts():
            if category is not None and post.category != category:
                continue
            if (
                wanted in post.content.lower()
                or wanted in post.author.name.lower()
                or any(wanted in tag.lower() for tag in post.tags)
            ):
                results.append(post)
        return results

    def posts_by(self, company_name: str) -> List[ForumPost]:
        return [p for p in self.posts() if p.author.name == company_name]

    # =============================================================================
    # Mutations
    # =============================================================================

    def _save(self, posts: List[ForumPost], value):
        return attempt(lambda: self.repos.forum.save(posts), value)

    def create_post(
        self,
        author: UserProfile,
        content: str,
        image: Optional[str] = None,
        link: Optional[str] = None,
        category: ForumCategory = ForumCategory.DISCUSSION,
        tags: Optional[List[str]] = None
    ) -> Saved[ForumPost]:
        if not (content or "").strip() and not image and not link:
            raise InvalidInputError("post", "needs text, an image or a link")
        post = ForumPost(
            id=self.clock.new_id(),
            author=PostAuthor(
                name=author.company_name,
                avatar=_avatar_for(author),
                title=author.title or DEFAULT_USER_TITLE,
            ),
            content=content or "",
            image=image,
            link=link or None,
            category=category,
            timestamp=self.clock.now_ms(),
            tags=list(tags) if tags else list(DEFAULT_FORUM_TAGS),
        )
        posts = self.posts()
        posts.insert(0, post)
        logger.info(f"'{author.company_name}' created forum post {post.id}")
        return self._save(posts, post)

    def _locate(self, posts: List[ForumPost], post_id: str) -> int:
        for i, post in enumerate(posts):
            if post.id == post_id:
                return i
        raise PostNotFoundError(post_id)

    def edit_post(
        self,
        company_name: str,
        post_id: str,
        content: Optional[str] = None,
        image: Optional[str] = None,
        link: Optional[str] = None,
        category: Optional[ForumCategory] = None
    ) -> Saved[ForumPost]:
        posts = self.posts()
        post = posts[self._locate(posts, post_id)]
        if post.author.name != company_name:
            raise PermissionDeniedError("edit this post", company_name)
        if content is not None:
            post.content = content
        if image is not None:
            post.image = image or None
        if link is not None:
            post.link = link or None
        if category is not None:
            post.category = category
        return self._save(posts, post)

    def delete_post(self, company_name: str, post_id: str) -> Saved[List[ForumPost]]:
        posts = self.posts()
        post = posts[self._locate(posts, post_id)]
        if post.author.name != company_name:
            raise PermissionDeniedError("delete this post", company_name)
        posts = [p for p in posts if p.id != post_id]
        logger.info(f"'{company_name}' deleted forum post {post_id}")
        return self._save(posts, posts)

    def toggle_like(self, company_name: str, post_id: str) -> Saved[ForumPost]:
        """Like or unlike; toggling twice restores the previous count."""
        posts = self.posts()
        post = posts[self._locate(posts, post_id)]
        if company_name in post.liked_by:
            post.liked_by = [n for n in post.liked_by if n != company_name]
            post.likes = max(0, post.likes - 1)
        else:
            post.liked_by = post.liked_by + [company_name]
            post.likes += 1
        return self._save(posts, post)

    def add_comment(self, author: UserProfile, post_id: str, content: str) -> Saved[ForumComment]:
        if not content or not content.strip():
            raise InvalidInputError("comment", "must not be empty")
        posts = self.posts()
        post = posts[self._locate(posts, post_id)]
        comment = ForumComment(
            id=self.clock.new_id(),
            author=CommentAuthor(name=author.company_name, avatar=_avatar_for(author)),
            content=content,
            timestamp=self.clock.now_ms(),
        )
        post.comments_list.append(comment)
        post.comments += 1
        return self._save(posts, comment)


__all__ = ["ForumService"]
