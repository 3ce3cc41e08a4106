"""Community service: reader directory, public profiles, and the review feed."""

import logging
from typing import Optional
from uuid import UUID

from bookburst.domain.entities import User, UserBook
from bookburst.domain.exceptions import NotFoundError
from bookburst.domain.repositories import IFollowRepository, IUserBookRepository, IUserRepository
from bookburst.domain.services import ICommunityService
from bookburst.domain.visibility import filter_visible

logger = logging.getLogger(__name__)


class CommunityService(ICommunityService):

    def __init__(
        self,
        user_repository: IUserRepository,
        follow_repository: IFollowRepository,
        user_book_repository: IUserBookRepository,
    ):
        self.user_repository = user_repository
        self.follow_repository = follow_repository
        self.user_book_repository = user_book_repository

    async def list_users(self) -> list[tuple[User, int]]:
        users = await self.user_repository.list_active()
        result = []
        for user in users:
            followers = await self.follow_repository.list_followers(user.id)
            result.append((user, len(followers)))
        return result

    async def get_user(self, user_id: UUID) -> User:
        user = await self.user_repository.get_by_id(user_id)
        if user is None or not user.is_active:
            raise NotFoundError("User not found")
        return user

    async def get_profile(self, user_id: UUID, viewer_id: Optional[UUID]) -> dict:
        """Return the user, the shelf entries the viewer may see, and follow counts."""
        user = await self.get_user(user_id)
        entries = await self.user_book_repository.list_by_user(user_id)
        followers = await self.follow_repository.list_followers(user_id)
        following = await self.follow_repository.list_following(user_id)
        return {
            "user": user,
            "books": filter_visible(entries, viewer_id),
            "followers_count": len(followers),
            "following_count": len(following),
            "is_following": (viewer_id in followers) if viewer_id is not None else None,
        }

    async def update_profile(
        self, user: User, name: Optional[str] = None, bio: Optional[str] = None
    ) -> User:
        if name is not None:
            name = name.strip()
            if not name:
                raise ValueError("Name cannot be empty")
            user.name = name
        if bio is not None:
            user.bio = bio
        updated = await self.user_repository.update(user)
        logger.info("Profile updated for user %s", user.id)
        return updated

    async def list_reviews(
        self, viewer_id: Optional[UUID], following_only: bool = False, limit: int = 50
    ) -> list[tuple[UserBook, User]]:
        """Newest reviews the viewer may see, optionally only from people they follow.

        Visibility and the follow filter are applied by the repository query,
        so private rows never use up the page.  Entries by deactivated authors
        are dropped here; further pages are fetched until ``limit`` is met.
        """
        author_ids: Optional[set[UUID]] = None
        if following_only:
            if viewer_id is None:
                return []
            author_ids = await self.follow_repository.list_following(viewer_id)
            if not author_ids:
                return []

        authors: dict[UUID, Optional[User]] = {}
        feed: list[tuple[UserBook, User]] = []
        skip = 0
        while len(feed) < limit:
            page = await self.user_book_repository.list_reviewed(
                viewer_id, author_ids=author_ids, skip=skip, limit=limit
            )
            for entry in filter_visible(page, viewer_id):
                if entry.user_id not in authors:
                    authors[entry.user_id] = await self.user_repository.get_by_id(entry.user_id)
                author = authors[entry.user_id]
                if author is None or not author.is_active:
                    continue
                feed.append((entry, author))
                if len(feed) >= limit:
                    break
            if len(page) < limit:
                break
            skip += limit
        return feed
