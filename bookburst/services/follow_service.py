"""Follow graph service."""

import logging
from uuid import UUID

from bookburst.domain.exceptions import InvalidOperation, NotFoundError
from bookburst.domain.repositories import IFollowRepository, IUserRepository
from bookburst.domain.services import IFollowService

logger = logging.getLogger(__name__)


class FollowService(IFollowService):
    """Directed follow edges between users.

    ``follow`` and ``unfollow`` are idempotent; the only rejected call is a
    user following themselves.
    """

    def __init__(self, follow_repository: IFollowRepository, user_repository: IUserRepository):
        self.follow_repository = follow_repository
        self.user_repository = user_repository

    async def follow(self, follower_id: UUID, followed_id: UUID) -> None:
        if follower_id == followed_id:
            raise InvalidOperation("Cannot follow yourself")
        if await self.user_repository.get_by_id(followed_id) is None:
            raise NotFoundError("User not found")
        await self.follow_repository.add(follower_id, followed_id)
        logger.info("User %s follows %s", follower_id, followed_id)

    async def unfollow(self, follower_id: UUID, followed_id: UUID) -> None:
        await self.follow_repository.remove(follower_id, followed_id)
        logger.info("User %s unfollowed %s", follower_id, followed_id)

    async def is_following(self, follower_id: UUID, followed_id: UUID) -> bool:
        return await self.follow_repository.exists(follower_id, followed_id)

    async def list_followers(self, user_id: UUID) -> set[UUID]:
        return await self.follow_repository.list_followers(user_id)

    async def list_following(self, user_id: UUID) -> set[UUID]:
        return await self.follow_repository.list_following(user_id)
