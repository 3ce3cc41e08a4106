"""Community API routes: readers, public profiles, follow graph, review feed."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bookburst.api.schemas import (
    FollowStatusResponse,
    ProfileUpdateRequest,
    PublicUserResponse,
    ReviewResponse,
    ShelfEntryResponse,
    UserIdListResponse,
    UserProfileResponse,
    UserResponse,
    UserSummaryResponse,
)
from bookburst.core.dependencies import (
    get_community_service,
    get_current_user,
    get_follow_service,
    get_optional_user,
    get_shelf_service,
)
from bookburst.domain.entities import ReadingStatus, User
from bookburst.domain.exceptions import InvalidOperation, NotFoundError
from bookburst.domain.services import ICommunityService, IFollowService, IShelfService

logger = logging.getLogger(__name__)
users_router = APIRouter(prefix="/users", tags=["users"])
follow_router = APIRouter(prefix="/follow", tags=["follow"])
reviews_router = APIRouter(prefix="/reviews", tags=["reviews"])


def _viewer_id(user: Optional[User]) -> Optional[UUID]:
    return user.id if user else None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@users_router.get("/", response_model=list[UserSummaryResponse])
async def list_users(
    community: Annotated[ICommunityService, Depends(get_community_service)],
) -> list[UserSummaryResponse]:
    """All active readers with their follower counts."""
    users = await community.list_users()
    return [
        UserSummaryResponse(
            id=user.id,
            name=user.name,
            bio=user.bio,
            profile_picture=user.profile_picture,
            created_at=user.created_at,
            followers_count=count,
        )
        for user, count in users
    ]


@users_router.patch("/me", response_model=UserResponse)
async def update_me(
    body: ProfileUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    community: Annotated[ICommunityService, Depends(get_community_service)],
) -> UserResponse:
    try:
        updated = await community.update_profile(current_user, name=body.name, bio=body.bio)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserResponse.model_validate(updated)


@users_router.get("/{user_id}", response_model=PublicUserResponse)
async def get_user(
    user_id: UUID,
    community: Annotated[ICommunityService, Depends(get_community_service)],
) -> PublicUserResponse:
    try:
        user = await community.get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return PublicUserResponse.model_validate(user)


@users_router.get("/{user_id}/profile", response_model=UserProfileResponse)
async def get_profile(
    user_id: UUID,
    community: Annotated[ICommunityService, Depends(get_community_service)],
    viewer: Annotated[Optional[User], Depends(get_optional_user)],
) -> UserProfileResponse:
    """A reader's profile with the shelf entries the caller may see."""
    try:
        profile = await community.get_profile(user_id, _viewer_id(viewer))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return UserProfileResponse(
        user=PublicUserResponse.model_validate(profile["user"]),
        books=[ShelfEntryResponse.model_validate(e) for e in profile["books"]],
        followers_count=profile["followers_count"],
        following_count=profile["following_count"],
        is_following=profile["is_following"],
    )


@users_router.get("/{user_id}/books", response_model=list[ShelfEntryResponse])
async def get_user_books(
    user_id: UUID,
    community: Annotated[ICommunityService, Depends(get_community_service)],
    shelf_service: Annotated[IShelfService, Depends(get_shelf_service)],
    viewer: Annotated[Optional[User], Depends(get_optional_user)],
    status_filter: Annotated[Optional[ReadingStatus], Query(alias="status")] = None,
) -> list[ShelfEntryResponse]:
    try:
        await community.get_user(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    entries = await shelf_service.get_shelf(user_id, _viewer_id(viewer), status_filter)
    return [ShelfEntryResponse.model_validate(e) for e in entries]


@users_router.get("/{user_id}/followers", response_model=UserIdListResponse)
async def list_followers(
    user_id: UUID,
    follow_service: Annotated[IFollowService, Depends(get_follow_service)],
) -> UserIdListResponse:
    followers = await follow_service.list_followers(user_id)
    return UserIdListResponse(user_ids=sorted(followers, key=str), count=len(followers))


@users_router.get("/{user_id}/following", response_model=UserIdListResponse)
async def list_following(
    user_id: UUID,
    follow_service: Annotated[IFollowService, Depends(get_follow_service)],
) -> UserIdListResponse:
    following = await follow_service.list_following(user_id)
    return UserIdListResponse(user_ids=sorted(following, key=str), count=len(following))


# ---------------------------------------------------------------------------
# Follow graph
# ---------------------------------------------------------------------------
@follow_router.post("/{user_id}", response_model=FollowStatusResponse)
async def follow(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    follow_service: Annotated[IFollowService, Depends(get_follow_service)],
) -> FollowStatusResponse:
    """Follow a reader.  Following someone twice is a no-op."""
    try:
        await follow_service.follow(current_user.id, user_id)
    except InvalidOperation as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return FollowStatusResponse(is_following=True)


@follow_router.delete("/{user_id}", response_model=FollowStatusResponse)
async def unfollow(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    follow_service: Annotated[IFollowService, Depends(get_follow_service)],
) -> FollowStatusResponse:
    await follow_service.unfollow(current_user.id, user_id)
    return FollowStatusResponse(is_following=False)


@follow_router.get("/status/{user_id}", response_model=FollowStatusResponse)
async def follow_status(
    user_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    follow_service: Annotated[IFollowService, Depends(get_follow_service)],
) -> FollowStatusResponse:
    is_following = await follow_service.is_following(current_user.id, user_id)
    return FollowStatusResponse(is_following=is_following)


# ---------------------------------------------------------------------------
# Review feed
# ---------------------------------------------------------------------------
@reviews_router.get("/", response_model=list[ReviewResponse])
async def list_reviews(
    community: Annotated[ICommunityService, Depends(get_community_service)],
    viewer: Annotated[Optional[User], Depends(get_optional_user)],
    following: bool = False,
    limit: int = Query(50, ge=1, le=200),
) -> list[ReviewResponse]:
    """Newest reviews, optionally only from readers the caller follows."""
    feed = await community.list_reviews(_viewer_id(viewer), following_only=following, limit=limit)
    return [
        ReviewResponse(
            entry=ShelfEntryResponse.model_validate(entry),
            author=PublicUserResponse.model_validate(author),
        )
        for entry, author in feed
    ]
