"""Dependency injection container."""

from typing import Optional
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from bookburst.core.client_state import ConsentStore, get_client_id
from bookburst.core.config import settings
from bookburst.core.security import decode_access_token
from bookburst.domain.entities import User
from bookburst.domain.personalization import PersonalizationContext
from bookburst.domain.repositories import (
    IBehaviorProfileStore,
    IBookRepository,
    IFollowRepository,
    IKeyValueStore,
    IUserBookRepository,
    IUserPreferenceRepository,
    IUserRepository,
)
from bookburst.domain.services import (
    IBookService,
    ICommunityService,
    IFollowService,
    IPersonalizationService,
    IPreferenceService,
    IShelfService,
)
from bookburst.infrastructure.cache.redis_store import (
    RedisKeyValueStore,
    TokenRevocationList,
    get_redis,
)
from bookburst.infrastructure.database.connection import get_db
from bookburst.infrastructure.database.repository import (
    BehaviorProfileRepository,
    BookRepository,
    FollowRepository,
    UserBookRepository,
    UserPreferenceRepository,
    UserRepository,
)
from bookburst.services.auth_service import AuthService
from bookburst.services.book_service import BookService
from bookburst.services.community_service import CommunityService
from bookburst.services.follow_service import FollowService
from bookburst.services.personalization_service import PersonalizationService
from bookburst.services.preference_service import PreferenceService
from bookburst.services.shelf_service import ShelfService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
async def get_key_value_store(
    redis_client: aioredis.Redis = Depends(get_redis),
) -> IKeyValueStore:
    return RedisKeyValueStore(redis_client)


async def get_revocation_list(
    redis_client: aioredis.Redis = Depends(get_redis),
) -> TokenRevocationList:
    return TokenRevocationList(redis_client)


# ---------------------------------------------------------------------------
# Repository providers
# ---------------------------------------------------------------------------
async def get_user_repository(session: AsyncSession = Depends(get_db)) -> IUserRepository:
    return UserRepository(session)


async def get_book_repository(session: AsyncSession = Depends(get_db)) -> IBookRepository:
    return BookRepository(session)


async def get_user_book_repository(
    session: AsyncSession = Depends(get_db),
) -> IUserBookRepository:
    return UserBookRepository(session)


async def get_follow_repository(session: AsyncSession = Depends(get_db)) -> IFollowRepository:
    return FollowRepository(session)


async def get_preference_repository(
    session: AsyncSession = Depends(get_db),
) -> IUserPreferenceRepository:
    return UserPreferenceRepository(session)


async def get_behavior_profile_store(
    session: AsyncSession = Depends(get_db),
) -> IBehaviorProfileStore:
    return BehaviorProfileRepository(session)


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
async def get_auth_service(
    user_repo: IUserRepository = Depends(get_user_repository),
    revocations: TokenRevocationList = Depends(get_revocation_list),
) -> AuthService:
    return AuthService(user_repository=user_repo, revocations=revocations)


async def get_book_service(
    repo: IBookRepository = Depends(get_book_repository),
) -> IBookService:
    return BookService(book_repository=repo)


async def get_shelf_service(
    user_book_repo: IUserBookRepository = Depends(get_user_book_repository),
    book_repo: IBookRepository = Depends(get_book_repository),
) -> IShelfService:
    return ShelfService(user_book_repository=user_book_repo, book_repository=book_repo)


async def get_follow_service(
    follow_repo: IFollowRepository = Depends(get_follow_repository),
    user_repo: IUserRepository = Depends(get_user_repository),
) -> IFollowService:
    return FollowService(follow_repository=follow_repo, user_repository=user_repo)


async def get_community_service(
    user_repo: IUserRepository = Depends(get_user_repository),
    follow_repo: IFollowRepository = Depends(get_follow_repository),
    user_book_repo: IUserBookRepository = Depends(get_user_book_repository),
) -> ICommunityService:
    return CommunityService(
        user_repository=user_repo,
        follow_repository=follow_repo,
        user_book_repository=user_book_repo,
    )


async def get_preference_service(
    pref_repo: IUserPreferenceRepository = Depends(get_preference_repository),
) -> IPreferenceService:
    return PreferenceService(preference_repo=pref_repo)


async def get_personalization_service(
    cache: IKeyValueStore = Depends(get_key_value_store),
    profile_store: IBehaviorProfileStore = Depends(get_behavior_profile_store),
    pref_repo: IUserPreferenceRepository = Depends(get_preference_repository),
    book_repo: IBookRepository = Depends(get_book_repository),
) -> IPersonalizationService:
    return PersonalizationService(
        cache=cache,
        profile_store=profile_store,
        preference_repo=pref_repo,
        catalog=book_repo,
        behavior_ttl_seconds=settings.behavior_ttl_days * 24 * 60 * 60,
    )


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------
async def _resolve_user(
    token: str, user_repo: IUserRepository, revocations: TokenRevocationList
) -> User:
    """Decode a JWT and return its active user, rejecting revoked tokens."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    jti: Optional[str] = payload.get("jti")
    if jti and await revocations.is_revoked(jti):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has been revoked",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id_str: Optional[str] = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise credentials_exception
    user = await user_repo.get_by_id(user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    user_repo: IUserRepository = Depends(get_user_repository),
    revocations: TokenRevocationList = Depends(get_revocation_list),
) -> User:
    return await _resolve_user(token, user_repo, revocations)


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    user_repo: IUserRepository = Depends(get_user_repository),
    revocations: TokenRevocationList = Depends(get_revocation_list),
) -> Optional[User]:
    """Like :func:`get_current_user`, but anonymous callers get ``None``."""
    if not token:
        return None
    return await _resolve_user(token, user_repo, revocations)


# ---------------------------------------------------------------------------
# Personalization context
# ---------------------------------------------------------------------------
def get_consent_store(request: Request, response: Response) -> ConsentStore:
    return ConsentStore(request, response)


async def get_personalization_context(
    request: Request,
    response: Response,
    consent_store: ConsentStore = Depends(get_consent_store),
    user: Optional[User] = Depends(get_optional_user),
    service: IPersonalizationService = Depends(get_personalization_service),
) -> PersonalizationContext:
    """Build the request's personalization context from cookies and stores."""
    client_id = get_client_id(request, response)
    return await service.load_context(
        client_id=client_id,
        consent=consent_store.has_consent(),
        user_id=user.id if user else None,
    )
