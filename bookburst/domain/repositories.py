"""Repository interfaces (ports) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from bookburst.domain.entities import (
    BehaviorProfile,
    Book,
    User,
    UserBook,
    UserPreference,
)


class IUserRepository(ABC):

    @abstractmethod
    async def create(self, user: User) -> User:
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def list_active(self) -> list[User]:
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass


class IBookCatalogSource(ABC):
    """Read-only source of candidate books for recommendations."""

    @abstractmethod
    async def list_books(self) -> list[Book]:
        pass


class IBookRepository(IBookCatalogSource):

    @abstractmethod
    async def create(self, book: Book) -> Book:
        pass

    @abstractmethod
    async def get_by_id(self, book_id: UUID) -> Optional[Book]:
        pass

    @abstractmethod
    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Book]:
        pass

    @abstractmethod
    async def search(self, query: str, limit: int = 50) -> list[Book]:
        """Case-insensitive substring match on title, author, and genre."""
        pass

    @abstractmethod
    async def count(self) -> int:
        pass


class IUserBookRepository(ABC):

    @abstractmethod
    async def create(self, entry: UserBook) -> UserBook:
        pass

    @abstractmethod
    async def get_by_id(self, entry_id: UUID) -> Optional[UserBook]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: UUID) -> list[UserBook]:
        """All entries of a user with their ``book`` populated."""
        pass

    @abstractmethod
    async def update(self, entry: UserBook) -> UserBook:
        pass

    @abstractmethod
    async def delete(self, entry_id: UUID) -> bool:
        pass

    @abstractmethod
    async def list_reviewed(
        self,
        viewer_id: Optional[UUID],
        author_ids: Optional[set[UUID]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[UserBook]:
        """Reviewed entries the viewer may see, newest first, ``book`` populated.

        Visible means public or owned by ``viewer_id``.  ``author_ids``, when
        given, restricts the result to those authors.  Filtering happens before
        ``skip``/``limit`` are applied.
        """
        pass


class IFollowRepository(ABC):
    """Directed follow edges.  Every method is a single atomic statement."""

    @abstractmethod
    async def add(self, follower_id: UUID, followed_id: UUID) -> None:
        """Insert the edge; do nothing if it already exists."""
        pass

    @abstractmethod
    async def remove(self, follower_id: UUID, followed_id: UUID) -> None:
        """Delete the edge; do nothing if it does not exist."""
        pass

    @abstractmethod
    async def exists(self, follower_id: UUID, followed_id: UUID) -> bool:
        pass

    @abstractmethod
    async def list_followers(self, user_id: UUID) -> set[UUID]:
        pass

    @abstractmethod
    async def list_following(self, user_id: UUID) -> set[UUID]:
        pass


class IUserPreferenceRepository(ABC):

    @abstractmethod
    async def get_or_create(self, user_id: UUID) -> UserPreference:
        pass

    @abstractmethod
    async def update(self, pref: UserPreference) -> UserPreference:
        pass


class IBehaviorProfileStore(ABC):
    """Durable behaviour storage for signed-in users."""

    @abstractmethod
    async def get(self, user_id: UUID) -> Optional[BehaviorProfile]:
        pass

    @abstractmethod
    async def put(self, user_id: UUID, profile: BehaviorProfile) -> None:
        pass


class IKeyValueStore(ABC):
    """Client-local cache: string keys, JSON values, optional expiry."""

    @abstractmethod
    async def get_json(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        pass


class ITokenRevocationList(ABC):
    """IDs of signed-out access tokens, each kept until the token expires."""

    @abstractmethod
    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    async def is_revoked(self, jti: str) -> bool:
        pass
