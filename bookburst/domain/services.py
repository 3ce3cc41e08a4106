"""Domain-level application service interfaces (ports).

These abstract classes define the contracts that the API layer depends on.
Concrete implementations live in ``bookburst/services/`` and are wired
together by the composition root in ``bookburst/core/dependencies.py``.

Route handlers import from ``bookburst.domain`` only, so every service can
be replaced with a test double via FastAPI's ``app.dependency_overrides``.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from bookburst.domain.entities import (
    BehaviorProfile,
    Book,
    ReadingStatus,
    User,
    UserBook,
    UserPreference,
)
from bookburst.domain.personalization import PersonalizationContext


class IBookService(ABC):

    @abstractmethod
    async def create_book(
        self,
        title: str,
        author: str,
        genre: Optional[str] = None,
        cover_image: Optional[str] = None,
        publication_date: Optional[str] = None,
        isbn: Optional[str] = None,
    ) -> Book:
        pass

    @abstractmethod
    async def get_book(self, book_id: UUID) -> Optional[Book]:
        pass

    @abstractmethod
    async def list_books(self, skip: int = 0, limit: int = 100) -> list[Book]:
        pass

    @abstractmethod
    async def search_books(self, query: str, limit: int = 50) -> list[Book]:
        pass

    @abstractmethod
    async def count_books(self) -> int:
        pass


class IShelfService(ABC):

    @abstractmethod
    async def add_to_shelf(
        self,
        user_id: UUID,
        book_id: UUID,
        status: ReadingStatus,
        progress: Optional[int] = None,
        rating: Optional[int] = None,
        review: Optional[str] = None,
        is_public: bool = False,
    ) -> UserBook:
        """Put a book on the user's shelf.

        Raises ``NotFoundError`` for an unknown book and
        ``DuplicateEntryError`` if a book with the same title and author
        (case-insensitive) is already there.
        """
        pass

    @abstractmethod
    async def update_entry(self, user_id: UUID, entry_id: UUID, changes: dict) -> UserBook:
        """Apply ``changes`` to an entry owned by ``user_id``."""
        pass

    @abstractmethod
    async def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        pass

    @abstractmethod
    async def get_shelf(
        self,
        owner_id: UUID,
        viewer_id: Optional[UUID],
        status: Optional[ReadingStatus] = None,
    ) -> list[UserBook]:
        """Entries of ``owner_id`` that ``viewer_id`` is allowed to see."""
        pass


class IFollowService(ABC):

    @abstractmethod
    async def follow(self, follower_id: UUID, followed_id: UUID) -> None:
        pass

    @abstractmethod
    async def unfollow(self, follower_id: UUID, followed_id: UUID) -> None:
        pass

    @abstractmethod
    async def is_following(self, follower_id: UUID, followed_id: UUID) -> bool:
        pass

    @abstractmethod
    async def list_followers(self, user_id: UUID) -> set[UUID]:
        pass

    @abstractmethod
    async def list_following(self, user_id: UUID) -> set[UUID]:
        pass


class ICommunityService(ABC):

    @abstractmethod
    async def list_users(self) -> list[tuple[User, int]]:
        """Active users paired with their follower counts."""
        pass

    @abstractmethod
    async def get_user(self, user_id: UUID) -> User:
        pass

    @abstractmethod
    async def get_profile(self, user_id: UUID, viewer_id: Optional[UUID]) -> dict:
        pass

    @abstractmethod
    async def update_profile(
        self, user: User, name: Optional[str] = None, bio: Optional[str] = None
    ) -> User:
        pass

    @abstractmethod
    async def list_reviews(
        self, viewer_id: Optional[UUID], following_only: bool = False, limit: int = 50
    ) -> list[tuple[UserBook, User]]:
        pass


class IPreferenceService(ABC):

    @abstractmethod
    async def get_preferences(self, user_id: UUID) -> UserPreference:
        pass

    @abstractmethod
    async def update_preferences(
        self,
        user_id: UUID,
        *,
        theme: Optional[str] = None,
        last_active_tab: Optional[str] = None,
        favorite_genres: Optional[list[str]] = None,
        view_mode: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> UserPreference:
        pass

    @abstractmethod
    async def add_reading_time(self, user_id: UUID, seconds: int) -> UserPreference:
        pass

    @abstractmethod
    async def add_recently_viewed(self, user_id: UUID, book_id: UUID) -> UserPreference:
        pass


class IPersonalizationService(ABC):

    @abstractmethod
    async def load_context(
        self, client_id: str, consent: bool, user_id: Optional[UUID] = None
    ) -> PersonalizationContext:
        pass

    @abstractmethod
    async def track_view(
        self,
        ctx: PersonalizationContext,
        book_id: UUID,
        genre: Optional[str] = None,
        author: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    async def track_search(self, ctx: PersonalizationContext, query: str) -> None:
        pass

    @abstractmethod
    def get_behavior(self, ctx: PersonalizationContext) -> BehaviorProfile:
        pass

    @abstractmethod
    def get_favorite_genres(self, ctx: PersonalizationContext) -> list[str]:
        pass

    @abstractmethod
    def should_highlight(self, ctx: PersonalizationContext, genre: str) -> bool:
        pass

    @abstractmethod
    async def recommend(
        self, ctx: PersonalizationContext, limit: int = 10
    ) -> tuple[list[tuple[Book, int]], str]:
        """Return ``(ranked (book, score) pairs, strategy label)``."""
        pass
