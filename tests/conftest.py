"""Shared fixtures: in-memory implementations of every storage port."""

from typing import Any, Optional
from uuid import UUID, uuid4

import pytest

from bookburst.domain.entities import BehaviorProfile, Book, User, UserBook, UserPreference
from bookburst.domain.repositories import (
    IBehaviorProfileStore,
    IBookRepository,
    IFollowRepository,
    IKeyValueStore,
    ITokenRevocationList,
    IUserBookRepository,
    IUserPreferenceRepository,
    IUserRepository,
)
from bookburst.services.book_service import BookService
from bookburst.services.community_service import CommunityService
from bookburst.services.follow_service import FollowService
from bookburst.services.personalization_service import PersonalizationService
from bookburst.services.preference_service import PreferenceService
from bookburst.services.shelf_service import ShelfService


class InMemoryUserRepository(IUserRepository):
    def __init__(self):
        self.users: dict[UUID, User] = {}

    async def create(self, user: User) -> User:
        self.users[user.id] = user
        return user

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        return self.users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email.lower() == email.strip().lower():
                return user
        return None

    async def list_active(self) -> list[User]:
        return [u for u in self.users.values() if u.is_active]

    async def update(self, user: User) -> User:
        self.users[user.id] = user
        return user


class InMemoryBookRepository(IBookRepository):
    def __init__(self):
        self.books: dict[UUID, Book] = {}

    async def create(self, book: Book) -> Book:
        self.books[book.id] = book
        return book

    async def get_by_id(self, book_id: UUID) -> Optional[Book]:
        return self.books.get(book_id)

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Book]:
        return list(self.books.values())[skip : skip + limit]

    async def list_books(self) -> list[Book]:
        return list(self.books.values())

    async def search(self, query: str, limit: int = 50) -> list[Book]:
        needle = query.strip().lower()
        return [
            b
            for b in self.books.values()
            if needle in b.title.lower()
            or needle in b.author.lower()
            or needle in (b.genre or "").lower()
        ][:limit]

    async def count(self) -> int:
        return len(self.books)


class InMemoryUserBookRepository(IUserBookRepository):
    def __init__(self, books: InMemoryBookRepository):
        self.entries: dict[UUID, UserBook] = {}
        self._books = books

    async def create(self, entry: UserBook) -> UserBook:
        entry.book = self._books.books.get(entry.book_id)
        self.entries[entry.id] = entry
        return entry

    async def get_by_id(self, entry_id: UUID) -> Optional[UserBook]:
        return self.entries.get(entry_id)

    async def list_by_user(self, user_id: UUID) -> list[UserBook]:
        return [e for e in self.entries.values() if e.user_id == user_id]

    async def update(self, entry: UserBook) -> UserBook:
        self.entries[entry.id] = entry
        return entry

    async def delete(self, entry_id: UUID) -> bool:
        return self.entries.pop(entry_id, None) is not None

    async def list_reviewed(
        self,
        viewer_id: Optional[UUID],
        author_ids: Optional[set[UUID]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[UserBook]:
        reviewed = [
            e
            for e in self.entries.values()
            if e.review
            and (e.is_public or e.user_id == viewer_id)
            and (author_ids is None or e.user_id in author_ids)
        ]
        reviewed.sort(key=lambda e: e.date_updated, reverse=True)
        return reviewed[skip : skip + limit]


class InMemoryFollowRepository(IFollowRepository):
    def __init__(self):
        self.edges: set[tuple[UUID, UUID]] = set()

    async def add(self, follower_id: UUID, followed_id: UUID) -> None:
        self.edges.add((follower_id, followed_id))

    async def remove(self, follower_id: UUID, followed_id: UUID) -> None:
        self.edges.discard((follower_id, followed_id))

    async def exists(self, follower_id: UUID, followed_id: UUID) -> bool:
        return (follower_id, followed_id) in self.edges

    async def list_followers(self, user_id: UUID) -> set[UUID]:
        return {a for a, b in self.edges if b == user_id}

    async def list_following(self, user_id: UUID) -> set[UUID]:
        return {b for a, b in self.edges if a == user_id}


class InMemoryPreferenceRepository(IUserPreferenceRepository):
    def __init__(self):
        self.prefs: dict[UUID, UserPreference] = {}

    async def get_or_create(self, user_id: UUID) -> UserPreference:
        if user_id not in self.prefs:
            self.prefs[user_id] = UserPreference(user_id=user_id)
        return self.prefs[user_id]

    async def update(self, pref: UserPreference) -> UserPreference:
        self.prefs[pref.user_id] = pref
        return pref


class InMemoryBehaviorStore(IBehaviorProfileStore):
    def __init__(self):
        self.profiles: dict[UUID, dict] = {}

    async def get(self, user_id: UUID) -> Optional[BehaviorProfile]:
        data = self.profiles.get(user_id)
        return BehaviorProfile.from_dict(data) if data is not None else None

    async def put(self, user_id: UUID, profile: BehaviorProfile) -> None:
        self.profiles[user_id] = profile.to_dict()


class InMemoryKeyValueStore(IKeyValueStore):
    def __init__(self):
        self.data: dict[str, Any] = {}
        self.ttls: dict[str, Optional[int]] = {}
        self.reads = 0

    async def get_json(self, key: str) -> Optional[Any]:
        self.reads += 1
        return self.data.get(key)

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        self.data[key] = value
        self.ttls[key] = ttl_seconds


class InMemoryRevocationList(ITokenRevocationList):
    def __init__(self):
        self.revoked: dict[str, int] = {}

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        self.revoked[jti] = ttl_seconds

    async def is_revoked(self, jti: str) -> bool:
        return jti in self.revoked


class BrokenKeyValueStore(IKeyValueStore):
    """Simulates Redis being unreachable."""

    async def get_json(self, key: str) -> Optional[Any]:
        raise ConnectionError("redis down")

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        raise ConnectionError("redis down")


class UnreadableKeyValueStore(InMemoryKeyValueStore):
    """Holds data, but every read times out."""

    async def get_json(self, key: str) -> Optional[Any]:
        raise TimeoutError("redis read timed out")


class UnreadableBehaviorStore(InMemoryBehaviorStore):
    """Holds profiles, but every read fails."""

    async def get(self, user_id: UUID) -> Optional[BehaviorProfile]:
        raise ConnectionError("database unavailable")


def make_user(name: str = "Reader", **kwargs) -> User:
    return User(
        id=kwargs.pop("id", uuid4()),
        email=kwargs.pop("email", f"{name.lower()}@example.com"),
        name=name,
        hashed_password="x",
        **kwargs,
    )


def make_book(title: str, author: str = "Anon", genre: Optional[str] = None) -> Book:
    return Book(id=uuid4(), title=title, author=author, genre=genre)


# ---------------------------------------------------------------------------
# Port fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def book_repo():
    return InMemoryBookRepository()


@pytest.fixture
def user_book_repo(book_repo):
    return InMemoryUserBookRepository(book_repo)


@pytest.fixture
def follow_repo():
    return InMemoryFollowRepository()


@pytest.fixture
def pref_repo():
    return InMemoryPreferenceRepository()


@pytest.fixture
def behavior_store():
    return InMemoryBehaviorStore()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def revocations():
    return InMemoryRevocationList()


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def book_service(book_repo):
    return BookService(book_repository=book_repo)


@pytest.fixture
def shelf_service(user_book_repo, book_repo):
    return ShelfService(user_book_repository=user_book_repo, book_repository=book_repo)


@pytest.fixture
def follow_service(follow_repo, user_repo):
    return FollowService(follow_repository=follow_repo, user_repository=user_repo)


@pytest.fixture
def community_service(user_repo, follow_repo, user_book_repo):
    return CommunityService(
        user_repository=user_repo,
        follow_repository=follow_repo,
        user_book_repository=user_book_repo,
    )


@pytest.fixture
def preference_service(pref_repo):
    return PreferenceService(preference_repo=pref_repo)


@pytest.fixture
def personalization_service(kv_store, behavior_store, pref_repo, book_repo):
    return PersonalizationService(
        cache=kv_store,
        profile_store=behavior_store,
        preference_repo=pref_repo,
        catalog=book_repo,
        behavior_ttl_seconds=30 * 24 * 60 * 60,
    )


@pytest.fixture
def new_user():
    return make_user


@pytest.fixture
def new_book():
    return make_book


@pytest.fixture
def broken_kv_store():
    return BrokenKeyValueStore()


@pytest.fixture
def unreadable_kv_store():
    return UnreadableKeyValueStore()


@pytest.fixture
def unreadable_behavior_store():
    return UnreadableBehaviorStore()
