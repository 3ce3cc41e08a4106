"""Domain entities for BookBurst."""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID


class ReadingStatus(str, enum.Enum):
    READING = "reading"
    FINISHED = "finished"
    WANT_TO_READ = "want_to_read"


@dataclass
class User:
    id: UUID
    email: str
    name: str
    hashed_password: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Book:
    id: UUID
    title: str
    author: str
    genre: Optional[str] = None
    cover_image: Optional[str] = None
    publication_date: Optional[str] = None
    isbn: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class UserBook:
    """A book on a user's shelf, with their reading state and review."""

    id: UUID
    user_id: UUID
    book_id: UUID
    status: ReadingStatus
    progress: Optional[int] = None  # 0-100 %
    rating: Optional[int] = None  # 0-5
    review: Optional[str] = None
    is_public: bool = False
    date_added: datetime = field(default_factory=datetime.utcnow)
    date_updated: datetime = field(default_factory=datetime.utcnow)
    book: Optional[Book] = None


@dataclass
class FollowEdge:
    follower_id: UUID
    followed_id: UUID
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class UserPreference:
    """Settings a signed-in user stores explicitly on the server."""

    user_id: UUID
    theme: str = "light"  # light | dark | system
    last_active_tab: Optional[str] = None
    favorite_genres: list[str] = field(default_factory=list)
    view_mode: str = "grid"  # grid | list
    sort_order: str = "date_added"  # title | author | date_added | rating
    recently_viewed_books: list[str] = field(default_factory=list)
    reading_time: int = 0  # seconds
    last_active_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class BehaviorProfile:
    """Observed browsing behaviour of one client.

    Every list is most-recent-first and free of duplicates.  The order of
    ``interactions_by_genre`` is the order in which genres were first seen,
    which is what breaks ties between equal counts.
    """

    recently_viewed_genres: list[str] = field(default_factory=list)
    recently_viewed_authors: list[str] = field(default_factory=list)
    recently_viewed_books: list[str] = field(default_factory=list)
    search_history: list[str] = field(default_factory=list)
    interactions_by_genre: dict[str, int] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.interactions_by_genre and not self.recently_viewed_genres

    def to_dict(self) -> dict[str, Any]:
        return {
            "recently_viewed_genres": list(self.recently_viewed_genres),
            "recently_viewed_authors": list(self.recently_viewed_authors),
            "recently_viewed_books": list(self.recently_viewed_books),
            "search_history": list(self.search_history),
            "interactions_by_genre": dict(self.interactions_by_genre),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BehaviorProfile":
        """Build a profile from its JSON form.

        Raises ``ValueError`` when the payload is not shaped like a profile.
        """
        if not isinstance(data, dict):
            raise ValueError("Behavior profile must be a JSON object")
        counts = data.get("interactions_by_genre") or {}
        if not isinstance(counts, dict):
            raise ValueError("interactions_by_genre must be an object")
        return cls(
            recently_viewed_genres=_str_list(data.get("recently_viewed_genres")),
            recently_viewed_authors=_str_list(data.get("recently_viewed_authors")),
            recently_viewed_books=_str_list(data.get("recently_viewed_books")),
            search_history=_str_list(data.get("search_history")),
            interactions_by_genre={str(g): int(c) for g, c in counts.items()},
        )


def _str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("Expected a list")
    return [str(v) for v in value]
