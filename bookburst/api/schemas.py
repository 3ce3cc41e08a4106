"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from bookburst.domain.entities import ReadingStatus


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
class SignupRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicUserResponse(BaseModel):
    """A user as other readers see them (no email)."""

    id: UUID
    name: str
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    genre: Optional[str] = Field(None, max_length=100)
    cover_image: Optional[str] = None
    publication_date: Optional[str] = None
    isbn: Optional[str] = Field(None, max_length=32)


class BookResponse(BaseModel):
    id: UUID
    title: str
    author: str
    genre: Optional[str] = None
    cover_image: Optional[str] = None
    publication_date: Optional[str] = None
    isbn: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    books: list[BookResponse]
    total: int
    page: int
    limit: int


# ---------------------------------------------------------------------------
# Shelf
# ---------------------------------------------------------------------------
class ShelfEntryCreate(BaseModel):
    book_id: UUID
    status: ReadingStatus = ReadingStatus.WANT_TO_READ
    progress: Optional[int] = Field(None, ge=0, le=100)
    rating: Optional[int] = Field(None, ge=0, le=5)
    review: Optional[str] = None
    is_public: bool = False


class ShelfEntryUpdate(BaseModel):
    """Partial update; only fields present in the body change."""

    status: Optional[ReadingStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    rating: Optional[int] = Field(None, ge=0, le=5)
    review: Optional[str] = None
    is_public: Optional[bool] = None


class ShelfEntryResponse(BaseModel):
    id: UUID
    user_id: UUID
    book_id: UUID
    status: ReadingStatus
    progress: Optional[int] = None
    rating: Optional[int] = None
    review: Optional[str] = None
    is_public: bool
    date_added: datetime
    date_updated: datetime
    book: Optional[BookResponse] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Community
# ---------------------------------------------------------------------------
class UserSummaryResponse(PublicUserResponse):
    followers_count: int


class UserProfileResponse(BaseModel):
    user: PublicUserResponse
    books: list[ShelfEntryResponse]
    followers_count: int
    following_count: int
    is_following: Optional[bool] = None


class FollowStatusResponse(BaseModel):
    is_following: bool


class UserIdListResponse(BaseModel):
    user_ids: list[UUID]
    count: int


class ReviewResponse(BaseModel):
    entry: ShelfEntryResponse
    author: PublicUserResponse


# ---------------------------------------------------------------------------
# Explicit Preferences
# ---------------------------------------------------------------------------
class UserPreferenceUpdateRequest(BaseModel):
    """Partial update; all fields optional, only supplied ones change."""

    theme: Optional[str] = None
    last_active_tab: Optional[str] = None
    favorite_genres: Optional[list[str]] = None
    view_mode: Optional[str] = None
    sort_order: Optional[str] = None


class UserPreferenceResponse(BaseModel):
    user_id: UUID
    theme: str
    last_active_tab: Optional[str] = None
    favorite_genres: list[str]
    view_mode: str
    sort_order: str
    recently_viewed_books: list[str]
    reading_time: int
    last_active_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReadingTimeRequest(BaseModel):
    seconds: int = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Personalization
# ---------------------------------------------------------------------------
class ConsentRequest(BaseModel):
    consent: bool


class ConsentResponse(BaseModel):
    consent: bool


class BehaviorResponse(BaseModel):
    recently_viewed_genres: list[str]
    recently_viewed_authors: list[str]
    recently_viewed_books: list[str]
    search_history: list[str]
    interactions_by_genre: dict[str, int]

    model_config = ConfigDict(from_attributes=True)


class TrackViewRequest(BaseModel):
    book_id: UUID
    genre: Optional[str] = None
    author: Optional[str] = None


class TrackSearchRequest(BaseModel):
    query: str


class FavoriteGenresResponse(BaseModel):
    genres: list[str]


class HighlightResponse(BaseModel):
    genre: str
    highlight: bool


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------
class RecommendedBookResponse(BookResponse):
    score: int


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendedBookResponse]
    strategy: str  # personalized | cold-start | no-consent
