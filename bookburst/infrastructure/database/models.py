"""SQLAlchemy database models."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSON, UUID
from sqlalchemy.orm import DeclarativeBase, relationship

from bookburst.domain.entities import ReadingStatus


class Base(DeclarativeBase):
    pass


class UserModel(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    profile_picture = Column(String(512), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user_books = relationship("UserBookModel", back_populates="user", cascade="all, delete-orphan")
    preferences = relationship(
        "UserPreferenceModel", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class BookModel(Base):
    __tablename__ = "books"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False, index=True)
    genre = Column(String(100), nullable=True, index=True)
    cover_image = Column(String(512), nullable=True)
    publication_date = Column(String(32), nullable=True)  # raw string from the search provider
    isbn = Column(String(20), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user_books = relationship("UserBookModel", back_populates="book", cascade="all, delete-orphan")


class UserBookModel(Base):
    """A shelf entry: one user's reading state, rating, and review of one book."""

    __tablename__ = "user_books"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_user_book"),
        CheckConstraint("progress IS NULL OR (progress >= 0 AND progress <= 100)", name="ck_progress"),
        CheckConstraint("rating IS NULL OR (rating >= 0 AND rating <= 5)", name="ck_rating"),
        Index("ix_user_books_public", "user_id", "is_public"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    book_id = Column(UUID(as_uuid=True), ForeignKey("books.id"), nullable=False, index=True)
    status = Column(
        SQLEnum(
            ReadingStatus,
            name="readingstatus",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
    )
    progress = Column(Integer, nullable=True)
    rating = Column(Integer, nullable=True)
    review = Column(Text, nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    date_added = Column(DateTime, default=datetime.utcnow, nullable=False)
    date_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("UserModel", back_populates="user_books")
    book = relationship("BookModel", back_populates="user_books", lazy="joined")


class FollowModel(Base):
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "followed_id", name="uq_follow_edge"),
        CheckConstraint("follower_id <> followed_id", name="ck_no_self_follow"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    follower_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    followed_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserPreferenceModel(Base):
    """Settings the user chose explicitly (theme, favorite genres, layout …)."""

    __tablename__ = "user_preferences"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), primary_key=True)
    theme = Column(String(20), default="light", nullable=False)  # light|dark|system
    last_active_tab = Column(String(50), nullable=True)
    favorite_genres = Column(ARRAY(String), default=list, nullable=False)
    view_mode = Column(String(20), default="grid", nullable=False)  # grid|list
    sort_order = Column(String(20), default="date_added", nullable=False)
    recently_viewed_books = Column(ARRAY(String), default=list, nullable=False)
    reading_time = Column(Integer, default=0, nullable=False)  # seconds
    last_active_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("UserModel", back_populates="preferences")


class BehaviorProfileModel(Base):
    """Durable copy of a signed-in user's behaviour profile.

    ``data`` is plain JSON rather than JSONB: JSONB reorders object keys, and
    the key order of ``interactions_by_genre`` breaks ties between genres.
    """

    __tablename__ = "behavior_profiles"

    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
