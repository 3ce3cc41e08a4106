"""Repository implementations."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from bookburst.core.config import settings
from bookburst.domain.entities import (
    BehaviorProfile,
    Book,
    ReadingStatus,
    User,
    UserBook,
    UserPreference,
)
from bookburst.domain.repositories import (
    IBehaviorProfileStore,
    IBookRepository,
    IFollowRepository,
    IUserBookRepository,
    IUserPreferenceRepository,
    IUserRepository,
)
from bookburst.infrastructure.database.models import (
    BehaviorProfileModel,
    BookModel,
    FollowModel,
    UserBookModel,
    UserModel,
    UserPreferenceModel,
)


# ---------------------------------------------------------------------------
# User Repository
# ---------------------------------------------------------------------------
class UserRepository(IUserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        db_user = UserModel(
            id=user.id,
            email=user.email,
            name=user.name,
            hashed_password=user.hashed_password,
            bio=user.bio,
            profile_picture=user.profile_picture,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        return self._to_entity(db_user)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    async def list_active(self) -> list[User]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.is_active.is_(True)).order_by(UserModel.name)
        )
        return [self._to_entity(u) for u in result.scalars().all()]

    async def update(self, user: User) -> User:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user.id))
        db_user = result.scalar_one()
        db_user.email = user.email
        db_user.name = user.name
        db_user.bio = user.bio
        db_user.profile_picture = user.profile_picture
        db_user.hashed_password = user.hashed_password
        db_user.is_active = user.is_active
        db_user.updated_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(db_user)
        return self._to_entity(db_user)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            name=model.name,
            hashed_password=model.hashed_password,
            bio=model.bio,
            profile_picture=model.profile_picture,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# ---------------------------------------------------------------------------
# Book Repository (also the catalog source for recommendations)
# ---------------------------------------------------------------------------
class BookRepository(IBookRepository):

    def __init__(self, session: AsyncSession, catalog_limit: int = settings.catalog_limit):
        self.session = session
        self.catalog_limit = catalog_limit

    async def create(self, book: Book) -> Book:
        db_book = BookModel(
            id=book.id,
            title=book.title,
            author=book.author,
            genre=book.genre,
            cover_image=book.cover_image,
            publication_date=book.publication_date,
            isbn=book.isbn,
            created_at=book.created_at,
        )
        self.session.add(db_book)
        await self.session.commit()
        await self.session.refresh(db_book)
        return self._to_entity(db_book)

    async def get_by_id(self, book_id: UUID) -> Optional[Book]:
        result = await self.session.execute(select(BookModel).where(BookModel.id == book_id))
        db_book = result.scalar_one_or_none()
        return self._to_entity(db_book) if db_book else None

    async def list_all(self, skip: int = 0, limit: int = 100) -> list[Book]:
        # Stable order so that catalog order (and ranking ties) is reproducible
        result = await self.session.execute(
            select(BookModel).order_by(BookModel.created_at, BookModel.id).offset(skip).limit(limit)
        )
        return [self._to_entity(book) for book in result.scalars().all()]

    async def list_books(self) -> list[Book]:
        return await self.list_all(limit=self.catalog_limit)

    async def search(self, query: str, limit: int = 50) -> list[Book]:
        pattern = f"%{query.strip()}%"
        result = await self.session.execute(
            select(BookModel)
            .where(
                or_(
                    BookModel.title.ilike(pattern),
                    BookModel.author.ilike(pattern),
                    BookModel.genre.ilike(pattern),
                )
            )
            .order_by(BookModel.title)
            .limit(limit)
        )
        return [self._to_entity(book) for book in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(BookModel))
        return result.scalar_one()

    @staticmethod
    def _to_entity(model: BookModel) -> Book:
        return Book(
            id=model.id,
            title=model.title,
            author=model.author,
            genre=model.genre,
            cover_image=model.cover_image,
            publication_date=model.publication_date,
            isbn=model.isbn,
            created_at=model.created_at,
        )


# ---------------------------------------------------------------------------
# Shelf (UserBook) Repository
# ---------------------------------------------------------------------------
class UserBookRepository(IUserBookRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: UserBook) -> UserBook:
        db_entry = UserBookModel(
            id=entry.id,
            user_id=entry.user_id,
            book_id=entry.book_id,
            status=entry.status,
            progress=entry.progress,
            rating=entry.rating,
            review=entry.review,
            is_public=entry.is_public,
            date_added=entry.date_added,
            date_updated=entry.date_updated,
        )
        self.session.add(db_entry)
        await self.session.commit()
        return await self._load(entry.id)

    async def get_by_id(self, entry_id: UUID) -> Optional[UserBook]:
        result = await self.session.execute(
            select(UserBookModel)
            .options(joinedload(UserBookModel.book))
            .where(UserBookModel.id == entry_id)
        )
        db_entry = result.scalar_one_or_none()
        return self._to_entity(db_entry) if db_entry else None

    async def list_by_user(self, user_id: UUID) -> list[UserBook]:
        result = await self.session.execute(
            select(UserBookModel)
            .options(joinedload(UserBookModel.book))
            .where(UserBookModel.user_id == user_id)
            .order_by(UserBookModel.date_added.desc())
        )
        return [self._to_entity(e) for e in result.scalars().all()]

    async def update(self, entry: UserBook) -> UserBook:
        result = await self.session.execute(
            select(UserBookModel).where(UserBookModel.id == entry.id)
        )
        db_entry = result.scalar_one()
        db_entry.status = entry.status
        db_entry.progress = entry.progress
        db_entry.rating = entry.rating
        db_entry.review = entry.review
        db_entry.is_public = entry.is_public
        db_entry.date_updated = datetime.utcnow()
        await self.session.commit()
        return await self._load(entry.id)

    async def delete(self, entry_id: UUID) -> bool:
        result = await self.session.execute(
            delete(UserBookModel).where(UserBookModel.id == entry_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def list_reviewed(
        self,
        viewer_id: Optional[UUID],
        author_ids: Optional[set[UUID]] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[UserBook]:
        conditions = [UserBookModel.review.is_not(None), UserBookModel.review != ""]
        if viewer_id is None:
            conditions.append(UserBookModel.is_public.is_(True))
        else:
            conditions.append(
                or_(UserBookModel.is_public.is_(True), UserBookModel.user_id == viewer_id)
            )
        if author_ids is not None:
            if not author_ids:
                return []
            conditions.append(UserBookModel.user_id.in_(author_ids))

        result = await self.session.execute(
            select(UserBookModel)
            .options(joinedload(UserBookModel.book))
            .where(and_(*conditions))
            .order_by(UserBookModel.date_updated.desc())
            .offset(skip)
            .limit(limit)
        )
        return [self._to_entity(e) for e in result.scalars().all()]

    async def _load(self, entry_id: UUID) -> UserBook:
        result = await self.session.execute(
            select(UserBookModel)
            .options(joinedload(UserBookModel.book))
            .where(UserBookModel.id == entry_id)
            .execution_options(populate_existing=True)
        )
        return self._to_entity(result.scalar_one())

    @staticmethod
    def _to_entity(model: UserBookModel) -> UserBook:
        return UserBook(
            id=model.id,
            user_id=model.user_id,
            book_id=model.book_id,
            status=ReadingStatus(model.status),
            progress=model.progress,
            rating=model.rating,
            review=model.review,
            is_public=bool(model.is_public),
            date_added=model.date_added,
            date_updated=model.date_updated,
            book=BookRepository._to_entity(model.book) if model.book is not None else None,
        )


# ---------------------------------------------------------------------------
# Follow Repository
# ---------------------------------------------------------------------------
class FollowRepository(IFollowRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, follower_id: UUID, followed_id: UUID) -> None:
        stmt = (
            pg_insert(FollowModel)
            .values(
                id=uuid4(),
                follower_id=follower_id,
                followed_id=followed_id,
                created_at=datetime.utcnow(),
            )
            .on_conflict_do_nothing(constraint="uq_follow_edge")
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def remove(self, follower_id: UUID, followed_id: UUID) -> None:
        await self.session.execute(
            delete(FollowModel).where(
                FollowModel.follower_id == follower_id,
                FollowModel.followed_id == followed_id,
            )
        )
        await self.session.commit()

    async def exists(self, follower_id: UUID, followed_id: UUID) -> bool:
        result = await self.session.execute(
            select(FollowModel.id).where(
                FollowModel.follower_id == follower_id,
                FollowModel.followed_id == followed_id,
            )
        )
        return result.first() is not None

    async def list_followers(self, user_id: UUID) -> set[UUID]:
        result = await self.session.execute(
            select(FollowModel.follower_id).where(FollowModel.followed_id == user_id)
        )
        return set(result.scalars().all())

    async def list_following(self, user_id: UUID) -> set[UUID]:
        result = await self.session.execute(
            select(FollowModel.followed_id).where(FollowModel.follower_id == user_id)
        )
        return set(result.scalars().all())


# ---------------------------------------------------------------------------
# User Preference Repository
# ---------------------------------------------------------------------------
class UserPreferenceRepository(IUserPreferenceRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_or_create(self, user_id: UUID) -> UserPreference:
        result = await self.session.execute(
            select(UserPreferenceModel).where(UserPreferenceModel.user_id == user_id)
        )
        db_pref = result.scalar_one_or_none()
        if not db_pref:
            db_pref = UserPreferenceModel(
                user_id=user_id,
                theme="light",
                favorite_genres=[],
                view_mode="grid",
                sort_order="date_added",
                recently_viewed_books=[],
                reading_time=0,
            )
            self.session.add(db_pref)
            await self.session.commit()
            await self.session.refresh(db_pref)
        return self._to_entity(db_pref)

    async def update(self, pref: UserPreference) -> UserPreference:
        result = await self.session.execute(
            select(UserPreferenceModel).where(UserPreferenceModel.user_id == pref.user_id)
        )
        db_pref = result.scalar_one()
        db_pref.theme = pref.theme
        db_pref.last_active_tab = pref.last_active_tab
        db_pref.favorite_genres = pref.favorite_genres
        db_pref.view_mode = pref.view_mode
        db_pref.sort_order = pref.sort_order
        db_pref.recently_viewed_books = pref.recently_viewed_books
        db_pref.reading_time = pref.reading_time
        db_pref.last_active_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(db_pref)
        return self._to_entity(db_pref)

    @staticmethod
    def _to_entity(model: UserPreferenceModel) -> UserPreference:
        return UserPreference(
            user_id=model.user_id,
            theme=model.theme or "light",
            last_active_tab=model.last_active_tab,
            favorite_genres=model.favorite_genres or [],
            view_mode=model.view_mode or "grid",
            sort_order=model.sort_order or "date_added",
            recently_viewed_books=model.recently_viewed_books or [],
            reading_time=model.reading_time or 0,
            last_active_at=model.last_active_at,
        )


# ---------------------------------------------------------------------------
# Behaviour Profile Store (durable copy for signed-in users)
# ---------------------------------------------------------------------------
class BehaviorProfileRepository(IBehaviorProfileStore):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID) -> Optional[BehaviorProfile]:
        result = await self.session.execute(
            select(BehaviorProfileModel.data).where(BehaviorProfileModel.user_id == user_id)
        )
        data = result.scalar_one_or_none()
        return BehaviorProfile.from_dict(data) if data is not None else None

    async def put(self, user_id: UUID, profile: BehaviorProfile) -> None:
        now = datetime.utcnow()
        stmt = pg_insert(BehaviorProfileModel).values(
            user_id=user_id, data=profile.to_dict(), updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[BehaviorProfileModel.user_id],
            set_={"data": stmt.excluded.data, "updated_at": now},
        )
        await self.session.execute(stmt)
        await self.session.commit()
