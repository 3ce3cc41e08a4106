"""Shelf service: a user's books, reading progress, ratings, and reviews."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from bookburst.domain.entities import ReadingStatus, UserBook
from bookburst.domain.exceptions import DuplicateEntryError, NotFoundError
from bookburst.domain.repositories import IBookRepository, IUserBookRepository
from bookburst.domain.services import IShelfService
from bookburst.domain.visibility import filter_visible

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("status", "progress", "rating", "review", "is_public")


def _normalize(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def validate_progress(progress: Optional[int]) -> Optional[int]:
    if progress is not None and not 0 <= progress <= 100:
        raise ValueError("progress must be between 0 and 100")
    return progress


def validate_rating(rating: Optional[int]) -> Optional[int]:
    if rating is not None and not 0 <= rating <= 5:
        raise ValueError("rating must be between 0 and 5")
    return rating


class ShelfService(IShelfService):

    def __init__(self, user_book_repository: IUserBookRepository, book_repository: IBookRepository):
        self.user_book_repository = user_book_repository
        self.book_repository = book_repository

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
        book = await self.book_repository.get_by_id(book_id)
        if book is None:
            raise NotFoundError("Book not found")

        # Catalog rows can repeat a title under different ids, so match on
        # title + author rather than on book_id alone.
        shelf = await self.user_book_repository.list_by_user(user_id)
        for entry in shelf:
            same_id = entry.book_id == book_id
            same_text = entry.book is not None and (
                _normalize(entry.book.title) == _normalize(book.title)
                and _normalize(entry.book.author) == _normalize(book.author)
            )
            if same_id or same_text:
                raise DuplicateEntryError("Book is already on your shelf")

        entry = UserBook(
            id=uuid4(),
            user_id=user_id,
            book_id=book_id,
            status=ReadingStatus(status),
            progress=validate_progress(progress),
            rating=validate_rating(rating),
            review=review,
            is_public=is_public,
        )
        created = await self.user_book_repository.create(entry)
        logger.info("User %s shelved book %s as %s", user_id, book_id, created.status.value)
        return created

    async def _get_owned(self, user_id: UUID, entry_id: UUID) -> UserBook:
        entry = await self.user_book_repository.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError("Shelf entry not found")
        if entry.user_id != user_id:
            raise PermissionError("Not authorized to modify this shelf entry")
        return entry

    async def update_entry(self, user_id: UUID, entry_id: UUID, changes: dict) -> UserBook:
        entry = await self._get_owned(user_id, entry_id)

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        if "status" in changes:
            if changes["status"] is None:
                raise ValueError("status cannot be empty")
            entry.status = ReadingStatus(changes["status"])
        if "progress" in changes:
            entry.progress = validate_progress(changes["progress"])
        if "rating" in changes:
            entry.rating = validate_rating(changes["rating"])
        if "review" in changes:
            entry.review = changes["review"]
        if "is_public" in changes:
            entry.is_public = bool(changes["is_public"])
        entry.date_updated = datetime.utcnow()

        updated = await self.user_book_repository.update(entry)
        logger.info("Shelf entry %s updated: %s", entry_id, sorted(changes))
        return updated

    async def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        await self._get_owned(user_id, entry_id)
        await self.user_book_repository.delete(entry_id)
        logger.info("Shelf entry %s removed by user %s", entry_id, user_id)

    async def get_shelf(
        self,
        owner_id: UUID,
        viewer_id: Optional[UUID],
        status: Optional[ReadingStatus] = None,
    ) -> list[UserBook]:
        entries = await self.user_book_repository.list_by_user(owner_id)
        if status is not None:
            entries = [e for e in entries if e.status == status]
        return filter_visible(entries, viewer_id)
