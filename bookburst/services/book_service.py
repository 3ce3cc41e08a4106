"""Book catalog service."""

import logging
from typing import Optional
from uuid import UUID, uuid4

from bookburst.domain.entities import Book
from bookburst.domain.repositories import IBookRepository
from bookburst.domain.services import IBookService

logger = logging.getLogger(__name__)


class BookService(IBookService):
    """Catalog reads and additions.

    Books usually arrive from the external search provider on the client
    side; the server stores whatever title/author/cover/genre/ISBN record it
    is handed and does not call the provider itself.
    """

    def __init__(self, book_repository: IBookRepository):
        self.book_repository = book_repository

    async def create_book(
        self,
        title: str,
        author: str,
        genre: Optional[str] = None,
        cover_image: Optional[str] = None,
        publication_date: Optional[str] = None,
        isbn: Optional[str] = None,
    ) -> Book:
        title = title.strip()
        author = author.strip()
        if not title or not author:
            raise ValueError("Title and author are required")

        book = Book(
            id=uuid4(),
            title=title,
            author=author,
            genre=(genre or "").strip() or None,
            cover_image=cover_image,
            publication_date=publication_date,
            isbn=isbn,
        )
        created = await self.book_repository.create(book)
        logger.info("Book created: '%s' by '%s' (%s)", created.title, created.author, created.id)
        return created

    async def get_book(self, book_id: UUID) -> Optional[Book]:
        return await self.book_repository.get_by_id(book_id)

    async def list_books(self, skip: int = 0, limit: int = 100) -> list[Book]:
        return await self.book_repository.list_all(skip, limit)

    async def search_books(self, query: str, limit: int = 50) -> list[Book]:
        if not query.strip():
            return []
        return await self.book_repository.search(query, limit)

    async def count_books(self) -> int:
        return await self.book_repository.count()
