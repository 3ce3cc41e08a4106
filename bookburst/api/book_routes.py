"""Book catalog API routes.

Reading a book page records a view and searching records the query, both
through the personalization context and only when the client has consented.
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from bookburst.api.schemas import BookCreate, BookListResponse, BookResponse
from bookburst.core.dependencies import (
    get_book_service,
    get_current_user,
    get_personalization_context,
    get_personalization_service,
)
from bookburst.domain.entities import User
from bookburst.domain.personalization import PersonalizationContext
from bookburst.domain.services import IBookService, IPersonalizationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/books", tags=["books"])


@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreate,
    book_service: Annotated[IBookService, Depends(get_book_service)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> BookResponse:
    """Add a book record to the catalog."""
    try:
        book = await book_service.create_book(
            title=body.title,
            author=body.author,
            genre=body.genre,
            cover_image=body.cover_image,
            publication_date=body.publication_date,
            isbn=body.isbn,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return BookResponse.model_validate(book)


@router.get("/", response_model=BookListResponse)
async def list_books(
    book_service: Annotated[IBookService, Depends(get_book_service)],
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
    q: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> BookListResponse:
    """List books with pagination, or search them when ``q`` is given."""
    if page < 1 or limit < 1:
        raise HTTPException(status_code=400, detail="page and limit must be positive")

    if q is not None:
        await personalization.track_search(ctx, q)
        books = await book_service.search_books(q, limit=limit)
        return BookListResponse(
            books=[BookResponse.model_validate(b) for b in books],
            total=len(books),
            page=1,
            limit=limit,
        )

    skip = (page - 1) * limit
    books = await book_service.list_books(skip=skip, limit=limit)
    total = await book_service.count_books()
    return BookListResponse(
        books=[BookResponse.model_validate(b) for b in books],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: UUID,
    book_service: Annotated[IBookService, Depends(get_book_service)],
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
) -> BookResponse:
    """Get a book by ID and record the view."""
    book = await book_service.get_book(book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    await personalization.track_view(ctx, book.id, genre=book.genre, author=book.author)
    return BookResponse.model_validate(book)
