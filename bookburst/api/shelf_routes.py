"""Shelf API routes: the signed-in user's own books."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from bookburst.api.schemas import ShelfEntryCreate, ShelfEntryResponse, ShelfEntryUpdate
from bookburst.core.dependencies import get_current_user, get_shelf_service
from bookburst.domain.entities import ReadingStatus, User
from bookburst.domain.exceptions import DuplicateEntryError, NotFoundError
from bookburst.domain.services import IShelfService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/shelf", tags=["shelf"])


@router.get("/", response_model=list[ShelfEntryResponse])
async def get_my_shelf(
    current_user: Annotated[User, Depends(get_current_user)],
    shelf_service: Annotated[IShelfService, Depends(get_shelf_service)],
    status_filter: Annotated[Optional[ReadingStatus], Query(alias="status")] = None,
) -> list[ShelfEntryResponse]:
    """List the caller's shelf, optionally filtered by reading status."""
    entries = await shelf_service.get_shelf(current_user.id, current_user.id, status_filter)
    return [ShelfEntryResponse.model_validate(e) for e in entries]


@router.post("/", response_model=ShelfEntryResponse, status_code=status.HTTP_201_CREATED)
async def add_to_shelf(
    body: ShelfEntryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    shelf_service: Annotated[IShelfService, Depends(get_shelf_service)],
) -> ShelfEntryResponse:
    try:
        entry = await shelf_service.add_to_shelf(
            current_user.id,
            body.book_id,
            body.status,
            progress=body.progress,
            rating=body.rating,
            review=body.review,
            is_public=body.is_public,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateEntryError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ShelfEntryResponse.model_validate(entry)


@router.patch("/{entry_id}", response_model=ShelfEntryResponse)
async def update_entry(
    entry_id: UUID,
    body: ShelfEntryUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    shelf_service: Annotated[IShelfService, Depends(get_shelf_service)],
) -> ShelfEntryResponse:
    """Update status, progress, rating, review or visibility of an entry."""
    try:
        entry = await shelf_service.update_entry(
            current_user.id, entry_id, body.model_dump(exclude_unset=True)
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ShelfEntryResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    shelf_service: Annotated[IShelfService, Depends(get_shelf_service)],
) -> Response:
    try:
        await shelf_service.delete_entry(current_user.id, entry_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
