"""Explicit preference API routes (signed-in users only).

  GET/PUT  /preferences                               theme, layout, favorites
  POST     /preferences/reading-time                  add reading seconds
  POST     /preferences/recently-viewed/{book_id}     server-side recent list
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from bookburst.api.schemas import (
    ReadingTimeRequest,
    UserPreferenceResponse,
    UserPreferenceUpdateRequest,
)
from bookburst.core.dependencies import get_current_user, get_preference_service
from bookburst.domain.entities import User
from bookburst.domain.services import IPreferenceService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/", response_model=UserPreferenceResponse)
async def get_preferences(
    current_user: Annotated[User, Depends(get_current_user)],
    pref_service: Annotated[IPreferenceService, Depends(get_preference_service)],
) -> UserPreferenceResponse:
    pref = await pref_service.get_preferences(current_user.id)
    return UserPreferenceResponse.model_validate(pref)


@router.put("/", response_model=UserPreferenceResponse)
async def update_preferences(
    body: UserPreferenceUpdateRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    pref_service: Annotated[IPreferenceService, Depends(get_preference_service)],
) -> UserPreferenceResponse:
    """Update (merge) the caller's preferences.

    Only fields present in the request body are changed; others are preserved.
    """
    try:
        pref = await pref_service.update_preferences(
            current_user.id,
            theme=body.theme,
            last_active_tab=body.last_active_tab,
            favorite_genres=body.favorite_genres,
            view_mode=body.view_mode,
            sort_order=body.sort_order,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserPreferenceResponse.model_validate(pref)


@router.post("/reading-time", response_model=UserPreferenceResponse)
async def add_reading_time(
    body: ReadingTimeRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    pref_service: Annotated[IPreferenceService, Depends(get_preference_service)],
) -> UserPreferenceResponse:
    try:
        pref = await pref_service.add_reading_time(current_user.id, body.seconds)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserPreferenceResponse.model_validate(pref)


@router.post("/recently-viewed/{book_id}", response_model=UserPreferenceResponse)
async def add_recently_viewed(
    book_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    pref_service: Annotated[IPreferenceService, Depends(get_preference_service)],
) -> UserPreferenceResponse:
    pref = await pref_service.add_recently_viewed(current_user.id, book_id)
    return UserPreferenceResponse.model_validate(pref)
