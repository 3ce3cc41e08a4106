"""Personalization API routes.

Everything here works for anonymous visitors as well as signed-in users;
the client is identified by its cookie.  Without tracking consent the reads
return empty defaults and the writes do nothing.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from bookburst.api.schemas import (
    BehaviorResponse,
    ConsentRequest,
    ConsentResponse,
    FavoriteGenresResponse,
    HighlightResponse,
    TrackSearchRequest,
    TrackViewRequest,
)
from bookburst.core.client_state import ConsentStore
from bookburst.core.dependencies import (
    get_consent_store,
    get_personalization_context,
    get_personalization_service,
)
from bookburst.domain.personalization import PersonalizationContext
from bookburst.domain.services import IPersonalizationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/personalization", tags=["personalization"])


@router.get("/consent", response_model=ConsentResponse)
async def get_consent(
    consent_store: Annotated[ConsentStore, Depends(get_consent_store)],
) -> ConsentResponse:
    return ConsentResponse(consent=consent_store.has_consent())


@router.put("/consent", response_model=ConsentResponse)
async def set_consent(
    body: ConsentRequest,
    consent_store: Annotated[ConsentStore, Depends(get_consent_store)],
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
) -> ConsentResponse:
    """Grant or revoke tracking consent.

    Revoking leaves stored behaviour in place; it is simply never read again
    until consent is granted anew.
    """
    consent_store.set_consent(body.consent)
    ctx.set_consent(body.consent)
    logger.info("Client %s set tracking consent to %s", ctx.client_id, body.consent)
    return ConsentResponse(consent=ctx.has_consent())


@router.get("/behavior", response_model=BehaviorResponse)
async def get_behavior(
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
) -> BehaviorResponse:
    return BehaviorResponse.model_validate(personalization.get_behavior(ctx))


@router.post("/views", status_code=status.HTTP_204_NO_CONTENT)
async def track_view(
    body: TrackViewRequest,
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
) -> None:
    """Record a book view reported by the client."""
    await personalization.track_view(ctx, body.book_id, genre=body.genre, author=body.author)


@router.post("/searches", status_code=status.HTTP_204_NO_CONTENT)
async def track_search(
    body: TrackSearchRequest,
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
) -> None:
    await personalization.track_search(ctx, body.query)


@router.get("/favorite-genres", response_model=FavoriteGenresResponse)
async def get_favorite_genres(
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
) -> FavoriteGenresResponse:
    return FavoriteGenresResponse(genres=personalization.get_favorite_genres(ctx))


@router.get("/highlight/{genre}", response_model=HighlightResponse)
async def should_highlight(
    genre: str,
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
) -> HighlightResponse:
    return HighlightResponse(genre=genre, highlight=personalization.should_highlight(ctx, genre))
