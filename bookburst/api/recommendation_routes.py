"""Recommendation API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from bookburst.api.schemas import BookResponse, RecommendationResponse, RecommendedBookResponse
from bookburst.core.dependencies import get_personalization_context, get_personalization_service
from bookburst.domain.personalization import PersonalizationContext
from bookburst.domain.services import IPersonalizationService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["recommendations"])


@router.get("/recommendations", response_model=RecommendationResponse)
async def get_recommendations(
    ctx: Annotated[PersonalizationContext, Depends(get_personalization_context)],
    personalization: Annotated[IPersonalizationService, Depends(get_personalization_service)],
    limit: int = Query(10, ge=1, le=100),
) -> RecommendationResponse:
    """The catalog re-ranked by the caller's browsing behaviour.

    Without consent, or before anything has been viewed, the catalog comes
    back in its stored order with every score at zero; ``strategy`` says
    which case applied.
    """
    ranked, strategy = await personalization.recommend(ctx, limit=limit)
    return RecommendationResponse(
        recommendations=[
            RecommendedBookResponse(**BookResponse.model_validate(book).model_dump(), score=score)
            for book, score in ranked
        ],
        strategy=strategy,
    )
