"""
Recommendations API router.
Implements GET /recommendations.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from tubefilter.api.dependencies import (
    get_content_filter,
    get_identity,
    get_recommendation_engine,
)
from tubefilter.models.schemas import ContentFilter, ErrorResponse, Identity, Video
from tubefilter.services.content_filter import apply_filter
from tubefilter.services.recommendations import RecommendationEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])


@router.get(
    "/recommendations",
    response_model=List[Video],
    summary="Get Recommendations",
    description="""
    Recommend videos for the caller.

    Authenticated callers get videos from the channels they watch and like
    most, minus what they already watched, topped up with trending videos.
    Anonymous callers get trending videos.
    """,
    responses={
        200: {"description": "Recommendations returned"},
        500: {"model": ErrorResponse, "description": "Catalog failure while fetching trending videos"},
    },
)
async def get_recommendations(
    response: Response,
    identity: Optional[Identity] = Depends(get_identity),
    content_filter: ContentFilter = Depends(get_content_filter),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> List[Video]:
    videos = await engine.recommend(identity)

    # Personalized lists must not be shared by intermediaries
    if identity is not None:
        response.headers["Cache-Control"] = "private, max-age=30"
    else:
        response.headers["Cache-Control"] = "public, max-age=30"
    response.headers["Vary"] = "X-User-Id"
    response.headers["X-Personalized"] = str(identity is not None).lower()

    return apply_filter(videos, content_filter)
