"""
Watch history and interactions router.
All endpoints require an authenticated identity.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from tubefilter.api.dependencies import get_app_settings, get_tracker, require_identity
from tubefilter.config import Settings
from tubefilter.models.schemas import (
    ErrorResponse,
    Identity,
    VideoInteraction,
    VideoInteractionCreate,
    VideoInteractionWithVideo,
    WatchHistory,
    WatchHistoryCreate,
    WatchHistoryWithVideo,
)
from tubefilter.services.tracker import InteractionTracker

router = APIRouter(tags=["history"])

AUTH_RESPONSES = {401: {"model": ErrorResponse, "description": "Not authenticated"}}


@router.post(
    "/watch-history",
    response_model=WatchHistory,
    status_code=status.HTTP_201_CREATED,
    summary="Record Watch",
    responses=AUTH_RESPONSES,
)
async def record_watch(
    payload: WatchHistoryCreate,
    identity: Identity = Depends(require_identity),
    tracker: InteractionTracker = Depends(get_tracker),
) -> WatchHistory:
    return await tracker.record_watch(
        identity,
        video_id=payload.video_id,
        watch_duration=payload.watch_duration,
        completed=payload.completed,
    )


@router.get(
    "/watch-history",
    response_model=List[WatchHistoryWithVideo],
    response_model_exclude_unset=True,
    summary="Watch History",
    responses=AUTH_RESPONSES,
)
async def get_watch_history(
    limit: Optional[int] = Query(default=None, ge=1),
    identity: Identity = Depends(require_identity),
    tracker: InteractionTracker = Depends(get_tracker),
    settings: Settings = Depends(get_app_settings),
) -> List[WatchHistoryWithVideo]:
    """Newest first; `video` is absent when the video is not cached."""
    effective_limit = min(limit or settings.DEFAULT_HISTORY_LIMIT, settings.MAX_HISTORY_LIMIT)
    return await tracker.watch_history(identity, effective_limit)


@router.post(
    "/video-interactions",
    response_model=VideoInteraction,
    status_code=status.HTTP_201_CREATED,
    summary="Toggle Interaction",
    responses=AUTH_RESPONSES,
)
async def toggle_interaction(
    payload: VideoInteractionCreate,
    identity: Identity = Depends(require_identity),
    tracker: InteractionTracker = Depends(get_tracker),
) -> VideoInteraction:
    """Creates the interaction, or refreshes its timestamp if it exists."""
    return await tracker.toggle_interaction(
        identity, payload.video_id, payload.interaction_type
    )


@router.get(
    "/video-interactions",
    response_model=List[VideoInteractionWithVideo],
    response_model_exclude_unset=True,
    summary="List Interactions",
    responses=AUTH_RESPONSES,
)
async def list_interactions(
    interaction_type: Optional[str] = Query(default=None, alias="type"),
    video_id: Optional[str] = Query(default=None, alias="videoId"),
    identity: Identity = Depends(require_identity),
    tracker: InteractionTracker = Depends(get_tracker),
) -> List[VideoInteractionWithVideo]:
    return await tracker.interactions(identity, interaction_type, video_id)


@router.delete(
    "/video-interactions",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove Interaction",
    responses={**AUTH_RESPONSES, 404: {"model": ErrorResponse, "description": "No such interaction"}},
)
async def remove_interaction(
    video_id: str = Query(..., alias="videoId", min_length=1),
    interaction_type: str = Query(..., alias="type", min_length=1),
    identity: Identity = Depends(require_identity),
    tracker: InteractionTracker = Depends(get_tracker),
) -> Response:
    await tracker.remove_interaction(identity, video_id, interaction_type)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
