"""
Browse API router.
Trending, single video, related, category, search, categories and channels.
Every video listing passes through the content filter.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from tubefilter.api.dependencies import get_content_filter, get_video_service
from tubefilter.core.exceptions import ValidationError
from tubefilter.models.schemas import (
    Category,
    Channel,
    ContentFilter,
    ErrorResponse,
    SearchQuery,
    Video,
)
from tubefilter.services.catalog import TRENDING_TOKENS
from tubefilter.services.content_filter import apply_filter
from tubefilter.services.videos import VideoService

router = APIRouter(tags=["videos"])


@router.get("/videos/trending", response_model=List[Video], summary="Trending Videos")
async def get_trending(
    content_filter: ContentFilter = Depends(get_content_filter),
    service: VideoService = Depends(get_video_service),
) -> List[Video]:
    return apply_filter(await service.trending(), content_filter)


@router.get(
    "/videos/category/{category_id}",
    response_model=List[Video],
    summary="Videos By Category",
)
async def get_category_videos(
    category_id: str,
    content_filter: ContentFilter = Depends(get_content_filter),
    service: VideoService = Depends(get_video_service),
) -> List[Video]:
    """Accepts the tokens `trending` / `popular` or a numeric category id."""
    if category_id not in TRENDING_TOKENS and not category_id.isdigit():
        raise ValidationError(
            "Category must be 'trending', 'popular' or a numeric id",
            details={"category_id": category_id},
        )
    return apply_filter(await service.by_category(category_id), content_filter)


@router.get(
    "/videos/{video_id}",
    response_model=Video,
    summary="Get Video",
    responses={404: {"model": ErrorResponse, "description": "Video unknown to cache and catalog"}},
)
async def get_video(
    video_id: str,
    service: VideoService = Depends(get_video_service),
) -> Video:
    return await service.get_video(video_id)


@router.get(
    "/videos/{video_id}/related",
    response_model=List[Video],
    summary="Related Videos",
)
async def get_related_videos(
    video_id: str,
    content_filter: ContentFilter = Depends(get_content_filter),
    service: VideoService = Depends(get_video_service),
) -> List[Video]:
    """Same-channel videos first, search-term backfill second."""
    return apply_filter(await service.related(video_id), content_filter)


@router.get(
    "/search",
    response_model=List[Video],
    summary="Search Videos",
    responses={400: {"model": ErrorResponse, "description": "Missing search query"}},
)
async def search_videos(
    q: Optional[str] = Query(default=None, description="Free-text query"),
    content_filter: ContentFilter = Depends(get_content_filter),
    service: VideoService = Depends(get_video_service),
) -> List[Video]:
    if not q or not q.strip():
        raise ValidationError("Search query is required")
    return apply_filter(await service.search(q.strip()), content_filter)


@router.get("/search/recent", response_model=List[SearchQuery], summary="Recent Searches")
async def recent_searches(
    limit: int = Query(default=10, ge=1, le=100),
    service: VideoService = Depends(get_video_service),
) -> List[SearchQuery]:
    return await service.recent_searches(limit)


@router.get("/categories", response_model=List[Category], summary="Video Categories")
async def get_categories(
    service: VideoService = Depends(get_video_service),
) -> List[Category]:
    return await service.categories()


@router.get("/channels/{channel_id}", response_model=Channel, summary="Get Channel")
async def get_channel(
    channel_id: str,
    service: VideoService = Depends(get_video_service),
) -> Channel:
    return await service.channel(channel_id)
