"""
Video listing service.
Cache-first lookups and catalog-backed listings for the browse surfaces.
"""
import logging
from typing import List, Optional

from tubefilter.config.settings import Settings, get_settings
from tubefilter.core.exceptions import NotFoundError
from tubefilter.models.interfaces import Repository
from tubefilter.models.schemas import Category, Channel, SearchQuery, Video
from tubefilter.services.catalog import CatalogGateway

logger = logging.getLogger(__name__)

RELATED_SEARCH_TERMS = 3  # Leading title words used to find related videos


class VideoService:
    """Browse operations over the repository cache and the catalog."""

    def __init__(
        self,
        repository: Repository,
        catalog: CatalogGateway,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self._repository = repository
        self._catalog = catalog
        self._related_channel_limit = settings.RELATED_CHANNEL_LIMIT
        self._related_target = settings.RELATED_TARGET

    async def trending(self) -> List[Video]:
        return await self._catalog.trending()

    async def get_video(self, video_id: str) -> Video:
        """
        Cached video, else fetched from the catalog.

        Raises:
            NotFoundError: If neither the cache nor the catalog knows the id
        """
        video = await self._repository.get_video(video_id)
        if video is not None:
            return video

        video = await self._catalog.video(video_id)
        if video is None:
            raise NotFoundError("Video", video_id)
        return video

    async def related(self, video_id: str) -> List[Video]:
        """
        Same-channel videos first, then a search on the title's leading words.
        An id unknown to both cache and catalog has no related videos.
        """
        video = await self._repository.get_video(video_id)
        if video is None:
            video = await self._catalog.video(video_id)
        if video is None:
            logger.debug(f"Related videos requested for unknown video: {video_id}")
            return []

        related: List[Video] = []
        if video.channel_id:
            channel_videos = await self._catalog.channel_videos(
                video.channel_id, self._related_channel_limit
            )
            related = [v for v in channel_videos if v.id != video_id]

        terms = " ".join(video.title.split()[:RELATED_SEARCH_TERMS])
        if len(related) < self._related_channel_limit and terms:
            existing = {v.id for v in related}
            search_videos = await self._catalog.search(
                terms, self._related_target - len(related)
            )
            related.extend(
                v for v in search_videos if v.id != video_id and v.id not in existing
            )

        logger.debug(f"Related videos: video={video_id}, count={len(related)}")
        return related

    async def by_category(self, category_id: str) -> List[Video]:
        return await self._catalog.category_videos(category_id)

    async def search(self, query: str) -> List[Video]:
        """Record the query and return merged search results."""
        await self._repository.save_search_query(query)
        return await self._catalog.search(query)

    async def recent_searches(self, limit: int = 10) -> List[SearchQuery]:
        return await self._repository.list_recent_search_queries(limit)

    async def categories(self) -> List[Category]:
        """Cached categories, fetched from the catalog when the cache is empty."""
        cached = await self._repository.list_categories()
        if cached:
            return cached
        logger.info("Category cache empty, fetching from catalog")
        return await self._catalog.categories()

    async def channel(self, channel_id: str) -> Channel:
        """
        Cached channel, else fetched from the catalog.

        Raises:
            NotFoundError: If the channel is unknown
        """
        channel = await self._repository.get_channel(channel_id)
        if channel is not None:
            return channel

        channel = await self._catalog.channel(channel_id)
        if channel is None:
            raise NotFoundError("Channel", channel_id)
        return channel
