"""
Catalog gateway.
Wraps the external video catalog (YouTube Data API v3 shaped), normalizes
raw records into Video entities and caches every fetched video in the
repository.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from tubefilter.config.settings import Settings, get_settings
from tubefilter.core.exceptions import UpstreamError
from tubefilter.core.telemetry import observe_catalog_call
from tubefilter.models.interfaces import Repository
from tubefilter.models.schemas import Category, Channel, Video
from tubefilter.services.classifier import SHORT_MAX_DURATION_SEC, is_short

logger = logging.getLogger(__name__)

THUMBNAIL_PREFERENCE = ("maxres", "standard", "high", "medium", "default")
VIDEO_PARTS = "snippet,contentDetails,statistics,player"
# Asking for a bounded player makes the catalog report embed dimensions
PLAYER_MAX_HEIGHT = 720
VERTICAL_ASPECT_RATIO_THRESHOLD = 1.0  # width / height below this is vertical
MAX_RESULTS_PER_REQUEST = 50
TRENDING_TOKENS = ("trending", "popular")


# =============================================================================
# Normalization
# =============================================================================


def best_thumbnail(thumbnails: Optional[Dict[str, Any]]) -> Optional[str]:
    """Pick the highest quality thumbnail present."""
    if not thumbnails:
        return None
    for size in THUMBNAIL_PREFERENCE:
        thumbnail = thumbnails.get(size)
        if thumbnail and thumbnail.get("url"):
            return thumbnail["url"]
    return None


def _aspect_is_vertical(player: Optional[Dict[str, Any]]) -> Optional[bool]:
    if not player:
        return None
    try:
        width = int(player.get("embedWidth") or 0)
        height = int(player.get("embedHeight") or 0)
    except (TypeError, ValueError):
        return None
    if width <= 0 or height <= 0:
        return None
    return width / height < VERTICAL_ASPECT_RATIO_THRESHOLD


def normalize_video(raw: Dict[str, Any], short_threshold: int = SHORT_MAX_DURATION_SEC) -> Video:
    """
    Convert a raw catalog record into a Video.

    Accepts both the video-detail shape (``id`` is a string) and the
    search-result shape (``id`` is ``{"videoId": ...}``).

    Raises:
        ValueError: If the record carries no usable video id
    """
    raw_id = raw.get("id")
    if isinstance(raw_id, dict):
        raw_id = raw_id.get("videoId")
    if not raw_id or not isinstance(raw_id, str):
        raise ValueError("catalog record has no video id")

    snippet = raw.get("snippet") or {}
    content_details = raw.get("contentDetails") or {}
    statistics = raw.get("statistics") or {}
    view_count = statistics.get("viewCount")

    video = Video(
        id=raw_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        thumbnail_url=best_thumbnail(snippet.get("thumbnails")),
        channel_id=snippet.get("channelId") or "",
        channel_title=snippet.get("channelTitle") or "",
        published_at=snippet.get("publishedAt") or None,
        duration=content_details.get("duration") or "",
        view_count=int(view_count) if view_count else 0,
        is_vertical=_aspect_is_vertical(raw.get("player")),
    )
    return video.model_copy(update={"is_short": is_short(video, short_threshold)})


# =============================================================================
# Gateway
# =============================================================================


class CatalogGateway:
    """
    HTTP client for the catalog service.

    Request-level failures (transport, timeout, non-2xx status, unreadable
    body) raise UpstreamError. Item-level failures are logged and skipped.
    """

    def __init__(
        self,
        repository: Repository,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            repository: Store receiving every fetched video
            settings: Application settings (defaults to cached settings)
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        settings = settings or get_settings()
        self._repository = repository
        self._api_key = settings.CATALOG_API_KEY
        self._region_code = settings.CATALOG_REGION_CODE
        self._trending_max = settings.TRENDING_MAX_RESULTS
        self._search_max = settings.SEARCH_MAX_RESULTS
        self._short_threshold = settings.SHORT_MAX_DURATION_SEC
        self._client = httpx.AsyncClient(
            base_url=settings.CATALOG_API_BASE_URL,
            timeout=settings.CATALOG_TIMEOUT_SEC,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if not self._client.is_closed:
            await self._client.aclose()

    def normalize(self, raw: Dict[str, Any]) -> Video:
        """Normalize a raw record with the configured short threshold."""
        return normalize_video(raw, self._short_threshold)

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        query = {**params, "key": self._api_key}
        resource = path.strip("/")

        with observe_catalog_call(resource):
            try:
                response = await self._client.get(path, params=query)
            except httpx.TimeoutException as e:
                logger.error(f"Catalog request timed out: path={path}")
                raise UpstreamError("request timed out", resource=resource) from e
            except httpx.HTTPError as e:
                logger.error(f"Catalog request failed: path={path}, error={e}")
                raise UpstreamError(f"request failed: {e}", resource=resource) from e

            if not response.is_success:
                logger.error(
                    f"Catalog returned error status: path={path}",
                    extra={"upstream_status": response.status_code},
                )
                raise UpstreamError(
                    response.reason_phrase or "request failed",
                    upstream_status=response.status_code,
                    resource=resource,
                )

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError(
                    "response body is not JSON",
                    upstream_status=response.status_code,
                    resource=resource,
                ) from e

    @staticmethod
    def _items(data: Any, path: str) -> List[Dict[str, Any]]:
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            logger.warning(f"Catalog response without item list: path={path}")
            return []
        return [item for item in data["items"] if isinstance(item, dict)]

    async def fetch_videos(
        self,
        path: str,
        params: Dict[str, Any],
        persist: bool = True,
    ) -> List[Video]:
        """
        Fetch and normalize a list of videos.

        Args:
            path: Catalog resource path, e.g. "/videos"
            params: Query parameters (API key is added)
            persist: Upsert every normalized video into the repository

        Raises:
            UpstreamError: On transport failure or non-success status
        """
        data = await self._get_json(path, params)

        videos: List[Video] = []
        for item in self._items(data, path):
            try:
                videos.append(self.normalize(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed catalog record: path={path}, error={e}")

        if persist:
            for video in videos:
                await self._repository.save_video(video)

        return videos

    # -------------------------------------------------------------------------
    # Video lookups
    # -------------------------------------------------------------------------

    async def trending(self, max_results: Optional[int] = None) -> List[Video]:
        """Most popular videos in the configured region."""
        return await self.fetch_videos(
            "/videos",
            {
                "part": VIDEO_PARTS,
                "chart": "mostPopular",
                "maxResults": self._cap(max_results or self._trending_max),
                "regionCode": self._region_code,
                "maxHeight": PLAYER_MAX_HEIGHT,
            },
        )

    async def category_videos(
        self, category_id: str, max_results: Optional[int] = None
    ) -> List[Video]:
        """Most popular videos in a category; the trending tokens map to trending."""
        if category_id in TRENDING_TOKENS:
            return await self.trending(max_results)
        return await self.fetch_videos(
            "/videos",
            {
                "part": VIDEO_PARTS,
                "chart": "mostPopular",
                "videoCategoryId": category_id,
                "maxResults": self._cap(max_results or self._trending_max),
                "regionCode": self._region_code,
                "maxHeight": PLAYER_MAX_HEIGHT,
            },
        )

    async def videos_by_ids(self, video_ids: Iterable[str]) -> List[Video]:
        """Full video details, in catalog response order."""
        unique_ids = list(dict.fromkeys(vid for vid in video_ids if vid))
        videos: List[Video] = []
        for start in range(0, len(unique_ids), MAX_RESULTS_PER_REQUEST):
            chunk = unique_ids[start : start + MAX_RESULTS_PER_REQUEST]
            videos.extend(
                await self.fetch_videos(
                    "/videos",
                    {
                        "part": VIDEO_PARTS,
                        "id": ",".join(chunk),
                        "maxHeight": PLAYER_MAX_HEIGHT,
                    },
                )
            )
        return videos

    async def video(self, video_id: str) -> Optional[Video]:
        """Single video by id, None if the catalog does not know it."""
        videos = await self.videos_by_ids([video_id])
        return videos[0] if videos else None

    async def _search(self, params: Dict[str, Any]) -> List[Video]:
        # Search records lack duration and statistics; never cache them as-is
        return await self.fetch_videos(
            "/search",
            {"part": "snippet", "type": "video", **params},
            persist=False,
        )

    async def channel_videos(self, channel_id: str, max_results: int = 10) -> List[Video]:
        """Most recent videos of a channel, with full details."""
        results = await self._search(
            {
                "channelId": channel_id,
                "order": "date",
                "maxResults": self._cap(max_results),
            }
        )
        if not results:
            return []
        return await self.videos_by_ids(video.id for video in results)

    async def search(self, query: str, max_results: Optional[int] = None) -> List[Video]:
        """
        Free-text search.

        Search records are merged with the full detail records keyed by id,
        keeping search order; a search record is kept when no detail exists.
        """
        results = await self._search(
            {"q": query, "maxResults": self._cap(max_results or self._search_max)}
        )
        if not results:
            return []

        details = {
            video.id: video
            for video in await self.videos_by_ids(v.id for v in results)
        }

        merged: List[Video] = []
        for video in results:
            detailed = details.get(video.id)
            if detailed is None:
                detailed = await self._repository.save_video(video)
            merged.append(detailed)
        return merged

    # -------------------------------------------------------------------------
    # Categories and channels
    # -------------------------------------------------------------------------

    async def categories(self) -> List[Category]:
        """Video categories for the configured region, cached in the repository."""
        path = "/videoCategories"
        data = await self._get_json(path, {"part": "snippet", "regionCode": self._region_code})

        categories: List[Category] = []
        for item in self._items(data, path):
            try:
                category = Category(id=item["id"], title=item["snippet"]["title"])
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed category record: error={e}")
                continue
            categories.append(await self._repository.save_category(category))
        return categories

    async def channel(self, channel_id: str) -> Optional[Channel]:
        """Channel details, cached in the repository. None if unknown."""
        path = "/channels"
        data = await self._get_json(path, {"part": "snippet,statistics", "id": channel_id})

        for item in self._items(data, path):
            snippet = item.get("snippet") or {}
            subscribers = (item.get("statistics") or {}).get("subscriberCount")
            try:
                channel = Channel(
                    id=item["id"],
                    title=snippet.get("title") or "",
                    thumbnail_url=best_thumbnail(snippet.get("thumbnails")),
                    subscriber_count=int(subscribers) if subscribers else None,
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed channel record: error={e}")
                continue
            return await self._repository.save_channel(channel)
        return None

    @staticmethod
    def _cap(max_results: int) -> int:
        return max(1, min(max_results, MAX_RESULTS_PER_REQUEST))
