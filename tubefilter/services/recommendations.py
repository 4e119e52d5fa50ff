"""
Recommendation engine.
Turns a user's watch history and likes into channel affinity weights,
fetches fresh videos from the strongest channels and backfills with
trending content.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Set

from tubefilter.config.settings import Settings, get_settings
from tubefilter.core.exceptions import UpstreamError
from tubefilter.models.interfaces import CatalogClient, Repository
from tubefilter.models.schemas import AffinityProfile, Identity, InteractionType, Video

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """
    Channel-affinity recommender.

    Flow:
    - Anonymous callers get trending videos
    - Build an AffinityProfile from recent history (+1) and likes (+3)
    - No channel signal (cold start) goes straight to the trending backfill
    - Fetch recent videos from the top channels concurrently
    - Drop already-watched videos, backfill with trending when short

    Output is unfiltered; callers apply the content filter.
    """

    def __init__(
        self,
        repository: Repository,
        catalog: CatalogClient,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self._repository = repository
        self._catalog = catalog
        self._history_limit = settings.RECOMMENDATION_HISTORY_LIMIT
        self._watch_weight = settings.WATCH_WEIGHT
        self._like_weight = settings.LIKE_WEIGHT
        self._top_channels = settings.TOP_CHANNELS
        self._channel_limit = settings.CHANNEL_VIDEOS_LIMIT
        self._min_results = settings.MIN_RECOMMENDATIONS
        self._target_results = settings.TARGET_RECOMMENDATIONS

    async def recommend(self, identity: Optional[Identity]) -> List[Video]:
        """
        Recommend videos for a caller.

        Args:
            identity: Authenticated caller, None for anonymous

        Returns:
            Candidate videos, personalized first, trending backfill after

        Raises:
            UpstreamError: If the trending fetch fails
        """
        if identity is None:
            logger.info("Anonymous recommendations, serving trending")
            return await self._catalog.trending()

        profile = await self.build_profile(identity.user_id)
        if profile.is_cold_start:
            logger.info(
                "Cold start, serving trending backfill",
                extra={"user_id": identity.user_id},
            )
            return await self._backfill([], profile.watched_ids)

        channels = self.top_channels(profile)
        candidates = await self._channel_candidates(channels, profile.watched_ids)
        personalized = len(candidates)

        if len(candidates) < self._min_results:
            candidates = await self._backfill(candidates, profile.watched_ids)

        logger.info(
            f"Recommendations served: channels={len(channels)}, "
            f"personalized={personalized}, total={len(candidates)}",
            extra={"user_id": identity.user_id},
        )
        return candidates

    async def build_profile(self, user_id: int) -> AffinityProfile:
        """
        Accumulate channel weights from recent history and likes.

        Each referenced video is hydrated once from the repository; videos
        missing from the cache contribute no weight.
        """
        history = await self._repository.list_watch_history(user_id, self._history_limit)
        likes = await self._repository.list_interactions_by_type(
            user_id, InteractionType.LIKE.value
        )

        hydrated: Dict[str, Optional[Video]] = {}

        async def hydrate(video_id: str) -> Optional[Video]:
            if video_id not in hydrated:
                hydrated[video_id] = await self._repository.get_video(video_id)
            return hydrated[video_id]

        weights: Dict[str, int] = {}
        watched_ids: Set[str] = set()

        for entry in history:
            watched_ids.add(entry.video_id)
            video = await hydrate(entry.video_id)
            if video is not None and video.channel_id:
                weights[video.channel_id] = weights.get(video.channel_id, 0) + self._watch_weight

        for like in likes:
            video = await hydrate(like.video_id)
            if video is not None and video.channel_id:
                weights[video.channel_id] = weights.get(video.channel_id, 0) + self._like_weight

        return AffinityProfile(weights=weights, watched_ids=watched_ids)

    def top_channels(self, profile: AffinityProfile) -> List[str]:
        """Channels by descending weight; ties keep first-seen order."""
        ranked = sorted(profile.weights.items(), key=lambda item: -item[1])
        return [channel_id for channel_id, _ in ranked[: self._top_channels]]

    async def _fetch_channel(self, channel_id: str) -> List[Video]:
        try:
            return await self._catalog.channel_videos(channel_id, self._channel_limit)
        except UpstreamError as e:
            logger.warning(f"Channel fetch failed, skipping: channel={channel_id}, error={e}")
            return []

    async def _channel_candidates(
        self, channels: List[str], watched_ids: Set[str]
    ) -> List[Video]:
        # Each task absorbs its own failure so one channel never cancels the rest
        results = await asyncio.gather(*(self._fetch_channel(c) for c in channels))

        candidates: List[Video] = []
        seen: Set[str] = set()
        for videos in results:
            for video in videos:
                if video.id in watched_ids or video.id in seen:
                    continue
                seen.add(video.id)
                candidates.append(video)
        return candidates

    async def _backfill(self, candidates: List[Video], watched_ids: Set[str]) -> List[Video]:
        needed = self._target_results - len(candidates)
        trending = await self._catalog.trending(needed)

        seen = {video.id for video in candidates}
        result = list(candidates)
        for video in trending:
            if video.id in watched_ids or video.id in seen:
                continue
            seen.add(video.id)
            result.append(video)
        return result
