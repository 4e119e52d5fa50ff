"""
History and interaction tracker.
Records watch sessions and like/save style interactions for a user.
"""
import logging
from typing import List, Optional, Type, TypeVar, Union

from tubefilter.core.exceptions import NotFoundError
from tubefilter.models.interfaces import Repository
from tubefilter.models.schemas import (
    Identity,
    VideoInteraction,
    VideoInteractionWithVideo,
    WatchHistory,
    WatchHistoryWithVideo,
)

logger = logging.getLogger(__name__)

Joined = TypeVar("Joined", WatchHistoryWithVideo, VideoInteractionWithVideo)


class InteractionTracker:
    """
    Tracks what a user watched and reacted to.

    Interactions are upserted by (user, video, type): toggling twice keeps
    one record with a refreshed timestamp. Removal is an explicit call.
    """

    def __init__(self, repository: Repository) -> None:
        self._repository = repository

    async def record_watch(
        self,
        identity: Identity,
        video_id: str,
        watch_duration: Optional[int] = None,
        completed: bool = False,
    ) -> WatchHistory:
        """Append a watch session; repeat views produce repeat entries."""
        entry = await self._repository.add_watch_history(
            user_id=identity.user_id,
            video_id=video_id,
            watch_duration=watch_duration,
            completed=completed,
        )
        logger.info(
            f"Watch recorded: duration={watch_duration}, completed={completed}",
            extra={"user_id": identity.user_id, "video_id": video_id},
        )
        return entry

    async def toggle_interaction(
        self, identity: Identity, video_id: str, interaction_type: str
    ) -> VideoInteraction:
        """Create the interaction or refresh the existing one. Never deletes."""
        return await self._repository.upsert_interaction(
            identity.user_id, video_id, interaction_type
        )

    async def remove_interaction(
        self, identity: Identity, video_id: str, interaction_type: str
    ) -> None:
        """
        Delete an interaction.

        Raises:
            NotFoundError: If the user has no such interaction
        """
        removed = await self._repository.delete_interaction(
            identity.user_id, video_id, interaction_type
        )
        if not removed:
            raise NotFoundError("Interaction", f"{interaction_type}:{video_id}")
        logger.info(
            f"Interaction removed: type={interaction_type}",
            extra={"user_id": identity.user_id, "video_id": video_id},
        )

    async def watch_history(
        self, identity: Identity, limit: int = 50
    ) -> List[WatchHistoryWithVideo]:
        """Newest-first history joined with cached videos."""
        entries = await self._repository.list_watch_history(identity.user_id, limit)
        return [await self._join(entry, WatchHistoryWithVideo) for entry in entries]

    async def interactions(
        self,
        identity: Identity,
        interaction_type: Optional[str] = None,
        video_id: Optional[str] = None,
    ) -> List[VideoInteractionWithVideo]:
        """Newest-first interactions, optionally narrowed by type and video."""
        if interaction_type:
            records = await self._repository.list_interactions_by_type(
                identity.user_id, interaction_type
            )
            if video_id:
                records = [r for r in records if r.video_id == video_id]
        else:
            records = await self._repository.list_interactions(identity.user_id, video_id)
        return [await self._join(record, VideoInteractionWithVideo) for record in records]

    async def _join(
        self,
        record: Union[WatchHistory, VideoInteraction],
        joined_type: Type[Joined],
    ) -> Joined:
        # An uncached video leaves the field unset rather than failing
        video = await self._repository.get_video(record.video_id)
        if video is None:
            return joined_type(**record.model_dump())
        return joined_type(**record.model_dump(), video=video)
