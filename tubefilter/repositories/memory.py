"""
In-memory repository implementation.
Used for prototyping and testing.
Production would replace this with a Postgres implementation.
"""
import itertools
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from tubefilter.core.exceptions import ValidationError
from tubefilter.core.store import InMemoryStore
from tubefilter.models.schemas import (
    Category,
    Channel,
    ContentFilter,
    SearchQuery,
    User,
    UserPreference,
    Video,
    VideoInteraction,
    WatchHistory,
)

InteractionKey = Tuple[int, str, str]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryRepository:
    """
    In-memory implementation of Repository.
    One store per entity type; each store carries its own lock.
    """

    def __init__(self) -> None:
        self._videos: InMemoryStore[str, Video] = InMemoryStore()
        self._channels: InMemoryStore[str, Channel] = InMemoryStore()
        self._categories: InMemoryStore[str, Category] = InMemoryStore()
        self._search_queries: InMemoryStore[int, SearchQuery] = InMemoryStore()
        self._users: InMemoryStore[int, User] = InMemoryStore()
        self._usernames: InMemoryStore[str, int] = InMemoryStore()
        self._watch_history: InMemoryStore[int, WatchHistory] = InMemoryStore()
        self._interactions: InMemoryStore[InteractionKey, VideoInteraction] = InMemoryStore()
        self._preferences = UserPreference()

        self._search_ids = itertools.count(1)
        self._user_ids = itertools.count(1)
        self._history_ids = itertools.count(1)
        self._interaction_ids = itertools.count(1)

    # -------------------------------------------------------------------------
    # Videos
    # -------------------------------------------------------------------------

    async def get_video(self, video_id: str) -> Optional[Video]:
        return self._videos.get(video_id)

    async def save_video(self, video: Video) -> Video:
        return self._videos.upsert(video.id, video)

    # -------------------------------------------------------------------------
    # Channels and categories
    # -------------------------------------------------------------------------

    async def get_channel(self, channel_id: str) -> Optional[Channel]:
        return self._channels.get(channel_id)

    async def save_channel(self, channel: Channel) -> Channel:
        return self._channels.upsert(channel.id, channel)

    async def save_category(self, category: Category) -> Category:
        return self._categories.upsert(category.id, category)

    async def list_categories(self) -> List[Category]:
        return self._categories.values()

    # -------------------------------------------------------------------------
    # Search queries
    # -------------------------------------------------------------------------

    async def save_search_query(self, query: str) -> SearchQuery:
        record = SearchQuery(id=next(self._search_ids), query=query, timestamp=_utcnow())
        return self._search_queries.upsert(record.id, record)

    async def list_recent_search_queries(self, limit: int = 10) -> List[SearchQuery]:
        queries = sorted(
            self._search_queries.values(),
            key=lambda q: (q.timestamp, q.id),
            reverse=True,
        )
        return queries[:limit]

    # -------------------------------------------------------------------------
    # Users and preferences
    # -------------------------------------------------------------------------

    async def create_user(self, username: str) -> User:
        user_id = next(self._user_ids)

        def taken(existing: int) -> int:
            raise ValidationError(
                "Username already exists", details={"username": username}
            )

        self._usernames.merge(username, create=lambda: user_id, update=taken)
        user = User(id=user_id, username=username, created_at=_utcnow())
        return self._users.upsert(user.id, user)

    async def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def get_preferences(self) -> UserPreference:
        return self._preferences

    async def save_preferences(self, preferences: ContentFilter) -> UserPreference:
        self._preferences = UserPreference(
            id=self._preferences.id,
            **preferences.model_dump(exclude={"id"}),
        )
        return self._preferences

    # -------------------------------------------------------------------------
    # Watch history
    # -------------------------------------------------------------------------

    async def add_watch_history(
        self,
        user_id: int,
        video_id: str,
        watch_duration: Optional[int] = None,
        completed: bool = False,
    ) -> WatchHistory:
        entry = WatchHistory(
            id=next(self._history_ids),
            user_id=user_id,
            video_id=video_id,
            watched_at=_utcnow(),
            watch_duration=watch_duration,
            completed=completed,
        )
        return self._watch_history.upsert(entry.id, entry)

    async def list_watch_history(self, user_id: int, limit: int = 50) -> List[WatchHistory]:
        entries = self._watch_history.filter(lambda h: h.user_id == user_id)
        return self._newest_history_first(entries)[:limit]

    @staticmethod
    def _newest_history_first(entries: List[WatchHistory]) -> List[WatchHistory]:
        # id breaks ties between entries created within the same clock tick
        return sorted(entries, key=lambda h: (h.watched_at, h.id), reverse=True)

    # -------------------------------------------------------------------------
    # Interactions
    # -------------------------------------------------------------------------

    async def upsert_interaction(
        self, user_id: int, video_id: str, interaction_type: str
    ) -> VideoInteraction:
        key = (user_id, video_id, interaction_type)
        return self._interactions.merge(
            key,
            create=lambda: VideoInteraction(
                id=next(self._interaction_ids),
                user_id=user_id,
                video_id=video_id,
                interaction_type=interaction_type,
                created_at=_utcnow(),
            ),
            update=lambda current: current.model_copy(update={"created_at": _utcnow()}),
        )

    async def list_interactions(
        self, user_id: int, video_id: Optional[str] = None
    ) -> List[VideoInteraction]:
        interactions = self._interactions.filter(
            lambda i: i.user_id == user_id and (video_id is None or i.video_id == video_id)
        )
        return self._newest_interactions_first(interactions)

    async def list_interactions_by_type(
        self, user_id: int, interaction_type: str
    ) -> List[VideoInteraction]:
        interactions = self._interactions.filter(
            lambda i: i.user_id == user_id and i.interaction_type == interaction_type
        )
        return self._newest_interactions_first(interactions)

    async def delete_interaction(
        self, user_id: int, video_id: str, interaction_type: str
    ) -> bool:
        return self._interactions.delete((user_id, video_id, interaction_type))

    @staticmethod
    def _newest_interactions_first(
        interactions: List[VideoInteraction],
    ) -> List[VideoInteraction]:
        return sorted(interactions, key=lambda i: (i.created_at, i.id), reverse=True)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def counts(self) -> dict:
        """Entity counts per collection (readiness reporting)."""
        return {
            "videos": self._videos.size(),
            "categories": self._categories.size(),
            "users": self._users.size(),
            "watch_history": self._watch_history.size(),
            "interactions": self._interactions.size(),
        }
