"""
Repository and catalog interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
These define the contracts that data access implementations must follow.
"""
from typing import List, Optional, Protocol, runtime_checkable

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


@runtime_checkable
class Repository(Protocol):
    """
    Interface for all persisted entities.
    Production: Postgres implementation.
    Testing: In-memory implementation.

    Each collection is updated atomically on its own; there are no
    cross-collection transactions.
    """

    # Videos -----------------------------------------------------------------

    async def get_video(self, video_id: str) -> Optional[Video]:
        """Fetch a cached video, None if never observed."""
        ...

    async def save_video(self, video: Video) -> Video:
        """Insert or overwrite a video by id."""
        ...

    # Channels and categories ------------------------------------------------

    async def get_channel(self, channel_id: str) -> Optional[Channel]:
        ...

    async def save_channel(self, channel: Channel) -> Channel:
        ...

    async def save_category(self, category: Category) -> Category:
        ...

    async def list_categories(self) -> List[Category]:
        ...

    # Search queries ---------------------------------------------------------

    async def save_search_query(self, query: str) -> SearchQuery:
        ...

    async def list_recent_search_queries(self, limit: int = 10) -> List[SearchQuery]:
        ...

    # Users and preferences --------------------------------------------------

    async def create_user(self, username: str) -> User:
        """
        Register a user.

        Raises:
            ValidationError: If the username is taken
        """
        ...

    async def get_user(self, user_id: int) -> Optional[User]:
        ...

    async def get_preferences(self) -> UserPreference:
        ...

    async def save_preferences(self, preferences: ContentFilter) -> UserPreference:
        ...

    # Watch history ----------------------------------------------------------

    async def add_watch_history(
        self,
        user_id: int,
        video_id: str,
        watch_duration: Optional[int] = None,
        completed: bool = False,
    ) -> WatchHistory:
        """Append a watch entry. Never merges with earlier entries."""
        ...

    async def list_watch_history(self, user_id: int, limit: int = 50) -> List[WatchHistory]:
        """User's watch entries, newest first."""
        ...

    # Interactions -----------------------------------------------------------

    async def upsert_interaction(
        self, user_id: int, video_id: str, interaction_type: str
    ) -> VideoInteraction:
        """Create the interaction or refresh the timestamp of the existing one."""
        ...

    async def list_interactions(
        self, user_id: int, video_id: Optional[str] = None
    ) -> List[VideoInteraction]:
        ...

    async def list_interactions_by_type(
        self, user_id: int, interaction_type: str
    ) -> List[VideoInteraction]:
        ...

    async def delete_interaction(
        self, user_id: int, video_id: str, interaction_type: str
    ) -> bool:
        """Remove the interaction, returns True if it existed."""
        ...


@runtime_checkable
class CatalogClient(Protocol):
    """
    Interface for the external video catalog.
    Production: CatalogGateway over HTTP.
    Testing: Stub returning canned videos.
    """

    async def trending(self, max_results: Optional[int] = None) -> List[Video]:
        ...

    async def channel_videos(self, channel_id: str, max_results: int = 10) -> List[Video]:
        ...
