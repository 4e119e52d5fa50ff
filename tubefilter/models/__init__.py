"""Models package - domain entities and interfaces."""
from .interfaces import CatalogClient, Repository
from .schemas import (
    AffinityProfile,
    Category,
    Channel,
    ContentFilter,
    ErrorResponse,
    Identity,
    InteractionType,
    SearchQuery,
    User,
    UserPreference,
    Video,
    VideoInteraction,
    VideoInteractionWithVideo,
    WatchHistory,
    WatchHistoryWithVideo,
)

__all__ = [
    # Interfaces
    "CatalogClient",
    "Repository",
    # Schemas
    "AffinityProfile",
    "Category",
    "Channel",
    "ContentFilter",
    "ErrorResponse",
    "Identity",
    "InteractionType",
    "SearchQuery",
    "User",
    "UserPreference",
    "Video",
    "VideoInteraction",
    "VideoInteractionWithVideo",
    "WatchHistory",
    "WatchHistoryWithVideo",
]
