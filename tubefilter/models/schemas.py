"""
Domain models using Pydantic.
All data structures for the catalog, history and recommendation system.
JSON field names are camelCase; Python attributes are snake_case.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base model serializing to camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InteractionType(str, Enum):
    """Known interaction types. The stored type is an open string set."""

    LIKE = "like"
    DISLIKE = "dislike"
    SAVE = "save"
    SHARE = "share"


# =============================================================================
# Catalog Entities (cached from the catalog service)
# =============================================================================


class Video(APIModel):
    """
    Normalized catalog video.
    Upserted on every observation, never deleted.
    """

    id: str = Field(..., min_length=1, description="Catalog video identifier")
    title: str = Field(default="", description="Video title")
    description: str = Field(default="", description="Video description")
    thumbnail_url: Optional[str] = Field(default=None, description="Best thumbnail URL")
    channel_id: str = Field(default="", description="Owning channel identifier")
    channel_title: str = Field(default="", description="Owning channel title")
    published_at: Optional[datetime] = Field(default=None, description="Publication time")
    duration: str = Field(default="", description="Compact duration, e.g. PT4M13S")
    view_count: int = Field(default=0, ge=0, description="View count")
    is_short: bool = Field(
        default=False,
        description="Short-form flag, computed once at normalization",
    )
    is_vertical: Optional[bool] = Field(
        default=None,
        description="Portrait aspect ratio; None when the catalog did not report one",
    )


class Channel(APIModel):
    """Catalog channel."""

    id: str = Field(..., min_length=1)
    title: str = ""
    thumbnail_url: Optional[str] = None
    subscriber_count: Optional[int] = None


class Category(APIModel):
    """Catalog video category."""

    id: str = Field(..., min_length=1)
    title: str = ""


# =============================================================================
# User State (owned by the repository)
# =============================================================================


class User(APIModel):
    id: int
    username: str
    created_at: datetime


class Identity(APIModel):
    """
    Authenticated identity resolved at the API boundary.
    Passed explicitly into every service call that needs a user.
    """

    user_id: int
    username: str


class SearchQuery(APIModel):
    id: int
    query: str
    timestamp: datetime


class WatchHistory(APIModel):
    """One watch session. Append-only."""

    id: int
    user_id: int
    video_id: str
    watched_at: datetime
    watch_duration: Optional[int] = Field(default=None, description="Seconds watched")
    completed: bool = False


class VideoInteraction(APIModel):
    """Interaction keyed uniquely by (user_id, video_id, interaction_type)."""

    id: int
    user_id: int
    video_id: str
    interaction_type: str
    created_at: datetime


class WatchHistoryWithVideo(WatchHistory):
    video: Optional[Video] = None


class VideoInteractionWithVideo(VideoInteraction):
    video: Optional[Video] = None


# =============================================================================
# Filtering
# =============================================================================


class ContentFilter(APIModel):
    """Client-adjustable content filter. Unknown fields are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    exclude_shorts: bool = Field(default=True, description="Hide short-form videos")
    exclude_vertical: bool = Field(default=False, description="Hide portrait videos")
    min_duration: int = Field(default=0, ge=0, description="Minimum length in minutes")


class UserPreference(ContentFilter):
    """Stored filter defaults."""

    id: int = 1


# =============================================================================
# Recommendation Internals
# =============================================================================


class AffinityProfile(BaseModel):
    """
    Per-request behavioral signal for one user.
    Never persisted.
    """

    weights: Dict[str, int] = Field(
        default_factory=dict,
        description="Channel id -> accumulated weight, in first-seen order",
    )
    watched_ids: Set[str] = Field(
        default_factory=set,
        description="Video ids present in the user's recent watch history",
    )

    @property
    def is_cold_start(self) -> bool:
        """Check if the user has no usable signal."""
        return len(self.weights) == 0


# =============================================================================
# API Models (Requests)
# =============================================================================


class WatchHistoryCreate(APIModel):
    video_id: str = Field(..., min_length=1)
    watch_duration: Optional[int] = Field(default=None, ge=0)
    completed: bool = False


class VideoInteractionCreate(APIModel):
    video_id: str = Field(..., min_length=1)
    interaction_type: str = Field(..., min_length=1, max_length=32)


class UserCreate(APIModel):
    username: str = Field(..., min_length=1, max_length=64)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: Dict[str, Any] = Field(..., description="Error details")
