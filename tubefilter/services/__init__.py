"""Services package - business logic layer."""
from .catalog import CatalogGateway, normalize_video
from .classifier import is_short
from .content_filter import apply_filter
from .duration import format_duration, parse_duration
from .recommendations import RecommendationEngine
from .tracker import InteractionTracker
from .videos import VideoService

__all__ = [
    "CatalogGateway",
    "InteractionTracker",
    "RecommendationEngine",
    "VideoService",
    "apply_filter",
    "format_duration",
    "is_short",
    "normalize_video",
    "parse_duration",
]
