"""
Content filter applied at every video-listing surface.
"""
from typing import Iterable, List

from tubefilter.models.schemas import ContentFilter, Video
from tubefilter.services.duration import parse_duration


def passes_filter(video: Video, content_filter: ContentFilter) -> bool:
    """Check a single video against the filter."""
    if content_filter.exclude_shorts and video.is_short:
        return False

    # Videos without a duration always pass the length rule
    if content_filter.min_duration > 0 and video.duration:
        if parse_duration(video.duration) < content_filter.min_duration * 60:
            return False

    # Unknown orientation passes
    if content_filter.exclude_vertical and video.is_vertical is True:
        return False

    return True


def apply_filter(videos: Iterable[Video], content_filter: ContentFilter) -> List[Video]:
    """Return the videos passing the filter, in input order."""
    return [video for video in videos if passes_filter(video, content_filter)]
