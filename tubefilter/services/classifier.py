"""
Short-form content classifier.
Decides from duration and hashtags whether a video is a Short.
"""
from typing import Optional, Protocol

from tubefilter.services.duration import parse_duration

SHORT_MAX_DURATION_SEC = 60  # Seconds; at or under this a video counts as short
SHORT_HASHTAGS = ("#shorts", "#short")


class ClassifiableVideo(Protocol):
    duration: Optional[str]
    title: Optional[str]
    description: Optional[str]


def _has_short_hashtag(text: Optional[str]) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(tag in lowered for tag in SHORT_HASHTAGS)


def is_short(video: ClassifiableVideo, threshold: int = SHORT_MAX_DURATION_SEC) -> bool:
    """
    Classify a video as short-form.

    Rules, first match wins:
        1. Duration present and at most ``threshold`` seconds
        2. Title mentions #shorts / #short
        3. Description mentions #shorts / #short

    Called once at normalization; the result is cached on the Video.
    """
    if video.duration and parse_duration(video.duration) <= threshold:
        return True
    if _has_short_hashtag(video.title):
        return True
    return _has_short_hashtag(video.description)
