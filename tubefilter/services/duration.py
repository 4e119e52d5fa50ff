"""
Compact duration codec.

The catalog reports lengths as ISO 8601 time durations (``PT1H2M3S``).
Parsing is lenient: the field is often missing upstream, so anything
without a recognizable component counts as zero seconds.
"""
import re

DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration(encoded: str) -> int:
    """
    Parse a compact duration into total seconds.

    Example:
        >>> parse_duration("PT1H2M3S")
        3723
        >>> parse_duration("garbage")
        0
    """
    if not encoded:
        return 0
    match = DURATION_PATTERN.search(encoded)
    if match is None:
        return 0
    hours, minutes, seconds = (int(group) if group else 0 for group in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_duration(seconds: int) -> str:
    """
    Format seconds as ``H:MM:SS``, or ``M:SS`` under an hour.

    Example:
        >>> format_duration(3723)
        '1:02:03'
        >>> format_duration(125)
        '2:05'
    """
    if seconds < 0:
        raise ValueError(f"Duration must be non-negative, got {seconds}")
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
