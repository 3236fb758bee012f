"""Video reference and time window validation utilities."""
import math
import re
from urllib.parse import parse_qs, urlparse
from typing import Optional, Tuple
from ..core.exceptions import NoVideoIdResolvedError, ValidationError

VIDEO_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{11}$')

YOUTUBE_DOMAINS = ["youtube.com", "youtu.be", "youtube-nocookie.com"]


class URLValidator:
    """YouTube URL and video ID utilities."""

    @staticmethod
    def is_video_id(value: str) -> bool:
        """Check whether a value looks like a bare video ID."""
        return bool(value) and bool(VIDEO_ID_PATTERN.match(value))

    @staticmethod
    def is_youtube_url(url: str) -> bool:
        """Validate if URL points at a YouTube domain."""
        try:
            parsed = urlparse(url)
            domain = parsed.netloc.lower().split(":")[0]
            return any(domain == d or domain.endswith("." + d) for d in YOUTUBE_DOMAINS)
        except ValueError:
            return False

    @staticmethod
    def get_query_video_id(url: str) -> Optional[str]:
        """Read the ``v`` query parameter of a URL, if any."""
        try:
            values = parse_qs(urlparse(url).query).get("v")
        except ValueError:
            return None
        if values and values[0]:
            return values[0]
        return None

    @staticmethod
    def extract_video_id(value: str) -> Optional[str]:
        """Extract a video ID from a bare ID or any YouTube URL form."""
        if not value:
            return None

        value = value.strip()
        if URLValidator.is_video_id(value):
            return value

        if not URLValidator.is_youtube_url(value):
            return None

        query_id = URLValidator.get_query_video_id(value)
        if query_id:
            return query_id

        parsed = urlparse(value)
        if parsed.netloc.lower().endswith("youtu.be"):
            short_id = parsed.path.lstrip("/").split("/")[0]
            return short_id or None

        match = re.search(r'/(?:embed|shorts|live|v)/([^/?#]+)', parsed.path)
        if match:
            return match.group(1)

        return None

    @staticmethod
    def require_video_id(value: Optional[str]) -> str:
        """Extract a video ID or raise NoVideoIdResolvedError."""
        video_id = URLValidator.extract_video_id(value) if value else None
        if not video_id:
            raise NoVideoIdResolvedError(value)
        return video_id


class TimeWindowValidator:
    """Time window validation for transcript slicing."""

    @staticmethod
    def validate_window(start_seconds: float, end_seconds: float) -> Tuple[float, float]:
        """Validate a [start, end) window in seconds."""
        if start_seconds is None or end_seconds is None:
            raise ValidationError("Both start and end must be provided")

        if math.isnan(start_seconds) or math.isnan(end_seconds):
            raise ValidationError("Time window bounds must be numbers")

        if start_seconds < 0:
            raise ValidationError(
                "Invalid time range: start must be >= 0",
                {"reason": f"start={start_seconds}"}
            )

        if end_seconds <= start_seconds:
            raise ValidationError(
                "Invalid time range: end must be greater than start",
                {"reason": f"start={start_seconds} end={end_seconds}"}
            )

        return float(start_seconds), float(end_seconds)
