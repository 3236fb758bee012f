"""Simple cache service for transcript windows."""
import hashlib
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from ..core.config import settings
from ..models.transcript import TranscriptResult


class TranscriptCacheService:
    """Simple in-memory cache for transcript windows."""

    def __init__(self, default_ttl_seconds: Optional[int] = None):
        self._cache: Dict[str, Dict[str, Any]] = {}
        self.default_ttl_seconds = default_ttl_seconds or settings.cache_ttl_seconds
        self.hits = 0
        self.misses = 0

    def _make_key(self, video_id: str, start: float, end: float, language: Optional[str]) -> str:
        """Generate cache key from the window coordinates."""
        raw = f"{video_id}:{float(start)}:{float(end)}:{language or ''}"
        return f"transcript:{hashlib.md5(raw.encode()).hexdigest()}"

    def get(
        self, video_id: str, start: float, end: float, language: Optional[str] = None
    ) -> Optional[TranscriptResult]:
        """Get a cached transcript window."""
        key = self._make_key(video_id, start, end, language)

        if key not in self._cache:
            self.misses += 1
            return None

        item = self._cache[key]

        # Check if expired
        if datetime.now() > item['expires_at']:
            del self._cache[key]
            self.misses += 1
            return None

        self.hits += 1
        return item['data']

    def set(
        self,
        video_id: str,
        start: float,
        end: float,
        language: Optional[str],
        result: TranscriptResult,
        ttl_seconds: Optional[int] = None
    ) -> None:
        """Cache a transcript window."""
        key = self._make_key(video_id, start, end, language)
        ttl = ttl_seconds or self.default_ttl_seconds

        self._cache[key] = {
            'data': result,
            'expires_at': datetime.now() + timedelta(seconds=ttl),
            'created_at': datetime.now()
        }

    def exists(self, video_id: str, start: float, end: float, language: Optional[str] = None) -> bool:
        """Check if a window is cached."""
        key = self._make_key(video_id, start, end, language)

        if key not in self._cache:
            return False

        if datetime.now() > self._cache[key]['expires_at']:
            del self._cache[key]
            return False

        return True

    def clear(self) -> None:
        """Clear all cache."""
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache stats."""
        lookups = self.hits + self.misses
        return {
            "total_items": len(self._cache),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / lookups if lookups else 0.0,
            "ttl_seconds": self.default_ttl_seconds
        }
