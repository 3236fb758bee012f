"""Unit tests for cache service."""
import pytest
from datetime import datetime, timedelta
from youtube_extraction.models.transcript import TranscriptResult, TranscriptSegment
from youtube_extraction.services.cache_service import TranscriptCacheService

def _result(video_id="abc", text="Hello"):
    return TranscriptResult(
        video_id=video_id,
        language="en",
        segments=[TranscriptSegment(start_seconds=0, duration_seconds=2, text=text)],
        full_text=text,
        start_seconds=0,
        end_seconds=4
    )

class TestTranscriptCacheService:
    """Test in-memory transcript cache."""

    def test_cache_set_and_get(self):
        """Test setting and getting cache values."""
        cache = TranscriptCacheService(default_ttl_seconds=60)
        result = _result()

        cache.set("abc", 0, 4, "en", result)

        assert cache.get("abc", 0, 4, "en") == result

    def test_cache_miss(self):
        """Test cache miss."""
        cache = TranscriptCacheService()
        assert cache.get("abc", 0, 4, "en") is None

    def test_window_and_language_are_part_of_the_key(self):
        cache = TranscriptCacheService()
        cache.set("abc", 0, 4, "en", _result())

        assert cache.get("abc", 0, 5, "en") is None
        assert cache.get("abc", 0, 4, "fr") is None
        assert cache.get("abc", 0, 4, None) is None

    def test_cache_expiry(self):
        """Test cache expiry functionality."""
        cache = TranscriptCacheService()
        cache.set("abc", 0, 4, "en", _result())

        # Manually expire by setting past time
        key = cache._make_key("abc", 0, 4, "en")
        cache._cache[key]["expires_at"] = datetime.now() - timedelta(seconds=1)

        assert cache.get("abc", 0, 4, "en") is None
        assert not cache.exists("abc", 0, 4, "en")

    def test_cache_exists(self):
        """Test cache exists functionality."""
        cache = TranscriptCacheService()

        assert not cache.exists("abc", 0, 4, "en")
        cache.set("abc", 0, 4, "en", _result())
        assert cache.exists("abc", 0, 4, "en")

    def test_cache_clear(self):
        """Test cache clear functionality."""
        cache = TranscriptCacheService()
        cache.set("abc", 0, 4, "en", _result())

        cache.clear()
        assert cache.get("abc", 0, 4, "en") is None

    def test_cache_stats(self):
        """Test cache statistics."""
        cache = TranscriptCacheService(default_ttl_seconds=120)

        stats = cache.get_stats()
        assert stats["total_items"] == 0
        assert stats["hit_rate"] == 0.0
        assert stats["ttl_seconds"] == 120

        cache.set("abc", 0, 4, "en", _result())
        cache.set("def", 0, 4, "en", _result("def"))
        cache.get("abc", 0, 4, "en")
        cache.get("xyz", 0, 4, "en")

        stats = cache.get_stats()
        assert stats["total_items"] == 2
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

    def test_cache_key_generation(self):
        """Test cache key generation consistency."""
        cache = TranscriptCacheService()

        assert cache._make_key("abc", 0, 4, "en") == cache._make_key("abc", 0, 4, "en")
        assert cache._make_key("abc", 0, 4, "en") != cache._make_key("abd", 0, 4, "en")
