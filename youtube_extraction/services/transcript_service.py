"""Time-windowed transcript extraction from platform caption tracks."""
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from ..core.config import settings
from ..core.exceptions import (
    ConfigurationError, ExtractionServiceError, LoopNotFoundError,
    NoCaptionsAvailableError, UpstreamHttpError
)
from ..models.transcript import (
    PracticeLoop, TranscriptExtractionResult, TranscriptResult, TranscriptSegment
)
from ..models.video import CaptionTrack
from ..utils.logging import CorrelatedLogger, MetricsLogger
from ..utils.validators import TimeWindowValidator
from .client_profiles import ClientProfileRegistry
from .innertube_gateway import InnerTubeGateway
from .timedtext_parser import join_segments, parse_timed_text, slice_window
from .video_data_extractor import normalize_player_response, parse_player_response

if TYPE_CHECKING:
    from .health_monitor import ExtractionHealthMonitor

CAPTIONS_CLIENT = "ANDROID"


class TranscriptCache(Protocol):
    """Optional cache of transcript windows."""

    def get(
        self, video_id: str, start: float, end: float, language: Optional[str]
    ) -> Optional[TranscriptResult]:
        ...

    def set(
        self, video_id: str, start: float, end: float, language: Optional[str],
        result: TranscriptResult
    ) -> None:
        ...


class LoopLookup(Protocol):
    """Host capability resolving saved practice loops."""

    async def find_by_id(self, loop_id: str) -> Optional[PracticeLoop]:
        ...


class TranscriptService:
    """Lists caption tracks, picks one and returns the requested time window.

    The full track is always downloaded and sliced locally. Errors on the
    segment path propagate to the caller; the availability helpers downgrade
    them to conservative defaults instead.
    """

    def __init__(
        self,
        gateway: InnerTubeGateway,
        registry: ClientProfileRegistry,
        cache: Optional[TranscriptCache] = None,
        loop_lookup: Optional[LoopLookup] = None,
        health_monitor: Optional["ExtractionHealthMonitor"] = None
    ):
        self.gateway = gateway
        self.registry = registry
        self.cache = cache
        self.loop_lookup = loop_lookup
        self.health_monitor = health_monitor
        self.logger = CorrelatedLogger(__name__)
        self.metrics = MetricsLogger()

    async def list_caption_tracks(self, video_id: str) -> List[CaptionTrack]:
        """Caption tracks advertised by the player endpoint.

        The Android client is asked first; the other profiles are only tried
        when a call fails.
        """
        api_key = await self.gateway.extract_api_key(video_id)

        last_error: Optional[ExtractionServiceError] = None
        answered = False
        for profile in self.registry.preferred(CAPTIONS_CLIENT):
            try:
                raw = await self.gateway.call_player_endpoint(video_id, profile, api_key)
                player = parse_player_response(raw)
            except ExtractionServiceError as e:
                self.logger.warning(
                    f"Caption track lookup with {profile.name} client failed for {video_id}: {e.message}"
                )
                last_error = e
                continue

            answered = True
            tracks = normalize_player_response(player, video_id).caption_tracks
            if tracks:
                self.logger.debug(f"Found {len(tracks)} caption tracks for {video_id} via {profile.name}")
                return tracks

        if answered or last_error is None:
            raise NoCaptionsAvailableError(video_id)
        raise last_error

    def select_track(
        self,
        tracks: List[CaptionTrack],
        preferred_language: Optional[str] = None
    ) -> CaptionTrack:
        """Pick a track: exact language, then prefix match, then the first one."""
        if not tracks:
            raise NoCaptionsAvailableError()

        language = (preferred_language or settings.default_transcript_language).lower()

        for track in tracks:
            if track.language_code.lower() == language:
                return track

        for track in tracks:
            code = track.language_code.lower()
            if code.startswith(language) or language.startswith(code):
                return track

        fallback = tracks[0]
        self.logger.warning(
            f"Preferred language {language} not available, "
            f"using {fallback.language_code} instead"
        )
        return fallback

    async def fetch_and_parse(self, track: CaptionTrack) -> List[TranscriptSegment]:
        """Download a caption track body and parse it into segments."""
        try:
            xml_content = await self.gateway.fetch_text(track.track_url)
        except UpstreamHttpError as e:
            self.logger.warning(f"Caption download for {track.language_code} failed with status {e.status}")
            raise
        return parse_timed_text(xml_content)

    async def get_transcript_segment(
        self,
        video_id: str,
        start_seconds: float,
        end_seconds: float,
        language: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> TranscriptResult:
        """Transcript for the window [start_seconds, end_seconds)."""
        start_time = datetime.now()

        if request_id:
            self.logger.request_id = request_id

        TimeWindowValidator.validate_window(start_seconds, end_seconds)

        cached = self._read_cache(video_id, start_seconds, end_seconds, language)
        if cached is not None:
            self._log_metrics(video_id, cached.language, True, start_time, len(cached.segments), cache_hit=True)
            return cached.model_copy(update={"from_cache": True})

        try:
            tracks = await self.list_caption_tracks(video_id)
            track = self.select_track(tracks, language)
            segments = await self.fetch_and_parse(track)
        except ExtractionServiceError as e:
            self._log_metrics(video_id, language, False, start_time, error_code=e.error_code)
            raise

        window = slice_window(segments, start_seconds, end_seconds)
        result = TranscriptResult(
            video_id=video_id,
            language=track.language_code,
            segments=window,
            full_text=join_segments(window),
            start_seconds=start_seconds,
            end_seconds=end_seconds
        )

        self._write_cache(video_id, start_seconds, end_seconds, language, result)
        self._log_metrics(video_id, result.language, True, start_time, len(window))
        return result

    async def is_transcript_available(self, video_id: str) -> bool:
        try:
            tracks = await self.list_caption_tracks(video_id)
        except ExtractionServiceError as e:
            self.logger.debug(f"Transcript availability check failed for {video_id}: {e.message}")
            return False
        return len(tracks) > 0

    async def get_available_languages(self, video_id: str) -> List[str]:
        """Language codes in track order; ``["en"]`` when the lookup fails."""
        try:
            tracks = await self.list_caption_tracks(video_id)
        except ExtractionServiceError as e:
            self.logger.debug(f"Language lookup failed for {video_id}: {e.message}")
            return ["en"]

        languages: List[str] = []
        for track in tracks:
            if track.language_code not in languages:
                languages.append(track.language_code)
        return languages

    async def fetch_transcript_window(
        self,
        video_id: str,
        start_seconds: float,
        end_seconds: float,
        language: Optional[str] = None,
        request_id: Optional[str] = None
    ) -> TranscriptExtractionResult:
        """Like get_transcript_segment, but failures come back as a value."""
        try:
            transcript = await self.get_transcript_segment(
                video_id, start_seconds, end_seconds, language, request_id
            )
        except ExtractionServiceError as e:
            self.logger.error(f"Transcript extraction failed for {video_id}: {e.message}")
            return TranscriptExtractionResult(
                success=False,
                error_code=e.error_code,
                error_message=e.message,
                details=self._failure_details(video_id, e)
            )

        return TranscriptExtractionResult(success=True, transcript=transcript)

    async def get_loop_transcript(self, loop_id: str, request_id: Optional[str] = None) -> TranscriptResult:
        """Transcript window of a saved practice loop."""
        if self.loop_lookup is None:
            raise ConfigurationError("loop_lookup", "No practice loop lookup configured")

        loop = await self.loop_lookup.find_by_id(loop_id)
        if loop is None:
            raise LoopNotFoundError(loop_id)

        return await self.get_transcript_segment(
            loop.video_id, loop.start_seconds, loop.end_seconds, loop.language, request_id
        )

    def _failure_details(self, video_id: str, error: ExtractionServiceError) -> Dict[str, Any]:
        details: Dict[str, Any] = dict(error.details)
        details["video_id"] = video_id
        details["timestamp"] = datetime.now().isoformat()
        if self.health_monitor is not None:
            details["health_metrics"] = self.health_monitor.get_health_metrics().model_dump(mode="json")
        return details

    def _read_cache(
        self, video_id: str, start: float, end: float, language: Optional[str]
    ) -> Optional[TranscriptResult]:
        if self.cache is None:
            return None
        try:
            return self.cache.get(video_id, start, end, language)
        except Exception as e:
            self.logger.warning(f"Transcript cache read failed: {str(e)}")
            return None

    def _write_cache(
        self, video_id: str, start: float, end: float, language: Optional[str],
        result: TranscriptResult
    ) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(video_id, start, end, language, result)
        except Exception as e:
            self.logger.warning(f"Transcript cache write failed: {str(e)}")

    def _log_metrics(
        self,
        video_id: str,
        language: Optional[str],
        success: bool,
        start_time: datetime,
        segment_count: int = 0,
        cache_hit: bool = False,
        error_code: Optional[str] = None
    ) -> None:
        self.metrics.log_transcript_metrics(
            video_id=video_id,
            language=language,
            success=success,
            processing_time_ms=int((datetime.now() - start_time).total_seconds() * 1000),
            segment_count=segment_count,
            cache_hit=cache_hit,
            error_code=error_code
        )
