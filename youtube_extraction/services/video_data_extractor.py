"""Video metadata extraction with ranked fallback between strategies."""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import (
    ExtractionServiceError, NoVideoIdResolvedError, ParseError
)
from ..models.player import FormatInfo, PlayerResponse
from ..models.video import (
    CaptionTrack, ExtractionMethod, StreamingFormat, Thumbnail,
    VideoExtractionResult, VideoMetadata
)
from ..utils.logging import CorrelatedLogger, MetricsLogger
from ..utils.validators import URLValidator
from .client_profiles import ClientProfileRegistry
from .innertube_gateway import InnerTubeGateway
from .page_objects import PageContext, PageObjectExtractor

PAGE_OBJECTS_RELIABILITY = 0.9
EXTRACTION_FAILED = "EXTRACTION_FAILED"


def _to_int(value: Any) -> int:
    """Coerce an upstream numeric (often a string) to a non-negative int."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(number, 0)


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return _to_int(value)


def parse_player_response(raw: Dict[str, Any]) -> PlayerResponse:
    """Validate raw player JSON into the sectioned model."""
    try:
        return PlayerResponse.model_validate(raw)
    except PydanticValidationError as e:
        raise ParseError("player response", str(e))


def normalize_player_response(player: PlayerResponse, video_id: str) -> VideoMetadata:
    """Turn a player response into VideoMetadata; missing parts become defaults."""
    details = player.video_details
    microformat = player.microformat_renderer

    thumbnails = []
    if details and details.thumbnail:
        for thumb in details.thumbnail.thumbnails:
            if thumb.url:
                thumbnails.append(Thumbnail(
                    url=thumb.url,
                    width=_to_int(thumb.width),
                    height=_to_int(thumb.height)
                ))

    caption_tracks = []
    for track in player.caption_tracks:
        if not track.base_url or not track.language_code:
            continue
        caption_tracks.append(CaptionTrack(
            language_code=track.language_code,
            language_name=track.display_name() or track.language_code,
            track_url=track.base_url,
            is_translatable=bool(track.is_translatable),
            is_auto_generated=track.kind == "asr"
        ))

    streaming_formats = []
    if player.streaming_data:
        for fmt in player.streaming_data.formats or []:
            streaming_formats.append(_normalize_format(fmt, is_adaptive=False))
        for fmt in player.streaming_data.adaptive_formats or []:
            streaming_formats.append(_normalize_format(fmt, is_adaptive=True))

    return VideoMetadata(
        video_id=video_id,
        title=(details.title if details else None) or "Unknown Title",
        author=(details.author if details else None) or "Unknown Channel",
        channel_id=(details.channel_id if details else None) or "",
        duration_seconds=_to_int(details.length_seconds if details else None),
        view_count=_to_int(details.view_count if details else None),
        publish_date=microformat.publish_date if microformat else None,
        upload_date=microformat.upload_date if microformat else None,
        description=details.short_description if details else None,
        thumbnails=thumbnails,
        caption_tracks=caption_tracks,
        streaming_formats=streaming_formats
    )


def _normalize_format(fmt: FormatInfo, is_adaptive: bool) -> StreamingFormat:
    return StreamingFormat(
        itag=fmt.itag,
        url=fmt.url,
        mime_type=fmt.mime_type,
        quality=fmt.quality,
        quality_label=fmt.quality_label,
        fps=_optional_int(fmt.fps),
        bitrate=_optional_int(fmt.bitrate),
        audio_quality=fmt.audio_quality,
        audio_sample_rate=_optional_int(fmt.audio_sample_rate),
        width=_optional_int(fmt.width),
        height=_optional_int(fmt.height),
        is_adaptive=is_adaptive
    )


class VideoDataExtractor:
    """Produces one normalized VideoMetadata per video ID.

    Strategies run strictly in priority order and the first success wins:

    1. embedded page state (only when a rendered page is supplied)
    2. the InnerTube player API, one client profile at a time in descending
       reliability

    A failing strategy is logged and swallowed. Only exhaustion of every
    strategy is reported, as a failed result carrying the last error.
    """

    def __init__(
        self,
        gateway: InnerTubeGateway,
        registry: ClientProfileRegistry,
        page_extractor: Optional[PageObjectExtractor] = None
    ):
        self.gateway = gateway
        self.registry = registry
        self.page_extractor = page_extractor or PageObjectExtractor()
        self.logger = CorrelatedLogger(__name__)
        self.metrics = MetricsLogger()

    def resolve_video_id(
        self,
        video_id: Optional[str] = None,
        page: Optional[PageContext] = None
    ) -> str:
        """Explicit argument first, else the page URL's ``v`` parameter."""
        if video_id:
            resolved = URLValidator.extract_video_id(video_id)
            if resolved:
                return resolved
        if page and page.url:
            resolved = URLValidator.get_query_video_id(page.url)
            if resolved:
                return resolved
        raise NoVideoIdResolvedError(video_id or (page.url if page else None))

    async def extract_video_data(
        self,
        video_id: Optional[str] = None,
        page: Optional[PageContext] = None,
        request_id: Optional[str] = None
    ) -> VideoExtractionResult:
        """Extract metadata for a video; never raises."""
        start_time = datetime.now()

        if request_id:
            self.logger.request_id = request_id

        try:
            resolved_id = self.resolve_video_id(video_id, page)
        except NoVideoIdResolvedError as e:
            self.logger.warning(e.message)
            return self._finish(
                VideoExtractionResult.failed(e.message, e.error_code),
                start_time
            )

        attempts: List[str] = []
        last_error: Tuple[str, str] = ("No extraction strategy was applicable", EXTRACTION_FAILED)

        if page is not None:
            attempts.append(ExtractionMethod.PAGE_OBJECTS.value)
            try:
                metadata = self._extract_from_page(resolved_id, page)
                return self._finish(
                    VideoExtractionResult.succeeded(
                        metadata,
                        ExtractionMethod.PAGE_OBJECTS,
                        PAGE_OBJECTS_RELIABILITY,
                        attempts=attempts
                    ),
                    start_time
                )
            except ExtractionServiceError as e:
                self.logger.warning(f"Page object extraction failed for {resolved_id}: {e.message}")
                last_error = (e.message, e.error_code)
            except Exception as e:
                self.logger.exception(f"Unexpected page object extraction error for {resolved_id}: {str(e)}")
                last_error = (str(e), EXTRACTION_FAILED)

        try:
            api_key = await self.gateway.extract_api_key(resolved_id)
        except ExtractionServiceError as e:
            self.logger.warning(f"InnerTube API key lookup failed for {resolved_id}: {e.message}")
            attempts.append(ExtractionMethod.INNERTUBE_API.value)
            return self._finish(
                VideoExtractionResult.failed(e.message, e.error_code, resolved_id, attempts),
                start_time
            )
        except Exception as e:
            self.logger.exception(f"Unexpected InnerTube API key lookup error for {resolved_id}: {str(e)}")
            attempts.append(ExtractionMethod.INNERTUBE_API.value)
            return self._finish(
                VideoExtractionResult.failed(str(e), EXTRACTION_FAILED, resolved_id, attempts),
                start_time
            )

        for profile in self.registry.ranked():
            attempts.append(f"{ExtractionMethod.INNERTUBE_API.value}:{profile.name}")
            try:
                raw = await self.gateway.call_player_endpoint(resolved_id, profile, api_key)
                metadata = normalize_player_response(parse_player_response(raw), resolved_id)
            except ExtractionServiceError as e:
                self.logger.warning(f"InnerTube {profile.name} client failed for {resolved_id}: {e.message}")
                last_error = (e.message, e.error_code)
                continue
            except Exception as e:
                self.logger.exception(f"Unexpected InnerTube {profile.name} error for {resolved_id}: {str(e)}")
                last_error = (str(e), EXTRACTION_FAILED)
                continue

            return self._finish(
                VideoExtractionResult.succeeded(
                    metadata,
                    ExtractionMethod.INNERTUBE_API,
                    profile.reliability,
                    client_profile=profile.name,
                    attempts=attempts
                ),
                start_time
            )

        message, error_code = last_error
        self.logger.error(f"All extraction methods failed for {resolved_id}: {message}")
        return self._finish(
            VideoExtractionResult.failed(message, error_code, resolved_id, attempts),
            start_time
        )

    def _extract_from_page(self, video_id: str, page: PageContext) -> VideoMetadata:
        lookup = self.page_extractor.read_player_state(page)
        if not lookup.found:
            raise ParseError("page state", "ytInitialPlayerResponse not found in page")

        player = parse_player_response(lookup.data)
        page_video_id = player.video_details.video_id if player.video_details else None
        if page_video_id and page_video_id != video_id:
            raise ParseError(
                "page state",
                f"player state belongs to {page_video_id}, not {video_id}"
            )

        return normalize_player_response(player, video_id)

    def _finish(self, result: VideoExtractionResult, start_time: datetime) -> VideoExtractionResult:
        result.processing_time_ms = int((datetime.now() - start_time).total_seconds() * 1000)
        self.metrics.log_extraction_metrics(
            video_id=result.video_id,
            method=result.method.value if result.method else None,
            success=result.success,
            processing_time_ms=result.processing_time_ms,
            reliability=result.reliability,
            attempts=len(result.attempts),
            error_code=result.error_code
        )
        if result.success:
            self.logger.info(
                f"Successfully extracted metadata for {result.video_id} "
                f"via {result.method.value} (reliability {result.reliability:.2f})"
            )
        return result
