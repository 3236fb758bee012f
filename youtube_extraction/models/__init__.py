"""Data models for the YouTube Extraction Service."""
from .requests import VideoReference, ExtractRequest, TranscriptRequest
from .video import (
    Thumbnail, CaptionTrack, StreamingFormat, VideoMetadata,
    ExtractionMethod, VideoExtractionResult
)
from .transcript import (
    TranscriptSegment, TranscriptResult, TranscriptExtractionResult, PracticeLoop
)
from .health import (
    MonitorState, MethodHealth, MethodHealthSet, ExtractionHealthReport,
    ExtractionMetrics, HealthAlert
)
from .player import PlayerResponse
from .responses import (
    ResponseMetadata, ErrorDetails, ErrorInfo,
    SuccessResponse, ErrorResponse, MonitorStatus, HealthMetrics, HealthData
)

__all__ = [
    "VideoReference", "ExtractRequest", "TranscriptRequest",
    "Thumbnail", "CaptionTrack", "StreamingFormat", "VideoMetadata",
    "ExtractionMethod", "VideoExtractionResult",
    "TranscriptSegment", "TranscriptResult", "TranscriptExtractionResult", "PracticeLoop",
    "MonitorState", "MethodHealth", "MethodHealthSet", "ExtractionHealthReport",
    "ExtractionMetrics", "HealthAlert",
    "PlayerResponse",
    "ResponseMetadata", "ErrorDetails", "ErrorInfo",
    "SuccessResponse", "ErrorResponse", "MonitorStatus", "HealthMetrics", "HealthData"
]
