"""Video-related data models."""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class Thumbnail(BaseModel):
    """Thumbnail image reference."""
    url: str
    width: int = 0
    height: int = 0


class CaptionTrack(BaseModel):
    """Caption track advertised by the player response."""
    language_code: str
    language_name: str
    track_url: str
    is_translatable: bool = False
    is_auto_generated: bool = False


class StreamingFormat(BaseModel):
    """Progressive or adaptive stream description."""
    itag: Optional[int] = None
    url: Optional[str] = None
    mime_type: Optional[str] = None
    quality: Optional[str] = None
    quality_label: Optional[str] = None
    fps: Optional[int] = None
    bitrate: Optional[int] = None
    audio_quality: Optional[str] = None
    audio_sample_rate: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    is_adaptive: bool = False


class VideoMetadata(BaseModel):
    """Normalized video metadata."""
    video_id: str = Field(..., min_length=1)
    title: str
    author: str
    channel_id: str = ""
    duration_seconds: int = Field(0, ge=0)
    view_count: int = Field(0, ge=0)
    publish_date: Optional[str] = None
    upload_date: Optional[str] = None
    description: Optional[str] = None
    thumbnails: List[Thumbnail] = []
    caption_tracks: List[CaptionTrack] = []
    streaming_formats: List[StreamingFormat] = []


class ExtractionMethod(str, Enum):
    """Strategies the video data extractor can succeed with."""
    PAGE_OBJECTS = "page_objects"
    INNERTUBE_API = "innertube_api"


class VideoExtractionResult(BaseModel):
    """Tagged outcome of a video data extraction: success or failure, never both."""
    success: bool
    video_id: Optional[str] = None
    data: Optional[VideoMetadata] = None
    method: Optional[ExtractionMethod] = None
    client_profile: Optional[str] = None
    reliability: float = Field(0.0, ge=0.0, le=1.0)
    error: Optional[str] = None
    error_code: Optional[str] = None
    attempts: List[str] = []
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: int = 0

    @classmethod
    def succeeded(
        cls,
        data: VideoMetadata,
        method: ExtractionMethod,
        reliability: float,
        client_profile: Optional[str] = None,
        attempts: Optional[List[str]] = None,
        processing_time_ms: int = 0
    ) -> "VideoExtractionResult":
        return cls(
            success=True,
            video_id=data.video_id,
            data=data,
            method=method,
            client_profile=client_profile,
            reliability=reliability,
            attempts=attempts or [],
            processing_time_ms=processing_time_ms
        )

    @classmethod
    def failed(
        cls,
        error: str,
        error_code: str,
        video_id: Optional[str] = None,
        attempts: Optional[List[str]] = None,
        processing_time_ms: int = 0
    ) -> "VideoExtractionResult":
        return cls(
            success=False,
            video_id=video_id,
            error=error,
            error_code=error_code,
            reliability=0.0,
            attempts=attempts or [],
            processing_time_ms=processing_time_ms
        )
