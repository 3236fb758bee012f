"""Request models for the YouTube Extraction Service."""
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class VideoReference(BaseModel):
    """Identifies a video by bare ID or by any YouTube URL form."""
    video_id: Optional[str] = None
    url: Optional[str] = None

    @model_validator(mode="after")
    def _require_reference(self) -> "VideoReference":
        if not self.video_id and not self.url:
            raise ValueError("Either video_id or url must be provided")
        return self

    @property
    def reference(self) -> str:
        return self.video_id or self.url


class ExtractRequest(VideoReference):
    """Request model for video metadata extraction."""


class TranscriptRequest(VideoReference):
    """Request model for a time-windowed transcript."""
    start_seconds: float = Field(0.0, ge=0)
    end_seconds: float = Field(..., gt=0)
    language: Optional[str] = None
