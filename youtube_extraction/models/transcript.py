"""Transcript-related data models."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, model_validator


class TranscriptSegment(BaseModel):
    """Individual caption cue with timing information."""
    start_seconds: float = Field(..., ge=0, description="Start time in seconds")
    duration_seconds: float = Field(0.0, ge=0, description="Cue duration in seconds")
    text: str = Field(..., description="Segment text content")

    @property
    def end_seconds(self) -> float:
        return self.start_seconds + self.duration_seconds


class TranscriptResult(BaseModel):
    """Transcript text for a video, optionally restricted to a time window."""
    video_id: str = Field(..., min_length=1)
    language: str = Field(..., description="Language code of the selected track")
    segments: List[TranscriptSegment] = Field(default=[], description="Segments in emission order")
    full_text: str = Field("", description="Segment texts joined by single spaces")
    start_seconds: Optional[float] = Field(None, description="Requested window start")
    end_seconds: Optional[float] = Field(None, description="Requested window end")
    from_cache: bool = Field(False, description="Whether the result came from the cache")


class TranscriptExtractionResult(BaseModel):
    """Result of a transcript extraction attempt, returned instead of raised."""
    success: bool = Field(..., description="Whether extraction was successful")
    transcript: Optional[TranscriptResult] = Field(None, description="Extracted transcript if successful")
    error_code: Optional[str] = Field(None, description="Error code if extraction failed")
    error_message: Optional[str] = Field(None, description="Error message if extraction failed")
    details: Dict[str, Any] = Field(default={}, description="Context to retry, degrade or report")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PracticeLoop(BaseModel):
    """A saved practice loop as returned by the host's loop lookup."""
    id: str
    video_id: str
    start_seconds: float = Field(..., ge=0)
    end_seconds: float
    language: Optional[str] = None

    @model_validator(mode="after")
    def _check_window(self) -> "PracticeLoop":
        if self.end_seconds <= self.start_seconds:
            raise ValueError("end_seconds must be greater than start_seconds")
        return self
