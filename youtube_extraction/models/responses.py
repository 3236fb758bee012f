"""Response models for the YouTube Extraction Service."""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict


class ResponseMetadata(BaseModel):
    """Standard response metadata."""
    request_id: str
    api_version: str = "1.0.0"
    timestamp: Optional[str] = None
    processing_time_ms: Optional[int] = None


class ErrorDetails(BaseModel):
    """Detailed error information."""
    model_config = ConfigDict(extra="allow")

    video_id: Optional[str] = None
    url: Optional[str] = None
    reason: Optional[str] = None


class ErrorInfo(BaseModel):
    """Error information structure."""
    code: str
    message: str
    details: Optional[ErrorDetails] = None


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    data: Any
    metadata: ResponseMetadata


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: ErrorInfo
    metadata: ResponseMetadata


class MonitorStatus(BaseModel):
    """Extraction monitor status."""
    enabled: bool
    state: str
    last_status: Optional[str] = None
    last_overall_health: Optional[float] = None
    last_checked_at: Optional[str] = None


class HealthMetrics(BaseModel):
    """Service health metrics."""
    uptime_seconds: int
    cache_entries: int


class HealthData(BaseModel):
    """Complete health check response."""
    status: str
    timestamp: str
    version: str
    extraction_monitor: MonitorStatus
    metrics: HealthMetrics
