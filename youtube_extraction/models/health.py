"""Extraction health models."""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class MonitorState(str, Enum):
    """Phases of the extraction health monitor."""
    IDLE = "idle"
    PROBING = "probing"
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    CRITICAL = "critical"


class MethodHealth(BaseModel):
    """Probe outcome for one extraction strategy."""
    success: bool
    response_time_ms: float = Field(0.0, ge=0)
    data_quality_score: float = Field(0.0, ge=0.0, le=1.0)
    error: Optional[str] = None


class MethodHealthSet(BaseModel):
    page_objects: MethodHealth
    innertube_api: MethodHealth


class ExtractionHealthReport(BaseModel):
    """One health probe cycle."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    methods: MethodHealthSet
    overall_health: float = Field(..., ge=0.0, le=1.0)
    status: MonitorState
    recommendations: List[str] = []
    critical_issues: List[str] = []


class ExtractionMetrics(BaseModel):
    """Aggregates over the recent health history window."""
    success_rate: float = 0.0
    average_response_time_ms: float = 0.0
    failures_by_method: Dict[str, int] = {}
    common_errors: List[str] = []
    data_integrity_score: float = 0.0
    last_successful_extraction: Optional[datetime] = None
    reports_considered: int = 0


class HealthAlert(BaseModel):
    """Broadcast when overall health drops below the alert threshold."""
    message: str
    report: ExtractionHealthReport
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
