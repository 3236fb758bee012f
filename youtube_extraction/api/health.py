"""Health check and extraction monitoring endpoints."""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..core.config import settings
from ..core.dependencies import ServiceContainer, get_health_monitor, get_services
from ..models.health import MonitorState
from ..models.responses import HealthData, HealthMetrics, MonitorStatus
from ..services import ExtractionHealthMonitor
from ..utils.response_helpers import ResponseHelper

router = APIRouter(tags=["health"])

service_start_time = datetime.now()


@router.get("/")
async def root():
    """Root endpoint."""
    return {"message": "YouTube Extraction Service is running"}


@router.get("/health")
async def health_check(services: ServiceContainer = Depends(get_services)):
    """
    Service health with the extraction monitor's latest classification
    """
    uptime = int((datetime.now() - service_start_time).total_seconds())
    monitor = services.health_monitor
    last_report = monitor.last_report

    # The service itself is up; a critical extraction status only degrades it
    status = "healthy"
    if monitor.last_status in (MonitorState.DEGRADED, MonitorState.CRITICAL):
        status = "degraded"

    health_data = HealthData(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.api_version,
        extraction_monitor=MonitorStatus(
            enabled=monitor.is_running,
            state=monitor.state.value,
            last_status=monitor.last_status.value if monitor.last_status else None,
            last_overall_health=last_report.overall_health if last_report else None,
            last_checked_at=monitor.last_checked_at.isoformat() if monitor.last_checked_at else None
        ),
        metrics=HealthMetrics(
            uptime_seconds=uptime,
            cache_entries=services.cache.get_stats()["total_items"] if services.cache else 0
        )
    )

    return JSONResponse(
        status_code=200,
        content=health_data.model_dump()
    )


@router.get("/health/extraction")
async def run_extraction_health_check(monitor: ExtractionHealthMonitor = Depends(get_health_monitor)):
    """
    Probe both extraction strategies now and return the report.
    A check already in flight is joined instead of starting a second one.
    """
    request_id = ResponseHelper.generate_request_id()
    report = await monitor.check_now()
    if report is None:
        return ResponseHelper.create_error_response(
            error_code="EXTRACTION_FAILED",
            message="Extraction health check failed",
            status_code=ResponseHelper.status_for("EXTRACTION_FAILED"),
            request_id=request_id
        )
    return ResponseHelper.create_success_response(report.model_dump(mode="json"), request_id)


@router.get("/health/metrics")
async def get_extraction_metrics(monitor: ExtractionHealthMonitor = Depends(get_health_monitor)):
    """
    Aggregated metrics over the recent health history
    """
    request_id = ResponseHelper.generate_request_id()
    metrics = monitor.get_health_metrics()
    return ResponseHelper.create_success_response(metrics.model_dump(mode="json"), request_id)


@router.get("/health/history")
async def get_health_history(
    limit: int = Query(10, ge=1, le=100),
    monitor: ExtractionHealthMonitor = Depends(get_health_monitor)
):
    """
    Most recent health reports, oldest first
    """
    request_id = ResponseHelper.generate_request_id()
    reports = monitor.get_recent_reports(limit)
    return ResponseHelper.create_success_response(
        {"reports": [report.model_dump(mode="json") for report in reports], "count": len(reports)},
        request_id
    )
