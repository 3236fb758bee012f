"""Self-monitoring of the extraction strategies against live pages."""
import asyncio
import re
import threading
import time
from collections import Counter, deque
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..core.config import settings, InnerTubeConfig
from ..core.exceptions import ExtractionServiceError
from ..models.health import (
    ExtractionHealthReport, ExtractionMetrics, HealthAlert, MethodHealth,
    MethodHealthSet, MonitorState
)
from ..utils.logging import CorrelatedLogger, MetricsLogger
from .alerts import AlertChannel
from .client_profiles import ClientProfileRegistry
from .innertube_gateway import InnerTubeGateway
from .page_objects import PageContext, PageObjectExtractor

PageProvider = Callable[[], Awaitable[PageContext]]

PAGE_OBJECTS = "page_objects"
INNERTUBE_API = "innertube_api"

HEALTHY_THRESHOLD = 0.8
PAGE_FAST_MS = 500
PAGE_SLOW_MS = 3000
API_FAST_MS = 500
API_SLOW_MS = 2000

PAGE_WEIGHT = 0.6
API_WEIGHT = 0.4

NOT_FOUND_RE = re.compile(r'not found|no .*found', re.IGNORECASE)
RATE_LIMITED_RE = re.compile(r'\b(403|429)\b')

COMPLETE_FAILURE = "CRITICAL: Complete data extraction failure"
STRUCTURE_CHANGED = "CRITICAL: YouTube structure may have changed significantly"
RATE_LIMITED = "CRITICAL: Rate limiting or access restrictions detected"


def _clamp(value: float) -> float:
    return round(max(0.0, min(1.0, value)), 4)


def calculate_page_quality(has_player_state: bool, has_initial_data: bool, response_time_ms: float) -> float:
    """Quality of an embedded-state read, in [0, 1]."""
    quality = 0.0
    if has_player_state:
        quality += 0.6
    if has_initial_data:
        quality += 0.3

    if response_time_ms < PAGE_FAST_MS:
        quality += 0.1
    elif response_time_ms > PAGE_SLOW_MS:
        quality -= 0.2

    return _clamp(quality)


def calculate_api_quality(data: Dict[str, Any], response_time_ms: float) -> float:
    """Quality of a player API response, in [0, 1]."""
    quality = 0.0
    if data.get("videoDetails"):
        quality += 0.4
    if data.get("streamingData"):
        quality += 0.3
    if data.get("captions"):
        quality += 0.2

    if response_time_ms < API_FAST_MS:
        quality += 0.1
    elif response_time_ms > API_SLOW_MS:
        quality -= 0.2

    return _clamp(quality)


def calculate_overall_health(page_objects: MethodHealth, innertube_api: MethodHealth) -> float:
    """Weighted health; a failed method contributes nothing."""
    page_score = page_objects.data_quality_score if page_objects.success else 0.0
    api_score = innertube_api.data_quality_score if innertube_api.success else 0.0
    return _clamp(PAGE_WEIGHT * page_score + API_WEIGHT * api_score)


def generate_recommendations(page_objects: MethodHealth, innertube_api: MethodHealth) -> List[str]:
    recommendations = []

    if not page_objects.success:
        recommendations.append("Page object extraction failing - the watch page markup may have changed")
        recommendations.append("Review the embedded state markers and page parsing logic")

    if not innertube_api.success:
        recommendations.append("InnerTube API extraction failing - API endpoints may have changed")
        recommendations.append("Review request parameters, headers and client profile versions")

    if not page_objects.success and not innertube_api.success:
        recommendations.append("All extraction methods failing - consider an official Data API fallback")
        recommendations.append("Notify users that video data extraction is degraded")

    return recommendations


def identify_critical_issues(page_objects: MethodHealth, innertube_api: MethodHealth) -> List[str]:
    issues = []

    if not page_objects.success and not innertube_api.success:
        issues.append(COMPLETE_FAILURE)

    if (
        page_objects.error and NOT_FOUND_RE.search(page_objects.error)
        and innertube_api.error and NOT_FOUND_RE.search(innertube_api.error)
    ):
        issues.append(STRUCTURE_CHANGED)

    if innertube_api.error and RATE_LIMITED_RE.search(innertube_api.error):
        issues.append(RATE_LIMITED)

    return issues


def classify_health(overall_health: float, alert_threshold: float) -> MonitorState:
    if overall_health >= HEALTHY_THRESHOLD:
        return MonitorState.HEALTHY
    if overall_health >= alert_threshold:
        return MonitorState.DEGRADED
    return MonitorState.CRITICAL


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class ExtractionHealthMonitor:
    """Periodically probes both extraction strategies and keeps a bounded history.

    Each cycle runs the page-object probe and the InnerTube probe concurrently,
    scores them, classifies the result and raises an alert when overall health
    falls below the threshold. The history is the only shared mutable state and
    is guarded by a lock.
    """

    def __init__(
        self,
        gateway: InnerTubeGateway,
        registry: ClientProfileRegistry,
        page_extractor: Optional[PageObjectExtractor] = None,
        page_provider: Optional[PageProvider] = None,
        alert_channel: Optional[AlertChannel] = None,
        probe_video_id: Optional[str] = None,
        probe_client: Optional[str] = None,
        history_size: Optional[int] = None,
        metrics_window: Optional[int] = None,
        alert_threshold: Optional[float] = None
    ):
        self.gateway = gateway
        self.registry = registry
        self.page_extractor = page_extractor or PageObjectExtractor()
        self.page_provider = page_provider or self._fetch_probe_page
        self.alert_channel = alert_channel or AlertChannel()
        self.probe_video_id = probe_video_id or settings.health_probe_video_id
        self.probe_client = probe_client or settings.health_probe_client
        self.metrics_window = metrics_window or settings.health_metrics_window
        self.alert_threshold = (
            alert_threshold if alert_threshold is not None else settings.health_alert_threshold
        )

        self.state = MonitorState.IDLE
        self.last_status: Optional[MonitorState] = None
        self.last_checked_at: Optional[datetime] = None

        self._history = deque(maxlen=history_size or settings.health_history_size)
        self._lock = threading.Lock()
        self._ticker: Optional[asyncio.Task] = None
        self._cycle: Optional[asyncio.Task] = None

        self.logger = CorrelatedLogger(__name__)
        self.metrics = MetricsLogger()

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def last_report(self) -> Optional[ExtractionHealthReport]:
        with self._lock:
            return self._history[-1] if self._history else None

    async def perform_health_check(self) -> ExtractionHealthReport:
        """Run one probe cycle and record its report."""
        self.state = MonitorState.PROBING
        self.logger.info("Starting extraction health check")

        page_outcome, api_outcome = await asyncio.gather(
            self._probe_page_objects(),
            self._probe_innertube_api(),
            return_exceptions=True
        )
        page_objects = self._as_method_health(page_outcome, PAGE_OBJECTS)
        innertube_api = self._as_method_health(api_outcome, INNERTUBE_API)

        overall_health = calculate_overall_health(page_objects, innertube_api)
        status = classify_health(overall_health, self.alert_threshold)
        report = ExtractionHealthReport(
            methods=MethodHealthSet(page_objects=page_objects, innertube_api=innertube_api),
            overall_health=overall_health,
            status=status,
            recommendations=generate_recommendations(page_objects, innertube_api),
            critical_issues=identify_critical_issues(page_objects, innertube_api)
        )

        with self._lock:
            self._history.append(report)

        self.state = status
        self.last_status = status
        self.last_checked_at = report.timestamp

        self.metrics.log_health_metrics(
            overall_health=overall_health,
            status=status.value,
            page_objects_ok=page_objects.success,
            innertube_ok=innertube_api.success,
            critical_issue_count=len(report.critical_issues)
        )

        if overall_health < self.alert_threshold:
            self._trigger_alert(report)

        return report

    def get_health_metrics(self) -> ExtractionMetrics:
        """Aggregate the most recent reports; recomputed on every call."""
        with self._lock:
            recent = list(self._history)[-self.metrics_window:]

        if not recent:
            return ExtractionMetrics()

        successful = [r for r in recent if r.overall_health > self.alert_threshold]

        total_response_time = sum(
            r.methods.page_objects.response_time_ms + r.methods.innertube_api.response_time_ms
            for r in recent
        )

        errors = Counter()
        for report in recent:
            for method in (report.methods.page_objects, report.methods.innertube_api):
                if method.error:
                    errors[method.error] += 1

        integrity = sum(
            (r.methods.page_objects.data_quality_score + r.methods.innertube_api.data_quality_score) / 2
            for r in recent
        ) / len(recent)

        return ExtractionMetrics(
            success_rate=len(successful) / len(recent),
            average_response_time_ms=total_response_time / (len(recent) * 2),
            failures_by_method={
                PAGE_OBJECTS: sum(1 for r in recent if not r.methods.page_objects.success),
                INNERTUBE_API: sum(1 for r in recent if not r.methods.innertube_api.success),
            },
            common_errors=[error for error, _ in errors.most_common(5)],
            data_integrity_score=integrity,
            last_successful_extraction=successful[-1].timestamp if successful else None,
            reports_considered=len(recent)
        )

    def get_recent_reports(self, limit: int = 10) -> List[ExtractionHealthReport]:
        """Newest reports last."""
        with self._lock:
            history = list(self._history)
        return history[-limit:] if limit > 0 else []

    async def check_now(self) -> Optional[ExtractionHealthReport]:
        """Run a cycle on demand, or join the one already in flight.

        Returns None when the cycle failed outright.
        """
        if self._cycle is None or self._cycle.done():
            self._cycle = asyncio.create_task(self._run_cycle())
        else:
            self.logger.info("Health check already running, joining it")
        return await asyncio.shield(self._cycle)

    def start(self, interval_minutes: Optional[float] = None) -> None:
        """Start the recurring check; the first cycle runs immediately."""
        if self.is_running:
            self.logger.warning("Extraction health monitor already running")
            return

        interval = interval_minutes or settings.health_check_interval_minutes
        self._ticker = asyncio.create_task(self._tick_forever(interval * 60))
        self.logger.info(f"Extraction health monitor started (every {interval} minutes)")

    async def stop(self) -> None:
        """Stop the timer and cancel a cycle still in flight."""
        for task in (self._ticker, self._cycle):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._ticker = None
        self._cycle = None
        self.state = MonitorState.IDLE
        self.logger.info("Extraction health monitor stopped")

    async def _tick_forever(self, interval_seconds: float) -> None:
        while True:
            if self._cycle is not None and not self._cycle.done():
                self.logger.warning("Previous health check still running, skipping this tick")
            else:
                self._cycle = asyncio.create_task(self._run_cycle())
            await asyncio.sleep(interval_seconds)

    async def _run_cycle(self) -> Optional[ExtractionHealthReport]:
        try:
            return await self.perform_health_check()
        except Exception as e:
            self.state = MonitorState.IDLE
            self.logger.exception(f"Health check failed: {str(e)}")
            return None

    async def _probe_page_objects(self) -> MethodHealth:
        started = time.perf_counter()
        page = await self.page_provider()

        has_player_state = self.page_extractor.read_player_state(page).found
        has_initial_data = self.page_extractor.read_initial_data_state(page).found
        response_time_ms = _elapsed_ms(started)

        if not has_player_state and not has_initial_data:
            return MethodHealth(
                success=False,
                response_time_ms=response_time_ms,
                error="No page data objects found"
            )

        return MethodHealth(
            success=True,
            response_time_ms=response_time_ms,
            data_quality_score=calculate_page_quality(has_player_state, has_initial_data, response_time_ms)
        )

    async def _probe_innertube_api(self) -> MethodHealth:
        profile = self.registry.get(self.probe_client)
        api_key = await self.gateway.extract_api_key(self.probe_video_id)

        started = time.perf_counter()
        data = await self.gateway.call_player_endpoint(self.probe_video_id, profile, api_key)
        response_time_ms = _elapsed_ms(started)

        return MethodHealth(
            success=True,
            response_time_ms=response_time_ms,
            data_quality_score=calculate_api_quality(data, response_time_ms)
        )

    async def _fetch_probe_page(self) -> PageContext:
        html = await self.gateway.fetch_watch_page(self.probe_video_id)
        url = InnerTubeConfig.WATCH_URL.format(video_id=self.probe_video_id)
        return PageContext.from_html(html, url=url)

    def _as_method_health(self, outcome: Union[MethodHealth, BaseException], method: str) -> MethodHealth:
        if isinstance(outcome, MethodHealth):
            return outcome

        if isinstance(outcome, ExtractionServiceError):
            error = outcome.message
        else:
            error = f"{method} probe failed: {str(outcome) or outcome.__class__.__name__}"

        self.logger.warning(f"Health probe {method} failed: {error}")
        return MethodHealth(success=False, error=error)

    def _trigger_alert(self, report: ExtractionHealthReport) -> None:
        message = (
            f"Extraction health is at {round(report.overall_health * 100)}% "
            f"({report.status.value})"
        )
        self.logger.error(
            f"Extraction health alert: {message}; "
            f"critical issues: {report.critical_issues}; "
            f"recommendations: {report.recommendations}"
        )
        self.alert_channel.publish(HealthAlert(message=message, report=report))
