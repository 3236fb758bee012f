"""Unit tests for the extraction health monitor."""
import asyncio
import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock

from conftest import make_player_response
from youtube_extraction.core.exceptions import ApiKeyNotFoundError, UpstreamHttpError
from youtube_extraction.models.health import (
    ExtractionHealthReport, MethodHealth, MethodHealthSet, MonitorState
)
from youtube_extraction.services.alerts import AlertChannel
from youtube_extraction.services.health_monitor import (
    COMPLETE_FAILURE, RATE_LIMITED, STRUCTURE_CHANGED, ExtractionHealthMonitor,
    calculate_api_quality, calculate_overall_health, calculate_page_quality,
    classify_health, identify_critical_issues
)
from youtube_extraction.services.page_objects import PageContext

OK = MethodHealth(success=True, response_time_ms=100, data_quality_score=1.0)


def _page(player=True, initial=True):
    scripts = []
    if player:
        scripts.append(f"var ytInitialPlayerResponse = {json.dumps(make_player_response())};")
    if initial:
        scripts.append('var ytInitialData = {"contents": {}};')
    return PageContext(url="https://www.youtube.com/watch?v=jNQXAC9IVRw", scripts=scripts)


def _report(overall, page_ok=True, api_ok=True, page_error=None, api_error=None, minutes_ago=0):
    return ExtractionHealthReport(
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        methods=MethodHealthSet(
            page_objects=MethodHealth(success=page_ok, response_time_ms=100,
                                      data_quality_score=overall if page_ok else 0, error=page_error),
            innertube_api=MethodHealth(success=api_ok, response_time_ms=300,
                                       data_quality_score=overall if api_ok else 0, error=api_error),
        ),
        overall_health=overall,
        status=classify_health(overall, 0.5)
    )


@pytest.fixture
def alert_channel():
    return AlertChannel()


@pytest.fixture
def monitor(gateway, registry, alert_channel):
    return ExtractionHealthMonitor(
        gateway,
        registry,
        page_provider=AsyncMock(return_value=_page()),
        alert_channel=alert_channel,
        probe_video_id="jNQXAC9IVRw",
        probe_client="WEB",
        history_size=50,
        metrics_window=20,
        alert_threshold=0.5
    )


class TestScoring:
    """Test quality scores."""

    def test_page_quality(self):
        assert calculate_page_quality(True, True, 100) == 1.0
        assert calculate_page_quality(True, False, 1000) == 0.6
        assert calculate_page_quality(False, True, 5000) == pytest.approx(0.1)
        assert calculate_page_quality(False, False, 5000) == 0.0

    def test_page_quality_is_monotonic(self):
        assert calculate_page_quality(True, False, 100) >= calculate_page_quality(False, False, 100)
        assert calculate_page_quality(True, True, 100) >= calculate_page_quality(True, False, 100)
        assert calculate_page_quality(True, True, 100) >= calculate_page_quality(True, True, 4000)

    def test_api_quality(self):
        full = {"videoDetails": {"a": 1}, "streamingData": {"b": 1}, "captions": {"c": 1}}

        assert calculate_api_quality(full, 100) == 1.0
        assert calculate_api_quality(full, 1000) == 0.9
        assert calculate_api_quality({"videoDetails": {"a": 1}}, 3000) == pytest.approx(0.2)
        assert calculate_api_quality({}, 3000) == 0.0

    def test_api_quality_is_monotonic(self):
        details = {"videoDetails": {"a": 1}}
        with_streaming = {**details, "streamingData": {"b": 1}}
        full = {**with_streaming, "captions": {"c": 1}}

        for latency in (100, 1000, 3000):
            assert calculate_api_quality(details, latency) >= calculate_api_quality({}, latency)
            assert calculate_api_quality(with_streaming, latency) >= calculate_api_quality(details, latency)
            assert calculate_api_quality(full, latency) >= calculate_api_quality(with_streaming, latency)

        assert calculate_api_quality(full, 100) >= calculate_api_quality(full, 1000)
        assert calculate_api_quality(full, 1000) >= calculate_api_quality(full, 3000)
        for data in ({}, details, full):
            for latency in (0, 100, 1000, 3000, 60000):
                assert 0.0 <= calculate_api_quality(data, latency) <= 1.0

    def test_overall_health(self):
        failed = MethodHealth(success=False, error="boom")

        assert calculate_overall_health(OK, OK) == 1.0
        assert calculate_overall_health(failed, failed) == 0.0
        assert calculate_overall_health(OK, failed) == 0.6
        assert calculate_overall_health(failed, OK) == 0.4

    def test_overall_health_below_max_quality(self):
        partial = MethodHealth(success=True, response_time_ms=1000, data_quality_score=0.9)

        assert calculate_overall_health(partial, OK) < 1.0

    def test_classify(self):
        assert classify_health(0.8, 0.5) == MonitorState.HEALTHY
        assert classify_health(0.79, 0.5) == MonitorState.DEGRADED
        assert classify_health(0.5, 0.5) == MonitorState.DEGRADED
        assert classify_health(0.49, 0.5) == MonitorState.CRITICAL


class TestCriticalIssues:

    def test_complete_failure_and_structure_change(self):
        issues = identify_critical_issues(
            MethodHealth(success=False, error="No page data objects found"),
            MethodHealth(success=False, error="INNERTUBE_API_KEY not found in video page")
        )

        assert COMPLETE_FAILURE in issues
        assert STRUCTURE_CHANGED in issues

    def test_rate_limited(self):
        issues = identify_critical_issues(
            OK, MethodHealth(success=False, error="Upstream request failed with status 429")
        )

        assert issues == [RATE_LIMITED]

    def test_no_issues_when_healthy(self):
        assert identify_critical_issues(OK, OK) == []


class TestHealthCheck:
    """Test full probe cycles with mocked upstream calls."""

    @pytest.mark.asyncio
    async def test_healthy_cycle(self, monitor, gateway):
        report = await monitor.perform_health_check()

        assert report.methods.page_objects.success
        assert report.methods.innertube_api.success
        assert report.status == MonitorState.HEALTHY
        assert monitor.state == MonitorState.HEALTHY
        assert monitor.last_status == MonitorState.HEALTHY
        assert monitor.last_report == report
        assert report.critical_issues == []
        profile = gateway.call_player_endpoint.call_args.args[1]
        assert profile.name == "WEB"
        gateway.extract_api_key.assert_awaited_once_with("jNQXAC9IVRw")

    @pytest.mark.asyncio
    async def test_page_without_objects(self, monitor):
        monitor.page_provider = AsyncMock(return_value=_page(player=False, initial=False))

        report = await monitor.perform_health_check()

        assert not report.methods.page_objects.success
        assert report.methods.page_objects.error == "No page data objects found"
        assert report.recommendations

    @pytest.mark.asyncio
    async def test_probe_exception_becomes_failed_entry(self, monitor, gateway):
        gateway.extract_api_key = AsyncMock(side_effect=UpstreamHttpError(429, "u"))

        report = await monitor.perform_health_check()

        assert report.methods.page_objects.success
        assert not report.methods.innertube_api.success
        assert "429" in report.methods.innertube_api.error
        assert RATE_LIMITED in report.critical_issues

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_captured(self, monitor):
        monitor.page_provider = AsyncMock(side_effect=RuntimeError("browser crashed"))

        report = await monitor.perform_health_check()

        assert not report.methods.page_objects.success
        assert "browser crashed" in report.methods.page_objects.error

    @pytest.mark.asyncio
    async def test_total_failure_alerts(self, monitor, gateway, alert_channel, caplog):
        caplog.set_level(logging.ERROR)
        queue = alert_channel.subscribe()
        monitor.page_provider = AsyncMock(return_value=_page(player=False, initial=False))
        gateway.extract_api_key = AsyncMock(side_effect=ApiKeyNotFoundError("jNQXAC9IVRw"))

        report = await monitor.perform_health_check()

        assert report.overall_health == 0.0
        assert report.status == MonitorState.CRITICAL
        assert COMPLETE_FAILURE in report.critical_issues
        assert STRUCTURE_CHANGED in report.critical_issues
        alert = queue.get_nowait()
        assert alert.report == report
        assert any("Extraction health alert" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_alert_does_not_block_on_full_queue(self, monitor, gateway, alert_channel):
        alert_channel.max_queue_size = 1
        queue = alert_channel.subscribe()
        gateway.extract_api_key = AsyncMock(side_effect=ApiKeyNotFoundError("jNQXAC9IVRw"))
        monitor.page_provider = AsyncMock(return_value=_page(player=False, initial=False))

        await monitor.perform_health_check()
        await monitor.perform_health_check()

        assert queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, gateway, registry):
        monitor = ExtractionHealthMonitor(
            gateway, registry, page_provider=AsyncMock(return_value=_page()), history_size=3
        )

        for _ in range(5):
            await monitor.perform_health_check()

        assert len(monitor.get_recent_reports(10)) == 3


class TestHealthMetrics:
    """Test aggregation over the recent history."""

    def test_empty_history(self, monitor):
        metrics = monitor.get_health_metrics()

        assert metrics.success_rate == 0.0
        assert metrics.reports_considered == 0
        assert metrics.last_successful_extraction is None

    def test_aggregates(self, monitor):
        good = _report(0.9, minutes_ago=20)
        bad = _report(0.0, page_ok=False, api_ok=False,
                      page_error="No page data objects found", api_error="timeout", minutes_ago=10)
        worse = _report(0.0, page_ok=False, api_ok=False,
                        page_error="No page data objects found", api_error="403", minutes_ago=0)
        monitor._history.extend([good, bad, worse])

        metrics = monitor.get_health_metrics()

        assert metrics.reports_considered == 3
        assert metrics.success_rate == pytest.approx(1 / 3)
        assert metrics.average_response_time_ms == pytest.approx(200)
        assert metrics.failures_by_method == {"page_objects": 2, "innertube_api": 2}
        assert metrics.common_errors[0] == "No page data objects found"
        assert set(metrics.common_errors) == {"No page data objects found", "timeout", "403"}
        assert metrics.data_integrity_score == pytest.approx(0.3)
        assert metrics.last_successful_extraction == good.timestamp

    def test_window_limits_reports(self, monitor):
        monitor.metrics_window = 2
        monitor._history.extend([_report(0.9), _report(0.1), _report(0.2)])

        metrics = monitor.get_health_metrics()

        assert metrics.reports_considered == 2
        assert metrics.success_rate == 0.0

    def test_recent_reports(self, monitor):
        reports = [_report(0.9), _report(0.8), _report(0.7)]
        monitor._history.extend(reports)

        assert monitor.get_recent_reports(2) == reports[1:]
        assert monitor.get_recent_reports(0) == []


class TestScheduling:
    """Test the recurring timer."""

    @pytest.mark.asyncio
    async def test_start_runs_first_cycle_immediately(self, monitor):
        monitor.start(interval_minutes=60)
        try:
            for _ in range(50):
                if monitor.last_report is not None:
                    break
                await asyncio.sleep(0.01)
            assert monitor.is_running
            assert monitor.last_report is not None
        finally:
            await monitor.stop()

        assert not monitor.is_running
        assert monitor.state == MonitorState.IDLE

    @pytest.mark.asyncio
    async def test_check_now_runs_a_cycle(self, monitor):
        report = await monitor.check_now()

        assert report is not None
        assert monitor.last_report == report
        assert monitor.state == MonitorState.HEALTHY

    @pytest.mark.asyncio
    async def test_check_now_joins_cycle_in_flight(self, monitor):
        release = asyncio.Event()
        calls = 0

        async def slow_page():
            nonlocal calls
            calls += 1
            await release.wait()
            return _page()

        monitor.page_provider = slow_page
        monitor.start(interval_minutes=60)
        try:
            for _ in range(50):
                if calls:
                    break
                await asyncio.sleep(0.01)

            joined = asyncio.create_task(monitor.check_now())
            await asyncio.sleep(0.05)
            assert not joined.done()

            release.set()
            report = await joined

            assert calls == 1
            assert report is not None
            assert monitor.get_recent_reports(10) == [report]
        finally:
            await monitor.stop()

    @pytest.mark.asyncio
    async def test_check_now_reports_failed_cycle(self, monitor):
        monitor.perform_health_check = AsyncMock(side_effect=RuntimeError("boom"))

        assert await monitor.check_now() is None
        assert monitor.state == MonitorState.IDLE

    @pytest.mark.asyncio
    async def test_overlapping_tick_is_skipped(self, monitor, caplog):
        caplog.set_level(logging.WARNING)
        release = asyncio.Event()

        async def slow_page():
            await release.wait()
            return _page()

        monitor.page_provider = slow_page
        monitor.start(interval_minutes=0.001)
        try:
            await asyncio.sleep(0.2)
            assert any("skipping" in r.getMessage() for r in caplog.records)
            assert len(monitor.get_recent_reports(10)) == 0
        finally:
            release.set()
            await monitor.stop()
