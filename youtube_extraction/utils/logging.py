"""Logging configuration and utilities."""
import logging
import sys
from typing import Optional
from ..core.config import settings


class LoggerSetup:
    """Centralized logging configuration."""

    @staticmethod
    def setup_logging(
        level: Optional[str] = None,
        format_string: Optional[str] = None
    ) -> None:
        """Setup application logging."""
        log_level = level or settings.log_level
        log_format = format_string or settings.log_format

        # Configure root logger
        logging.basicConfig(
            level=getattr(logging, log_level.upper(), logging.INFO),
            format=log_format,
            handlers=[
                logging.StreamHandler(sys.stdout)
            ]
        )

        # Set specific logger levels
        logging.getLogger("uvicorn").setLevel(logging.INFO)
        logging.getLogger("fastapi").setLevel(logging.INFO)
        logging.getLogger("aiohttp").setLevel(logging.WARNING)  # Reduce aiohttp verbosity


class CorrelatedLogger:
    """Logger with correlation ID support for request tracking."""

    def __init__(self, name: str, request_id: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.request_id = request_id

    def _format_message(self, message: str) -> str:
        """Format message with request ID if available."""
        if self.request_id:
            return f"[{self.request_id}] {message}"
        return message

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message with correlation ID."""
        self.logger.debug(self._format_message(message), **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log info message with correlation ID."""
        self.logger.info(self._format_message(message), **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message with correlation ID."""
        self.logger.warning(self._format_message(message), **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Log error message with correlation ID."""
        self.logger.error(self._format_message(message), **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception message with correlation ID."""
        self.logger.exception(self._format_message(message), **kwargs)


class MetricsLogger:
    """Logger for performance metrics and monitoring."""

    def __init__(self):
        self.logger = logging.getLogger("metrics")

    def log_request_metrics(
        self,
        request_id: str,
        endpoint: str,
        method: str,
        processing_time_ms: int,
        status_code: int
    ) -> None:
        """Log request processing metrics."""
        self.logger.info(
            f"REQUEST_METRICS request_id={request_id} "
            f"endpoint={endpoint} method={method} "
            f"processing_time_ms={processing_time_ms} "
            f"status_code={status_code}"
        )

    def log_extraction_metrics(
        self,
        video_id: Optional[str],
        method: Optional[str],
        success: bool,
        processing_time_ms: int,
        reliability: float = 0.0,
        attempts: int = 0,
        error_code: Optional[str] = None
    ) -> None:
        """Log video data extraction metrics."""
        status = "success" if success else "failed"

        log_msg = (
            f"EXTRACTION_METRICS video_id={video_id} method={method} "
            f"status={status} processing_time_ms={processing_time_ms} "
            f"reliability={reliability:.2f} attempts={attempts}"
        )

        if error_code:
            log_msg += f" error_code={error_code}"

        self.logger.info(log_msg)

    def log_transcript_metrics(
        self,
        video_id: str,
        language: Optional[str],
        success: bool,
        processing_time_ms: int,
        segment_count: int = 0,
        cache_hit: bool = False,
        error_code: Optional[str] = None
    ) -> None:
        """Log transcript window extraction metrics."""
        status = "success" if success else "failed"
        cache_status = "hit" if cache_hit else "miss"

        log_msg = (
            f"TRANSCRIPT_METRICS video_id={video_id} language={language} "
            f"status={status} processing_time_ms={processing_time_ms} "
            f"segments={segment_count} cache={cache_status}"
        )

        if error_code:
            log_msg += f" error_code={error_code}"

        self.logger.info(log_msg)

    def log_health_metrics(
        self,
        overall_health: float,
        status: str,
        page_objects_ok: bool,
        innertube_ok: bool,
        critical_issue_count: int = 0
    ) -> None:
        """Log one extraction health probe cycle."""
        self.logger.info(
            f"HEALTH_METRICS overall_health={overall_health:.2f} status={status} "
            f"page_objects={'ok' if page_objects_ok else 'failed'} "
            f"innertube_api={'ok' if innertube_ok else 'failed'} "
            f"critical_issues={critical_issue_count}"
        )
