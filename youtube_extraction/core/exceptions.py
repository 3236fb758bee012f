"""Custom exceptions for the YouTube Extraction Service."""
from typing import Optional


class ExtractionServiceError(Exception):
    """Base exception for the extraction service."""

    def __init__(self, message: str, error_code: str, details: Optional[dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ExtractionServiceError):
    """Exception raised for input validation errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NoVideoIdResolvedError(ExtractionServiceError):
    """Exception raised when no video ID can be derived from the inputs."""

    def __init__(self, source: Optional[str] = None):
        message = "No video ID could be resolved"
        details = {"source": source} if source else {}
        super().__init__(message, "NO_VIDEO_ID_RESOLVED", details)


class ApiKeyNotFoundError(ExtractionServiceError):
    """Exception raised when the watch page carries no InnerTube API key."""

    def __init__(self, video_id: str):
        message = "INNERTUBE_API_KEY not found in video page"
        super().__init__(message, "API_KEY_NOT_FOUND", {"video_id": video_id})


class UpstreamHttpError(ExtractionServiceError):
    """Exception raised when the platform answers with a non-200 status."""

    def __init__(self, status: int, url: str, reason: Optional[str] = None):
        self.status = status
        message = f"Upstream request failed with status {status}"
        if reason:
            message = f"{message}: {reason}"
        details = {"status": status, "url": url, "reason": reason}
        super().__init__(message, "UPSTREAM_HTTP_ERROR", details)


class NoCaptionsAvailableError(ExtractionServiceError):
    """Exception raised when a video exposes no caption tracks."""

    def __init__(self, video_id: Optional[str] = None, reason: str = "No caption tracks available"):
        details = {"video_id": video_id, "reason": reason}
        super().__init__(reason, "NO_CAPTIONS_AVAILABLE", details)


class EmptyTranscriptError(ExtractionServiceError):
    """Exception raised when a caption body contains no usable cues."""

    def __init__(self, reason: str = "Transcript contains no text segments"):
        super().__init__(reason, "EMPTY_TRANSCRIPT", {"reason": reason})


class NetworkError(ExtractionServiceError):
    """Exception raised when an upstream connection fails."""

    def __init__(self, url: str, reason: str, error_code: str = "NETWORK_ERROR"):
        message = f"Network error for {url}: {reason}"
        super().__init__(message, error_code, {"url": url, "reason": reason})


class NetworkTimeoutError(NetworkError):
    """Exception raised when an upstream call exceeds its timeout."""

    def __init__(self, url: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(url, f"timed out after {timeout_seconds}s", "NETWORK_TIMEOUT")
        self.details["timeout_seconds"] = timeout_seconds


class ParseError(ExtractionServiceError):
    """Exception raised when an upstream payload cannot be decoded."""

    def __init__(self, what: str, reason: str):
        message = f"Failed to parse {what}: {reason}"
        super().__init__(message, "PARSE_ERROR", {"reason": reason})


class LoopNotFoundError(ExtractionServiceError):
    """Exception raised when a practice loop cannot be resolved."""

    def __init__(self, loop_id: str):
        message = f"Practice loop not found: {loop_id}"
        super().__init__(message, "LOOP_NOT_FOUND", {"loop_id": loop_id})


class APIKeyInvalidError(ExtractionServiceError):
    """Exception raised for invalid API key."""

    def __init__(self):
        message = "Invalid or missing API key"
        super().__init__(message, "API_KEY_INVALID")


class ConfigurationError(ExtractionServiceError):
    """Exception raised for configuration errors."""

    def __init__(self, setting: str, reason: str):
        message = f"Configuration error for {setting}: {reason}"
        details = {"setting": setting, "reason": reason}
        super().__init__(message, "CONFIGURATION_ERROR", details)
