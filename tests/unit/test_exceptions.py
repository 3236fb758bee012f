"""Unit tests for custom exceptions."""
import pytest
from youtube_extraction.core.exceptions import (
    ExtractionServiceError, ValidationError, ApiKeyNotFoundError, UpstreamHttpError,
    NoCaptionsAvailableError, EmptyTranscriptError, NetworkError, NetworkTimeoutError,
    ParseError, LoopNotFoundError, APIKeyInvalidError
)

class TestCustomExceptions:
    """Test custom exception classes."""

    def test_base_exception(self):
        """Test base exception functionality."""
        exc = ExtractionServiceError(
            "Test message",
            "TEST_ERROR",
            {"key": "value"}
        )

        assert str(exc) == "Test message"
        assert exc.message == "Test message"
        assert exc.error_code == "TEST_ERROR"
        assert exc.details == {"key": "value"}

    def test_validation_error(self):
        """Test validation error."""
        exc = ValidationError("Invalid input", {"field": "start_seconds"})

        assert exc.error_code == "VALIDATION_ERROR"
        assert exc.message == "Invalid input"
        assert exc.details == {"field": "start_seconds"}

    def test_api_key_not_found_error(self):
        exc = ApiKeyNotFoundError("dQw4w9WgXcQ")

        assert exc.error_code == "API_KEY_NOT_FOUND"
        assert "not found" in exc.message
        assert exc.details["video_id"] == "dQw4w9WgXcQ"

    def test_upstream_http_error_keeps_status(self):
        exc = UpstreamHttpError(429, "https://www.youtube.com/youtubei/v1/player", "WEB player request")

        assert exc.status == 429
        assert exc.error_code == "UPSTREAM_HTTP_ERROR"
        assert "429" in exc.message
        assert exc.details["status"] == 429

    def test_caption_errors(self):
        assert NoCaptionsAvailableError("abc").error_code == "NO_CAPTIONS_AVAILABLE"
        assert EmptyTranscriptError().error_code == "EMPTY_TRANSCRIPT"

    def test_timeout_is_network_error(self):
        exc = NetworkTimeoutError("https://www.youtube.com/watch?v=abc", 10)

        assert isinstance(exc, NetworkError)
        assert exc.error_code == "NETWORK_TIMEOUT"
        assert exc.details["timeout_seconds"] == 10

    def test_parse_error(self):
        exc = ParseError("player response", "Expecting value")

        assert exc.error_code == "PARSE_ERROR"
        assert exc.message == "Failed to parse player response: Expecting value"

    def test_loop_not_found_error(self):
        exc = LoopNotFoundError("loop-1")

        assert exc.error_code == "LOOP_NOT_FOUND"
        assert exc.details["loop_id"] == "loop-1"

    def test_api_key_invalid_error(self):
        """Test API key invalid error."""
        exc = APIKeyInvalidError()

        assert exc.error_code == "API_KEY_INVALID"
        assert "Invalid or missing API key" in exc.message
