"""Response creation utilities."""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import status
from fastapi.responses import JSONResponse

from ..models.responses import (
    SuccessResponse, ErrorResponse, ResponseMetadata,
    ErrorInfo, ErrorDetails
)
from ..core.exceptions import ExtractionServiceError

# Map error codes to HTTP status codes
STATUS_MAPPING = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "NO_VIDEO_ID_RESOLVED": status.HTTP_400_BAD_REQUEST,
    "API_KEY_INVALID": status.HTTP_401_UNAUTHORIZED,
    "NO_CAPTIONS_AVAILABLE": status.HTTP_404_NOT_FOUND,
    "EMPTY_TRANSCRIPT": status.HTTP_404_NOT_FOUND,
    "LOOP_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "API_KEY_NOT_FOUND": status.HTTP_502_BAD_GATEWAY,
    "UPSTREAM_HTTP_ERROR": status.HTTP_502_BAD_GATEWAY,
    "PARSE_ERROR": status.HTTP_502_BAD_GATEWAY,
    "NETWORK_ERROR": status.HTTP_502_BAD_GATEWAY,
    "EXTRACTION_FAILED": status.HTTP_502_BAD_GATEWAY,
    "NETWORK_TIMEOUT": status.HTTP_504_GATEWAY_TIMEOUT,
    "CONFIGURATION_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ResponseHelper:
    """Utilities for creating standardized API responses."""

    @staticmethod
    def generate_request_id() -> str:
        """Generate unique request ID."""
        return f"req_{uuid.uuid4().hex[:8]}"

    @staticmethod
    def status_for(error_code: Optional[str]) -> int:
        """HTTP status for an error code; unknown codes are server errors."""
        return STATUS_MAPPING.get(error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    @staticmethod
    def create_response_metadata(request_id: str, processing_time_ms: Optional[int] = None) -> ResponseMetadata:
        """Create standardized response metadata."""
        return ResponseMetadata(
            request_id=request_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            processing_time_ms=processing_time_ms
        )

    @staticmethod
    def create_success_response(
        data: Any,
        request_id: Optional[str] = None,
        processing_time_ms: Optional[int] = None
    ) -> JSONResponse:
        """Create standardized success response."""
        if not request_id:
            request_id = ResponseHelper.generate_request_id()

        response = SuccessResponse(
            data=data,
            metadata=ResponseHelper.create_response_metadata(request_id, processing_time_ms)
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=response.model_dump(mode="json")
        )

    @staticmethod
    def create_error_response(
        error_code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        processing_time_ms: Optional[int] = None
    ) -> JSONResponse:
        """Create standardized error response."""
        if not request_id:
            request_id = ResponseHelper.generate_request_id()

        response = ErrorResponse(
            error=ErrorInfo(
                code=error_code,
                message=message,
                details=ErrorDetails(**details) if details else None
            ),
            metadata=ResponseHelper.create_response_metadata(request_id, processing_time_ms)
        )
        return JSONResponse(
            status_code=status_code,
            content=response.model_dump(mode="json")
        )

    @staticmethod
    def create_error_from_exception(
        exc: ExtractionServiceError,
        request_id: Optional[str] = None
    ) -> JSONResponse:
        """Create error response from a service exception."""
        return ResponseHelper.create_error_response(
            error_code=exc.error_code,
            message=exc.message,
            status_code=ResponseHelper.status_for(exc.error_code),
            request_id=request_id,
            details=exc.details
        )
