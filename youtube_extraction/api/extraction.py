"""Extraction API endpoints - simple service layer."""
from typing import Optional

from fastapi import APIRouter, Depends, Security

from ..models.requests import ExtractRequest, TranscriptRequest
from ..services import TranscriptCacheService, TranscriptService, VideoDataExtractor
from ..core.dependencies import (
    get_cache_service, get_transcript_service, get_video_extractor, verify_api_key
)
from ..core.exceptions import ExtractionServiceError
from ..utils.response_helpers import ResponseHelper
from ..utils.validators import URLValidator

# Create router
router = APIRouter(tags=["extraction"])


@router.post("/extract")
async def extract_video_data(
    request: ExtractRequest,
    api_key: str = Security(verify_api_key),
    extractor: VideoDataExtractor = Depends(get_video_extractor)
):
    """Extract normalized metadata for a single video ID or URL."""
    request_id = ResponseHelper.generate_request_id()

    result = await extractor.extract_video_data(request.reference, request_id=request_id)

    if not result.success:
        return ResponseHelper.create_error_response(
            error_code=result.error_code,
            message=result.error,
            status_code=ResponseHelper.status_for(result.error_code),
            request_id=request_id,
            details={"video_id": result.video_id, "attempts": result.attempts},
            processing_time_ms=result.processing_time_ms
        )

    return ResponseHelper.create_success_response(
        data=result.model_dump(mode="json"),
        request_id=request_id,
        processing_time_ms=result.processing_time_ms
    )


@router.post("/transcript")
async def get_transcript_window(
    request: TranscriptRequest,
    api_key: str = Security(verify_api_key),
    transcript_service: TranscriptService = Depends(get_transcript_service)
):
    """Transcript text for the window [start_seconds, end_seconds).

    Caption tracks are looked up through the player API, the track closest to
    the requested language is downloaded in full and sliced locally.
    """
    request_id = ResponseHelper.generate_request_id()

    try:
        video_id = URLValidator.require_video_id(request.reference)
    except ExtractionServiceError as e:
        return ResponseHelper.create_error_from_exception(e, request_id)

    result = await transcript_service.fetch_transcript_window(
        video_id,
        request.start_seconds,
        request.end_seconds,
        request.language,
        request_id=request_id
    )

    if not result.success:
        return ResponseHelper.create_error_response(
            error_code=result.error_code,
            message=result.error_message,
            status_code=ResponseHelper.status_for(result.error_code),
            request_id=request_id,
            details=result.details
        )

    return ResponseHelper.create_success_response(
        data=result.transcript.model_dump(mode="json"),
        request_id=request_id
    )


@router.get("/transcript/{video_id}/languages")
async def get_transcript_languages(
    video_id: str,
    transcript_service: TranscriptService = Depends(get_transcript_service)
):
    """Caption language codes available for a video."""
    request_id = ResponseHelper.generate_request_id()

    try:
        resolved_id = URLValidator.require_video_id(video_id)
    except ExtractionServiceError as e:
        return ResponseHelper.create_error_from_exception(e, request_id)

    languages = await transcript_service.get_available_languages(resolved_id)
    return ResponseHelper.create_success_response(
        data={"video_id": resolved_id, "languages": languages},
        request_id=request_id
    )


@router.get("/transcript/{video_id}/available")
async def get_transcript_availability(
    video_id: str,
    transcript_service: TranscriptService = Depends(get_transcript_service)
):
    """Whether a video exposes any caption track."""
    request_id = ResponseHelper.generate_request_id()

    try:
        resolved_id = URLValidator.require_video_id(video_id)
    except ExtractionServiceError as e:
        return ResponseHelper.create_error_from_exception(e, request_id)

    available = await transcript_service.is_transcript_available(resolved_id)
    return ResponseHelper.create_success_response(
        data={"video_id": resolved_id, "available": available},
        request_id=request_id
    )


@router.get("/cache/stats")
async def get_cache_stats(
    api_key: str = Security(verify_api_key),
    cache_service: Optional[TranscriptCacheService] = Depends(get_cache_service)
):
    """Get transcript cache statistics."""
    stats = cache_service.get_stats() if cache_service else {"enabled": False}
    if cache_service:
        stats["enabled"] = True
    return ResponseHelper.create_success_response(data=stats)
