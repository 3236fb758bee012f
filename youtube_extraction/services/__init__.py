"""Service layer modules for the YouTube Extraction Service."""
from .alerts import AlertChannel
from .cache_service import TranscriptCacheService
from .client_profiles import ClientProfile, ClientProfileRegistry
from .health_monitor import ExtractionHealthMonitor
from .innertube_gateway import InnerTubeGateway
from .page_objects import PageContext, PageObjectExtractor, PageObjectLookup
from .transcript_service import TranscriptService
from .video_data_extractor import VideoDataExtractor

__all__ = [
    "AlertChannel", "TranscriptCacheService", "ClientProfile", "ClientProfileRegistry",
    "ExtractionHealthMonitor", "InnerTubeGateway", "PageContext", "PageObjectExtractor",
    "PageObjectLookup", "TranscriptService", "VideoDataExtractor"
]
