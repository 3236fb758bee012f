"""Dependency injection setup for FastAPI."""
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from .config import settings, Settings
from .exceptions import APIKeyInvalidError
from ..services import (
    ClientProfileRegistry, ExtractionHealthMonitor, InnerTubeGateway,
    PageObjectExtractor, TranscriptCacheService, TranscriptService,
    VideoDataExtractor, AlertChannel
)

# Security dependency
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


class ServiceContainer:
    """Services wired once per application and shared by all requests."""

    def __init__(
        self,
        gateway: InnerTubeGateway,
        registry: ClientProfileRegistry,
        video_extractor: VideoDataExtractor,
        transcript_service: TranscriptService,
        health_monitor: ExtractionHealthMonitor,
        alert_channel: AlertChannel,
        cache: Optional[TranscriptCacheService] = None
    ):
        self.gateway = gateway
        self.registry = registry
        self.video_extractor = video_extractor
        self.transcript_service = transcript_service
        self.health_monitor = health_monitor
        self.alert_channel = alert_channel
        self.cache = cache


def build_container(config: Optional[Settings] = None) -> ServiceContainer:
    """Wire the default service graph from settings."""
    config = config or settings

    gateway = InnerTubeGateway(timeout_seconds=config.request_timeout_seconds)
    registry = ClientProfileRegistry(weights=config.client_profile_weights)
    page_extractor = PageObjectExtractor()
    alert_channel = AlertChannel()
    cache = TranscriptCacheService(config.cache_ttl_seconds) if config.cache_enabled else None

    health_monitor = ExtractionHealthMonitor(
        gateway,
        registry,
        page_extractor=page_extractor,
        alert_channel=alert_channel,
        probe_video_id=config.health_probe_video_id,
        probe_client=config.health_probe_client,
        history_size=config.health_history_size,
        metrics_window=config.health_metrics_window,
        alert_threshold=config.health_alert_threshold
    )

    return ServiceContainer(
        gateway=gateway,
        registry=registry,
        video_extractor=VideoDataExtractor(gateway, registry, page_extractor),
        transcript_service=TranscriptService(
            gateway, registry, cache=cache, health_monitor=health_monitor
        ),
        health_monitor=health_monitor,
        alert_channel=alert_channel,
        cache=cache
    )


def get_services(request: Request) -> ServiceContainer:
    """The container stored on the application state."""
    return request.app.state.services


# Authentication dependency
async def verify_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """Verify API key from request header."""
    if not api_key or api_key != settings.api_key:
        raise APIKeyInvalidError()
    return api_key


# Service dependencies
def get_video_extractor(services: ServiceContainer = Depends(get_services)) -> VideoDataExtractor:
    return services.video_extractor


def get_transcript_service(services: ServiceContainer = Depends(get_services)) -> TranscriptService:
    return services.transcript_service


def get_health_monitor(services: ServiceContainer = Depends(get_services)) -> ExtractionHealthMonitor:
    return services.health_monitor


def get_cache_service(services: ServiceContainer = Depends(get_services)) -> Optional[TranscriptCacheService]:
    return services.cache
