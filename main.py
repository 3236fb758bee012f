"""Entry point for the YouTube Extraction Service."""

if __name__ == "__main__":
    import uvicorn
    from youtube_extraction.core.config import settings

    print(f"Starting {settings.api_title} v{settings.api_version}")
    print(f"Cache enabled: {settings.cache_enabled}")
    print(f"Health checks: {'every %s minutes' % settings.health_check_interval_minutes if settings.enable_health_checks else 'disabled'}")
    print(f"Log level: {settings.log_level}")

    uvicorn.run(
        "youtube_extraction.main:app",  # Use string import for hot reload
        host="0.0.0.0",
        port=8000,
        reload=settings.debug_mode,
        log_level=settings.log_level.lower()
    )
