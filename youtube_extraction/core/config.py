"""
Configuration management for the YouTube Extraction Service.
Centralizes environment variable handling and application settings.
"""
import os
from typing import Dict, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _parse_weights(raw: str) -> Dict[str, float]:
    """Parse "ANDROID=0.9,IOS=0.8" into a name -> weight mapping."""
    weights: Dict[str, float] = {}
    for item in raw.split(","):
        if "=" not in item:
            continue
        name, value = item.split("=", 1)
        try:
            weights[name.strip().upper()] = min(max(float(value), 0.0), 1.0)
        except ValueError:
            continue
    return weights


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        # API Configuration
        self.api_title = "YouTube Extraction Service"
        self.api_description = (
            "Extracts YouTube video metadata and time-windowed transcripts "
            "through ranked, self-monitoring extraction strategies"
        )
        self.api_version = "1.0.0"
        self.debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"

        # Security
        self.api_key = os.getenv("API_KEY", "your-default-api-key-here")
        self.allowed_origins = ["*"]  # Would be configurable in production

        # Upstream requests
        self.request_timeout_seconds = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))
        self.client_profile_weights = _parse_weights(
            os.getenv("CLIENT_PROFILE_WEIGHTS", "ANDROID=0.9,IOS=0.8,WEB=0.7")
        )

        # Transcripts
        self.default_transcript_language = os.getenv("DEFAULT_TRANSCRIPT_LANGUAGE", "en")

        # Cache Configuration
        self.cache_enabled = os.getenv("CACHE_ENABLED", "true").lower() == "true"
        self.cache_ttl_seconds = int(os.getenv("CACHE_TTL_SECONDS", "3600"))  # 1 hour

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        # Extraction health monitoring
        self.enable_health_checks = os.getenv("ENABLE_HEALTH_CHECKS", "true").lower() == "true"
        self.health_check_interval_minutes = float(os.getenv("HEALTH_CHECK_INTERVAL_MINUTES", "15"))
        self.health_history_size = int(os.getenv("HEALTH_HISTORY_SIZE", "50"))
        self.health_metrics_window = int(os.getenv("HEALTH_METRICS_WINDOW", "20"))
        self.health_alert_threshold = float(os.getenv("HEALTH_ALERT_THRESHOLD", "0.5"))
        self.health_probe_video_id = os.getenv("HEALTH_PROBE_VIDEO_ID", "jNQXAC9IVRw")
        self.health_probe_client = os.getenv("HEALTH_PROBE_CLIENT", "WEB").upper()


class InnerTubeConfig:
    """Upstream endpoints and markers for the internal player API."""

    BASE_URL = "https://www.youtube.com"
    WATCH_URL = BASE_URL + "/watch?v={video_id}"
    PLAYER_URL = BASE_URL + "/youtubei/v1/player?key={api_key}"

    API_KEY_PATTERN = r'"INNERTUBE_API_KEY":"(.*?)"'

    PLAYER_STATE_MARKER = "ytInitialPlayerResponse"
    INITIAL_DATA_MARKER = "ytInitialData"

    DESKTOP_USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    BASE_HEADERS = {
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Origin": BASE_URL,
    }

    @classmethod
    def get_headers(cls, user_agent: Optional[str] = None, json_body: bool = False) -> Dict[str, str]:
        """Get request headers for an upstream call."""
        headers = cls.BASE_HEADERS.copy()
        headers["User-Agent"] = user_agent or cls.DESKTOP_USER_AGENT
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers


# Create global settings instance
settings = Settings()
