"""Gateway to the platform's internal JSON player API (InnerTube)."""
import asyncio
import json
import re
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ..core.config import settings, InnerTubeConfig
from ..core.exceptions import (
    ApiKeyNotFoundError, NetworkError, NetworkTimeoutError, ParseError, UpstreamHttpError
)
from ..utils.logging import CorrelatedLogger
from .client_profiles import ClientProfile

API_KEY_RE = re.compile(InnerTubeConfig.API_KEY_PATTERN)


def find_api_key(html: str) -> Optional[str]:
    """Scan watch-page HTML for the InnerTube API key."""
    match = API_KEY_RE.search(html or "")
    if match and match.group(1):
        return match.group(1)
    return None


class InnerTubeGateway:
    """Thin client for the watch page, player endpoint and caption downloads.

    Every call is bounded by ``timeout_seconds``. The gateway never retries;
    fallback between client profiles is left to the callers.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds
        self.logger = CorrelatedLogger(__name__)

    async def fetch_watch_page(self, video_id: str) -> str:
        """Fetch the watch-page HTML with a desktop browser user-agent."""
        url = InnerTubeConfig.WATCH_URL.format(video_id=video_id)
        status, body = await self._request(
            "GET", url, InnerTubeConfig.get_headers(InnerTubeConfig.DESKTOP_USER_AGENT)
        )
        if status != 200:
            raise UpstreamHttpError(status, url, "watch page")
        return body

    async def extract_api_key(self, video_id: str) -> str:
        """Scrape the short-lived API key out of the video's watch page."""
        html = await self.fetch_watch_page(video_id)
        api_key = find_api_key(html)
        if not api_key:
            raise ApiKeyNotFoundError(video_id)
        return api_key

    async def call_player_endpoint(
        self,
        video_id: str,
        profile: ClientProfile,
        api_key: str
    ) -> Dict[str, Any]:
        """POST to the player endpoint as the given client profile."""
        url = InnerTubeConfig.PLAYER_URL.format(api_key=api_key)
        body = {
            "context": {"client": profile.client_context()},
            "videoId": video_id,
        }
        headers = InnerTubeConfig.get_headers(profile.user_agent, json_body=True)

        status, text = await self._request("POST", url, headers, json_body=body)
        if status != 200:
            self.logger.warning(f"InnerTube {profile.name} client HTTP {status} for {video_id}")
            raise UpstreamHttpError(status, url.split("?")[0], f"{profile.name} player request")

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError("player response", str(e))

        if not isinstance(data, dict):
            raise ParseError("player response", f"expected a JSON object, got {type(data).__name__}")

        return data

    async def fetch_text(self, url: str) -> str:
        """GET a resource such as a caption track body."""
        status, body = await self._request("GET", url, InnerTubeConfig.get_headers())
        if status != 200:
            raise UpstreamHttpError(status, url)
        return body

    async def _request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json_body: Optional[Dict[str, Any]] = None
    ) -> Tuple[int, str]:
        """Perform one bounded HTTP request and return (status, body)."""
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=headers, json=json_body) as response:
                    text = await response.text()
                    return response.status, text
        except asyncio.TimeoutError:
            raise NetworkTimeoutError(url, self.timeout_seconds)
        except aiohttp.ClientError as e:
            raise NetworkError(url, str(e) or e.__class__.__name__)
