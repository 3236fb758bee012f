"""Shared fixtures."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from youtube_extraction.services.client_profiles import ClientProfileRegistry
from youtube_extraction.services.innertube_gateway import InnerTubeGateway

VIDEO_ID = "dQw4w9WgXcQ"


def make_player_response(video_id=VIDEO_ID, captions=None, streaming=True):
    """A trimmed player payload with every section the extractor reads."""
    response = {
        "playabilityStatus": {"status": "OK"},
        "videoDetails": {
            "videoId": video_id,
            "title": "Never Gonna Give You Up",
            "author": "Rick Astley",
            "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
            "lengthSeconds": "213",
            "viewCount": "1500000000",
            "shortDescription": "The official video",
            "thumbnail": {"thumbnails": [
                {"url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/default.jpg", "width": 120, "height": 90}
            ]},
        },
        "microformat": {"playerMicroformatRenderer": {
            "publishDate": "2009-10-24", "uploadDate": "2009-10-24"
        }},
    }
    if streaming:
        response["streamingData"] = {
            "formats": [{"itag": 18, "mimeType": "video/mp4", "qualityLabel": "360p", "width": 640, "height": 360}],
            "adaptiveFormats": [{"itag": 140, "mimeType": "audio/mp4", "bitrate": "130000", "audioSampleRate": "44100"}],
        }
    if captions is not None:
        response["captions"] = {"playerCaptionsTracklistRenderer": {"captionTracks": captions}}
    return response


def caption_track(language_code, url, name=None, kind=None):
    track = {
        "baseUrl": url,
        "languageCode": language_code,
        "name": {"simpleText": name or language_code},
        "isTranslatable": True,
    }
    if kind:
        track["kind"] = kind
    return track


@pytest.fixture
def registry():
    return ClientProfileRegistry(weights={})


@pytest.fixture
def gateway():
    """Gateway double whose async methods are AsyncMocks."""
    mock = MagicMock(spec=InnerTubeGateway)
    mock.fetch_watch_page = AsyncMock(return_value="<html></html>")
    mock.extract_api_key = AsyncMock(return_value="AIzaTestKey")
    mock.call_player_endpoint = AsyncMock(return_value=make_player_response())
    mock.fetch_text = AsyncMock(return_value="")
    return mock
