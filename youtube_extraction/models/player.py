"""Models for the upstream player JSON.

Each known top-level section of the player response gets its own model with
optional fields. A section missing from the payload is ``None`` on
``PlayerResponse``; unknown keys are ignored so upstream additions never break
parsing. A section or list entry whose shape does not fit is dropped on its
own, leaving the rest of the payload usable.
"""
from typing import Any, List, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

Number = Union[int, float, str]

ModelT = TypeVar("ModelT", bound=BaseModel)


def lenient_section(model: Type[ModelT], value: Any) -> Optional[ModelT]:
    """Validate a nested object; a missing or malformed one becomes None."""
    if value is None or isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError:
        return None


def lenient_entries(model: Type[ModelT], value: Any) -> List[ModelT]:
    """Validate list entries one at a time, skipping the ones that do not fit."""
    if not isinstance(value, list):
        return []
    entries = []
    for item in value:
        entry = lenient_section(model, item)
        if entry is not None:
            entries.append(entry)
    return entries


class UpstreamModel(BaseModel):
    """Base for upstream sections: camelCase aliases, extra keys ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ThumbnailInfo(UpstreamModel):
    url: Optional[str] = None
    width: Optional[Number] = None
    height: Optional[Number] = None


class ThumbnailList(UpstreamModel):
    thumbnails: List[ThumbnailInfo] = []

    @field_validator("thumbnails", mode="before")
    @classmethod
    def drop_bad_thumbnails(cls, value: Any) -> List[ThumbnailInfo]:
        return lenient_entries(ThumbnailInfo, value)


class VideoDetails(UpstreamModel):
    video_id: Optional[str] = Field(None, alias="videoId")
    title: Optional[str] = None
    author: Optional[str] = None
    channel_id: Optional[str] = Field(None, alias="channelId")
    length_seconds: Optional[Number] = Field(None, alias="lengthSeconds")
    view_count: Optional[Number] = Field(None, alias="viewCount")
    short_description: Optional[str] = Field(None, alias="shortDescription")
    thumbnail: Optional[ThumbnailList] = None
    is_live_content: Optional[bool] = Field(None, alias="isLiveContent")

    @field_validator("thumbnail", mode="before")
    @classmethod
    def drop_bad_thumbnail_list(cls, value: Any) -> Optional[ThumbnailList]:
        return lenient_section(ThumbnailList, value)


class FormatInfo(UpstreamModel):
    itag: Optional[int] = None
    url: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")
    bitrate: Optional[Number] = None
    quality: Optional[str] = None
    quality_label: Optional[str] = Field(None, alias="qualityLabel")
    fps: Optional[Number] = None
    audio_quality: Optional[str] = Field(None, alias="audioQuality")
    audio_sample_rate: Optional[Number] = Field(None, alias="audioSampleRate")
    width: Optional[Number] = None
    height: Optional[Number] = None


class StreamingData(UpstreamModel):
    formats: List[FormatInfo] = []
    adaptive_formats: List[FormatInfo] = Field([], alias="adaptiveFormats")

    @field_validator("formats", "adaptive_formats", mode="before")
    @classmethod
    def drop_bad_formats(cls, value: Any) -> List[FormatInfo]:
        return lenient_entries(FormatInfo, value)


class CaptionTrackInfo(UpstreamModel):
    base_url: Optional[str] = Field(None, alias="baseUrl")
    language_code: Optional[str] = Field(None, alias="languageCode")
    # simpleText object, runs object or a bare string depending on the client
    name: Any = None
    kind: Optional[str] = None
    is_translatable: Optional[bool] = Field(None, alias="isTranslatable")

    def display_name(self) -> Optional[str]:
        """Resolve the track name from a plain string, simpleText or runs."""
        if isinstance(self.name, str):
            return self.name.strip() or None
        if not isinstance(self.name, dict):
            return None

        simple_text = self.name.get("simpleText")
        if isinstance(simple_text, str) and simple_text:
            return simple_text

        runs = self.name.get("runs")
        if isinstance(runs, list) and runs and isinstance(runs[0], dict):
            text = runs[0].get("text")
            if isinstance(text, str) and text:
                return text
        return None


class CaptionTracklist(UpstreamModel):
    caption_tracks: List[CaptionTrackInfo] = Field([], alias="captionTracks")

    @field_validator("caption_tracks", mode="before")
    @classmethod
    def drop_bad_caption_tracks(cls, value: Any) -> List[CaptionTrackInfo]:
        return lenient_entries(CaptionTrackInfo, value)


class Captions(UpstreamModel):
    tracklist: Optional[CaptionTracklist] = Field(None, alias="playerCaptionsTracklistRenderer")

    @field_validator("tracklist", mode="before")
    @classmethod
    def drop_bad_tracklist(cls, value: Any) -> Optional[CaptionTracklist]:
        return lenient_section(CaptionTracklist, value)


class MicroformatRenderer(UpstreamModel):
    publish_date: Optional[str] = Field(None, alias="publishDate")
    upload_date: Optional[str] = Field(None, alias="uploadDate")
    category: Optional[str] = None


class Microformat(UpstreamModel):
    renderer: Optional[MicroformatRenderer] = Field(None, alias="playerMicroformatRenderer")

    @field_validator("renderer", mode="before")
    @classmethod
    def drop_bad_renderer(cls, value: Any) -> Optional[MicroformatRenderer]:
        return lenient_section(MicroformatRenderer, value)


class PlayabilityStatus(UpstreamModel):
    status: Optional[str] = None
    reason: Optional[str] = None


SECTION_MODELS = {
    "video_details": VideoDetails,
    "streaming_data": StreamingData,
    "captions": Captions,
    "microformat": Microformat,
    "playability_status": PlayabilityStatus,
}


class PlayerResponse(UpstreamModel):
    """The player payload, one optional field per known section."""
    video_details: Optional[VideoDetails] = Field(None, alias="videoDetails")
    streaming_data: Optional[StreamingData] = Field(None, alias="streamingData")
    captions: Optional[Captions] = None
    microformat: Optional[Microformat] = None
    playability_status: Optional[PlayabilityStatus] = Field(None, alias="playabilityStatus")

    @field_validator(*SECTION_MODELS, mode="before")
    @classmethod
    def drop_bad_section(cls, value: Any, info: ValidationInfo) -> Optional[BaseModel]:
        return lenient_section(SECTION_MODELS[info.field_name], value)

    @property
    def caption_tracks(self) -> List[CaptionTrackInfo]:
        if self.captions and self.captions.tracklist:
            return self.captions.tracklist.caption_tracks
        return []

    @property
    def microformat_renderer(self) -> Optional[MicroformatRenderer]:
        return self.microformat.renderer if self.microformat else None
