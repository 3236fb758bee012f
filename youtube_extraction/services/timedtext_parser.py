"""Timed-text caption parsing and time window slicing."""
import math
import re
from typing import List, Optional

from ..core.exceptions import EmptyTranscriptError
from ..models.transcript import TranscriptSegment

TEXT_ELEMENT_RE = re.compile(r'<text\b([^>]*)>(.*?)</text>', re.DOTALL)
START_ATTR_RE = re.compile(r'\bstart="([^"]*)"')
DUR_ATTR_RE = re.compile(r'\bdur="([^"]*)"')
TAG_RE = re.compile(r'<[^>]+>')
WHITESPACE_RE = re.compile(r'\s+')

# &amp; first: caption bodies often arrive double-escaped (&amp;#39;)
XML_ENTITIES = [
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&#39;', "'"),
    ('&apos;', "'"),
]


def _parse_seconds(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def clean_caption_text(text: str) -> str:
    """Decode entities, strip inline markup and normalize whitespace."""
    if not text:
        return ""

    for entity, char in XML_ENTITIES:
        text = text.replace(entity, char)

    text = TAG_RE.sub('', text)
    text = WHITESPACE_RE.sub(' ', text)
    return text.strip()


def parse_timed_text(xml_content: str) -> List[TranscriptSegment]:
    """Parse ``<text start dur>`` cues into segments in source order.

    Malformed regions are skipped rather than aborting the parse. Raises
    EmptyTranscriptError when no usable cue remains.
    """
    segments = []

    for match in TEXT_ELEMENT_RE.finditer(xml_content or ""):
        attributes, body = match.group(1), match.group(2)

        start_match = START_ATTR_RE.search(attributes)
        start = _parse_seconds(start_match.group(1) if start_match else None)
        if start is None:
            continue

        dur_match = DUR_ATTR_RE.search(attributes)
        duration = _parse_seconds(dur_match.group(1)) if dur_match else 0.0
        if duration is None:
            duration = 0.0

        text = clean_caption_text(body)
        if not text:
            continue

        segments.append(TranscriptSegment(
            start_seconds=start,
            duration_seconds=duration,
            text=text
        ))

    if not segments:
        raise EmptyTranscriptError("Timed text contained no caption segments")

    return segments


def overlaps_window(segment: TranscriptSegment, start: float, end: float) -> bool:
    """Any-overlap test of a segment against the window [start, end)."""
    seg_start = segment.start_seconds
    seg_end = segment.end_seconds
    return (
        (start <= seg_start < end)
        or (start <= seg_end < end)
        or (seg_start <= start and seg_end >= end)
    )


def slice_window(
    segments: List[TranscriptSegment],
    start: float,
    end: float = math.inf
) -> List[TranscriptSegment]:
    """Keep the segments overlapping [start, end), in their original order."""
    return [segment for segment in segments if overlaps_window(segment, start, end)]


def join_segments(segments: List[TranscriptSegment]) -> str:
    """Join segment texts in order with single spaces."""
    return ' '.join(segment.text for segment in segments)
