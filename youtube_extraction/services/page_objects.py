"""Reads JSON state already embedded in a rendered watch page."""
import json
import re
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup
from pydantic import BaseModel

from ..core.config import InnerTubeConfig
from ..utils.logging import CorrelatedLogger

# Text allowed between a marker and its object literal:
#   ytInitialData = {   /   window["ytInitialData"] = {
ASSIGNMENT_GAP_RE = re.compile(r'^["\'\]\s]*=\s*$')


class PageContext(BaseModel):
    """A rendered page: its URL, global bindings and inline script texts."""
    url: Optional[str] = None
    global_bindings: Dict[str, Any] = {}
    scripts: List[str] = []

    @classmethod
    def from_html(
        cls,
        html: str,
        url: Optional[str] = None,
        global_bindings: Optional[Dict[str, Any]] = None
    ) -> "PageContext":
        """Build a context from page HTML, keeping inline scripts only."""
        soup = BeautifulSoup(html or "", "html.parser")
        scripts = []
        for tag in soup.find_all("script"):
            if tag.get("src"):
                continue
            text = tag.string if tag.string is not None else tag.get_text()
            if text and text.strip():
                scripts.append(text)
        return cls(url=url, global_bindings=global_bindings or {}, scripts=scripts)


class PageObjectLookup(BaseModel):
    """Tagged lookup result: Found(data, source) or NotFound."""
    found: bool
    data: Optional[Dict[str, Any]] = None
    source: Optional[str] = None

    @classmethod
    def found_in(cls, data: Dict[str, Any], source: str) -> "PageObjectLookup":
        return cls(found=True, data=data, source=source)

    @classmethod
    def not_found(cls) -> "PageObjectLookup":
        return cls(found=False)


def balanced_object_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the object opened at ``start``.

    String literals are skipped with their escapes, so braces inside strings do
    not count. Returns None when the object never closes.
    """
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def iter_marked_objects(text: str, marker: str) -> Iterator[str]:
    """Yield each object literal assigned to ``marker`` in script text."""
    position = 0
    while True:
        index = text.find(marker, position)
        if index == -1:
            return
        position = index + len(marker)

        brace = text.find("{", position)
        if brace == -1:
            return
        if not ASSIGNMENT_GAP_RE.match(text[position:brace]):
            continue

        end = balanced_object_end(text, brace)
        if end is None:
            continue
        position = end + 1
        yield text[brace:end + 1]


class PageObjectExtractor:
    """Two-tier lookup of embedded page state.

    The known global binding wins; otherwise inline scripts are scanned for the
    marker. Not finding anything is an expected outcome and is reported as
    ``NotFound``, never raised.
    """

    def __init__(self):
        self.logger = CorrelatedLogger(__name__)

    def read_player_state(self, page: PageContext) -> PageObjectLookup:
        return self._lookup(page, InnerTubeConfig.PLAYER_STATE_MARKER)

    def read_initial_data_state(self, page: PageContext) -> PageObjectLookup:
        return self._lookup(page, InnerTubeConfig.INITIAL_DATA_MARKER)

    def _lookup(self, page: PageContext, marker: str) -> PageObjectLookup:
        binding = page.global_bindings.get(marker)
        if isinstance(binding, dict) and binding:
            return PageObjectLookup.found_in(binding, "global")
        if isinstance(binding, str):
            decoded = self._decode(binding, marker)
            if decoded is not None:
                return PageObjectLookup.found_in(decoded, "global")

        for script in page.scripts:
            if marker not in script:
                continue
            for candidate in iter_marked_objects(script, marker):
                decoded = self._decode(candidate, marker)
                if decoded is not None:
                    return PageObjectLookup.found_in(decoded, "script")

        return PageObjectLookup.not_found()

    def _decode(self, raw: str, marker: str) -> Optional[Dict[str, Any]]:
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.debug(f"Failed to decode {marker} candidate: {str(e)}")
            return None
        return value if isinstance(value, dict) else None
