"""Unit tests for embedded page state lookup."""
import json

import pytest
from youtube_extraction.services.page_objects import (
    PageContext, PageObjectExtractor, balanced_object_end, iter_marked_objects
)

PLAYER_STATE = {
    "videoDetails": {"videoId": "dQw4w9WgXcQ", "title": "A {tricky} \"title\""},
    "captions": {}
}


def _watch_html(player_state=PLAYER_STATE, initial_data=None):
    scripts = [
        '<script src="https://www.youtube.com/s/player/base.js"></script>',
        f'<script>var ytInitialPlayerResponse = {json.dumps(player_state)};var meta = {{}};</script>',
    ]
    if initial_data is not None:
        scripts.append(f'<script>window["ytInitialData"] = {json.dumps(initial_data)};</script>')
    return "<html><head></head><body>" + "".join(scripts) + "</body></html>"


@pytest.fixture
def extractor():
    return PageObjectExtractor()


class TestBalancedObjects:

    def test_braces_inside_strings_are_ignored(self):
        text = 'x = {"a": "}{", "b": {"c": "\\"}"}} tail'
        start = text.index("{")
        end = balanced_object_end(text, start)

        assert json.loads(text[start:end + 1]) == {"a": "}{", "b": {"c": "\"}"}}

    def test_unclosed_object(self):
        assert balanced_object_end('{"a": {', 0) is None

    def test_marker_must_be_an_assignment(self):
        text = 'if (ytInitialData) { run(); } ytInitialData = {"ok": true};'

        assert list(iter_marked_objects(text, "ytInitialData")) == ['{"ok": true}']


class TestPageContext:

    def test_from_html_keeps_inline_scripts_only(self):
        page = PageContext.from_html(_watch_html(), url="https://www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert page.url.endswith("v=dQw4w9WgXcQ")
        assert len(page.scripts) == 1
        assert "ytInitialPlayerResponse" in page.scripts[0]


class TestPageObjectExtractor:
    """Test the two-tier lookup."""

    def test_reads_player_state_from_script(self, extractor):
        page = PageContext.from_html(_watch_html())

        lookup = extractor.read_player_state(page)

        assert lookup.found
        assert lookup.source == "script"
        assert lookup.data["videoDetails"]["title"] == "A {tricky} \"title\""

    def test_reads_bracketed_assignment(self, extractor):
        page = PageContext.from_html(_watch_html(initial_data={"contents": {"x": 1}}))

        lookup = extractor.read_initial_data_state(page)

        assert lookup.found
        assert lookup.data == {"contents": {"x": 1}}

    def test_global_binding_wins(self, extractor):
        page = PageContext.from_html(
            _watch_html(),
            global_bindings={"ytInitialPlayerResponse": {"videoDetails": {"videoId": "global"}}}
        )

        lookup = extractor.read_player_state(page)

        assert lookup.source == "global"
        assert lookup.data["videoDetails"]["videoId"] == "global"

    def test_global_binding_as_json_string(self, extractor):
        page = PageContext(global_bindings={"ytInitialData": '{"contents": {}}'})

        lookup = extractor.read_initial_data_state(page)

        assert lookup.found
        assert lookup.source == "global"

    def test_not_found(self, extractor):
        page = PageContext.from_html("<html><script>var other = {};</script></html>")

        assert not extractor.read_player_state(page).found
        assert not extractor.read_initial_data_state(page).found

    def test_undecodable_candidate_is_skipped(self, extractor):
        page = PageContext(scripts=[
            "var ytInitialPlayerResponse = {videoDetails: 'not json'};",
            'var ytInitialPlayerResponse = {"videoDetails": {"videoId": "second"}};',
        ])

        lookup = extractor.read_player_state(page)

        assert lookup.found
        assert lookup.data["videoDetails"]["videoId"] == "second"
