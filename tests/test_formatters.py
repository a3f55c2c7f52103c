"""Unit tests for all formatter modules.

WHY: Exports leave the editor: captions get burned into videos and the
alignment JSON is reloaded by the renderer. A wrong offset or an invalid
document is only noticed after a render.

HOW: Tests run each formatter against the laid-out narrated fixture
(intro 0–2.0 s, demo 2.0–3.5 s):
  - SRT: sentence/word-count grouping, global timestamps
  - Plain text: timestamped paragraphs
  - Alignment JSON: schema-valid slides, slide-relative word times

RULES:
- Schema validation uses the packaged TTS result schema
"""

import json

import jsonschema
import pytest

from clueso_sync.core.ir import Slide, Timeline
from clueso_sync.core.locator import layout_slides
from clueso_sync.core.validation import get_tts_schema
from clueso_sync.formatters import FORMATTERS
from clueso_sync.formatters.alignment_json import AlignmentJSONFormatter
from clueso_sync.formatters.plain_text import PlainTextFormatter, format_clock
from clueso_sync.formatters.srt_captions import (
    SRTCaptionFormatter,
    format_srt_timestamp,
    group_words,
)
from conftest import make_words

EMPTY = Timeline(slides=(), total_duration=0.0)


@pytest.fixture
def timeline(narrated_slides):
    return layout_slides(narrated_slides)


def test_registry_keys():
    assert sorted(FORMATTERS) == ["alignment_json", "plain_text", "srt_captions"]
    for formatter_cls in FORMATTERS.values():
        assert formatter_cls().name


# ---------------------------------------------------------------------------
# SRT
# ---------------------------------------------------------------------------


class TestSRTCaptions:

    def test_timestamp(self):
        assert format_srt_timestamp(0) == "00:00:00,000"
        assert format_srt_timestamp(3725.5) == "01:02:05,500"
        assert format_srt_timestamp(-1) == "00:00:00,000"

    def test_one_cue_per_sentence(self, timeline):
        [output] = SRTCaptionFormatter().format(timeline)
        assert output.suffix == "-captions.srt"
        assert output.media_type == "application/x-subrip"
        assert output.content == (
            "1\n00:00:00,000 --> 00:00:02,000\nWelcome to Clueso.\n"
            "\n"
            "2\n00:00:02,000 --> 00:00:03,500\nClick the button.\n"
        )

    def test_max_words_splits_cues(self, timeline):
        cues = SRTCaptionFormatter(max_words=2).cues(timeline)
        assert [text for _, _, text in cues] == ["Welcome to", "Clueso.", "Click the", "button."]
        assert cues[1][:2] == pytest.approx((1.1, 2.0))
        assert cues[2][:2] == pytest.approx((2.0, 2.6))

    def test_slides_without_alignment_produce_no_cues(self):
        timeline = layout_slides([Slide(id="silent", duration=4.0)])
        assert SRTCaptionFormatter().format(timeline)[0].content == ""

    def test_group_words(self):
        words = make_words(("a", 0, 1), ("b", 1, 2), ("c.", 2, 3), ("d", 3, 4))
        groups = group_words(words, max_words=5)
        assert [[w.text for w in g] for g in groups] == [["a", "b", "c."], ["d"]]

    def test_empty_timeline(self):
        assert SRTCaptionFormatter().format(EMPTY)[0].content == ""


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------


class TestPlainText:

    def test_clock(self):
        assert format_clock(0) == "00:00.000"
        assert format_clock(65.5) == "01:05.500"
        assert format_clock(3600) == "60:00.000"

    def test_paragraphs(self, timeline):
        [output] = PlainTextFormatter().format(timeline)
        assert output.suffix == "-script.txt"
        assert output.media_type == "text/plain"
        assert output.content == (
            "[00:00.000] Slide 1\nWelcome to Clueso.\n"
            "\n"
            "[00:02.000] Slide 2\nClick the button.\n"
        )

    def test_falls_back_to_aligned_words(self):
        slide = Slide(
            id="x",
            word_alignment=make_words(("Hello", 0.0, 0.5), ("there.", 0.5, 1.0)),
            duration=1.0,
        )
        content = PlainTextFormatter().format(layout_slides([slide]))[0].content
        assert content == "[00:00.000] Slide 1\nHello there.\n"

    def test_empty_timeline(self):
        assert PlainTextFormatter().format(EMPTY)[0].content == ""


# ---------------------------------------------------------------------------
# Alignment JSON
# ---------------------------------------------------------------------------


class TestAlignmentJSON:

    def test_document_shape(self, timeline):
        [output] = AlignmentJSONFormatter().format(timeline)
        assert output.suffix == "-alignment.json"
        assert output.media_type == "application/json"

        document = json.loads(output.content)
        assert document["totalDuration"] == 3.5
        assert [s["id"] for s in document["slides"]] == ["intro", "demo"]
        assert [s["startTime"] for s in document["slides"]] == [0.0, 2.0]

    def test_slides_are_tts_results(self, timeline):
        document = json.loads(AlignmentJSONFormatter().format(timeline)[0].content)
        schema = get_tts_schema()
        for slide in document["slides"]:
            jsonschema.validate(instance=slide, schema=schema)

        demo = document["slides"][1]
        assert demo["duration_estimate"] == 1.5
        assert demo["audioUrl"] == "https://cdn.example.com/demo.mp3"
        assert demo["word_alignment"][0] == {"text": "Click", "startTime": 0.0, "endTime": 0.4}

    def test_invalid_slide_rejected(self):
        timeline = layout_slides([Slide(id="bad", duration=-1.0)])
        with pytest.raises(jsonschema.ValidationError):
            AlignmentJSONFormatter().format(timeline)

    def test_empty_timeline(self):
        document = json.loads(AlignmentJSONFormatter().format(EMPTY)[0].content)
        assert document == {"totalDuration": 0.0, "slides": []}
