"""Tests for TTS result validation and graceful degradation.

WHY: Alignments come from an external service. A malformed one must not
crash the editor or produce a wrong highlight; it must be dropped so the
transcript falls back to plain text.

HOW: Feed load_tts_result() valid, unsorted, overlapping, overlong and
schema-invalid payloads and check the resulting TTSResult and the
WARNING log.

RULES:
- validate_tts_payload() raises; load_tts_result() never does
"""

import logging

import jsonschema
import pytest

from clueso_sync.core.ir import Word
from clueso_sync.core.validation import (
    get_tts_schema,
    is_valid_alignment,
    load_tts_result,
    slide_from_tts_result,
    validate_tts_payload,
)
from conftest import make_words


def _payload(words, duration=1.5, audio_url="https://cdn.example.com/demo.mp3"):
    return {
        "audioUrl": audio_url,
        "duration_estimate": duration,
        "word_alignment": [
            {"text": text, "startTime": start, "endTime": end} for text, start, end in words
        ],
    }


GOOD_WORDS = [("Click", 0.0, 0.4), ("the", 0.4, 0.6), ("button.", 0.6, 1.5)]


class TestIsValidAlignment:

    def test_sorted_contiguous(self):
        assert is_valid_alignment(make_words(*GOOD_WORDS), 1.5)

    def test_empty_is_valid(self):
        assert is_valid_alignment([], 0.0)

    def test_gaps_allowed(self):
        assert is_valid_alignment(make_words(("a", 0.0, 0.2), ("b", 0.5, 0.9)), 1.0)

    def test_overlap_rejected(self):
        assert not is_valid_alignment(make_words(("a", 0.0, 0.5), ("b", 0.4, 0.9)), 1.0)

    def test_unsorted_rejected(self):
        assert not is_valid_alignment(make_words(("b", 0.5, 0.9), ("a", 0.0, 0.2)), 1.0)

    def test_inverted_span_rejected(self):
        assert not is_valid_alignment([Word("a", 0.6, 0.2)], 1.0)

    def test_past_duration_rejected_beyond_tolerance(self):
        words = make_words(("a", 0.0, 1.0005))
        assert is_valid_alignment(words, 1.0)
        assert not is_valid_alignment(make_words(("a", 0.0, 1.01)), 1.0)


class TestLoadTTSResult:

    def test_valid_payload(self):
        result = load_tts_result(_payload(GOOD_WORDS))
        assert result.audio_url == "https://cdn.example.com/demo.mp3"
        assert result.duration == 1.5
        assert result.has_alignment
        assert result.word_alignment[2] == Word("button.", 0.6, 1.5)

    def test_unsorted_alignment_degrades(self, caplog):
        words = [("the", 0.4, 0.6), ("Click", 0.0, 0.4)]
        with caplog.at_level(logging.WARNING, logger="clueso_sync.core.validation"):
            result = load_tts_result(_payload(words))
        assert result.word_alignment == []
        assert not result.has_alignment
        assert result.duration == 1.5
        assert "falling back to plain text" in caplog.text

    def test_alignment_past_clip_degrades(self):
        result = load_tts_result(_payload(GOOD_WORDS, duration=1.0))
        assert result.word_alignment == []
        assert result.duration == 1.0

    def test_schema_invalid_degrades(self, caplog):
        payload = {"audioUrl": None, "duration_estimate": 2.0}
        with caplog.at_level(logging.WARNING, logger="clueso_sync.core.validation"):
            result = load_tts_result(payload)
        assert result.word_alignment == []
        assert result.duration == 2.0
        assert result.audio_url is None
        assert "Discarding malformed TTS result" in caplog.text

    def test_schema_invalid_negative_duration(self):
        result = load_tts_result(_payload(GOOD_WORDS, duration=-3))
        assert result.duration == 0.0
        assert result.word_alignment == []

    def test_extra_fields_allowed(self):
        payload = _payload(GOOD_WORDS)
        payload["voice"] = "alloy"
        assert load_tts_result(payload).has_alignment


class TestValidateTTSPayload:

    def test_raises_on_wrong_types(self):
        payload = _payload(GOOD_WORDS)
        payload["word_alignment"][0]["startTime"] = "zero"
        with pytest.raises(jsonschema.ValidationError):
            validate_tts_payload(payload)

    def test_schema_is_cached(self):
        assert get_tts_schema() is get_tts_schema()


def test_slide_from_tts_result():
    slide = slide_from_tts_result("demo", "Click the button.", _payload(GOOD_WORDS))
    assert slide.id == "demo"
    assert slide.script == "Click the button."
    assert slide.duration == 1.5
    assert len(slide.word_alignment) == 3
    assert slide.start_time == 0.0
