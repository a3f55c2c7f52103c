"""Validation of TTS results delivered by the narration pipeline.

WHY: Word alignments arrive from an external TTS/AI service. A malformed
alignment (unsorted, overlapping, or outside the clip) would make the
binary search return nonsense. Rather than failing the whole editor, a
bad alignment degrades to "no alignment available" and the transcript
falls back to plain editable text.

HOW: The payload is first checked against a JSON Schema with jsonschema
(shape and types), then alignment ordering is checked in Python (the
schema language cannot express "sorted and non-overlapping").

RULES:
- Schema-invalid payloads raise jsonschema.ValidationError from
  validate_tts_payload(); load_tts_result() never raises on bad alignment
- An invalid alignment becomes [] and is logged at WARNING
- The last word may end at most ALIGNMENT_TOLERANCE_S past the duration
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import jsonschema

from clueso_sync.core.ir import Slide, Word

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "tts_result.schema.json"

_CACHED_SCHEMA: Optional[dict] = None

ALIGNMENT_TOLERANCE_S = 0.001


def get_tts_schema() -> dict:
    """Load and cache the TTS result JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


@dataclass
class TTSResult:
    """A validated voice generation result for one slide."""

    audio_url: Optional[str]
    duration: float
    word_alignment: List[Word] = field(default_factory=list)

    @property
    def has_alignment(self) -> bool:
        return bool(self.word_alignment)


def is_valid_alignment(words: Sequence[Word], duration: float) -> bool:
    """Check that ``words`` is sorted, non-overlapping, and inside the clip.

    RULES:
    - An empty list is valid (it means "no alignment")
    - Every span has start_time >= 0 and start_time <= end_time
    - words[i].end_time <= words[i+1].start_time
    - words[-1].end_time <= duration + ALIGNMENT_TOLERANCE_S
    """
    previous_end = 0.0
    for word in words:
        if word.start_time < 0 or word.start_time > word.end_time:
            return False
        if word.start_time < previous_end:
            return False
        previous_end = word.end_time
    if words and words[-1].end_time > duration + ALIGNMENT_TOLERANCE_S:
        return False
    return True


def validate_tts_payload(payload: Dict[str, Any]) -> None:
    """Raise jsonschema.ValidationError if the payload has the wrong shape."""
    jsonschema.validate(instance=payload, schema=get_tts_schema())


def load_tts_result(payload: Dict[str, Any]) -> TTSResult:
    """Parse a TTS result, degrading a bad alignment to an empty one.

    Args:
        payload: ``{"audioUrl", "duration_estimate", "word_alignment"}``
                 as produced by the narration pipeline.

    Returns:
        TTSResult whose word_alignment is either trustworthy or empty.
    """
    try:
        validate_tts_payload(payload)
    except jsonschema.ValidationError as exc:
        logger.warning("Discarding malformed TTS result: %s", exc.message)
        duration = payload.get("duration_estimate") if isinstance(payload, dict) else None
        return TTSResult(
            audio_url=payload.get("audioUrl") if isinstance(payload, dict) else None,
            duration=float(duration) if isinstance(duration, (int, float)) and duration > 0 else 0.0,
        )

    duration = float(payload["duration_estimate"])
    words = [Word.from_dict(w) for w in payload["word_alignment"]]
    if not is_valid_alignment(words, duration):
        logger.warning(
            "Word alignment is unsorted or exceeds %.3fs; falling back to plain text",
            duration,
        )
        words = []

    return TTSResult(audio_url=payload["audioUrl"], duration=duration, word_alignment=words)


def slide_from_tts_result(slide_id: str, script: str, payload: Dict[str, Any]) -> Slide:
    """Build a Slide from a narration script and its TTS result."""
    result = load_tts_result(payload)
    return Slide(
        id=slide_id,
        script=script,
        audio_url=result.audio_url,
        word_alignment=result.word_alignment,
        duration=result.duration,
    )
