"""Alignment JSON formatter — the per-slide TTS result, schema-validated.

WHY: The editor front end and the video renderer both reload narration
timing from disk. Writing each slide in the same shape the TTS pipeline
delivers (``audioUrl``, ``duration_estimate``, ``word_alignment``) means
one loader and one schema serve import and export.

HOW: Each laid-out slide becomes a TTS-result object plus its id, script
and global ``startTime``. Every slide object is validated against the TTS
result JSON Schema before the document is serialized.

RULES:
- Word times stay slide-relative (as the TTS pipeline delivers them)
- ``totalDuration`` is the timeline's total
- Output suffix: "-alignment.json"; media type: "application/json"
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

import jsonschema

from clueso_sync.core.ir import Slide, Timeline
from clueso_sync.core.validation import get_tts_schema
from clueso_sync.formatters.base import BaseFormatter, FormatterOutput


def slide_to_tts_result(slide: Slide) -> Dict[str, Any]:
    """Render a slide in the TTS result wire form."""
    return {
        "id": slide.id,
        "script": slide.script,
        "startTime": slide.start_time,
        "audioUrl": slide.audio_url,
        "duration_estimate": slide.duration,
        "word_alignment": [w.to_dict() for w in slide.word_alignment],
    }


class AlignmentJSONFormatter(BaseFormatter):
    """Formatter that writes every slide's alignment as JSON."""

    @property
    def name(self) -> str:
        return "Alignment JSON"

    def format(self, timeline: Timeline) -> List[FormatterOutput]:
        """Serialize the timeline.

        Raises:
            jsonschema.ValidationError: If a slide does not match the TTS
                result schema (e.g. a negative duration).
        """
        schema = get_tts_schema()
        slides = []
        for slide in timeline.slides:
            entry = slide_to_tts_result(slide)
            jsonschema.validate(instance=entry, schema=schema)
            slides.append(entry)

        document = {"totalDuration": timeline.total_duration, "slides": slides}
        return [
            FormatterOutput(
                suffix="-alignment.json",
                content=json.dumps(document, indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
