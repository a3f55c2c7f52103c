"""Plain text formatter — the narration script with slide timestamps.

WHY: Reviewers want to read the whole narration at once and know where
each slide starts, without opening the editor.

HOW: One paragraph per slide: a "[MM:SS.mmm] Slide N" header followed by
the slide script (or, when the script is empty, the aligned words).

RULES:
- Paragraphs separated by a blank line; output ends with one newline
- Empty timeline → empty string
- Output suffix: "-script.txt"; media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from clueso_sync.core.ir import Slide, Timeline
from clueso_sync.formatters.base import BaseFormatter, FormatterOutput


def format_clock(seconds: float) -> str:
    """Format seconds as MM:SS.mmm (minutes may exceed 59)."""
    total_ms = int(round(max(0.0, seconds) * 1000))
    minutes, rest = divmod(total_ms, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}.{:03d}".format(minutes, secs, millis)


def _slide_text(slide: Slide) -> str:
    if slide.script.strip():
        return " ".join(slide.script.split())
    return " ".join(w.text for w in slide.word_alignment)


class PlainTextFormatter(BaseFormatter):
    """Formatter that writes the narration as timestamped paragraphs."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, timeline: Timeline) -> List[FormatterOutput]:
        paragraphs = []
        for number, slide in enumerate(timeline.slides, start=1):
            paragraphs.append("[{}] Slide {}\n{}".format(
                format_clock(slide.start_time), number, _slide_text(slide),
            ))

        content = "\n\n".join(paragraphs)
        if content:
            content += "\n"

        return [
            FormatterOutput(
                suffix="-script.txt",
                content=content,
                media_type="text/plain",
            )
        ]
