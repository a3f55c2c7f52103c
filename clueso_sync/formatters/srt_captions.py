"""SRT caption formatter — narration subtitles on the global timeline.

WHY: Exported videos need burned-in or sidecar captions that match the
voice-over. The word alignment already knows when each word is spoken,
so captions fall out of it directly.

HOW: Walk each slide's words in order, grouping them into cues. A cue
closes after a sentence-ending word or once it holds ``max_words``
words. Cue times are the first word's start and the last word's end,
shifted by the slide's global start time.

RULES:
- Cues never span two slides
- Sentence end: a word ending in ".", "?" or "!"
- Slides without alignment produce no cues
- Timestamps: HH:MM:SS,mmm; cues numbered from 1
- Output suffix: "-captions.srt"; media type: "application/x-subrip"
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from clueso_sync.core.ir import Timeline, Word
from clueso_sync.formatters.base import BaseFormatter, FormatterOutput

_SENTENCE_END = (".", "?", "!")

DEFAULT_MAX_WORDS = 7


def format_srt_timestamp(seconds: float) -> str:
    """Format seconds as an SRT timestamp, e.g. 3725.5 → "01:02:05,500"."""
    total_ms = int(round(max(0.0, seconds) * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


def group_words(words: Sequence[Word], max_words: int) -> List[List[Word]]:
    """Split an alignment into caption-sized groups."""
    groups: List[List[Word]] = []
    current: List[Word] = []
    for word in words:
        current.append(word)
        if word.text.endswith(_SENTENCE_END) or len(current) >= max_words:
            groups.append(current)
            current = []
    if current:
        groups.append(current)
    return groups


class SRTCaptionFormatter(BaseFormatter):
    """Formatter that produces one SRT file for the whole timeline."""

    def __init__(self, max_words: int = DEFAULT_MAX_WORDS) -> None:
        self.max_words = max(1, max_words)

    @property
    def name(self) -> str:
        return "SRT Captions"

    def cues(self, timeline: Timeline) -> List[Tuple[float, float, str]]:
        """Return (global start, global end, text) for every cue."""
        result = []
        for slide in timeline.slides:
            for group in group_words(slide.word_alignment, self.max_words):
                start = slide.start_time + group[0].start_time
                end = slide.start_time + group[-1].end_time
                result.append((start, end, " ".join(w.text for w in group)))
        return result

    def format(self, timeline: Timeline) -> List[FormatterOutput]:
        blocks = []
        for number, (start, end, text) in enumerate(self.cues(timeline), start=1):
            blocks.append("{}\n{} --> {}\n{}\n".format(
                number, format_srt_timestamp(start), format_srt_timestamp(end), text,
            ))
        return [
            FormatterOutput(
                suffix="-captions.srt",
                content="\n".join(blocks),
                media_type="application/x-subrip",
            )
        ]
