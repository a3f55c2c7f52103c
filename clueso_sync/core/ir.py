"""Dataclasses for word spans, slides, audio clips, and laid-out timelines.

WHY: The estimator, locator, clock store, formatters, and HTTP layer all
exchange the same handful of shapes. A single typed definition keeps the
wire form (camelCase JSON from the TTS pipeline) and the Python form in
one place.

HOW: Four dataclasses:
  Word      — one spoken word with slide-relative timing
  Slide     — a narrated segment of the project with its alignment
  AudioClip — a rendered voice track tied to exactly one slide
  Timeline  — slides laid out back-to-back plus the total duration
from_dict()/to_dict() translate to and from the camelCase wire form.

RULES:
- All times are float seconds
- Word times are relative to the containing slide
- Slide.start_time is global and is only ever computed by layout
- Word is frozen; Slide and AudioClip are replaced, not mutated, by the store
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Word:
    """A single word of narration with its spoken interval.

    RULES:
    - text keeps the original surface form, punctuation included
    - start_time <= end_time
    - Within an alignment array spans are sorted and non-overlapping
    """

    text: str
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, time: float) -> bool:
        """True if ``time`` falls inside the span (both ends inclusive)."""
        return self.start_time <= time <= self.end_time

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Word:
        return cls(
            text=str(data["text"]),
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "startTime": self.start_time, "endTime": self.end_time}


@dataclass
class Slide:
    """A narrated segment of the project.

    WHY: Narration is generated per segment. Each segment carries its own
    script, voice track, and word alignment, and occupies a contiguous
    range of the global timeline.

    RULES:
    - word_alignment and duration are recomputed only by a new TTS result
    - start_time is the prefix sum of preceding durations (set by layout)
    - audio_url is None until audio has been generated
    """

    id: str
    script: str = ""
    audio_url: Optional[str] = None
    word_alignment: List[Word] = field(default_factory=list)
    duration: float = 0.0
    start_time: float = 0.0

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def global_word_start(self, word_index: int) -> float:
        """Global time at which word ``word_index`` of this slide begins."""
        return self.start_time + self.word_alignment[word_index].start_time

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Slide:
        """Parse a Slide from its camelCase wire form.

        Missing optional fields take their defaults; ``startTime`` is
        accepted but is overwritten by the next layout.
        """
        return cls(
            id=str(data["id"]),
            script=data.get("script") or "",
            audio_url=data.get("audioUrl"),
            word_alignment=[Word.from_dict(w) for w in data.get("wordAlignment") or []],
            duration=float(data.get("duration") or 0.0),
            start_time=float(data.get("startTime") or 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "script": self.script,
            "audioUrl": self.audio_url,
            "wordAlignment": [w.to_dict() for w in self.word_alignment],
            "duration": self.duration,
            "startTime": self.start_time,
        }


@dataclass
class AudioClip:
    """A rendered voice track for one slide.

    RULES:
    - At most one clip exists per slide_id; a new clip replaces the old one
    - start_time is global
    """

    id: str
    url: str
    text: str
    duration: float
    voice: str
    slide_id: str
    start_time: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AudioClip:
        return cls(
            id=str(data["id"]),
            url=str(data["url"]),
            text=data.get("text") or "",
            duration=float(data.get("duration") or 0.0),
            voice=data.get("voice") or "",
            slide_id=str(data["slideId"]),
            start_time=float(data.get("startTime") or 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "text": self.text,
            "duration": self.duration,
            "voice": self.voice,
            "slideId": self.slide_id,
            "startTime": self.start_time,
        }


@dataclass
class Timeline:
    """Slides laid out back-to-back on the global clock.

    RULES:
    - slides[0].start_time == 0 when non-empty
    - slides[i+1].start_time == slides[i].start_time + slides[i].duration
    - total_duration == sum of slide durations
    """

    slides: Tuple[Slide, ...]
    total_duration: float

    def slide_by_id(self, slide_id: str) -> Optional[Slide]:
        for slide in self.slides:
            if slide.id == slide_id:
                return slide
        return None
