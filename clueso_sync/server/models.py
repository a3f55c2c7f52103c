"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Wire models mirror the camelCase JSON the editor already speaks
(``startTime``, ``wordAlignment``) through field aliases, while Python
code uses snake_case attributes. to_slide()/from_slide() convert to and
from the core dataclasses.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Models accept both alias and field names (populate_by_name)
- Responses are serialized by alias (FastAPI's default)
- Python 3.9+ compatible (use Optional/List from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from clueso_sync.core.ir import Slide, Word


class WordModel(BaseModel):
    """One word span (slide-relative seconds)."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(description="Word as written, punctuation included.")
    start_time: float = Field(alias="startTime", ge=0, description="Start, seconds from slide start.")
    end_time: float = Field(alias="endTime", ge=0, description="End, seconds from slide start.")

    def to_word(self) -> Word:
        return Word(text=self.text, start_time=self.start_time, end_time=self.end_time)

    @classmethod
    def from_word(cls, word: Word) -> WordModel:
        return cls(text=word.text, start_time=word.start_time, end_time=word.end_time)


class SlideModel(BaseModel):
    """A narrated slide as exchanged with the editor."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Slide identifier.")
    script: str = Field(default="", description="Narration text.")
    audio_url: Optional[str] = Field(default=None, alias="audioUrl", description="Voice track URL.")
    word_alignment: List[WordModel] = Field(
        default_factory=list,
        alias="wordAlignment",
        description="Word spans, sorted and non-overlapping.",
    )
    duration: float = Field(default=0.0, ge=0, description="Slide length in seconds.")
    start_time: float = Field(
        default=0.0,
        alias="startTime",
        description="Global start time (computed by layout; ignored on input).",
    )

    def to_slide(self) -> Slide:
        return Slide(
            id=self.id,
            script=self.script,
            audio_url=self.audio_url,
            word_alignment=[w.to_word() for w in self.word_alignment],
            duration=self.duration,
            start_time=self.start_time,
        )

    @classmethod
    def from_slide(cls, slide: Slide) -> SlideModel:
        return cls(
            id=slide.id,
            script=slide.script,
            audio_url=slide.audio_url,
            word_alignment=[WordModel.from_word(w) for w in slide.word_alignment],
            duration=slide.duration,
            start_time=slide.start_time,
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AlignmentRequest(BaseModel):
    """Narration text to align, with an optional known duration."""

    text: str = Field(description="Narration text for one slide.")
    duration: Optional[float] = Field(
        default=None,
        gt=0,
        description="Actual voice track length in seconds. Estimated from the text when omitted.",
    )


class TimelineRequest(BaseModel):
    """An ordered list of slides to lay out."""

    slides: List[SlideModel] = Field(description="Slides in playback order.")


class LocateRequest(TimelineRequest):
    """Slides plus a global time to resolve."""

    time: float = Field(description="Global time in seconds.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AlignmentResponse(BaseModel):
    """Estimated narration timing, in the TTS result shape."""

    model_config = ConfigDict(populate_by_name=True)

    duration_estimate: float = Field(description="Duration the alignment covers, in seconds.")
    word_alignment: List[WordModel] = Field(description="Contiguous word spans covering [0, duration].")
    estimated: bool = Field(description="True when the duration was estimated from the text.")


class TimelineResponse(BaseModel):
    """Slides with global start times."""

    model_config = ConfigDict(populate_by_name=True)

    slides: List[SlideModel] = Field(description="Slides with computed startTime.")
    total_duration: float = Field(alias="totalDuration", description="Sum of slide durations.")


class LocateResponse(BaseModel):
    """Where a global time lands."""

    model_config = ConfigDict(populate_by_name=True)

    slide_index: int = Field(alias="slideIndex", description="Active slide, or -1 with no slides.")
    relative_time: float = Field(alias="relativeTime", description="Seconds into the active slide.")
    word_index: int = Field(alias="wordIndex", description="Active word in that slide, or -1.")


class FormatInfo(BaseModel):
    """An available export format."""

    key: str = Field(description="Format identifier used in /exports/{key}.")
    name: str = Field(description="Human-readable name.")
    suffix: str = Field(description="File suffix of the first output file.")


class ExportFile(BaseModel):
    """One exported file."""

    suffix: str = Field(description="File suffix, e.g. '-captions.srt'.")
    media_type: str = Field(description="MIME type.")
    content: str = Field(description="File content.")


class ExportResponse(BaseModel):
    format: str = Field(description="Format key that produced the files.")
    files: List[ExportFile] = Field(description="Exported files.")


class ErrorResponse(BaseModel):
    """Consistent error body."""

    detail: str = Field(description="What went wrong.")


class HealthResponse(BaseModel):
    status: str = Field(description="'ok' when the service is up.")
    version: str = Field(description="Package version.")
