"""FastAPI application exposing alignment, layout, and export endpoints.

WHY: The editor's back end generates narration audio and needs word
timings for it; the front end needs slides laid out on one timeline and
exports for captions. Serving the sync core's pure functions over HTTP
lets both reuse the exact same estimation and layout rules.

HOW: A stateless FastAPI app. Every request carries the slides it needs;
nothing is stored between requests. Slides with a malformed word
alignment are accepted with the alignment dropped (the editor then shows
plain text), matching how TTS results are loaded.

RULES:
- All endpoints have OpenAPI descriptions and a consistent ErrorResponse
- ValueError from the core maps to HTTP 400; unknown formats to 404
- Python 3.9+ compatible (no match/case, no PEP 604 unions at runtime)
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List

import jsonschema
from fastapi import FastAPI, HTTPException

from clueso_sync import __version__
from clueso_sync.config import API_HOST, API_PORT
from clueso_sync.core.estimator import align_words, estimate_duration
from clueso_sync.core.ir import Slide, Timeline
from clueso_sync.core.locator import active_word_at, layout_slides, locate_slide
from clueso_sync.core.validation import is_valid_alignment
from clueso_sync.formatters import FORMATTERS
from clueso_sync.server.models import (
    AlignmentRequest,
    AlignmentResponse,
    ErrorResponse,
    ExportFile,
    ExportResponse,
    FormatInfo,
    HealthResponse,
    LocateRequest,
    LocateResponse,
    SlideModel,
    TimelineRequest,
    TimelineResponse,
    WordModel,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Clueso Sync API",
    description=(
        "Narration timing service: estimate spoken duration and word-level "
        "alignment, lay slides out on a global timeline, resolve the active "
        "slide and word for a time, and export captions."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_timeline(models: List[SlideModel]) -> Timeline:
    """Convert request slides to a laid-out Timeline, dropping bad alignments."""
    slides: List[Slide] = []
    for model in models:
        slide = model.to_slide()
        if not is_valid_alignment(slide.word_alignment, slide.duration):
            logger.warning("Slide %s has a malformed word alignment; ignoring it", slide.id)
            slide = dataclasses.replace(slide, word_alignment=[])
        slides.append(slide)
    return layout_slides(slides)


# ---------------------------------------------------------------------------
# Endpoints: Alignment
# ---------------------------------------------------------------------------


@app.post(
    "/alignments",
    response_model=AlignmentResponse,
    tags=["alignment"],
    summary="Estimate word-level alignment for narration text",
    description=(
        "Returns syllable-weighted word spans covering the narration. When "
        "`duration` is omitted it is estimated from the text (3.5 syllables "
        "per second plus a short pause per punctuation mark)."
    ),
    responses={422: {"model": ErrorResponse, "description": "Invalid request body"}},
)
async def create_alignment(request: AlignmentRequest) -> AlignmentResponse:
    estimated = request.duration is None
    duration = estimate_duration(request.text) if estimated else request.duration
    words = align_words(request.text, duration)
    return AlignmentResponse(
        duration_estimate=duration,
        word_alignment=[WordModel.from_word(w) for w in words],
        estimated=estimated,
    )


# ---------------------------------------------------------------------------
# Endpoints: Timelines
# ---------------------------------------------------------------------------


@app.post(
    "/timelines",
    response_model=TimelineResponse,
    tags=["timelines"],
    summary="Lay slides out back-to-back",
    description="Computes each slide's global startTime by prefix sum and the total duration.",
)
async def create_timeline(request: TimelineRequest) -> TimelineResponse:
    timeline = _to_timeline(request.slides)
    return TimelineResponse(
        slides=[SlideModel.from_slide(s) for s in timeline.slides],
        total_duration=timeline.total_duration,
    )


@app.post(
    "/timelines/locate",
    response_model=LocateResponse,
    tags=["timelines"],
    summary="Resolve the active slide and word at a global time",
    description=(
        "Times past the end resolve to the last slide with an extrapolated "
        "relative time and no active word."
    ),
)
async def locate(request: LocateRequest) -> LocateResponse:
    timeline = _to_timeline(request.slides)
    position = locate_slide(timeline.slides, request.time)
    return LocateResponse(
        slide_index=position.slide_index,
        relative_time=position.relative_time,
        word_index=active_word_at(timeline.slides, request.time),
    )


# ---------------------------------------------------------------------------
# Endpoints: Exports
# ---------------------------------------------------------------------------


@app.post(
    "/exports/{format_key}",
    response_model=ExportResponse,
    tags=["exports"],
    summary="Export the timeline in one format",
    responses={
        400: {"model": ErrorResponse, "description": "Timeline cannot be exported"},
        404: {"model": ErrorResponse, "description": "Unknown format"},
    },
)
async def export_timeline(format_key: str, request: TimelineRequest) -> ExportResponse:
    formatter_cls = FORMATTERS.get(format_key)
    if formatter_cls is None:
        available = ", ".join(sorted(FORMATTERS))
        raise HTTPException(
            status_code=404,
            detail="Unknown format '{}'. Available: {}".format(format_key, available),
        )

    timeline = _to_timeline(request.slides)
    try:
        outputs = formatter_cls().format(timeline)
    except (ValueError, jsonschema.ValidationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return ExportResponse(
        format=format_key,
        files=[
            ExportFile(suffix=o.suffix, media_type=o.media_type, content=o.content)
            for o in outputs
        ],
    )


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["exports"],
    summary="List available export formats",
)
async def list_formats() -> List[FormatInfo]:
    empty = Timeline(slides=(), total_duration=0.0)
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        outputs = formatter.format(empty)
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=outputs[0].suffix if outputs else "",
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the clueso-sync-api console script."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)
