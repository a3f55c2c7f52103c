"""Command-line interface for the narration timing core.

WHY: Narration timing needs checking without opening the editor: how
long will this script take to read, where does each word land, what do
the captions look like, and does highlighting track a playing project.

HOW: argparse with one subcommand per task:
  estimate TEXT                       → estimated duration
  align TEXT [--duration S]           → word spans as JSON
  export SLIDES.json --format KEY     → formatter output to stdout or a file
  preview SLIDES.json [--seconds S]   → simulated playback, printing each
                                        newly highlighted word
  serve                               → run the HTTP API
SLIDES.json is either a list of slides or {"slides": [...]} in the
editor's camelCase form. Slides without an alignment get one estimated
from their script.

RULES:
- Results go to stdout; status messages go to stderr
- --verbose enables DEBUG logging (default WARNING)
- Exit code 0 on success, 1 on input errors
- Python 3.9 compatible: no match/case, no X | Y unions
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from clueso_sync.clock.observers import ActiveWord, ActiveWordTracker
from clueso_sync.clock.store import ClockStore
from clueso_sync.core.estimator import align_words, estimate_alignment, estimate_duration
from clueso_sync.core.ir import Slide
from clueso_sync.core.locator import layout_slides
from clueso_sync.formatters import FORMATTERS
from clueso_sync.playback.simulated import SimulatedMedia
from clueso_sync.playback.sync_loop import MediaSynchronizer

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def load_slides(path: Path) -> List[Slide]:
    """Read slides from a JSON file, estimating missing alignments.

    Raises:
        ValueError: If the file is not a slide list.
    """
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("slides")
    if not isinstance(data, list):
        raise ValueError("{}: expected a list of slides or {{\"slides\": [...]}}".format(path))

    slides = []
    for index, raw in enumerate(data):
        raw = dict(raw)
        raw.setdefault("id", "slide-{}".format(index + 1))
        slide = Slide.from_dict(raw)
        if not slide.word_alignment and slide.script.strip():
            if slide.duration > 0:
                words = align_words(slide.script, slide.duration)
                slide = dataclasses.replace(slide, word_alignment=words)
            else:
                duration, words = estimate_alignment(slide.script)
                slide = dataclasses.replace(slide, word_alignment=words, duration=duration)
        slides.append(slide)
    return slides


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_estimate(args: argparse.Namespace) -> int:
    print("{:.3f}".format(estimate_duration(args.text)))
    return 0


def _cmd_align(args: argparse.Namespace) -> int:
    duration = args.duration if args.duration is not None else estimate_duration(args.text)
    words = align_words(args.text, duration)
    print(json.dumps({
        "duration_estimate": duration,
        "word_alignment": [w.to_dict() for w in words],
    }, indent=2))
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    timeline = layout_slides(load_slides(args.slides))
    outputs = FORMATTERS[args.format]().format(timeline)
    if args.output_dir is None:
        for output in outputs:
            sys.stdout.write(output.content)
        return 0

    args.output_dir.mkdir(parents=True, exist_ok=True)
    for output in outputs:
        out_path = args.output_dir / "{}{}".format(args.slides.stem, output.suffix)
        out_path.write_text(output.content, encoding="utf-8")
        _status("Wrote {}".format(out_path))
    return 0


async def run_preview(slides: List[Slide], seconds: Optional[float], rate: float) -> List[ActiveWord]:
    """Play ``slides`` on simulated media and collect every highlight change."""
    store = ClockStore(slides)
    total = store.total_duration
    video = SimulatedMedia("video", duration=total, rate=rate)
    voice = SimulatedMedia("voice", duration=total, rate=rate)
    highlights: List[ActiveWord] = []

    def _on_word(active: ActiveWord) -> None:
        highlights.append(active)
        if active.word is not None:
            print("{:8.3f}s  slide {}  {}".format(
                store.current_time, active.slide_index + 1, active.word.text,
            ), flush=True)

    tracker = ActiveWordTracker(store, on_change=_on_word)
    limit = total if seconds is None else min(seconds, total)
    try:
        async with MediaSynchronizer(store, video, voice) as sync:
            store.play()
            await sync.settle()
            # Poll rather than sleep once so an early "ended" stops the preview
            while store.is_playing and store.current_time < limit:
                await asyncio.sleep(0.05)
            store.pause()
            await sync.settle()
    finally:
        tracker.close()
    return highlights


def _cmd_preview(args: argparse.Namespace) -> int:
    slides = load_slides(args.slides)
    if not slides:
        _status("No slides in {}".format(args.slides))
        return 1
    _status("Previewing {} slide(s) from {}".format(len(slides), args.slides))
    asyncio.run(run_preview(slides, args.seconds, args.rate))
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    from clueso_sync.server.app import run_api
    run_api()
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clueso-sync",
        description="Estimate, align, export, and preview narration timing.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("estimate", help="Estimate how long a text takes to speak.")
    p.add_argument("text", help="Narration text.")
    p.set_defaults(func=_cmd_estimate)

    p = sub.add_parser("align", help="Print word-level alignment as JSON.")
    p.add_argument("text", help="Narration text.")
    p.add_argument("--duration", type=float, default=None,
                   help="Voice track length in seconds (estimated when omitted).")
    p.set_defaults(func=_cmd_align)

    p = sub.add_parser("export", help="Export a slides file in one format.")
    p.add_argument("slides", type=Path, help="Slides JSON file.")
    p.add_argument("--format", choices=sorted(FORMATTERS), default="srt_captions",
                   help="Export format (default: srt_captions).")
    p.add_argument("--output-dir", type=Path, default=None,
                   help="Write files here instead of stdout.")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("preview", help="Simulate playback and print highlighted words.")
    p.add_argument("slides", type=Path, help="Slides JSON file.")
    p.add_argument("--seconds", type=float, default=None,
                   help="Stop after this many seconds of timeline (default: all).")
    p.add_argument("--rate", type=float, default=1.0,
                   help="Playback speed multiplier (default: 1.0).")
    p.set_defaults(func=_cmd_preview)

    p = sub.add_parser("serve", help="Run the HTTP API.")
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        code = args.func(args)
    except (OSError, ValueError, KeyError) as exc:
        _status("Error: {}".format(exc))
        code = 1
    sys.exit(code)
