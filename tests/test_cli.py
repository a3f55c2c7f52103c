"""Tests for the command-line interface.

WHY: The CLI is how narration timing gets checked outside the editor.
Its stdout must be machine-readable and its exit codes meaningful.

HOW: Call main() with an argv list and capture stdout/stderr with capsys.
main() always exits, so every call is wrapped in pytest.raises(SystemExit).
"""

import asyncio
import json

import pytest

from clueso_sync.cli import load_slides, main, run_preview
from clueso_sync.core.ir import Slide
from conftest import make_words


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


@pytest.fixture
def slides_file(tmp_path):
    path = tmp_path / "project.json"
    path.write_text(json.dumps({
        "slides": [
            {"id": "intro", "script": "Click the button.", "duration": 1.5},
            {"script": "Then press save."},
        ],
    }), encoding="utf-8")
    return path


class TestEstimateAndAlign:

    def test_estimate(self, capsys):
        assert _run(["estimate", "Click the button."]) == 0
        assert capsys.readouterr().out == "1.293\n"

    def test_align_with_duration(self, capsys):
        assert _run(["align", "Click the button.", "--duration", "3"]) == 0
        body = json.loads(capsys.readouterr().out)
        assert body["duration_estimate"] == 3.0
        assert [w["text"] for w in body["word_alignment"]] == ["Click", "the", "button."]
        assert body["word_alignment"][-1]["endTime"] == 3.0


class TestLoadSlides:

    def test_fills_ids_and_alignment(self, slides_file):
        slides = load_slides(slides_file)
        assert [s.id for s in slides] == ["intro", "slide-2"]
        assert slides[0].duration == 1.5
        assert slides[0].word_alignment[-1].end_time == 1.5
        assert slides[1].duration > 0
        assert slides[1].word_alignment[-1].end_time == slides[1].duration

    def test_rejects_non_list(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"title": "nope"}', encoding="utf-8")
        with pytest.raises(ValueError):
            load_slides(path)


class TestExport:

    def test_export_to_stdout(self, slides_file, capsys):
        assert _run(["export", str(slides_file), "--format", "plain_text"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("[00:00.000] Slide 1\nClick the button.\n\n[00:01.500] Slide 2\n")

    def test_export_to_directory(self, slides_file, tmp_path, capsys):
        out_dir = tmp_path / "out"
        assert _run(["export", str(slides_file), "--output-dir", str(out_dir)]) == 0
        written = out_dir / "project-captions.srt"
        assert written.exists()
        assert "Click the button." in written.read_text(encoding="utf-8")
        assert "Wrote" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert _run(["export", str(tmp_path / "missing.json")]) == 1
        assert "Error:" in capsys.readouterr().err


def test_preview_highlights_words_in_order(capsys):
    slides = [Slide(
        id="short",
        script="One two three.",
        word_alignment=make_words(("One", 0.0, 0.1), ("two", 0.1, 0.2), ("three.", 0.2, 0.3)),
        duration=0.3,
    )]
    highlights = asyncio.run(run_preview(slides, None, 1.0))
    texts = [h.word.text for h in highlights if h.word is not None]
    assert texts[0] == "One"
    assert texts[-1] == "three."
    assert "three." in capsys.readouterr().out
