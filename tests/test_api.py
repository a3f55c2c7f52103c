"""Tests for the FastAPI narration timing API.

WHY: The editor back end and front end call these endpoints directly.
Field names (camelCase aliases), status codes, and the degraded handling
of malformed alignments are part of the contract.

HOW: FastAPI TestClient against the module-level app. The app is
stateless, so no per-test reset is needed.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Tests cover happy paths, 404 unknown format, and 422 validation errors
"""

import pytest
from fastapi.testclient import TestClient

from clueso_sync import __version__
from clueso_sync.server.app import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def slides_json(narrated_slides):
    return [s.to_dict() for s in narrated_slides]


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": __version__}


# ---------------------------------------------------------------------------
# POST /alignments
# ---------------------------------------------------------------------------


class TestAlignments:

    def test_estimated(self, client):
        response = client.post("/alignments", json={"text": "Click the button."})
        assert response.status_code == 200
        body = response.json()
        assert body["estimated"] is True
        assert body["duration_estimate"] == pytest.approx(4 / 3.5 + 0.15, abs=0.05)
        words = body["word_alignment"]
        assert [w["text"] for w in words] == ["Click", "the", "button."]
        assert words[0]["startTime"] == 0.0
        assert words[-1]["endTime"] == body["duration_estimate"]

    def test_known_duration(self, client):
        response = client.post("/alignments", json={"text": "Click the button.", "duration": 3.0})
        body = response.json()
        assert body["estimated"] is False
        assert body["duration_estimate"] == 3.0
        assert body["word_alignment"][-1]["endTime"] == 3.0

    def test_empty_text(self, client):
        body = client.post("/alignments", json={"text": ""}).json()
        assert body["duration_estimate"] == 0.0
        assert body["word_alignment"] == []

    def test_nonpositive_duration_rejected(self, client):
        response = client.post("/alignments", json={"text": "Hi.", "duration": 0})
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# POST /timelines, /timelines/locate
# ---------------------------------------------------------------------------


class TestTimelines:

    def test_layout(self, client):
        slides = [{"id": "s1", "duration": 5}, {"id": "s2", "duration": 8}, {"id": "s3", "duration": 3}]
        response = client.post("/timelines", json={"slides": slides})
        assert response.status_code == 200
        body = response.json()
        assert [s["startTime"] for s in body["slides"]] == [0.0, 5.0, 13.0]
        assert body["totalDuration"] == 16.0

    def test_malformed_alignment_dropped(self, client):
        slides = [{
            "id": "s1",
            "script": "a b",
            "duration": 1.0,
            "wordAlignment": [
                {"text": "a", "startTime": 0.0, "endTime": 0.6},
                {"text": "b", "startTime": 0.4, "endTime": 1.0},
            ],
        }]
        body = client.post("/timelines", json={"slides": slides}).json()
        assert body["slides"][0]["wordAlignment"] == []
        assert body["slides"][0]["script"] == "a b"

    def test_negative_duration_rejected(self, client):
        response = client.post("/timelines", json={"slides": [{"id": "s1", "duration": -1}]})
        assert response.status_code == 422

    def test_locate(self, client, slides_json):
        response = client.post("/timelines/locate", json={"slides": slides_json, "time": 2.5})
        assert response.status_code == 200
        assert response.json() == {"slideIndex": 1, "relativeTime": 0.5, "wordIndex": 1}

    def test_locate_past_end(self, client, slides_json):
        body = client.post("/timelines/locate", json={"slides": slides_json, "time": 10.0}).json()
        assert body["slideIndex"] == 1
        assert body["relativeTime"] == 8.0
        assert body["wordIndex"] == -1

    def test_locate_without_slides(self, client):
        body = client.post("/timelines/locate", json={"slides": [], "time": 1.0}).json()
        assert body == {"slideIndex": -1, "relativeTime": 0.0, "wordIndex": -1}


# ---------------------------------------------------------------------------
# POST /exports/{format}, GET /formats
# ---------------------------------------------------------------------------


class TestExports:

    def test_srt_export(self, client, slides_json):
        response = client.post("/exports/srt_captions", json={"slides": slides_json})
        assert response.status_code == 200
        body = response.json()
        assert body["format"] == "srt_captions"
        [exported] = body["files"]
        assert exported["suffix"] == "-captions.srt"
        assert exported["media_type"] == "application/x-subrip"
        assert "00:00:02,000 --> 00:00:03,500\nClick the button." in exported["content"]

    def test_unknown_format(self, client, slides_json):
        response = client.post("/exports/docx", json={"slides": slides_json})
        assert response.status_code == 404
        assert "Available" in response.json()["detail"]

    def test_list_formats(self, client):
        response = client.get("/formats")
        assert response.status_code == 200
        formats = {f["key"]: f for f in response.json()}
        assert sorted(formats) == ["alignment_json", "plain_text", "srt_captions"]
        assert formats["plain_text"]["suffix"] == "-script.txt"
        assert formats["alignment_json"]["name"] == "Alignment JSON"
