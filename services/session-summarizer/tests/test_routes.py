import json

import pytest
from conftest import ENGLISH_TEXT
from fastapi import FastAPI
from fastapi.testclient import TestClient

from session_summarizer.dependencies import get_pipeline
from session_summarizer.routes import summaries_router


@pytest.fixture
def client(build_pipeline):
    pipeline, _, _ = build_pipeline()
    app = FastAPI()
    app.include_router(summaries_router)
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    with TestClient(app) as test_client:
        yield test_client


def test_create_and_fetch_summary(client):
    response = client.post(
        "/sessions/abc123/summary",
        json={"transcript_text": ENGLISH_TEXT, "tier": "basic"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["session_id"] == "abc123"
    assert body["tier"] == "basic"
    assert body["tier_display_name"] == "Basic"
    assert body["language"] == "en"
    assert body["summary"]["summary"]

    cached = client.get("/sessions/abc123/summary")
    assert cached.status_code == 200
    assert cached.json()["summary"]["summary"] == body["summary"]["summary"]


def test_unknown_session_is_not_found(client):
    assert client.get("/sessions/nope/summary").status_code == 404


def test_audio_from_path(client, audio_file):
    response = client.post("/sessions/abc123/summary", json={"audio_path": audio_file.locator})

    assert response.status_code == 200
    assert response.json()["transcript_text"] == ENGLISH_TEXT


def test_missing_audio_maps_to_404(client, tmp_path):
    response = client.post(
        "/sessions/abc123/summary", json={"audio_path": str(tmp_path / "gone.m4a")}
    )

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["error"] == "AudioFileNotFoundError"
    assert detail["stage"] == "transcribing"
    assert "gone.m4a" in detail["message"]


def test_invalid_audio_maps_to_422(client, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not audio")

    response = client.post("/sessions/abc123/summary", json={"audio_path": str(path)})

    assert response.status_code == 422
    assert response.json()["detail"]["error"] == "InvalidAudioFormatError"


@pytest.mark.parametrize(
    "body",
    [{}, {"audio_path": "a.wav", "transcript_text": "hello there"}],
)
def test_requires_exactly_one_source(client, body):
    assert client.post("/sessions/abc123/summary", json=body).status_code == 422


def test_stream_returns_ndjson_events(client):
    response = client.post(
        "/sessions/abc123/summary?stream=true",
        json={"transcript_text": ENGLISH_TEXT},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    events = [json.loads(line) for line in response.text.splitlines() if line]
    assert events[0]["kind"] == "progress"
    assert events[-1]["kind"] == "completed"
    assert events[-1]["entry"]["session_id"] == "abc123"
    fractions = [e["progress"]["fraction"] for e in events if e["kind"] == "progress"]
    assert fractions == sorted(fractions)
    assert fractions[-1] == 1.0


def test_cancel_without_active_run(client):
    assert client.delete("/sessions/abc123/summary/run").status_code == 404


def test_lists_engines(client):
    response = client.get("/engines")

    assert response.status_code == 200
    engines = {engine["tier"]: engine for engine in response.json()}
    assert set(engines) == {"basic", "apple", "local", "external"}
    assert engines["basic"]["available"] is True
    assert engines["local"]["available"] is False
    assert engines["external"]["permitted"] is False
    assert engines["external"]["requires_internet"] is True


def test_period_summary_rolls_up_cached_sessions(client):
    for session_id in ("abc123", "def456"):
        client.post(f"/sessions/{session_id}/summary", json={"transcript_text": ENGLISH_TEXT})

    response = client.post(
        "/periods/summary",
        json={
            "period_type": "week",
            "period_start": "2026-10-12T00:00:00Z",
            "period_end": "2026-10-19T00:00:00Z",
            "session_ids": ["abc123", "def456", "missing"],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["period_type"] == "week"
    assert body["tier"] == "basic"
    assert body["session_ids"] == ["abc123", "def456"]
    assert body["session_count"] == 2
    assert body["summary"]


def test_period_summary_without_cached_sessions_is_not_found(client):
    response = client.post(
        "/periods/summary",
        json={
            "period_type": "day",
            "period_start": "2026-10-12T00:00:00Z",
            "period_end": "2026-10-13T00:00:00Z",
            "session_ids": ["missing"],
        },
    )

    assert response.status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [{"session_ids": []}, {"period_end": "2026-10-11T00:00:00Z"}, {"period_type": "year"}],
)
def test_period_summary_validates_request(client, overrides):
    body = {
        "period_type": "day",
        "period_start": "2026-10-12T00:00:00Z",
        "period_end": "2026-10-13T00:00:00Z",
        "session_ids": ["abc123"],
    }
    body.update(overrides)

    assert client.post("/periods/summary", json=body).status_code == 422
