"""Tests for the roast pipeline HTTP API."""

from __future__ import annotations

from typing import Iterator

from fastapi.testclient import TestClient
import pytest

from config.settings import VideoSettings
from intelligence import ScriptWriter
from orchestrator import RoastOrchestrator
from persona import PersonaClassifier
from render import VideoRenderManager
from scrapers import StaticProfileSource
from webapp.app import app
from webapp.runtime import get_classifier, get_orchestrator, get_render_manager

from fakes import FakeClock, FakeLLM, FakeRenderer, FakeSpeech, FakeVideoAdapter, UnconfiguredSource, done, make_profile


ALICE = "https://www.linkedin.com/in/alice"
BOB = "https://www.linkedin.com/in/bob"


def _orchestrator(source=None) -> RoastOrchestrator:
    profiles = [
        make_profile(ALICE, name="Alice", post_ages_days=[1, 2, 3], connections=1800),
        make_profile(BOB, name="Bob"),
    ]
    return RoastOrchestrator(
        profile_source=source if source is not None else StaticProfileSource(profiles),
        script_writer=ScriptWriter(FakeLLM()),
        speech=FakeSpeech(),
        video_renderer=FakeRenderer(),
    )


@pytest.fixture
def client() -> Iterator[TestClient]:
    adapter = FakeVideoAdapter([done("https://videos.example.com/tlk_7.mp4")], job_id="tlk_7")
    manager = VideoRenderManager(adapter=adapter, settings=VideoSettings(api_key="did-key"), clock=FakeClock())
    app.dependency_overrides[get_orchestrator] = lambda: _orchestrator()
    app.dependency_overrides[get_classifier] = lambda: PersonaClassifier()
    app.dependency_overrides[get_render_manager] = lambda: manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_roast_pipeline_returns_batch_payload(client: TestClient) -> None:
    response = client.post(
        "/api/roast-pipeline",
        json={"linkedinUrls": [BOB, ALICE], "generateVideo": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["processed"] == 2
    assert body["successful"] == 2
    assert body["videosGenerated"] == 2
    assert [item["profileId"] for item in body["results"]] == [BOB, ALICE]
    assert body["results"][0]["persona"] == "Ghost"


def test_roast_pipeline_without_video(client: TestClient) -> None:
    response = client.post("/api/roast-pipeline", json={"identifiers": [ALICE], "generateVideo": False})

    body = response.json()
    assert response.status_code == 200
    assert "videosGenerated" not in body
    assert "videoUrl" not in body["results"][0]


def test_empty_identifier_list_is_rejected(client: TestClient) -> None:
    response = client.post("/api/roast-pipeline", json={"linkedinUrls": []})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "non-empty" in response.json()["error"]


def test_malformed_body_is_rejected(client: TestClient) -> None:
    response = client.post("/api/roast-pipeline", json={"linkedinUrls": "not-a-list"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid request body"


def test_batch_fatal_acquisition_maps_to_502(client: TestClient) -> None:
    app.dependency_overrides[get_orchestrator] = lambda: _orchestrator(UnconfiguredSource([]))

    response = client.post("/api/roast-pipeline", json={"linkedinUrls": [ALICE]})

    assert response.status_code == 502
    assert "not configured" in response.json()["error"]


def test_analyze_persona(client: TestClient) -> None:
    response = client.post("/api/analyze-persona", json={"profileData": {"identifier": ALICE, "name": "Alice"}})

    assert response.status_code == 200
    analysis = response.json()["analysis"]
    assert analysis["persona"] == "Ghost"
    assert 3 <= len(analysis["contentSuggestions"]) <= 5
    assert 0 <= analysis["confidence"] <= 100


def test_video_status_lookup(client: TestClient) -> None:
    response = client.get("/api/videos/tlk_7")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "done"
    assert body["videoUrl"] == "https://videos.example.com/tlk_7.mp4"
    assert body["attempts"] == 1
