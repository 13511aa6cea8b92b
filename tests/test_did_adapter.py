from __future__ import annotations

import base64
import json
from typing import List

import httpx
import pytest

from core import AudioArtifact, JobState
from render.adapters import DIDVideoAdapter
from utils.exceptions import ConfigurationError, GenerationError, TransientNetworkError


def _adapter(handler, api_key: str = "did-key") -> DIDVideoAdapter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DIDVideoAdapter(api_key=api_key, base_url="https://api.d-id.test", avatar_url="https://img.test/a.jpg", client=client)


def _audio() -> AudioArtifact:
    return AudioArtifact(identifier="https://www.linkedin.com/in/alice", data=b"ID3-audio")


@pytest.mark.asyncio
async def test_submit_uploads_audio_then_creates_talk() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/audios":
            return httpx.Response(201, json={"url": "s3://bucket/audio.mp3"})
        if request.url.path == "/talks":
            return httpx.Response(201, json={"id": "tlk_123", "status": "created"})
        return httpx.Response(404)

    adapter = _adapter(handler)
    talk_id = await adapter.submit(_audio())

    assert talk_id == "tlk_123"
    assert [req.url.path for req in seen] == ["/audios", "/talks"]
    expected = "Basic " + base64.b64encode(b"did-key:").decode("ascii")
    assert all(req.headers["Authorization"] == expected for req in seen)
    assert b"ID3-audio" in seen[0].read()
    body = json.loads(seen[1].read())
    assert body == {
        "source_url": "https://img.test/a.jpg",
        "script": {"type": "audio", "audio_url": "s3://bucket/audio.mp3"},
    }
    await adapter.aclose()


@pytest.mark.asyncio
async def test_submit_without_upload_url_fails() -> None:
    adapter = _adapter(lambda request: httpx.Response(201, json={}))

    with pytest.raises(GenerationError, match="no url"):
        await adapter.submit(_audio())


@pytest.mark.asyncio
async def test_submit_requires_api_key() -> None:
    adapter = _adapter(lambda request: httpx.Response(200, json={}), api_key="")

    with pytest.raises(ConfigurationError):
        await adapter.submit(_audio())


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, state, url, error_part",
    [
        ({"status": "done", "result_url": "https://cdn.test/v.mp4"}, JobState.DONE, "https://cdn.test/v.mp4", None),
        ({"status": "started"}, JobState.PROCESSING, None, None),
        ({"status": "error", "error": {"description": "bad audio"}}, JobState.ERRORED, None, "bad audio"),
        ({"status": "rejected"}, JobState.REJECTED, None, "content policy"),
    ],
)
async def test_check_status_maps_provider_states(payload, state, url, error_part) -> None:
    adapter = _adapter(lambda request: httpx.Response(200, json=payload))

    status = await adapter.check_status("tlk_1")

    assert status.state == state
    assert status.result_url == url
    if error_part:
        assert error_part in (status.error or "")


@pytest.mark.asyncio
async def test_network_failures_are_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientNetworkError):
        await _adapter(handler).check_status("tlk_1")


@pytest.mark.asyncio
async def test_server_errors_are_transient_but_auth_errors_are_not() -> None:
    with pytest.raises(TransientNetworkError):
        await _adapter(lambda request: httpx.Response(503)).check_status("tlk_1")
    with pytest.raises(GenerationError) as excinfo:
        await _adapter(lambda request: httpx.Response(401)).check_status("tlk_1")
    assert not isinstance(excinfo.value, TransientNetworkError)
    assert "auth" in excinfo.value.message
