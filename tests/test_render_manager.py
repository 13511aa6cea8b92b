from __future__ import annotations

import pytest

from config.settings import VideoSettings
from core import AudioArtifact, JobState
from render import VideoRenderManager

from fakes import FakeClock, FakeVideoAdapter, done, processing


def _manager(adapter: FakeVideoAdapter, clock: FakeClock) -> VideoRenderManager:
    settings = VideoSettings(api_key="did-key", poll_interval_s=10, max_attempts=60, short_max_attempts=30)
    return VideoRenderManager(adapter=adapter, settings=settings, clock=clock)


@pytest.mark.asyncio
async def test_render_submits_audio_and_tags_the_job() -> None:
    adapter = FakeVideoAdapter([processing(), processing(), done()], job_id="tlk_42")
    clock = FakeClock()

    job = await _manager(adapter, clock).render(AudioArtifact(identifier="alice", data=b"ID3"))

    assert adapter.submitted == ["alice"]
    assert job.job_id == "tlk_42"
    assert job.state == JobState.DONE
    assert job.attempts == 3
    assert clock.sleeps == [10, 10]
    assert job.metadata == {"identifier": "alice", "provider": "fake-video"}


@pytest.mark.asyncio
async def test_lookup_uses_the_short_budget() -> None:
    adapter = FakeVideoAdapter([processing()])
    clock = FakeClock()

    job = await _manager(adapter, clock).lookup(" tlk_fake ")

    assert adapter.submitted == []
    assert job.state == JobState.TIMED_OUT
    assert job.attempts == 30
    assert len(clock.sleeps) == 29
    assert adapter.checked[0] == "tlk_fake"


@pytest.mark.asyncio
async def test_lookup_requires_a_job_id() -> None:
    with pytest.raises(ValueError):
        await _manager(FakeVideoAdapter([done()]), FakeClock()).lookup("  ")
