from __future__ import annotations

from typing import List, Optional

import asyncio

import pytest

from core import BatchOptions, JobState, Persona
from intelligence import ScriptWriter
from orchestrator import NO_AUDIO_FOR_VIDEO, RoastOrchestrator
import orchestrator.service as service_module
from scrapers import StaticProfileSource
from utils.exceptions import AcquisitionError, GenerationError, ValidationError

from fakes import FakeLLM, FakeRenderer, FakeSpeech, ScriptedLLM, UnconfiguredSource, make_profile


ALICE = "https://www.linkedin.com/in/alice"
BOB = "https://www.linkedin.com/in/bob"
CAROL = "https://www.linkedin.com/in/carol"


def _profiles():
    return [
        make_profile(ALICE, name="Alice", post_ages_days=[1, 2, 3], connections=1800),
        make_profile(BOB, name="Bob", post_ages_days=[40, 60], connections=200),
        make_profile(CAROL, name="Carol"),
    ]


def _orchestrator(
    *,
    source=None,
    llm=None,
    speech: Optional[FakeSpeech] = None,
    renderer: Optional[FakeRenderer] = None,
    **kwargs,
) -> RoastOrchestrator:
    return RoastOrchestrator(
        profile_source=source or StaticProfileSource(_profiles()),
        script_writer=ScriptWriter(llm or FakeLLM()),
        speech=speech or FakeSpeech(),
        video_renderer=renderer if renderer is not None else FakeRenderer(),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_batch_preserves_input_order_and_counts() -> None:
    orchestrator = _orchestrator()

    result = await orchestrator.run_batch([CAROL, ALICE, BOB], BatchOptions(generate_video=False))

    assert [item.identifier for item in result.results] == [CAROL, ALICE, BOB]
    assert [item.name for item in result.results] == ["Carol", "Alice", "Bob"]
    assert result.processed == 3
    assert result.successful == 3
    assert result.videos_generated is None
    payload = result.to_payload()
    assert payload["success"] is True
    assert "videosGenerated" not in payload
    assert all("videoUrl" not in item for item in payload["results"])


@pytest.mark.asyncio
async def test_failed_acquisition_is_isolated_to_its_item() -> None:
    source = StaticProfileSource([_profiles()[0], _profiles()[2]])
    orchestrator = _orchestrator(source=source)

    result = await orchestrator.run_batch([ALICE, BOB, CAROL], BatchOptions(generate_video=True))

    assert result.processed == 3
    assert result.successful == 2
    failed = result.results[1]
    assert failed.success is False
    assert failed.error == "profile not found"
    assert failed.persona_label == "Unknown"
    assert failed.video_error == NO_AUDIO_FOR_VIDEO
    assert result.videos_generated == 2
    payload = failed.to_payload()
    assert payload["profileId"] == BOB
    assert payload["persona"] == "Unknown"
    assert payload["audioBase64"] == ""
    assert payload["videoUrl"] is None


@pytest.mark.asyncio
async def test_script_failure_keeps_classified_persona() -> None:
    orchestrator = _orchestrator(llm=ScriptedLLM(bad_names=["Bob"]))

    result = await orchestrator.run_batch([ALICE, BOB], BatchOptions(generate_video=False))

    bob = result.results[1]
    assert bob.success is False
    assert "malformed JSON" in (bob.error or "")
    assert bob.persona is not None
    assert bob.persona.persona == Persona.LURKER
    assert bob.to_payload()["persona"] == "Lurker"
    assert result.results[0].success is True


@pytest.mark.asyncio
async def test_empty_audio_fails_the_item() -> None:
    speech = FakeSpeech(empty_for=[ALICE])
    orchestrator = _orchestrator(speech=speech)

    result = await orchestrator.run_batch([ALICE, BOB], BatchOptions(generate_video=False))

    assert result.results[0].success is False
    assert "empty audio" in (result.results[0].error or "")
    assert result.results[1].success is True


@pytest.mark.asyncio
async def test_video_failure_never_revokes_success() -> None:
    renderer = FakeRenderer({ALICE: JobState.REJECTED, BOB: GenerationError("d-id auth failed")})
    orchestrator = _orchestrator(renderer=renderer)

    result = await orchestrator.run_batch([ALICE, BOB, CAROL])

    alice, bob, carol = result.results
    assert alice.success is True
    assert alice.video_error == "video rejected"
    assert alice.video_url is None
    assert alice.to_payload()["talkId"].startswith("tlk_")
    assert bob.success is True
    assert bob.video_error == "d-id auth failed"
    assert carol.video_url is not None
    assert result.successful == 3
    assert result.videos_generated == 1
    assert result.to_payload()["videosGenerated"] == 1


@pytest.mark.asyncio
async def test_successful_video_is_reported_with_processing_time() -> None:
    orchestrator = _orchestrator()

    result = await orchestrator.run_batch([ALICE])

    payload = result.to_payload()["results"][0]
    assert payload["videoUrl"].endswith(".mp4")
    assert payload["videoError"] is None
    assert payload["processingTime"] == "20 seconds"
    assert payload["mimeType"] == "audio/mpeg"
    assert payload["audioBase64"]


@pytest.mark.asyncio
async def test_video_is_skipped_when_not_requested() -> None:
    renderer = FakeRenderer()
    orchestrator = _orchestrator(renderer=renderer)

    await orchestrator.run_batch([ALICE], BatchOptions(generate_video=False))

    assert renderer.calls == []


@pytest.mark.asyncio
async def test_invalid_identifiers_are_rejected_before_processing() -> None:
    speech = FakeSpeech()
    orchestrator = _orchestrator(speech=speech)

    with pytest.raises(ValidationError):
        await orchestrator.run_batch([])
    with pytest.raises(ValidationError):
        await orchestrator.run_batch([ALICE, "   "])
    assert speech.calls == []


@pytest.mark.asyncio
async def test_bulk_acquisition_failure_is_batch_fatal() -> None:
    orchestrator = _orchestrator(source=UnconfiguredSource(_profiles()))

    with pytest.raises(AcquisitionError, match="not configured"):
        await orchestrator.run_batch([ALICE])


@pytest.mark.asyncio
async def test_deadline_yields_one_result_per_identifier() -> None:
    orchestrator = _orchestrator(speech=FakeSpeech(delay_s=5.0))

    result = await orchestrator.run_batch([ALICE, BOB], BatchOptions(generate_video=True, deadline_s=0.05))

    assert result.processed == 2
    assert result.successful == 0
    for item in result.results:
        assert (item.error or "").startswith("timed out")
        assert item.video_error == NO_AUDIO_FOR_VIDEO
        assert item.persona is not None


@pytest.mark.asyncio
async def test_concurrency_limit_still_processes_every_item() -> None:
    orchestrator = _orchestrator(max_concurrency=1)

    result = await orchestrator.run_batch([ALICE, BOB, CAROL], BatchOptions(generate_video=False))

    assert result.successful == 3


@pytest.mark.asyncio
async def test_callback_receives_payload_and_failures_do_not_change_result(monkeypatch: pytest.MonkeyPatch) -> None:
    deliveries: List[dict] = []

    async def _fake_deliver(url, payload, *, timeout_s=10.0, client=None):
        deliveries.append({"url": url, "payload": payload, "timeout_s": timeout_s})
        return False

    monkeypatch.setattr(service_module, "deliver_callback", _fake_deliver)
    orchestrator = _orchestrator(callback_timeout_s=3.0)

    result = await orchestrator.run_batch(
        [ALICE],
        BatchOptions(generate_video=False, callback_url="https://hooks.example.com/roast"),
    )

    assert result.successful == 1
    assert len(deliveries) == 1
    assert deliveries[0]["url"] == "https://hooks.example.com/roast"
    assert deliveries[0]["payload"] == result.to_payload()
    assert deliveries[0]["timeout_s"] == 3.0


@pytest.mark.asyncio
async def test_blank_callback_url_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    called = []

    async def _fake_deliver(*args, **kwargs):
        called.append(args)
        return True

    monkeypatch.setattr(service_module, "deliver_callback", _fake_deliver)

    await _orchestrator().run_batch([ALICE], BatchOptions(generate_video=False, callback_url="  "))

    assert called == []


class _SlowSource(StaticProfileSource):
    async def fetch_profile(self, identifier: str):
        await asyncio.sleep(1.0)
        return await super().fetch_profile(identifier)


@pytest.mark.asyncio
async def test_deadline_covers_profile_acquisition() -> None:
    orchestrator = _orchestrator(source=_SlowSource(_profiles()))
    loop = asyncio.get_running_loop()
    started = loop.time()

    result = await orchestrator.run_batch([ALICE, BOB], BatchOptions(generate_video=True, deadline_s=0.1))

    assert loop.time() - started < 0.9
    assert result.processed == 2
    assert result.successful == 0
    for item in result.results:
        assert (item.error or "").startswith("timed out")
        assert item.video_error == NO_AUDIO_FOR_VIDEO


@pytest.mark.asyncio
async def test_middle_item_failure_in_three_item_batch() -> None:
    source = StaticProfileSource([_profiles()[0], _profiles()[2]])
    orchestrator = _orchestrator(source=source)

    result = await orchestrator.run_batch([ALICE, BOB, CAROL], BatchOptions(generate_video=False))

    assert result.processed == 3
    assert result.successful == 2
    assert [item.success for item in result.results] == [True, False, True]
    assert result.results[1].error == "profile not found"
    payload = result.to_payload()
    assert payload["processed"] == 3
    assert payload["successful"] == 2


class _ClosingSource(StaticProfileSource):
    def __init__(self, profiles) -> None:
        super().__init__(profiles)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_aclose_releases_the_profile_source() -> None:
    source = _ClosingSource(_profiles())
    orchestrator = _orchestrator(source=source)

    await orchestrator.run_batch([ALICE], BatchOptions(generate_video=False))
    await orchestrator.aclose()

    assert source.closed is True
