"""Batch orchestrator: fan identifiers out into independent roast item-pipelines."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, List, Optional, Protocol, Sequence

from core import AudioArtifact, BatchOptions, BatchResult, ItemResult, VideoJob
from intelligence.script_writer import ScriptWriter
from persona import PersonaClassifier
from render.adapters import BaseSpeechAdapter
from scrapers import BaseProfileSource, ProfileAcquisition
from utils.exceptions import (
    AcquisitionError,
    GenerationError,
    RoastPipelineError,
    ValidationError,
)

from .notification import deliver_callback


logger = logging.getLogger(__name__)

NO_AUDIO_FOR_VIDEO = "No audio available for video generation"


class VideoRenderer(Protocol):
    async def render(self, audio: AudioArtifact) -> VideoJob:
        ...


def validate_identifiers(identifiers: Any) -> List[str]:
    """Return stripped identifiers or raise ValidationError."""
    if not isinstance(identifiers, (list, tuple)) or not identifiers:
        raise ValidationError("identifiers must be a non-empty list")
    cleaned: List[str] = []
    for index, value in enumerate(identifiers):
        text = value.strip() if isinstance(value, str) else ""
        if not text:
            raise ValidationError("identifiers must be non-blank strings", {"index": index})
        cleaned.append(text)
    return cleaned


class RoastOrchestrator:
    """Runs acquire, classify, script, audio and optional video per identifier.

    Items never share state: each task fills its own ``ItemResult`` slot, and
    a failure in one item is recorded on that item only. The only batch-level
    failures are invalid input and a bulk acquisition call that raises.
    """

    def __init__(
        self,
        *,
        profile_source: BaseProfileSource,
        script_writer: ScriptWriter,
        speech: BaseSpeechAdapter,
        video_renderer: Optional[VideoRenderer] = None,
        classifier: Optional[PersonaClassifier] = None,
        max_concurrency: int = 4,
        batch_deadline_s: Optional[float] = None,
        callback_timeout_s: float = 10.0,
    ) -> None:
        self._profile_source = profile_source
        self._script_writer = script_writer
        self._speech = speech
        self._video_renderer = video_renderer
        self._classifier = classifier or PersonaClassifier()
        self._max_concurrency = max(1, int(max_concurrency))
        self._batch_deadline_s = batch_deadline_s
        self._callback_timeout_s = callback_timeout_s

    async def run_batch(
        self,
        identifiers: Sequence[str],
        options: Optional[BatchOptions] = None,
    ) -> BatchResult:
        """Process a batch and return one result per identifier in input order.

        Raises:
            ValidationError: empty list or blank identifiers
            AcquisitionError: bulk acquisition could not serve the batch
        """
        options = options or BatchOptions()
        cleaned = validate_identifiers(identifiers)
        generate_video = bool(options.generate_video)
        started = time.monotonic()
        logger.info("batch_start items=%s generate_video=%s", len(cleaned), generate_video)

        deadline = options.deadline_s if options.deadline_s is not None else self._batch_deadline_s
        results = [ItemResult(identifier=identifier) for identifier in cleaned]

        try:
            acquisitions = await asyncio.wait_for(self._acquire(cleaned), timeout=deadline)
        except asyncio.TimeoutError:
            logger.warning("batch_acquisition_timed_out items=%s deadline_s=%s", len(cleaned), deadline)
            for item in results:
                self._mark_timed_out(item, deadline, generate_video)
        else:
            remaining = None if deadline is None else max(0.0, deadline - (time.monotonic() - started))
            await self._run_items(results, acquisitions, generate_video, deadline, remaining)

        batch = BatchResult(results=results, video_requested=generate_video)
        logger.info(
            "batch_finished processed=%s successful=%s videos=%s elapsed_s=%.1f",
            batch.processed,
            batch.successful,
            batch.videos_generated,
            time.monotonic() - started,
        )

        if options.callback_url:
            await deliver_callback(options.callback_url, batch.to_payload(), timeout_s=self._callback_timeout_s)
        return batch

    async def _acquire(self, identifiers: List[str]) -> List[ProfileAcquisition]:
        try:
            acquisitions = await self._profile_source.acquire_batch(identifiers)
        except AcquisitionError:
            raise
        except Exception as exc:
            raise AcquisitionError(f"bulk profile acquisition failed: {exc}") from exc
        if len(acquisitions) != len(identifiers):
            raise AcquisitionError(
                "profile source returned a mismatched batch",
                requested=len(identifiers),
                returned=len(acquisitions),
            )
        return acquisitions

    async def _run_items(
        self,
        results: List[ItemResult],
        acquisitions: List[ProfileAcquisition],
        generate_video: bool,
        deadline: Optional[float],
        remaining: Optional[float],
    ) -> None:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(index: int) -> None:
            async with semaphore:
                await self._run_item(results[index], acquisitions[index], generate_video)

        tasks = [asyncio.create_task(_bounded(index)) for index in range(len(results))]
        _, pending = await asyncio.wait(tasks, timeout=remaining)
        if not pending:
            return
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for index, task in enumerate(tasks):
            if task in pending:
                self._mark_timed_out(results[index], deadline, generate_video)

    async def aclose(self) -> None:
        """Release the HTTP clients owned by the collaborators."""
        await self._profile_source.close()
        await self._speech.aclose()
        closer = getattr(self._video_renderer, "aclose", None)
        if closer is not None:
            await closer()

    async def _run_item(self, item: ItemResult, acquisition: ProfileAcquisition, generate_video: bool) -> None:
        try:
            if acquisition.profile is None:
                raise AcquisitionError(acquisition.error or "profile unavailable", identifier=item.identifier)
            profile = acquisition.profile
            item.name = profile.name or "Unknown"

            item.persona = self._classifier.classify(profile)
            item.script = await self._script_writer.write(item.persona, profile)

            audio = await self._speech.synthesize(item.script)
            if not audio.data:
                raise GenerationError("speech synthesis returned empty audio", provider=self._speech.provider)
            item.audio = audio
            item.success = True
        except RoastPipelineError as exc:
            item.error = exc.message
            logger.warning("item_failed identifier=%s stage=%s error=%s", item.identifier, _stage(item), exc)
        except Exception as exc:
            item.error = f"unexpected error: {exc}"
            logger.exception("item_failed identifier=%s stage=%s", item.identifier, _stage(item))

        if generate_video:
            await self._render_video(item)

    async def _render_video(self, item: ItemResult) -> None:
        if item.audio is None:
            item.video_error = NO_AUDIO_FOR_VIDEO
            return
        if self._video_renderer is None:
            item.video_error = "video rendering is not configured"
            return
        try:
            job = await self._video_renderer.render(item.audio)
        except RoastPipelineError as exc:
            item.video_error = exc.message
            logger.warning("video_failed identifier=%s error=%s", item.identifier, exc)
            return
        except Exception as exc:
            item.video_error = f"unexpected video error: {exc}"
            logger.exception("video_failed identifier=%s", item.identifier)
            return

        item.video = job
        try:
            job.raise_for_state()
        except RoastPipelineError as exc:
            item.video_error = exc.message
            logger.warning(
                "video_failed identifier=%s job_id=%s state=%s error=%s",
                item.identifier,
                job.job_id,
                job.state.value,
                exc,
            )

    @staticmethod
    def _mark_timed_out(item: ItemResult, deadline: Optional[float], generate_video: bool) -> None:
        message = f"batch deadline of {deadline:g} seconds exceeded" if deadline is not None else "batch deadline exceeded"
        if item.success:
            item.video_error = f"video generation timed out: {message}"
        else:
            item.error = f"timed out: {message}"
            if generate_video:
                item.video_error = NO_AUDIO_FOR_VIDEO
        logger.warning("item_timed_out identifier=%s success=%s", item.identifier, item.success)


def _stage(item: ItemResult) -> str:
    if item.persona is None:
        return "acquire"
    if item.script is None:
        return "script"
    return "audio"


def build_orchestrator(settings: Any = None, *, profile_source: Optional[BaseProfileSource] = None) -> RoastOrchestrator:
    """Wire the production collaborators from settings."""
    from config import get_settings
    from intelligence.llm import get_llm
    from render import VideoRenderManager
    from render.adapters import ElevenLabsSpeechAdapter
    from scrapers import ProxycurlProfileSource

    settings = settings or get_settings()
    return RoastOrchestrator(
        profile_source=profile_source or ProxycurlProfileSource(settings.proxycurl, settings.apify),
        script_writer=ScriptWriter(get_llm(settings=settings.llm)),
        speech=ElevenLabsSpeechAdapter.from_settings(settings.speech),
        video_renderer=VideoRenderManager(settings=settings.video),
        classifier=PersonaClassifier(settings.persona),
        max_concurrency=settings.pipeline.max_concurrency,
        batch_deadline_s=settings.pipeline.batch_deadline_s,
        callback_timeout_s=settings.pipeline.callback_timeout_s,
    )
