"""Video render manager: submit roast audio and poll the talk to completion."""

from __future__ import annotations

import logging
from typing import Optional

from config.settings import VideoSettings
from core import AudioArtifact, VideoJob

from .adapters import BaseVideoAdapter, DIDVideoAdapter
from .poller import Clock, JobPoller


logger = logging.getLogger(__name__)


class VideoRenderManager:
    """Pairs a video adapter with the pollers that drive its jobs.

    ``render`` uses the long polling budget used during batch runs, while
    ``lookup`` uses the short budget meant for status requests on a job that
    was submitted earlier.
    """

    def __init__(
        self,
        *,
        adapter: Optional[BaseVideoAdapter] = None,
        settings: Optional[VideoSettings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings or VideoSettings()
        self._adapter = adapter or DIDVideoAdapter.from_settings(self._settings)
        self._poller = JobPoller.from_settings(self._adapter.check_status, self._settings, clock=clock)
        self._lookup_poller = JobPoller.from_settings(
            self._adapter.check_status,
            self._settings,
            short=True,
            clock=clock,
            name="video-lookup",
        )

    @property
    def adapter(self) -> BaseVideoAdapter:
        return self._adapter

    async def render(self, audio: AudioArtifact) -> VideoJob:
        """Submit audio for a talking-head video and wait for a terminal state."""

        async def _submit() -> str:
            return await self._adapter.submit(audio)

        job = await self._poller.run(_submit)
        job.metadata.setdefault("identifier", audio.identifier)
        job.metadata.setdefault("provider", self._adapter.provider)
        logger.info(
            "render_finished identifier=%s job_id=%s state=%s attempts=%s",
            audio.identifier,
            job.job_id,
            job.state.value,
            job.attempts,
        )
        return job

    async def lookup(self, job_id: str) -> VideoJob:
        """Poll an already submitted job with the short budget."""
        job_id = str(job_id or "").strip()
        if not job_id:
            raise ValueError("job_id is required")
        job = await self._lookup_poller.poll(job_id)
        job.metadata.setdefault("provider", self._adapter.provider)
        return job

    async def aclose(self) -> None:
        await self._adapter.aclose()
