"""Speech and video adapter abstractions."""

from __future__ import annotations

from core import AudioArtifact, JobStatus, ScriptArtifact


class BaseSpeechAdapter:
    """Text-to-speech boundary; replaceable by ElevenLabs or fakes."""

    provider = "base"

    async def synthesize(self, script: ScriptArtifact) -> AudioArtifact:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class BaseVideoAdapter:
    """Talking-head rendering boundary: submit once, then check status."""

    provider = "base"

    async def submit(self, audio: AudioArtifact) -> str:
        """Start a rendering job and return its provider id."""
        raise NotImplementedError

    async def check_status(self, job_id: str) -> JobStatus:
        """Report the current status of a job.

        Network-level failures must surface as ``TransientNetworkError`` so the
        poller can retry them; anything else is treated as a hard failure.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
