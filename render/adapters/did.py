"""D-ID talks adapter over httpx."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import VideoSettings
from core import AudioArtifact, JobState, JobStatus
from utils.exceptions import ConfigurationError, GenerationError, TransientNetworkError

from .base import BaseVideoAdapter


logger = logging.getLogger(__name__)

_PROCESSING_STATUSES = {"created", "started", "queued", "pending", "processing"}


class DIDVideoAdapter(BaseVideoAdapter):
    """Uploads roast audio, creates a talk and reports its status."""

    provider = "d-id"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: str = "https://api.d-id.com",
        avatar_url: str = "https://d-id-public-bucket.s3.amazonaws.com/alice.jpg",
        timeout_s: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = str(api_key or "").strip()
        self.base_url = str(base_url or "").strip().rstrip("/")
        self.avatar_url = str(avatar_url or "").strip()
        self.timeout_s = float(timeout_s)
        self._client = client

    @classmethod
    def from_settings(cls, settings: VideoSettings, *, client: Optional[httpx.AsyncClient] = None) -> "DIDVideoAdapter":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            avatar_url=settings.avatar_url,
            timeout_s=settings.timeout_s,
            client=client,
        )

    def _auth_header(self) -> str:
        token = base64.b64encode(f"{self.api_key}:".encode("utf-8")).decode("ascii")
        return f"Basic {token}"

    async def submit(self, audio: AudioArtifact) -> str:
        if not self.api_key:
            raise ConfigurationError("d-id config missing: DID_API_KEY")
        if not audio.data:
            raise GenerationError("no audio available for video generation", provider=self.provider)

        upload = await self._send(
            "POST",
            "/audios",
            files={"audio": ("audio.mp3", audio.data, audio.mime_type or "audio/mpeg")},
        )
        self._raise_for_status(upload, action="audio upload")
        audio_url = str(self._json(upload).get("url") or "").strip()
        if not audio_url:
            raise GenerationError("d-id audio upload returned no url", provider=self.provider)

        talk = await self._send(
            "POST",
            "/talks",
            json={
                "source_url": self.avatar_url,
                "script": {"type": "audio", "audio_url": audio_url},
            },
        )
        self._raise_for_status(talk, action="talk creation")
        talk_id = str(self._json(talk).get("id") or "").strip()
        if not talk_id:
            raise GenerationError("d-id talk creation returned no id", provider=self.provider)

        logger.info("did_talk_created talk_id=%s identifier=%s", talk_id, audio.identifier)
        return talk_id

    async def check_status(self, job_id: str) -> JobStatus:
        if not self.api_key:
            raise ConfigurationError("d-id config missing: DID_API_KEY")

        response = await self._send("GET", f"/talks/{job_id}", headers={"Accept": "application/json"})
        self._raise_for_status(response, action="status check")
        return self.parse_status(self._json(response))

    @staticmethod
    def parse_status(payload: Dict[str, Any]) -> JobStatus:
        raw = str(payload.get("status") or "").strip().lower()
        if raw == "done":
            return JobStatus(state=JobState.DONE, result_url=payload.get("result_url") or None, raw_status=raw)
        if raw == "error":
            error = payload.get("error") or {}
            description = error.get("description") if isinstance(error, dict) else str(error)
            return JobStatus(
                state=JobState.ERRORED,
                error=f"d-id video generation failed: {description or 'unknown error'}",
                raw_status=raw,
            )
        if raw == "rejected":
            return JobStatus(
                state=JobState.REJECTED,
                error="d-id video generation was rejected, possibly due to content policy violations",
                raw_status=raw,
            )
        if raw and raw not in _PROCESSING_STATUSES:
            logger.debug("did_unknown_status status=%s treated_as=processing", raw)
        return JobStatus(state=JobState.PROCESSING, raw_status=raw)

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        headers = {"Authorization": self._auth_header(), **dict(kwargs.pop("headers", {}) or {})}
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=headers, **kwargs)
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                return await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransientNetworkError("d-id timeout", provider=self.provider) from exc
        except httpx.RequestError as exc:
            raise TransientNetworkError(f"d-id request failed: {exc}", provider=self.provider) from exc

    def _raise_for_status(self, response: httpx.Response, *, action: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status in {401, 403}:
            raise GenerationError(f"d-id auth failed during {action}", provider=self.provider)
        if status == 429 or status >= 500:
            raise TransientNetworkError(f"d-id {action} http {status}", provider=self.provider)
        raise GenerationError(f"d-id {action} http {status}: {response.text[:200]}", provider=self.provider)

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise GenerationError("d-id returned a non-JSON body", provider=self.provider) from exc
        if not isinstance(payload, dict):
            raise GenerationError("d-id returned an unexpected payload", provider=self.provider)
        return payload

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
