"""ElevenLabs text-to-speech adapter over httpx."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from config.settings import SpeechSettings
from core import AudioArtifact, ScriptArtifact
from utils.exceptions import ConfigurationError, GenerationError, TransientNetworkError

from .base import BaseSpeechAdapter


logger = logging.getLogger(__name__)

_FORMAT_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "pcm": "audio/wav",
    "ulaw": "audio/basic",
    "opus": "audio/ogg",
}


def mime_type_for(output_format: str) -> str:
    prefix = str(output_format or "").split("_", 1)[0].lower()
    return _FORMAT_MIME_TYPES.get(prefix, "audio/mpeg")


class ElevenLabsSpeechAdapter(BaseSpeechAdapter):
    """Converts a roast script into a single audio payload."""

    provider = "elevenlabs"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: str = "https://api.elevenlabs.io/v1",
        voice_id: str = "pNInz6obpgDQGcFmaJgB",
        model_id: str = "eleven_multilingual_v2",
        output_format: str = "mp3_44100_128",
        timeout_s: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = str(api_key or "").strip()
        self.base_url = str(base_url or "").strip().rstrip("/")
        self.voice_id = voice_id
        self.model_id = model_id
        self.output_format = output_format
        self.timeout_s = float(timeout_s)
        self._client = client

    @classmethod
    def from_settings(cls, settings: SpeechSettings, *, client: Optional[httpx.AsyncClient] = None) -> "ElevenLabsSpeechAdapter":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            voice_id=settings.voice_id,
            model_id=settings.model_id,
            output_format=settings.output_format,
            timeout_s=settings.timeout_s,
            client=client,
        )

    async def synthesize(self, script: ScriptArtifact) -> AudioArtifact:
        if not self.api_key:
            raise ConfigurationError("elevenlabs config missing: ELEVENLABS_API_KEY")
        text = script.text.strip()
        if not text:
            raise GenerationError("text is required for speech synthesis", provider=self.provider)

        url = f"{self.base_url}/text-to-speech/{self.voice_id}"
        headers = {
            "xi-api-key": self.api_key,
            "Accept": mime_type_for(self.output_format),
            "Content-Type": "application/json",
        }
        request = {"text": text, "model_id": self.model_id}
        params = {"output_format": self.output_format}

        try:
            if self._client is not None:
                response = await self._client.post(url, headers=headers, params=params, json=request)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                    response = await client.post(url, headers=headers, params=params, json=request)
        except httpx.TimeoutException as exc:
            raise TransientNetworkError("elevenlabs timeout", provider=self.provider) from exc
        except httpx.RequestError as exc:
            raise TransientNetworkError(f"elevenlabs request failed: {exc}", provider=self.provider) from exc

        if response.status_code in {401, 403}:
            raise GenerationError("elevenlabs auth failed", provider=self.provider)
        if response.status_code == 429:
            raise GenerationError("elevenlabs quota exceeded", provider=self.provider)
        if response.status_code >= 400:
            raise GenerationError(
                f"elevenlabs http {response.status_code}: {response.text[:200]}",
                provider=self.provider,
            )

        payload = response.content
        if not payload:
            raise GenerationError("elevenlabs returned an empty audio payload", provider=self.provider)

        content_type = str(response.headers.get("content-type") or "").split(";", 1)[0].strip().lower()
        mime_type = content_type if content_type.startswith("audio/") else mime_type_for(self.output_format)
        logger.info(
            "speech_done identifier=%s bytes=%s words=%s",
            script.identifier,
            len(payload),
            script.word_count,
        )
        return AudioArtifact(
            identifier=script.identifier,
            data=payload,
            mime_type=mime_type,
            voice_id=self.voice_id,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
