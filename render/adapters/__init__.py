"""Render adapters package."""

from .base import BaseSpeechAdapter, BaseVideoAdapter
from .did import DIDVideoAdapter
from .elevenlabs import ElevenLabsSpeechAdapter

__all__ = [
    "BaseSpeechAdapter",
    "BaseVideoAdapter",
    "DIDVideoAdapter",
    "ElevenLabsSpeechAdapter",
]
