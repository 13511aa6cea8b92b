"""Batch orchestration for the roast pipeline."""

from .notification import deliver_callback
from .service import NO_AUDIO_FOR_VIDEO, RoastOrchestrator, build_orchestrator, validate_identifiers

__all__ = [
    "NO_AUDIO_FOR_VIDEO",
    "RoastOrchestrator",
    "build_orchestrator",
    "deliver_callback",
    "validate_identifiers",
]
