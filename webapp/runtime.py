"""Shared runtime singletons for web and CLI entrypoints."""

from __future__ import annotations

from typing import Optional

from config import get_settings
from orchestrator.service import RoastOrchestrator, build_orchestrator
from persona import PersonaClassifier
from render.manager import VideoRenderManager


_ORCHESTRATOR: Optional[RoastOrchestrator] = None
_RENDER_MANAGER: Optional[VideoRenderManager] = None
_CLASSIFIER: Optional[PersonaClassifier] = None


def get_orchestrator() -> RoastOrchestrator:
    """Built on first use so that missing keys surface per request."""
    global _ORCHESTRATOR
    if _ORCHESTRATOR is None:
        _ORCHESTRATOR = build_orchestrator(get_settings())
    return _ORCHESTRATOR


def get_render_manager() -> VideoRenderManager:
    global _RENDER_MANAGER
    if _RENDER_MANAGER is None:
        _RENDER_MANAGER = VideoRenderManager(settings=get_settings().video)
    return _RENDER_MANAGER


def get_classifier() -> PersonaClassifier:
    global _CLASSIFIER
    if _CLASSIFIER is None:
        _CLASSIFIER = PersonaClassifier(get_settings().persona)
    return _CLASSIFIER


def reset_runtime() -> None:
    global _ORCHESTRATOR, _RENDER_MANAGER, _CLASSIFIER
    _ORCHESTRATOR = None
    _RENDER_MANAGER = None
    _CLASSIFIER = None
