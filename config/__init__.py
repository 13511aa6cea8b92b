"""
Configuration Management Module
Collaborator settings are read once and passed into adapter constructors.
"""
from .settings import (
    ApifySettings,
    LLMSettings,
    PersonaSettings,
    PipelineSettings,
    ProxycurlSettings,
    Settings,
    SpeechSettings,
    VideoSettings,
    get_llm_settings,
    get_persona_settings,
    get_pipeline_settings,
    get_settings,
    get_video_settings,
)

__all__ = [
    "ApifySettings",
    "LLMSettings",
    "PersonaSettings",
    "PipelineSettings",
    "ProxycurlSettings",
    "Settings",
    "SpeechSettings",
    "VideoSettings",
    "get_llm_settings",
    "get_persona_settings",
    "get_pipeline_settings",
    "get_settings",
    "get_video_settings",
]
