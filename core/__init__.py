"""Core contracts and shared types for the roast pipeline."""

from .contracts import (
    AudioArtifact,
    BatchOptions,
    BatchResult,
    ExperienceEntry,
    ItemResult,
    JobState,
    JobStatus,
    Persona,
    PersonaResult,
    PostSummary,
    ProfileRecord,
    ScriptArtifact,
    SignalReport,
    SkillEntry,
    TERMINAL_JOB_STATES,
    UNKNOWN_PERSONA,
    VideoJob,
)

__all__ = [
    "AudioArtifact",
    "BatchOptions",
    "BatchResult",
    "ExperienceEntry",
    "ItemResult",
    "JobState",
    "JobStatus",
    "Persona",
    "PersonaResult",
    "PostSummary",
    "ProfileRecord",
    "ScriptArtifact",
    "SignalReport",
    "SkillEntry",
    "TERMINAL_JOB_STATES",
    "UNKNOWN_PERSONA",
    "VideoJob",
]
