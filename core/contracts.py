"""Canonical data contracts for the roast batch pipeline."""

from __future__ import annotations

import base64
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from utils.exceptions import JobFailure


class Persona(str, Enum):
    """Closed behavioral taxonomy produced by the classifier."""

    NETWORKER = "Networker"
    GHOST = "Ghost"
    HUSTLER = "Hustler"
    LURKER = "Lurker"


UNKNOWN_PERSONA = "Unknown"


class JobState(str, Enum):
    """Lifecycle of an externally hosted rendering job."""

    SUBMITTED = "submitted"
    PROCESSING = "processing"
    DONE = "done"
    ERRORED = "errored"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_JOB_STATES


TERMINAL_JOB_STATES = frozenset({JobState.DONE, JobState.ERRORED, JobState.REJECTED, JobState.TIMED_OUT})


class PostSummary(BaseModel):
    """One published post with its engagement counters."""

    text: str = ""
    published_at: Optional[datetime] = None
    likes: int = 0
    comments: int = 0
    shares: int = 0
    url: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def engagement(self) -> int:
        return int(self.likes) + int(self.comments) + int(self.shares)


class ExperienceEntry(BaseModel):
    title: str = ""
    organization: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    current: bool = False


class SkillEntry(BaseModel):
    name: str
    endorsements: int = 0


class ProfileRecord(BaseModel):
    """Normalized profile as returned by the acquisition collaborator."""

    identifier: str = Field(frozen=True)
    name: str = ""
    headline: str = ""
    bio: str = ""
    location: str = ""
    profile_picture: Optional[str] = None
    connections: Optional[int] = None
    followers: Optional[int] = None
    posts: List[PostSummary] = Field(default_factory=list)
    experience: List[ExperienceEntry] = Field(default_factory=list)
    skills: List[SkillEntry] = Field(default_factory=list)
    posting_frequency: Optional[str] = None
    scraped_at: Optional[datetime] = None
    data_source: str = "unknown"

    @field_validator("identifier", mode="before")
    @classmethod
    def _non_empty_identifier(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("identifier is required")
        return text

    @computed_field  # type: ignore[prop-decorator]
    @property
    def network_size(self) -> Optional[int]:
        known = [int(value) for value in (self.connections, self.followers) if value is not None]
        return max(known) if known else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completeness(self) -> int:
        score = 0
        if self.name.strip():
            score += 15
        if self.headline.strip():
            score += 15
        if self.location.strip():
            score += 10
        if self.profile_picture:
            score += 10
        if self.bio.strip():
            score += 15
        if self.experience:
            score += 15
        if self.followers:
            score += 5
        if self.connections:
            score += 5
        if self.posts:
            score += 5
        if self.skills:
            score += 5
        return min(score, 100)


class SignalReport(BaseModel):
    """Per-signal evidence recorded by the classifier."""

    name: str
    value: str
    agrees: bool
    evaluated: bool = True


class PersonaResult(BaseModel):
    persona: Persona
    confidence: int = Field(ge=0, le=100)
    reasoning: str
    content_suggestions: List[str] = Field(min_length=3, max_length=5)
    rule: str = ""
    signals: List[SignalReport] = Field(default_factory=list)


class ScriptArtifact(BaseModel):
    """Narrative roast text written for one persona."""

    identifier: str
    persona: Persona
    text: str
    roast_type: str = "linkedin_profile"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def word_count(self) -> int:
        return len(self.text.split())


class AudioArtifact(BaseModel):
    identifier: str
    data: bytes
    mime_type: str = "audio/mpeg"
    voice_id: Optional[str] = None

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


class JobStatus(BaseModel):
    """One status-check snapshot reported by a rendering adapter."""

    state: JobState
    result_url: Optional[str] = None
    error: Optional[str] = None
    raw_status: str = ""


class VideoJob(BaseModel):
    """Rendering job tracked by the job poller."""

    job_id: str
    state: JobState = JobState.SUBMITTED
    result_url: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
    transient_failures: int = 0
    waited_s: float = 0.0
    history: List[JobState] = Field(default_factory=lambda: [JobState.SUBMITTED])
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def raise_for_state(self) -> None:
        """Raise JobFailure unless the job finished with a result URL."""
        if self.state == JobState.DONE and self.result_url:
            return
        if self.state == JobState.REJECTED:
            message = self.error or "video generation was rejected, possibly for content policy reasons"
        elif self.state == JobState.TIMED_OUT:
            message = self.error or f"video generation timed out after {int(self.waited_s)} seconds"
        elif self.state.is_terminal:
            message = self.error or "video generation failed"
        else:
            message = f"video job {self.job_id} is still {self.state.value}"
        raise JobFailure(message, job_id=self.job_id, state=self.state.value)


class BatchOptions(BaseModel):
    generate_video: bool = True
    callback_url: Optional[str] = None
    deadline_s: Optional[float] = None

    @field_validator("callback_url", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        text = str(value or "").strip()
        return text or None


class ItemResult(BaseModel):
    """Outcome of one item-pipeline, owned by its task until assembly."""

    identifier: str
    name: str = "Unknown"
    persona: Optional[PersonaResult] = None
    script: Optional[ScriptArtifact] = None
    audio: Optional[AudioArtifact] = None
    video: Optional[VideoJob] = None
    success: bool = False
    error: Optional[str] = None
    video_error: Optional[str] = None

    @property
    def persona_label(self) -> str:
        return self.persona.persona.value if self.persona else UNKNOWN_PERSONA

    @property
    def video_url(self) -> Optional[str]:
        if self.video and self.video.state == JobState.DONE:
            return self.video.result_url
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the public response shape."""
        payload: Dict[str, Any] = {
            "profileId": self.identifier,
            "name": self.name or "Unknown",
            "persona": self.persona_label,
            "confidence": self.persona.confidence if self.persona else 0,
            "roastScript": self.script.text if self.script else "",
            "audioBase64": self.audio.base64 if self.audio else "",
            "mimeType": self.audio.mime_type if self.audio else "",
            "success": bool(self.success),
        }
        if self.error:
            payload["error"] = self.error
        if self.video is not None or self.video_error:
            payload["videoUrl"] = self.video_url
            payload["videoError"] = self.video_error
        if self.video is not None:
            payload["talkId"] = self.video.job_id
            payload["processingTime"] = f"{int(self.video.waited_s)} seconds"
        return payload


class BatchResult(BaseModel):
    results: List[ItemResult] = Field(default_factory=list)
    video_requested: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def processed(self) -> int:
        return len(self.results)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def successful(self) -> int:
        return sum(1 for item in self.results if item.success)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def videos_generated(self) -> Optional[int]:
        if not self.video_requested:
            return None
        return sum(1 for item in self.results if item.video_url)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": True,
            "results": [item.to_payload() for item in self.results],
            "processed": self.processed,
            "successful": self.successful,
        }
        if self.video_requested:
            payload["videosGenerated"] = self.videos_generated
        return payload
