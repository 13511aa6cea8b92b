"""
Settings Configuration
Pydantic-validated configuration for every pipeline collaborator.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_PROMO_MARKERS = [
    "dm me",
    "looking for",
    "opportunity",
    "connect",
    "partnership",
    "exclusive",
    "limited spots",
]


class ProxycurlSettings(BaseSettings):
    """Proxycurl profile API"""
    api_key: Optional[str] = Field(default=None, description="Proxycurl API key")
    base_url: str = Field(default="https://nubela.co/proxycurl/api/v2/linkedin", description="Profile endpoint")
    use_cache: str = Field(default="if-present", description="Proxycurl cache policy")
    timeout_s: float = Field(default=30.0, description="Request timeout (seconds)")
    max_parallel: int = Field(default=4, description="Concurrent profile fetches during bulk acquisition")

    class Config:
        env_prefix = "PROXYCURL_"


class ApifySettings(BaseSettings):
    """Apify actor used for recent posts"""
    api_token: Optional[str] = Field(default=None, description="Apify API token (posts are skipped without it)")
    base_url: str = Field(default="https://api.apify.com/v2", description="Apify API base URL")
    posts_actor_id: str = Field(default="harvestapi~linkedin-profile-posts", description="Posts actor id")
    max_posts: int = Field(default=20, description="Maximum posts fetched per profile")
    timeout_s: float = Field(default=120.0, description="Actor run timeout (seconds)")

    class Config:
        env_prefix = "APIFY_"


class LLMSettings(BaseSettings):
    """Reasoning service used for roast scripts"""
    provider: str = Field(default="anthropic", description="LLM provider: anthropic, openai")
    model_name: Optional[str] = Field(default=None, description="Model name (provider default when empty)")
    temperature: float = Field(default=0.9, description="Sampling temperature")
    max_tokens: int = Field(default=500, description="Maximum generated tokens")
    timeout_s: float = Field(default=60.0, description="Request timeout (seconds)")

    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API Key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API Key")

    class Config:
        env_prefix = "LLM_"


class SpeechSettings(BaseSettings):
    """ElevenLabs text-to-speech"""
    api_key: Optional[str] = Field(default=None, description="ElevenLabs API key")
    base_url: str = Field(default="https://api.elevenlabs.io/v1", description="ElevenLabs API base URL")
    voice_id: str = Field(default="pNInz6obpgDQGcFmaJgB", description="Default voice (Adam)")
    model_id: str = Field(default="eleven_multilingual_v2", description="Speech model")
    output_format: str = Field(default="mp3_44100_128", description="Audio output format")
    timeout_s: float = Field(default=60.0, description="Request timeout (seconds)")

    class Config:
        env_prefix = "ELEVENLABS_"


class VideoSettings(BaseSettings):
    """D-ID talking-head rendering and polling budgets"""
    api_key: Optional[str] = Field(default=None, description="D-ID API key")
    base_url: str = Field(default="https://api.d-id.com", description="D-ID API base URL")
    avatar_url: str = Field(
        default="https://d-id-public-bucket.s3.amazonaws.com/alice.jpg",
        description="Source image for the talking head",
    )
    timeout_s: float = Field(default=30.0, description="Per-request timeout (seconds)")
    poll_interval_s: float = Field(default=10.0, description="Wait between status checks (seconds)")
    max_attempts: int = Field(default=60, description="Status checks for a full render (10 minutes)")
    short_max_attempts: int = Field(default=30, description="Status checks for lightweight lookups (5 minutes)")
    max_transient_failures: int = Field(default=5, description="Transient status-check failures tolerated per job")

    class Config:
        env_prefix = "DID_"


class PersonaSettings(BaseSettings):
    """Persona classification thresholds"""
    high_network_threshold: int = Field(default=1000, description="Network size above which a profile is well connected")
    medium_network_threshold: int = Field(default=500, description="Network size at or below which a prolific poster is a hustler")
    recent_posts_inspected: int = Field(default=3, description="Most recent posts scanned for promotional markers")
    recency_window_days: int = Field(default=30, description="Window for counting recent posts")
    very_active_min_posts: int = Field(default=3, description="Recent posts needed for a very active cadence")
    occasional_window_days: int = Field(default=180, description="Window separating occasional from inactive")
    promo_markers: List[str] = Field(default_factory=lambda: list(DEFAULT_PROMO_MARKERS), description="Promotional phrases")

    class Config:
        env_prefix = "PERSONA_"


class PipelineSettings(BaseSettings):
    """Batch orchestration"""
    max_concurrency: int = Field(default=4, description="Maximum in-flight item pipelines")
    batch_deadline_s: Optional[float] = Field(default=900.0, description="Overall batch deadline (seconds)")
    generate_video: bool = Field(default=True, description="Render videos unless the request opts out")
    callback_timeout_s: float = Field(default=10.0, description="Callback POST timeout (seconds)")
    log_level: str = Field(default="INFO", description="Log level for entrypoints")

    class Config:
        env_prefix = "PIPELINE_"


class Settings(BaseSettings):
    """Aggregated configuration"""

    proxycurl: ProxycurlSettings = Field(default_factory=ProxycurlSettings)
    apify: ApifySettings = Field(default_factory=ApifySettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    speech: SpeechSettings = Field(default_factory=SpeechSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    persona: PersonaSettings = Field(default_factory=PersonaSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load configuration, reading ``config/.env`` first when present."""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            proxycurl=ProxycurlSettings(),
            apify=ApifySettings(),
            llm=LLMSettings(),
            speech=SpeechSettings(),
            video=VideoSettings(),
            persona=PersonaSettings(),
            pipeline=PipelineSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings singleton."""
    return Settings.load_from_env_file()


def get_llm_settings() -> LLMSettings:
    return get_settings().llm


def get_persona_settings() -> PersonaSettings:
    return get_settings().persona


def get_video_settings() -> VideoSettings:
    return get_settings().video


def get_pipeline_settings() -> PipelineSettings:
    return get_settings().pipeline
