"""
LLM Factory
Builds the configured reasoning provider.
"""
from typing import Optional
import logging

from config.settings import LLMSettings
from utils.exceptions import ConfigurationError

from .anthropic_llm import AnthropicLLM
from .base import BaseLLM
from .openai_llm import OpenAILLM


logger = logging.getLogger(__name__)


DEFAULT_MODELS = {
    "anthropic": "claude-3-5-sonnet-20241022",
    "openai": "gpt-4o-mini",
}


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[LLMSettings] = None,
    **kwargs,
) -> BaseLLM:
    """
    Create an LLM instance from settings, with optional overrides.

    Example:
        llm = get_llm()
        llm = get_llm(provider="openai", model="gpt-4o")

    Raises:
        ConfigurationError: unknown provider or missing API key
    """
    if settings is None:
        from config import get_llm_settings
        settings = get_llm_settings()

    provider = str(provider or settings.provider or "").strip().lower()
    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")

    model = model or settings.model_name or DEFAULT_MODELS[provider]
    api_keys = {
        "anthropic": settings.anthropic_api_key,
        "openai": settings.openai_api_key,
    }
    api_key = kwargs.pop("api_key", None) or api_keys.get(provider)
    if not api_key:
        raise ConfigurationError(f"{provider} config missing: LLM_{provider.upper()}_API_KEY")

    kwargs.setdefault("temperature", settings.temperature)
    kwargs.setdefault("max_tokens", settings.max_tokens)
    kwargs.setdefault("timeout", settings.timeout_s)

    logger.debug("llm_created provider=%s model=%s", provider, model)
    if provider == "openai":
        return OpenAILLM(model=model, api_key=api_key, base_url=kwargs.pop("base_url", None), **kwargs)
    return AnthropicLLM(model=model, api_key=api_key, **kwargs)
