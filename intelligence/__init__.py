"""
Intelligence Module
LLM abstraction and roast script generation.
"""
from .llm import (
    BaseLLM,
    LLMResponse,
    Message,
    OpenAILLM,
    AnthropicLLM,
    get_llm,
)
from .script_writer import ScriptWriter, extract_json_dict

__all__ = [
    # LLM
    "BaseLLM",
    "LLMResponse",
    "Message",
    "OpenAILLM",
    "AnthropicLLM",
    "get_llm",
    # Scripts
    "ScriptWriter",
    "extract_json_dict",
]
