"""
Script Writer
Turns a classified profile into a short roast script via the LLM.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from core import PersonaResult, ProfileRecord, ScriptArtifact
from utils.exceptions import GenerationError, RoastPipelineError

from .llm import BaseLLM, Message


logger = logging.getLogger(__name__)

MIN_WORDS = 100
MAX_WORDS = 150

PERSONA_EXAMPLES = {
    "Networker": "Oh look, another 'thought leader' who posts 3 times a day...",
    "Ghost": "This person's LinkedIn is like a haunted house - beautiful on the outside, nobody home inside...",
    "Hustler": "Every post screams 'BUY MY COURSE!' louder than a carnival barker...",
    "Lurker": "The LinkedIn equivalent of that friend who reads all your messages but never replies...",
}

ROAST_PROMPT = """You are a witty comedian creating a playful roast of this LinkedIn profile.

Profile Data:
{profile_json}

Detected Persona: {persona}
Classifier reasoning: {reasoning}

Create a humorous but not mean-spirited roast that:
1. Playfully calls out their {persona} behavior patterns
2. Makes fun of typical LinkedIn stereotypes they exhibit
3. References specific details from their profile
4. Keeps it light and entertaining (not actually insulting)
5. Is {min_words}-{max_words} words, perfect for text-to-speech

Examples based on persona:
{examples}

Generate a funny roast script that would make them laugh at themselves.
Respond with JSON only, shaped as {{"script": "<the roast text>"}}."""


def extract_json_dict(content: str) -> Optional[Dict[str, Any]]:
    """Parse the first JSON object found in ``content``."""
    text = str(content or "").strip()
    if not text:
        return None
    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    for start in (idx for idx, ch in enumerate(text) if ch == "{"):
        depth = 0
        for end in range(start, len(text)):
            ch = text[end]
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    try:
                        parsed = json.loads(text[start : end + 1])
                    except ValueError:
                        break
                    if isinstance(parsed, dict):
                        return parsed
                    break
    return None


def profile_prompt_payload(profile: ProfileRecord, max_posts: int = 5) -> Dict[str, Any]:
    """Compact profile view sent to the model; raw post lists are truncated."""
    payload = profile.model_dump(
        mode="json",
        include={
            "name",
            "headline",
            "bio",
            "location",
            "connections",
            "followers",
            "experience",
            "skills",
            "posting_frequency",
        },
    )
    payload["post_count"] = len(profile.posts)
    payload["recent_posts"] = [
        {"text": post.text[:400], "engagement": post.engagement}
        for post in profile.posts[:max_posts]
    ]
    return payload


class ScriptWriter:
    """Writes one roast script per profile."""

    def __init__(self, llm: BaseLLM, *, max_tokens: Optional[int] = None):
        self.llm = llm
        self.max_tokens = max_tokens

    def build_prompt(self, persona: PersonaResult, profile: ProfileRecord) -> str:
        examples = "\n".join(f"- {name.upper()}: \"{line}\"" for name, line in PERSONA_EXAMPLES.items())
        return ROAST_PROMPT.format(
            profile_json=json.dumps(profile_prompt_payload(profile), indent=2, ensure_ascii=False),
            persona=persona.persona.value,
            reasoning=persona.reasoning,
            min_words=MIN_WORDS,
            max_words=MAX_WORDS,
            examples=examples,
        )

    async def write(self, persona: PersonaResult, profile: ProfileRecord) -> ScriptArtifact:
        """
        Generate the roast script.

        Raises:
            GenerationError: the model call failed, or returned malformed JSON
                or no ``script`` field
        """
        prompt = self.build_prompt(persona, profile)
        kwargs = {"max_tokens": self.max_tokens} if self.max_tokens else {}
        try:
            response = await self.llm.acomplete([Message.user(prompt)], **kwargs)
        except RoastPipelineError:
            raise
        except Exception as exc:
            raise GenerationError(f"script generation failed: {exc}", provider=self.llm.provider) from exc

        parsed = extract_json_dict(response.content)
        if parsed is None:
            raise GenerationError("model returned malformed JSON for the roast script", provider=self.llm.provider)
        script = parsed.get("script")
        if not isinstance(script, str) or not script.strip():
            raise GenerationError("model response has no 'script' field", provider=self.llm.provider)

        artifact = ScriptArtifact(identifier=profile.identifier, persona=persona.persona, text=script.strip())
        if not MIN_WORDS <= artifact.word_count <= MAX_WORDS:
            logger.warning(
                "script_length_out_of_range identifier=%s words=%s expected=%s-%s",
                profile.identifier,
                artifact.word_count,
                MIN_WORDS,
                MAX_WORDS,
            )
        logger.info(
            "script_written identifier=%s persona=%s words=%s",
            profile.identifier,
            persona.persona.value,
            artifact.word_count,
        )
        return artifact
