from __future__ import annotations

import json

import pytest

from core import Persona
from intelligence import ScriptWriter, extract_json_dict
from persona import classify
from utils.exceptions import GenerationError

from fakes import ROAST_TEXT, FakeLLM, make_profile


def _inputs():
    profile = make_profile(
        name="Dana Sales",
        post_ages_days=[1, 2, 3],
        texts=["DM me for exclusive access", "Grind", "Hustle"],
        connections=2500,
        headline="Chief Synergy Officer",
    )
    return classify(profile), profile


@pytest.mark.asyncio
async def test_write_returns_script_artifact_and_prompts_with_profile() -> None:
    llm = FakeLLM()
    persona, profile = _inputs()

    script = await ScriptWriter(llm).write(persona, profile)

    assert script.text == ROAST_TEXT
    assert script.persona == Persona.HUSTLER
    assert script.word_count == 120
    assert script.identifier == profile.identifier
    prompt = llm.prompts[0]
    assert "Detected Persona: Hustler" in prompt
    assert "Chief Synergy Officer" in prompt
    assert "100-150 words" in prompt


@pytest.mark.asyncio
async def test_json_wrapped_in_prose_is_accepted() -> None:
    reply = 'Sure! Here it is:\n{"script": "Short roast."}\nEnjoy.'
    persona, profile = _inputs()

    script = await ScriptWriter(FakeLLM([reply])).write(persona, profile)

    assert script.text == "Short roast."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply, message",
    [
        ("no json here", "malformed JSON"),
        (json.dumps({"roast": "wrong key"}), "no 'script' field"),
        (json.dumps({"script": "   "}), "no 'script' field"),
    ],
)
async def test_unusable_replies_raise_generation_error(reply: str, message: str) -> None:
    persona, profile = _inputs()

    with pytest.raises(GenerationError, match=message):
        await ScriptWriter(FakeLLM([reply])).write(persona, profile)


@pytest.mark.asyncio
async def test_provider_exceptions_are_wrapped() -> None:
    persona, profile = _inputs()

    with pytest.raises(GenerationError) as excinfo:
        await ScriptWriter(FakeLLM([RuntimeError("overloaded")])).write(persona, profile)

    assert excinfo.value.provider == "fake"
    assert "overloaded" in excinfo.value.message


def test_extract_json_dict_finds_first_balanced_object() -> None:
    assert extract_json_dict('```json\n{"script": "a {b}"}\n```') == {"script": "a {b}"}
    assert extract_json_dict("[1, 2]") is None
    assert extract_json_dict("") is None
