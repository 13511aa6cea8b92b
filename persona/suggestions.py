"""Persona-specific content suggestions."""

from __future__ import annotations

from typing import Dict, List, Tuple

from core import Persona


CONTENT_SUGGESTIONS: Dict[Persona, Tuple[str, ...]] = {
    Persona.NETWORKER: (
        "Share a behind-the-scenes story about a connection that changed your career",
        "Post a thank-you thread tagging three people who helped you this quarter",
        "Host a short live Q&A for your network instead of another motivational quote",
        "Write a candid post about a networking habit you have dropped",
    ),
    Persona.GHOST: (
        "Publish a first post introducing what you actually work on",
        "Update the headline so it says more than a job title",
        "Comment on two posts a week from people you already know",
        "Share one lesson from your current role in three sentences",
    ),
    Persona.HUSTLER: (
        "Post a genuinely useful tip with no link or call to action",
        "Share a failure story that is not secretly a sales pitch",
        "Celebrate a customer or peer without mentioning your offer",
        "Ask your audience a question and reply to every answer",
        "Take a week off from 'limited spots' announcements",
    ),
    Persona.LURKER: (
        "Turn one of the posts you read this week into a short reaction post",
        "Leave a thoughtful comment instead of a silent like",
        "Share a resource you keep coming back to and why it matters",
        "Post a quick poll about a question from your daily work",
    ),
}


def suggestions_for(persona: Persona) -> List[str]:
    return list(CONTENT_SUGGESTIONS[persona])
