"""
Prompt rendering for the simulated interlocutor.

Example:
    from prompt_runner.runtime.prompts import render_interlocutor_prompt

    prompt = render_interlocutor_prompt(
        directive="You are a patient with a headache",
        transcript=[{"role": "user", "content": "Hello doctor"}],
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

END_SENTINEL = "[END]"

INTERLOCUTOR_TEMPLATE = """You are simulating a user in a conversation. Based on the following context and conversation history, generate your NEXT message.

Context: {directive}

Conversation so far:
{history}

Reply with ONLY the user's next message, 1-3 sentences, nothing else.
If the conversation has naturally concluded, reply with exactly: {sentinel}
"""


def format_transcript(transcript: Iterable[Any]) -> str:
    """
    Render messages as ``Role: content`` blocks separated by blank lines.

    Accepts NormalizedMessage objects or role/content mappings.
    """
    lines = []
    for message in transcript:
        if isinstance(message, Mapping):
            role, content = message.get("role"), message.get("content")
        else:
            role, content = message.role, message.content
        lines.append(f"{str(role or '').capitalize()}: {content or ''}")
    return "\n\n".join(lines)


def render_interlocutor_prompt(directive: str, transcript: Iterable[Any]) -> str:
    """
    Render the prompt asking the auxiliary model for the next user turn.

    Args:
        directive: Who the simulated user is and what they want
        transcript: Conversation so far

    Returns:
        Rendered prompt
    """
    history = format_transcript(transcript) or "(no messages yet)"
    return INTERLOCUTOR_TEMPLATE.format(
        directive=directive.strip(),
        history=history,
        sentinel=END_SENTINEL,
    )
