"""
Simulated user for multi-turn runs.

The simulator returns the next user utterance, or None to end the
conversation. None is returned for an empty reply or a reply containing an
end sentinel (``[END]``, ``[END CONVERSATION]`` or ``[END_CONVERSATION]``,
any case).
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from prompt_runner.core.payload import as_dict, as_list, to_plain

from .prompts import render_interlocutor_prompt

if TYPE_CHECKING:
    from openai import OpenAI

logger = logging.getLogger(__name__)

END_PATTERN = re.compile(r"\[END(?:[ _]CONVERSATION)?\]", re.IGNORECASE)

DEFAULT_MOCK_REPLY = "I have another question."


def parse_interlocutor_reply(text: str | None) -> str | None:
    """Strip the reply; return None if it is empty or signals the end."""
    text = (text or "").strip()
    if not text or END_PATTERN.search(text):
        return None
    return text


class InterlocutorSimulator(ABC):
    """Generates the next simulated user turn."""

    @abstractmethod
    def generate_next_message(
        self, directive: str, transcript: Sequence[Any], turn: int
    ) -> str | None:
        """
        Produce the next user message.

        Args:
            directive: Who the simulated user is and what they want
            transcript: Messages so far
            turn: Turn number the message will belong to

        Returns:
            Message text, or None if the conversation should end
        """
        ...


class LiveInterlocutor(InterlocutorSimulator):
    """
    Asks a chat-completions model for the next user turn.

    Example:
        interlocutor = LiveInterlocutor(OpenAI(api_key=...), model="gpt-4o-mini")
    """

    def __init__(
        self,
        client: OpenAI,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature

    def generate_next_message(
        self, directive: str, transcript: Sequence[Any], turn: int
    ) -> str | None:
        prompt = render_interlocutor_prompt(directive, transcript)
        logger.debug(f"Requesting interlocutor message for turn {turn}")

        completion = to_plain(
            self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
        )
        choices = as_list(as_dict(completion).get("choices"))
        message = as_dict(as_dict(choices[0]).get("message")) if choices else {}
        reply = parse_interlocutor_reply(message.get("content"))

        if reply is None:
            logger.info(f"Interlocutor ended the conversation at turn {turn}")
        return reply


class MockInterlocutor(InterlocutorSimulator):
    """
    Replays scripted replies, then a fixed question.

    Scripted replies go through the same end-sentinel parsing as live ones,
    so ``MockInterlocutor(["[END]"])`` ends a run at turn 2.
    """

    def __init__(self, replies: Sequence[str] | None = None):
        self._replies = deque(replies or ())
        self.calls: list[dict[str, Any]] = []

    def generate_next_message(
        self, directive: str, transcript: Sequence[Any], turn: int
    ) -> str | None:
        self.calls.append(
            {"directive": directive, "turn": turn, "messages": len(transcript)}
        )
        if self._replies:
            return parse_interlocutor_reply(self._replies.popleft())
        return DEFAULT_MOCK_REPLY
