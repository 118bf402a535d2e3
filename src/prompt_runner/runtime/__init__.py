"""
Conversation runtime: the simulated user and the turn loop.

Usage:
    from prompt_runner.runtime import ConversationOrchestrator, MockInterlocutor

    orchestrator = ConversationOrchestrator(backend, MockInterlocutor())
    result = orchestrator.run("You are a curious student", "Hello", max_turns=3)
"""

from .interlocutor import (
    END_PATTERN,
    InterlocutorSimulator,
    LiveInterlocutor,
    MockInterlocutor,
    parse_interlocutor_reply,
)
from .orchestrator import ConversationOrchestrator, run_conversation
from .prompts import format_transcript, render_interlocutor_prompt

__all__ = [
    "END_PATTERN",
    "ConversationOrchestrator",
    "InterlocutorSimulator",
    "LiveInterlocutor",
    "MockInterlocutor",
    "format_transcript",
    "parse_interlocutor_reply",
    "render_interlocutor_prompt",
    "run_conversation",
]
