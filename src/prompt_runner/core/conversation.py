"""
Conversation-level types: transcript messages, continuation tokens,
per-run state and the finished result.

A turn is one user utterance plus the assistant reply. Both messages of a
turn carry the same 1-based turn number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from .types import (
    CodeInterpreterResult,
    FileSearchResult,
    NormalizedResponse,
    ToolCall,
    UsageTotals,
    WebSearchResult,
)

Role = Literal["user", "assistant"]
ConversationStatus = Literal["completed", "error"]


@dataclass(frozen=True)
class ResponseChainToken:
    """Continuation for the response-chaining backend."""

    type: Literal["response_chain"] = field(default="response_chain", init=False)
    response_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "response_id": self.response_id}


@dataclass(frozen=True)
class ThreadRunToken:
    """Continuation for the thread/run backend."""

    type: Literal["thread_run"] = field(default="thread_run", init=False)
    thread_id: str
    run_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "thread_id": self.thread_id, "run_id": self.run_id}


# Union type for all continuation tokens (None for stateless backends)
ContinuationToken = ResponseChainToken | ThreadRunToken


@dataclass(frozen=True)
class NormalizedMessage:
    """One transcript entry."""

    role: Role
    content: str
    turn: int
    tool_calls: tuple[ToolCall, ...] = ()
    usage: UsageTotals | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    web_search_results: tuple[WebSearchResult, ...] = ()
    code_interpreter_results: tuple[CodeInterpreterResult, ...] = ()
    file_search_results: tuple[FileSearchResult, ...] = ()

    @classmethod
    def user(cls, content: str, turn: int) -> NormalizedMessage:
        return cls(role="user", content=content, turn=turn)

    @classmethod
    def from_response(
        cls,
        response: NormalizedResponse,
        turn: int,
        metadata: dict[str, Any] | None = None,
    ) -> NormalizedMessage:
        """Build the assistant message for a turn from a normalized response."""
        merged = dict(response.metadata)
        merged.update(metadata or {})
        return cls(
            role="assistant",
            content=response.text,
            turn=turn,
            tool_calls=response.tool_calls,
            usage=response.usage,
            metadata=merged,
            web_search_results=response.web_search_results,
            code_interpreter_results=response.code_interpreter_results,
            file_search_results=response.file_search_results,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "turn": self.turn,
            "usage": self.usage.to_dict() if self.usage else None,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
            "web_search_results": [r.to_dict() for r in self.web_search_results],
            "code_interpreter_results": [
                r.to_dict() for r in self.code_interpreter_results
            ],
            "file_search_results": [r.to_dict() for r in self.file_search_results],
            "api_metadata": dict(self.metadata),
        }


@dataclass
class ConversationState:
    """
    Mutable state owned by a single orchestrator run.

    Never shared between runs. Adapters read the transcript and the
    continuation token from here; the orchestrator is the only writer.
    """

    messages: list[NormalizedMessage] = field(default_factory=list)
    continuation: ContinuationToken | None = None
    turn: int = 0
    status: ConversationStatus | None = None

    def append(self, message: NormalizedMessage) -> None:
        self.messages.append(message)

    @property
    def current_user_message(self) -> str:
        """Content of the most recent user message ("" if none yet)."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return ""


@dataclass
class ConversationResult:
    """Finished transcript plus run-level metadata."""

    messages: list[NormalizedMessage]
    status: ConversationStatus
    continuation_token: ContinuationToken | None = None
    error: str | None = None
    tokens: UsageTotals | None = None
    response_time_ms: int = 0
    web_search_results: list[WebSearchResult] = field(default_factory=list)
    code_interpreter_results: list[CodeInterpreterResult] = field(default_factory=list)
    file_search_results: list[FileSearchResult] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def total_turns(self) -> int:
        """Number of turns that received an assistant reply."""
        return len(self.assistant_messages())

    def user_messages(self) -> list[NormalizedMessage]:
        return [m for m in self.messages if m.role == "user"]

    def assistant_messages(self) -> list[NormalizedMessage]:
        return [m for m in self.messages if m.role == "assistant"]

    def messages_for_turn(self, turn: int) -> list[NormalizedMessage]:
        return [m for m in self.messages if m.turn == turn]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "messages": [m.to_dict() for m in self.messages],
            "status": self.status,
            "continuation_token": (
                self.continuation_token.to_dict() if self.continuation_token else None
            ),
            "total_turns": self.total_turns,
            "tokens": self.tokens.to_dict() if self.tokens else None,
            "response_time_ms": self.response_time_ms,
            "web_search_results": [r.to_dict() for r in self.web_search_results],
            "code_interpreter_results": [
                r.to_dict() for r in self.code_interpreter_results
            ],
            "file_search_results": [r.to_dict() for r in self.file_search_results],
            "metadata": dict(self.metadata),
        }
        if self.error is not None:
            data["error"] = self.error
        return data
