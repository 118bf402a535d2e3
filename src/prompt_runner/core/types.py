"""
Canonical response types shared by every backend and consumer.

Each backend returns a differently shaped payload. Normalizers translate
those payloads into the types below so that the orchestrator, the token
aggregator and downstream scorers only ever see one schema:

    Raw backend payload → NormalizedResponse → NormalizedMessage
    (dict / SDK model)     (one backend turn)    (one transcript entry)

All values are immutable. Collections are stored as tuples and expanded
back to lists by ``to_dict()`` for serialization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(frozen=True)
class ToolCall:
    """A single function call requested by the model."""

    id: str
    function_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    type: Literal["function"] = "function"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "function_name": self.function_name,
            "arguments": dict(self.arguments),
        }


@dataclass(frozen=True)
class UsageTotals:
    """Token counters. Missing fields are zero."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: UsageTotals) -> UsageTotals:
        return UsageTotals(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class WebSearchSource:
    """A page the search tool consulted."""

    title: str | None = None
    url: str | None = None
    snippet: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "url": self.url, "snippet": self.snippet}


@dataclass(frozen=True)
class UrlCitation:
    """A citation annotation attached to the model's text."""

    title: str | None = None
    url: str | None = None
    start_index: int | None = None
    end_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "start_index": self.start_index,
            "end_index": self.end_index,
        }


@dataclass(frozen=True)
class WebSearchResult:
    """
    One web search performed during a turn.

    ``sources`` come from the search call itself and are only present when
    they were explicitly requested. ``citations`` come from annotations on the
    message text. The two lists are kept apart.
    """

    type: Literal["web_search"] = field(default="web_search", init=False)
    id: str | None = None
    status: str | None = None
    query: str | None = None
    sources: tuple[WebSearchSource, ...] = ()
    citations: tuple[UrlCitation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "query": self.query,
            "sources": [s.to_dict() for s in self.sources],
            "citations": [c.to_dict() for c in self.citations],
        }


@dataclass(frozen=True)
class CodeInterpreterResult:
    """One code execution performed during a turn."""

    type: Literal["code_interpreter"] = field(default="code_interpreter", init=False)
    id: str | None = None
    status: str | None = None
    code: str | None = None
    language: str = "unknown"
    output: str = ""
    files_created: tuple[str, ...] = ()
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "code": self.code,
            "language": self.language,
            "output": self.output,
            "files_created": list(self.files_created),
            "error": self.error,
        }


@dataclass(frozen=True)
class FileSearchResult:
    """One file search performed during a turn."""

    type: Literal["file_search"] = field(default="file_search", init=False)
    query: str | None = None
    files: tuple[str, ...] = ()
    scores: tuple[float, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "files": list(self.files),
            "scores": list(self.scores),
        }


# Union type for all side-channel tool results
ToolResult = WebSearchResult | CodeInterpreterResult | FileSearchResult


@dataclass(frozen=True)
class ToolUsage:
    """A function call seen in a conversation, with its output when known."""

    function_name: str
    call_id: str | None
    arguments: dict[str, Any] = field(default_factory=dict)
    result: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "function_name": self.function_name,
            "call_id": self.call_id,
            "arguments": dict(self.arguments),
            "result": self.result,
        }


@dataclass(frozen=True)
class NormalizedResponse:
    """
    Output of a normalizer for a single backend turn.

    ``text`` is never None; a response without textual content has ``""``.
    ``usage`` is None when the backend reported no usage at all.
    """

    text: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    usage: UsageTotals | None = None
    model: str | None = None
    response_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    web_search_results: tuple[WebSearchResult, ...] = ()
    code_interpreter_results: tuple[CodeInterpreterResult, ...] = ()
    file_search_results: tuple[FileSearchResult, ...] = ()
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
            "usage": self.usage.to_dict() if self.usage else None,
            "model": self.model,
            "response_id": self.response_id,
            "metadata": dict(self.metadata),
            "web_search_results": [r.to_dict() for r in self.web_search_results],
            "code_interpreter_results": [
                r.to_dict() for r in self.code_interpreter_results
            ],
            "file_search_results": [r.to_dict() for r in self.file_search_results],
        }
