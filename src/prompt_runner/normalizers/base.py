"""
Shared normalizer machinery.

Every backend normalizer coerces its input once with ``to_plain`` and then
reads string keys only. Subclasses implement ``_normalize_payload`` and
``_normalize_conversation_payload``; string inputs and other non-mapping
values are handled here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from prompt_runner.core.conversation import NormalizedMessage
from prompt_runner.core.payload import (
    as_dict,
    as_int,
    as_list,
    first_present,
    parse_arguments,
    to_plain,
)
from prompt_runner.core.types import (
    CodeInterpreterResult,
    FileSearchResult,
    NormalizedResponse,
    ToolCall,
    ToolUsage,
    UsageTotals,
    WebSearchResult,
)

logger = logging.getLogger(__name__)


@dataclass
class NormalizedConversation:
    """Canonical view of a stored conversation."""

    messages: list[NormalizedMessage] = field(default_factory=list)
    tool_usage: list[ToolUsage] = field(default_factory=list)
    file_search_results: list[FileSearchResult] = field(default_factory=list)
    web_search_results: list[WebSearchResult] = field(default_factory=list)
    code_interpreter_results: list[CodeInterpreterResult] = field(default_factory=list)
    run_steps: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "tool_usage": [t.to_dict() for t in self.tool_usage],
            "file_search_results": [r.to_dict() for r in self.file_search_results],
            "web_search_results": [r.to_dict() for r in self.web_search_results],
            "code_interpreter_results": [
                r.to_dict() for r in self.code_interpreter_results
            ],
            "run_steps": list(self.run_steps),
        }


class BaseNormalizer(ABC):
    """
    Base class for backend normalizers.

    Subclasses only ever see ``dict[str, Any]`` payloads.
    """

    def normalize_single_response(self, raw: Any) -> NormalizedResponse:
        """
        Normalize one backend turn.

        Args:
            raw: Backend payload (dict, SDK model, or plain string)

        Returns:
            NormalizedResponse with text never None
        """
        if isinstance(raw, str):
            return NormalizedResponse(text=raw, raw=raw)
        data = to_plain(raw)
        if not isinstance(data, dict):
            return NormalizedResponse(text="" if data is None else str(data), raw=raw)
        return self._normalize_payload(data, raw)

    def normalize_conversation(self, raw: Any) -> NormalizedConversation:
        """
        Normalize a stored conversation.

        Args:
            raw: ``{"messages": [...], ...}`` or a bare message list

        Returns:
            NormalizedConversation
        """
        data = to_plain(raw)
        if isinstance(data, list):
            data = {"messages": data}
        return self._normalize_conversation_payload(as_dict(data))

    @abstractmethod
    def _normalize_payload(self, data: dict[str, Any], raw: Any) -> NormalizedResponse:
        """Normalize a coerced single-turn payload."""
        ...

    @abstractmethod
    def _normalize_conversation_payload(
        self, data: dict[str, Any]
    ) -> NormalizedConversation:
        """Normalize a coerced conversation payload."""
        ...


def text_from_content(content: Any, text_type: str = "text") -> str:
    """
    Flatten message content into text.

    Strings pass through; lists keep string items and blocks whose ``type``
    matches ``text_type``, joined with newlines. Block text may be a string
    or a ``{"value": ...}`` object.
    """
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for item in as_list(content):
        if isinstance(item, str):
            parts.append(item)
            continue
        block = as_dict(item)
        if block.get("type") != text_type:
            continue
        text = block.get("text")
        if isinstance(text, dict):
            text = text.get("value")
        if isinstance(text, str):
            parts.append(text)
    return "\n".join(parts)


def tool_call_from(data: dict[str, Any], index: int) -> ToolCall | None:
    """
    Build a ToolCall from either wire shape.

    Accepts the nested ``{"function": {"name", "arguments"}}`` form and the
    flat ``{"function_name", "arguments"}`` form used in stored transcripts.
    """
    function = as_dict(data.get("function"))
    name = first_present(function, "name") or first_present(data, "function_name", "name")
    if not name:
        logger.warning(f"Skipping tool call without a function name: {data}")
        return None
    arguments = first_present(function, "arguments")
    if arguments is None:
        arguments = first_present(data, "arguments", "input")
    return ToolCall(
        id=str(first_present(data, "call_id", "id") or f"call_{index}"),
        function_name=str(name),
        arguments=parse_arguments(arguments),
    )


def unique_tool_calls(calls: list[ToolCall | None]) -> tuple[ToolCall, ...]:
    """Drop empty entries and make identifiers unique within one response."""
    seen: dict[str, int] = {}
    result: list[ToolCall] = []
    for call in calls:
        if call is None:
            continue
        count = seen.get(call.id, 0)
        seen[call.id] = count + 1
        if count:
            logger.warning(f"Duplicate tool call id {call.id}; renaming")
            call = ToolCall(
                id=f"{call.id}_{count}",
                function_name=call.function_name,
                arguments=call.arguments,
            )
        result.append(call)
    return tuple(result)


def usage_from(
    usage: Any,
    prompt_key: str = "prompt_tokens",
    completion_key: str = "completion_tokens",
) -> UsageTotals | None:
    """
    Map a backend usage object onto UsageTotals.

    Returns None when there is no usage object at all. When the backend
    does not report a total, it is the sum of the other two counters.
    """
    if not isinstance(usage, dict):
        return None
    prompt = as_int(usage.get(prompt_key))
    completion = as_int(usage.get(completion_key))
    total = usage.get("total_tokens")
    return UsageTotals(
        prompt_tokens=prompt,
        completion_tokens=completion,
        total_tokens=as_int(total) if total is not None else prompt + completion,
    )


def compact(mapping: dict[str, Any]) -> dict[str, Any]:
    """Drop None values."""
    return {k: v for k, v in mapping.items() if v is not None}


def assign_turns(messages: list[dict[str, Any]]) -> list[int]:
    """
    Compute turn numbers by counting user messages up to each index.

    An explicit integer ``turn`` on a message wins. Assistant messages seen
    before any user message are placed in turn 1.
    """
    turns: list[int] = []
    user_count = 0
    for message in messages:
        if message.get("role") == "user":
            user_count += 1
        explicit = message.get("turn")
        if isinstance(explicit, int) and not isinstance(explicit, bool) and explicit > 0:
            turns.append(explicit)
        else:
            turns.append(max(user_count, 1))
    return turns


def build_messages(
    entries: list[tuple[dict[str, Any], str, tuple[ToolCall, ...]]],
) -> list[NormalizedMessage]:
    """
    Turn (source message, text, tool calls) triples into NormalizedMessages.

    Only user and assistant roles are kept. Usage and metadata are read from
    the source message when present.
    """
    kept = [entry for entry in entries if entry[0].get("role") in ("user", "assistant")]
    turns = assign_turns([entry[0] for entry in kept])
    messages: list[NormalizedMessage] = []
    for (source, text, calls), turn in zip(kept, turns):
        messages.append(
            NormalizedMessage(
                role=source["role"],
                content=text,
                turn=turn,
                tool_calls=calls,
                usage=usage_from(source.get("usage")),
                metadata=as_dict(first_present(source, "api_metadata", "metadata")),
            )
        )
    return messages
