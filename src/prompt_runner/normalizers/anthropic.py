"""
Normalizer for the Anthropic Messages wire shape.

Text and tool use share one typed ``content`` array, discriminated by
``type``: ``text`` blocks carry the reply, ``tool_use`` blocks carry
function calls with an already-decoded ``input`` object. Server-side web
search appears as ``server_tool_use`` / ``web_search_tool_result`` block
pairs. There is no file search concept, so file search results are always
empty.
"""

from __future__ import annotations

from typing import Any

from prompt_runner.core.payload import as_dict, as_list
from prompt_runner.core.types import (
    NormalizedResponse,
    ToolCall,
    ToolUsage,
    UrlCitation,
    WebSearchResult,
    WebSearchSource,
)

from .base import (
    BaseNormalizer,
    NormalizedConversation,
    build_messages,
    compact,
    text_from_content,
    tool_call_from,
    unique_tool_calls,
    usage_from,
)


class AnthropicNormalizer(BaseNormalizer):
    """Reads ``content`` block arrays."""

    def _normalize_payload(self, data: dict[str, Any], raw: Any) -> NormalizedResponse:
        content = data.get("content")
        if content is None:
            text = text_from_content(data.get("text"))
        else:
            text = text_from_content(content)
        blocks = [as_dict(b) for b in as_list(content)]

        return NormalizedResponse(
            text=text,
            tool_calls=_tool_uses(blocks),
            usage=usage_from(data.get("usage"), "input_tokens", "output_tokens"),
            model=data.get("model"),
            response_id=data.get("id"),
            metadata=compact(
                {
                    "id": data.get("id"),
                    "model": data.get("model"),
                    "stop_reason": data.get("stop_reason"),
                    "usage": data.get("usage"),
                }
            ),
            web_search_results=tuple(extract_web_search_results(blocks)),
            raw=raw,
        )

    def _normalize_conversation_payload(
        self, data: dict[str, Any]
    ) -> NormalizedConversation:
        messages = [as_dict(m) for m in as_list(data.get("messages"))]

        # tool_result blocks come back as user messages; they are not user turns
        results: dict[str, str] = {}
        entries = []
        for message in messages:
            blocks = [as_dict(b) for b in as_list(message.get("content"))]
            tool_results = [b for b in blocks if b.get("type") == "tool_result"]
            for block in tool_results:
                results[str(block.get("tool_use_id"))] = _tool_result_text(
                    block.get("content")
                )
            if message.get("role") == "user" and blocks and len(tool_results) == len(blocks):
                continue
            entries.append(
                (message, text_from_content(message.get("content")), _tool_uses(blocks))
            )

        tool_usage = [
            ToolUsage(
                function_name=call.function_name,
                call_id=call.id,
                arguments=call.arguments,
                result=results.get(call.id),
            )
            for _, _, calls in entries
            for call in calls
        ]

        blocks = [
            as_dict(b)
            for m in messages
            if m.get("role") == "assistant"
            for b in as_list(m.get("content"))
        ]
        return NormalizedConversation(
            messages=build_messages(entries),
            tool_usage=tool_usage,
            web_search_results=extract_web_search_results(blocks),
        )


def _tool_uses(blocks: list[dict[str, Any]]) -> tuple[ToolCall, ...]:
    return unique_tool_calls(
        [
            tool_call_from(block, index)
            for index, block in enumerate(blocks)
            if block.get("type") == "tool_use"
        ]
    )


def _tool_result_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    return text_from_content(content)


def extract_web_search_results(blocks: list[dict[str, Any]]) -> list[WebSearchResult]:
    """Pair server_tool_use web searches with their result blocks."""
    citations = tuple(
        UrlCitation(title=c.get("title"), url=c.get("url"))
        for block in blocks
        if block.get("type") == "text"
        for c in (as_dict(c) for c in as_list(block.get("citations")))
        if c.get("type") == "web_search_result_location"
    )
    queries = {
        block.get("id"): as_dict(block.get("input")).get("query")
        for block in blocks
        if block.get("type") == "server_tool_use" and block.get("name") == "web_search"
    }

    results = []
    for block in blocks:
        if block.get("type") != "web_search_tool_result":
            continue
        content = block.get("content")
        error = as_dict(content).get("error_code") if isinstance(content, dict) else None
        sources = tuple(
            WebSearchSource(title=s.get("title"), url=s.get("url"))
            for s in (as_dict(s) for s in as_list(content))
            if s.get("type") == "web_search_result"
        )
        results.append(
            WebSearchResult(
                id=block.get("tool_use_id"),
                status="failed" if error else "completed",
                query=queries.get(block.get("tool_use_id")),
                sources=sources,
                citations=citations,
            )
        )
    return results
